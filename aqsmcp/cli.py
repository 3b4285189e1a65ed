"""CLI tool for AQS API testing."""

import asyncio
import json

import typer
from dotenv import load_dotenv

from aqsmcp.client import AQSClient
from aqsmcp.credentials import resolve_credentials
from aqsmcp.errors import AQSError
from aqsmcp.middleware import configure_logging
from aqsmcp.models import AQSResponse


async def _fetch(endpoint: str, params: dict) -> AQSResponse:
    client = AQSClient()
    try:
        return await client.request(endpoint, params)
    finally:
        await client.aclose()


app = typer.Typer(add_completion=False)


@app.command()
def main(
    endpoint: str = typer.Argument(..., help="API endpoint (e.g., list/states, dailyData/byCounty)"),
    params: str = typer.Option("{}", "--params", help="Additional params as JSON"),
    email: str = typer.Option(None, "--email", help="AQS email (defaults to AQS_EMAIL)"),
    key: str = typer.Option(None, "--key", help="AQS API key (defaults to AQS_API_KEY)"),
    output: str = typer.Option(None, "--output", "-o", help="Save to file"),
):
    """Fetch data from the EPA AQS API."""
    load_dotenv()
    configure_logging()

    try:
        extra_params = json.loads(params)
    except json.JSONDecodeError as e:
        typer.echo("Error: --params must be a valid JSON object.", err=True)
        raise typer.Exit(1) from e

    try:
        credentials = resolve_credentials(email, key)
        result = asyncio.run(_fetch(endpoint, {**credentials.as_params(), **extra_params}))
    except AQSError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(1) from e

    text = json.dumps(result.to_wire(), ensure_ascii=False, indent=2)
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
        typer.echo(f"Saved to {output}")
    else:
        typer.echo(text)


if __name__ == "__main__":
    app()
