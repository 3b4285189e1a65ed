"""Text payloads for MCP tool results, one renderer per data family."""

from __future__ import annotations

import json
from typing import Any

from aqsmcp.models import AQSResponse, MonitorSummary
from aqsmcp.services import DataFamily


def _dumps(payload: Any, indent: int | None = 2) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=indent)


def format_reference(response: AQSResponse) -> str:
    return _dumps(response.data)


def format_monitors(response: AQSResponse, endpoint: str) -> str:
    if not response.data:
        return _dumps(
            {
                "message": "No monitors found matching the specified criteria.",
                "endpoint": endpoint,
                "count": 0,
            }
        )

    monitors = [
        MonitorSummary.model_validate(row).model_dump(exclude_none=True) if isinstance(row, dict) else row
        for row in response.data
    ]
    return _dumps({"endpoint": endpoint, "count": len(monitors), "monitors": monitors})


def format_sample_data(response: AQSResponse, endpoint: str) -> str:
    # Compact: sample payloads are routinely tens of thousands of rows
    if not response.data:
        return _dumps(
            {
                "message": "No sample data found for the specified parameters.",
                "endpoint": endpoint,
                "count": 0,
            },
            indent=None,
        )

    return _dumps(
        {
            "message": f"Retrieved {len(response.data)} sample data records.",
            "endpoint": endpoint,
            "count": len(response.data),
            "data": response.data,
        },
        indent=None,
    )


def format_daily_summary(response: AQSResponse, endpoint: str) -> str:
    if not response.data:
        return _dumps(
            {
                "message": "No data found for the specified query parameters.",
                "endpoint": endpoint,
                "rowCount": 0,
            }
        )

    return _dumps({"endpoint": endpoint, "rowCount": len(response.data), "data": response.data})


def format_quarterly_summary(response: AQSResponse) -> str:
    return _dumps(response.to_wire())


def format_annual_summary(response: AQSResponse) -> str:
    if not response.data:
        return "No annual summary data found for the specified criteria."

    header = response.first_header
    return _dumps(
        {
            "recordCount": len(response.data),
            "reportedRows": header.rows if header else None,
            "data": response.data,
        }
    )


def render_data(family: DataFamily, response: AQSResponse, endpoint: str) -> str:
    """Pick the renderer for a data family."""
    match family:
        case DataFamily.MONITORS:
            return format_monitors(response, endpoint)
        case DataFamily.SAMPLE_DATA:
            return format_sample_data(response, endpoint)
        case DataFamily.DAILY:
            return format_daily_summary(response, endpoint)
        case DataFamily.QUARTERLY:
            return format_quarterly_summary(response)
        case DataFamily.ANNUAL:
            return format_annual_summary(response)
    raise ValueError(f"Unknown data family: {family}")


def format_signup(response: AQSResponse, email: str) -> str:
    header = response.first_header
    status = (header.status if header else None) or "Unknown"

    if "success" in status.lower():
        return (
            "API key registration successful!\n\n"
            f"An API key has been sent to: {email}\n\n"
            "Please check your email (including spam folder) for the API key. "
            "Once received, you can use it with the AQS_API_KEY environment variable "
            "or pass it directly to API calls."
        )
    return f"Signup response: {_dumps(response.to_wire())}"


def format_availability(response: AQSResponse) -> str:
    header = response.first_header
    status = (header.status if header else None) or "Unknown"

    if "success" in status.lower():
        request_time = header.request_time if header and header.request_time else "N/A"
        return (
            "EPA AQS API Status: AVAILABLE\n\n"
            "The API is operational and responding to requests.\n"
            f"Request time: {request_time}"
        )
    return f"EPA AQS API Status: {status}\n\nResponse: {_dumps(response.to_wire())}"
