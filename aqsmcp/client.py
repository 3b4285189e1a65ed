import logging
from typing import Any

import httpx
from pydantic import ValidationError

from aqsmcp.config import settings
from aqsmcp.errors import AQSTransportError
from aqsmcp.models import AQSResponse
from aqsmcp.throttle import RequestThrottle

# Configure logging
logger = logging.getLogger(__name__)

FAILED_STATUS = "Failed"


def build_query(params: dict[str, Any] | None) -> dict[str, str]:
    """Drop parameters whose value is None or an empty string."""
    return {key: str(value) for key, value in (params or {}).items() if value is not None and value != ""}


class AQSClient:
    """Client for the EPA Air Quality System (AQS) Data API."""

    BASE_URL = "https://aqs.epa.gov/data/api"

    def __init__(
        self,
        base_url: str | None = None,
        throttle: RequestThrottle | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url or settings.base_url or self.BASE_URL).rstrip("/")
        self.throttle = throttle or RequestThrottle(interval=settings.rate_limit_seconds)
        self.client = http_client or httpx.AsyncClient(timeout=settings.request_timeout, follow_redirects=True)

    async def request(self, endpoint: str, params: dict[str, Any] | None = None) -> AQSResponse:
        """
        Issue one throttled GET against an AQS endpoint.

        Args:
            endpoint: Endpoint path relative to the base URL (e.g., 'list/states').
            params: Query parameters. None and empty values are not sent.

        Returns:
            The parsed Header/Data envelope, unmodified.

        Raises:
            AQSTransportError: On HTTP failure, unreadable body, or a 'Failed' header status.
        """
        await self.throttle.acquire()

        url = f"{self.base_url}/{endpoint}"
        query = build_query(params)

        # stderr only; stdout carries the MCP stdio transport
        logger.info(f"Requesting: {endpoint}")

        try:
            response = await self.client.get(url, params=query)
        except httpx.HTTPError as e:
            logger.error(f"Request to {endpoint} failed: {e}")
            raise AQSTransportError(str(e) or type(e).__name__) from e

        if not response.is_success:
            logger.error(f"HTTP error: {response.status_code} - {response.reason_phrase}")
            raise AQSTransportError.from_status(response.status_code, response.reason_phrase)

        try:
            envelope = AQSResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unreadable response from {endpoint}: {e}")
            raise AQSTransportError(f"Invalid response body from {endpoint}") from e

        self._check_api_error(envelope)
        return envelope

    def _check_api_error(self, envelope: AQSResponse) -> None:
        """Raise if the first header reports failure."""
        header = envelope.first_header
        if header is not None and header.status == FAILED_STATUS:
            detail = header.model_dump(exclude_unset=True)
            logger.warning(f"API Result: {detail}")
            raise AQSTransportError.from_header(detail)

    async def aclose(self) -> None:
        await self.client.aclose()
