"""Error taxonomy for the AQS request pipeline."""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    MISSING_CREDENTIAL = "missing_credential"
    INVALID_DATE_FORMAT = "invalid_date_format"
    INVALID_DATE_VALUE = "invalid_date_value"
    CROSS_YEAR_RANGE = "cross_year_range"
    TRANSPORT = "transport"


class AQSError(Exception):
    """Base class for every failure surfaced to a tool caller."""

    kind: ErrorKind

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MissingCredentialError(AQSError):
    kind = ErrorKind.MISSING_CREDENTIAL

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class InvalidDateFormatError(AQSError):
    kind = ErrorKind.INVALID_DATE_FORMAT

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"{field} must be in YYYYMMDD format. Got: {value}")


class InvalidDateValueError(AQSError):
    kind = ErrorKind.INVALID_DATE_VALUE

    def __init__(self, field: str, component: str, value: int):
        self.field = field
        self.component = component
        self.value = value
        super().__init__(f"{field} has invalid {component}: {value}")


class CrossYearRangeError(AQSError):
    kind = ErrorKind.CROSS_YEAR_RANGE

    def __init__(self, bdate: str, edate: str):
        self.bdate = bdate
        self.edate = edate
        super().__init__(
            f"Begin date ({bdate}) and end date ({edate}) must be in the same calendar year. "
            f"Got years {bdate[:4]} and {edate[:4]}."
        )


class AQSTransportError(AQSError):
    """HTTP-level or API-level failure of a single request."""

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        reason: str | None = None,
        header: dict[str, Any] | None = None,
    ):
        self.status_code = status_code
        self.reason = reason
        self.header = header
        super().__init__(f"AQS API request failed: {message}")

    @classmethod
    def from_status(cls, status_code: int, reason: str) -> AQSTransportError:
        return cls(f"HTTP {status_code}: {reason}", status_code=status_code, reason=reason)

    @classmethod
    def from_header(cls, header: dict[str, Any]) -> AQSTransportError:
        detail = json.dumps(header, ensure_ascii=False)
        return cls(f"AQS API Error: {detail}", header=header)


_ERROR_HINTS: dict[ErrorKind, str] = {
    ErrorKind.MISSING_CREDENTIAL: (
        "Provide email and key parameters, or set AQS_EMAIL and AQS_API_KEY environment variables."
    ),
    ErrorKind.INVALID_DATE_FORMAT: "Dates use YYYYMMDD, e.g. 20240115.",
    ErrorKind.CROSS_YEAR_RANGE: "Split the query into one request per calendar year.",
}


def describe_error(error: AQSError) -> str:
    """Render an error as the text payload returned by a tool."""
    text = f"Error: {error.message}"
    hint = _ERROR_HINTS.get(error.kind)
    if hint:
        text += f"\n\n{hint}"
    return text
