import re

from aqsmcp.errors import CrossYearRangeError, InvalidDateFormatError, InvalidDateValueError

_DATE_PATTERN = re.compile(r"[0-9]{8}")


def validate_date_format(value: str, field_name: str) -> None:
    """
    Check a YYYYMMDD token.

    Day is only bounded to 1-31; month length and leap years are left to the
    upstream API.
    """
    if not isinstance(value, str) or not _DATE_PATTERN.fullmatch(value):
        raise InvalidDateFormatError(field_name, value)

    year = int(value[0:4])
    month = int(value[4:6])
    day = int(value[6:8])

    if month < 1 or month > 12:
        raise InvalidDateValueError(field_name, "month", month)
    if day < 1 or day > 31:
        raise InvalidDateValueError(field_name, "day", day)
    if year < 1900 or year > 2100:
        raise InvalidDateValueError(field_name, "year", year)


def validate_date_range(bdate: str, edate: str) -> None:
    """Begin and end dates must fall in the same calendar year."""
    if bdate[:4] != edate[:4]:
        raise CrossYearRangeError(bdate, edate)
