"""Date parsing utilities."""

from datetime import date, datetime, timedelta
import re

from dateutil import parser as date_parser

# Spreadsheet serial dates count days from 1899-12-30
_SERIAL_EPOCH = date(1899, 12, 30)

_EU_DATE = re.compile(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports the formats spreadsheets and exports commonly produce:
    - ISO dates and timestamps: "2024-01-15", "2024-01-15 10:30:00",
      "2024-01-15T10:30:00Z"
    - Day-first dates: "15/01/2024", "15-01-2024", "15.01.2024"
    - Spreadsheet serial numbers: "45306"
    - Anything else dateutil understands, read day-first

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    if date_str is None or not str(date_str).strip():
        raise ValueError("Empty date string")
    date_str = str(date_str).strip()

    match = _ISO_DATE.match(date_str)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return date(year, month, day)

    match = _EU_DATE.match(date_str)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return date(year, month, day)

    if re.fullmatch(r"\d+(\.\d+)?", date_str):
        try:
            return _SERIAL_EPOCH + timedelta(days=int(float(date_str)))
        except OverflowError as e:
            raise ValueError(f"Could not parse date '{date_str}': {e}")

    try:
        parsed: datetime = date_parser.parse(date_str, dayfirst=True)
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
    return parsed.date()


def parse_optional_date(date_str: str | None) -> date | None:
    """Parse a date, returning None for empty input."""
    if date_str is None or not str(date_str).strip():
        return None
    return parse_date(date_str)
