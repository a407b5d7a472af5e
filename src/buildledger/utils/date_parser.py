"""Date parsing utilities."""

import re
from datetime import date, datetime, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from buildledger.domain.errors import ValidationError

_IN_PERIOD = re.compile(r"^in (\d+) (day|days|week|weeks|month|months)$")


def parse_date(value: str | date, today: Optional[date] = None) -> date:
    """Parse a date value into a date object.

    Supports:
    - date objects (returned unchanged; datetimes are truncated)
    - absolute dates: "2024-01-15", "January 15, 2024", etc.
    - "today", "yesterday", "tomorrow"
    - "next week" (Monday), "next month" (1st), "end of month"
    - "in N days/weeks/months", handy for due dates

    Args:
        value: Date value
        today: Reference day for relative values (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValidationError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or not str(value).strip():
        raise ValidationError("Empty date string")

    date_str = str(value).strip().lower()
    if today is None:
        today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "next week": today + timedelta(days=(7 - today.weekday())),
        "next month": (today + relativedelta(months=1)).replace(day=1),
        "end of month": (today + relativedelta(months=1)).replace(day=1) - timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    match = _IN_PERIOD.match(date_str)
    if match:
        count = int(match.group(1))
        unit = match.group(2).rstrip("s")
        if unit == "day":
            return today + timedelta(days=count)
        if unit == "week":
            return today + timedelta(weeks=count)
        return today + relativedelta(months=count)

    # Try parsing as absolute date
    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"Could not parse date '{value}': {e}")


def parse_optional_date(value: Optional[str | date]) -> Optional[date]:
    """Parse a date, passing None and empty strings through as None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_date(value)
