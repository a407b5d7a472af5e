"""Tests for date parser with relative dates."""

import pytest
from datetime import date, datetime, timedelta
from buildledger.utils.date_parser import parse_date, parse_optional_date

TODAY = date(2025, 1, 15)  # a Wednesday


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("January 15, 2024") == date(2024, 1, 15)


def test_parse_date_objects():
    """Dates pass through and datetimes are truncated."""
    assert parse_date(date(2024, 2, 29)) == date(2024, 2, 29)
    assert parse_date(datetime(2024, 2, 29, 17, 30)) == date(2024, 2, 29)


def test_parse_today():
    """Test parsing 'today'."""
    assert parse_date("today") == date.today()
    assert parse_date("Today", today=TODAY) == TODAY


def test_parse_yesterday_and_tomorrow():
    assert parse_date("yesterday", today=TODAY) == TODAY - timedelta(days=1)
    assert parse_date("tomorrow", today=TODAY) == TODAY + timedelta(days=1)


def test_parse_next_week():
    """'next week' is the following Monday."""
    result = parse_date("next week", today=TODAY)
    assert result == date(2025, 1, 20)
    assert result.weekday() == 0


def test_parse_month_boundaries():
    assert parse_date("next month", today=TODAY) == date(2025, 2, 1)
    assert parse_date("end of month", today=TODAY) == date(2025, 1, 31)
    assert parse_date("end of month", today=date(2024, 2, 10)) == date(2024, 2, 29)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("in 30 days", date(2025, 2, 14)),
        ("in 1 day", date(2025, 1, 16)),
        ("in 2 weeks", date(2025, 1, 29)),
        ("in 1 month", date(2025, 2, 15)),
        ("in 6 months", date(2025, 7, 15)),
    ],
)
def test_parse_in_period(value, expected):
    """Due dates can be given relative to today."""
    assert parse_date(value, today=TODAY) == expected


def test_parse_invalid():
    """Test parsing invalid dates."""
    with pytest.raises(ValueError):
        parse_date("someday soon")
    with pytest.raises(ValueError):
        parse_date("")


def test_parse_optional_date():
    assert parse_optional_date(None) is None
    assert parse_optional_date("  ") is None
    assert parse_optional_date("2024-03-01") == date(2024, 3, 1)
