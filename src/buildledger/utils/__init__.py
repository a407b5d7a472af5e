"""Utility functions for buildledger."""

from buildledger.utils.date_parser import parse_date, parse_optional_date
from buildledger.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_optional_date", "parse_amount"]
