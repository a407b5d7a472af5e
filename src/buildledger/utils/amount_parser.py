"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from buildledger.domain.errors import ValidationError


def parse_amount(value: str | int | float | Decimal) -> Decimal:
    """Parse a money amount into a Decimal.

    Handles JSON numbers as well as strings such as:
    - "5000"
    - "$5,000.00"
    - "-123.45"
    - "(123.45)" (negative in parentheses)

    Args:
        value: Amount as a number or string

    Returns:
        Decimal amount

    Raises:
        ValidationError: If the value cannot be parsed or is not finite
    """
    if isinstance(value, bool):
        raise ValidationError(f"Could not parse amount '{value}'")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        # str() keeps 0.1 as 0.1 instead of its binary expansion
        amount = Decimal(str(value))
    else:
        if value is None or not str(value).strip():
            raise ValidationError("Empty amount string")
        amount = _parse_amount_string(str(value).strip())

    if not amount.is_finite():
        raise ValidationError(f"Amount must be a finite number, got '{value}'")
    return amount


def _parse_amount_string(amount_str: str) -> Decimal:
    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and thousands separators
    cleaned = re.sub(r"[$€£¥,\s]", "", amount_str)

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValidationError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount
