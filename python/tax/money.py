"""
Peso Amount Module

Decimal conversion, centavo rounding and Philippine peso formatting shared by
the tax, payroll and receipt calculators.
"""

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

logger = logging.getLogger(__name__)

CENTAVO = Decimal("0.01")
ZERO = Decimal("0")
PESO_SIGN = "₱"


class InvalidAmount(ValueError):
    """Raised for negative, NaN, infinite or non-numeric money input."""


def to_decimal(value: Any, field_name: str = "amount") -> Decimal:
    """Convert a number or numeric string to Decimal.

    Signed values are allowed; use ensure_amount for non-negative input.

    Args:
        value: int, float, Decimal or numeric string
        field_name: Name used in the error message

    Returns:
        Finite Decimal value

    Raises:
        InvalidAmount: If the value is missing, boolean, non-numeric or not finite
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmount(f"Invalid {field_name}: {value!r}")

    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidAmount(f"Invalid {field_name}: {value!r}")

    if not result.is_finite():
        raise InvalidAmount(f"Invalid {field_name}: {value!r}")

    return result


def ensure_amount(value: Any, field_name: str = "amount") -> Decimal:
    """Convert a money input and reject negative values."""
    result = to_decimal(value, field_name)
    if result < 0:
        raise InvalidAmount(f"{field_name} cannot be negative: {value!r}")
    return result


def round_centavo(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half away from zero."""
    return value.quantize(CENTAVO, rounding=ROUND_HALF_UP)


def sum_amounts(values) -> Decimal:
    """Sum signed money values and round the result to centavos."""
    total = ZERO
    for value in values:
        total += to_decimal(value)
    return round_centavo(total)


def format_philippine_currency(amount: Any) -> str:
    """Format an amount as Philippine pesos, e.g. ₱1,234.56 or -₱1,234.56."""
    value = round_centavo(to_decimal(amount))
    if value < 0:
        return f"-{PESO_SIGN}{-value:,.2f}"
    # Decimal keeps the sign of -0.00
    return f"{PESO_SIGN}{abs(value):,.2f}"


def coerce_date(value: Any) -> date | None:
    """Return the calendar date of a date, datetime or ISO-8601 string.

    Unparseable values yield None so period filters can skip the record.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            logger.debug(f"Cannot parse date: {value}")
            return None
    return None
