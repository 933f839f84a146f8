"""
Monetary Amount Module

Coerces amounts to Decimal with cent precision. NEVER uses float arithmetic
for monetary values; floats are converted through their string form.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from typing import Union
import re

# High precision for intermediate interest calculations
getcontext().prec = 28

CENT = Decimal('0.01')
ZERO = Decimal('0.00')

AmountLike = Union[Decimal, int, float, str]


def to_amount(value: AmountLike) -> Decimal:
    """
    Convert a value to a Decimal rounded to cents

    Args:
        value: Decimal, int, float or numeric string

    Returns:
        Decimal quantized to two places (ROUND_HALF_UP)

    Raises:
        ValueError: If value is not numeric
    """
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to an amount")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, str):
        amount = decimal_from_string(value)
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        raise ValueError(f"Cannot convert {value!r} to an amount")

    if not amount.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")

    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_rate(value: AmountLike) -> Decimal:
    """
    Convert an interest or payment rate to Decimal without rounding

    Raises:
        ValueError: If value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to a rate")

    if isinstance(value, Decimal):
        rate = value
    elif isinstance(value, str):
        rate = decimal_from_string(value)
    elif isinstance(value, (int, float)):
        rate = Decimal(str(value))
    else:
        raise ValueError(f"Cannot convert {value!r} to a rate")

    if not rate.is_finite():
        raise ValueError(f"Rate must be finite, got {value!r}")

    return rate


# Optional sign, optional leading currency symbol, digits with optional
# comma thousands grouping, optional fraction
_NUMBER_PATTERN = re.compile(
    r'^(?P<sign>[+-]?)[$€£]?(?P<digits>\d{1,3}(?:,\d{3})+|\d+)(?P<fraction>\.\d+)?$',
    re.ASCII
)


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert string to Decimal, handling common formats

    Only a leading currency symbol, surrounding whitespace and comma
    thousands separators are tolerated; anything else is rejected rather
    than stripped.

    Args:
        value: String representation of number, e.g. "$1,250.50"

    Returns:
        Decimal value

    Raises:
        ValueError: If string cannot be converted to valid Decimal
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")

    match = _NUMBER_PATTERN.match(value.strip())
    if match is None:
        raise ValueError(f"Cannot convert '{value}' to Decimal")

    clean_value = match.group('sign') + match.group('digits').replace(',', '') + (match.group('fraction') or '')

    try:
        return Decimal(clean_value)
    except InvalidOperation:
        raise ValueError(f"Cannot convert '{value}' to Decimal")


def format_amount(amount: Decimal) -> str:
    """Format for logs and audit metadata"""
    return f"{amount:,.2f}"
