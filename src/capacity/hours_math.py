"""
Decimal Math Utilities for Capacity Calculations.

Weekly hours arrive from the persistence layer as ints, floats, numeric
strings or garbage. Everything is converted to Decimal so that summing
allocations is exact and the same snapshot always yields the same
utilization figures.

Why Decimal?
- Float: 0.1 + 0.2 = 0.30000000000000004
- Decimal: 0.1 + 0.2 = 0.3

Parsing here never raises: a value that cannot be read as a finite,
non-negative number counts as zero hours.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Iterable, Optional, Union
import logging

logger = logging.getLogger(__name__)

# Type alias for values that can be converted to Decimal
Numeric = Union[int, float, str, Decimal]

HOURS_PLACES = Decimal("0.01")
PERCENT_PLACES = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert a numeric value to Decimal.

    Args:
        value: Value to convert (int, float, str, or Decimal)

    Returns:
        Decimal representation

    Raises:
        InvalidOperation: If a string is not a number

    Examples:
        >>> to_decimal(40)
        Decimal('40')
        >>> to_decimal(37.5)
        Decimal('37.5')
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Convert float to string first to preserve representation
        return Decimal(str(value))
    if isinstance(value, str):
        return Decimal(value.strip())
    return Decimal(value)


def parse_hours(value: Any, default: Numeric = ZERO) -> Decimal:
    """
    Leniently parse a weekly hours value.

    None, booleans, empty strings, non-numeric strings, NaN, infinities and
    negative numbers all yield ``default``.

    Examples:
        >>> parse_hours("12.5")
        Decimal('12.5')
        >>> parse_hours("twelve")
        Decimal('0')
        >>> parse_hours(None, default=40)
        Decimal('40')
    """
    fallback = to_decimal(default)
    if value is None or isinstance(value, bool):
        return fallback
    try:
        result = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        logger.debug(f"Unparseable hours value {value!r}, using {fallback}")
        return fallback
    if not result.is_finite() or result < 0:
        logger.debug(f"Out of range hours value {value!r}, using {fallback}")
        return fallback
    return result


def sum_hours(values: Iterable[Any]) -> Decimal:
    """
    Sum weekly hours, parsing each value leniently.

    Examples:
        >>> sum_hours(["10", 20.5, None, "n/a"])
        Decimal('30.5')
    """
    total = ZERO
    for v in values:
        total += parse_hours(v)
    return total


def divide(a: Numeric, b: Numeric, default: Optional[Numeric] = None) -> Decimal:
    """
    Divide a by b with Decimal precision.

    Args:
        a: Dividend
        b: Divisor
        default: Value to return if division by zero (None raises error)

    Returns:
        Quotient as Decimal

    Raises:
        InvalidOperation: If b is zero and no default provided
    """
    b_dec = to_decimal(b)
    if b_dec == 0:
        if default is not None:
            return to_decimal(default)
        raise InvalidOperation("Division by zero")
    return to_decimal(a) / b_dec


def percent_of(part: Numeric, whole: Numeric) -> Decimal:
    """
    Calculate what percentage part is of whole, as 0-100+.

    A zero or negative whole yields 0.

    Examples:
        >>> percent_of(45, 40)
        Decimal('112.500')
    """
    whole_d = to_decimal(whole)
    if whole_d <= 0:
        return ZERO
    return divide(part, whole_d) * HUNDRED


def floor_zero(value: Numeric) -> Decimal:
    """
    Clamp a value at zero from below.

    Examples:
        >>> floor_zero(-5)
        Decimal('0')
    """
    return max(ZERO, to_decimal(value))


def hours(value: Numeric) -> Decimal:
    """Round hours to 2 decimal places for display."""
    return to_decimal(value).quantize(HOURS_PLACES, rounding=ROUND_HALF_UP)


def percentage(value: Numeric) -> Decimal:
    """Round a percentage to 2 decimal places for display."""
    return to_decimal(value).quantize(PERCENT_PLACES, rounding=ROUND_HALF_UP)
