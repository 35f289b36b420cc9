"""
Decimal Math Utilities for Ringgit Calculations.

Provides precise decimal arithmetic to avoid floating point drift in
bracket and contribution calculations. Calculators keep plain floats in
their public results, but every rounding step goes through this module.

Rounding convention:
- Currency is rounded to 2 decimal places (sen).
- Rates and ratios are rounded to 4 decimal places.
- Ties round toward positive infinity (scaled-round semantics), so
  1.005 -> 1.01 and -1.005 -> -1.00. This is round-half-up, not
  banker's rounding.
"""

import math
from decimal import Decimal, ROUND_DOWN, ROUND_FLOOR, InvalidOperation
from typing import Union

# Type alias for values that can be converted to Decimal
Numeric = Union[int, float, str, Decimal]

MONEY_PLACES = Decimal("0.01")  # Round to sen
RATE_PLACES = Decimal("0.0001")  # 4 decimal places for rates
HALF = Decimal("0.5")


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert a numeric value to Decimal.

    Floats go through ``str`` first so that 0.1 stays 0.1.

    Examples:
        >>> to_decimal(100)
        Decimal('100')
        >>> to_decimal(100.50)
        Decimal('100.5')
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidOperation(f"Cannot convert non-finite value {value!r} to Decimal")
        return Decimal(str(value))
    return Decimal(value)


def _round_half_up(value: Decimal, places: Decimal) -> Decimal:
    # floor(x / q + 0.5) * q
    scaled = (value / places + HALF).to_integral_value(rounding=ROUND_FLOOR)
    return (scaled * places).quantize(places)


def money(value: Numeric) -> Decimal:
    """
    Convert value to money (rounded to sen).

    Examples:
        >>> money(100.999)
        Decimal('101.00')
        >>> money(100.994)
        Decimal('100.99')
        >>> money(1.005)
        Decimal('1.01')
    """
    return _round_half_up(to_decimal(value), MONEY_PLACES)


def money_down(value: Numeric) -> Decimal:
    """
    Convert value to money, truncating toward zero.

    Used where the result must never exceed the exact figure
    (e.g. the maximum affordable salary).

    Examples:
        >>> money_down(100.999)
        Decimal('100.99')
    """
    return to_decimal(value).quantize(MONEY_PLACES, rounding=ROUND_DOWN)


def rate(value: Numeric) -> Decimal:
    """
    Convert value to a rate (4 decimal places).

    Examples:
        >>> rate(0.076899)
        Decimal('0.0769')
    """
    return _round_half_up(to_decimal(value), RATE_PLACES)


def round_currency(value: Numeric) -> float:
    """Round to sen and return a float for result structures."""
    return float(money(value))


def round_whole(value: Numeric) -> int:
    """
    Round to the nearest whole ringgit, ties toward positive infinity.

    Examples:
        >>> round_whole(1250.5)
        1251
        >>> round_whole(-0.5)
        0
    """
    return int((to_decimal(value) + HALF).to_integral_value(rounding=ROUND_FLOOR))


def subtract(a: Numeric, b: Numeric) -> Decimal:
    """Subtract b from a with Decimal precision."""
    return to_decimal(a) - to_decimal(b)


def multiply(a: Numeric, b: Numeric) -> Decimal:
    """Multiply two values with Decimal precision."""
    return to_decimal(a) * to_decimal(b)


def min_decimal(*values: Numeric) -> Decimal:
    """Find minimum of values with Decimal precision."""
    return min(to_decimal(v) for v in values)


def max_decimal(*values: Numeric) -> Decimal:
    """Find maximum of values with Decimal precision."""
    return max(to_decimal(v) for v in values)


def safe_divide_for_rate(numerator: Numeric, denominator: Numeric) -> Decimal:
    """
    Safe division for calculating rates (returns 0 if denominator is 0).

    Returns:
        Rate with 4 decimal places, or 0 if denominator is 0
    """
    denom = to_decimal(denominator)
    if denom == 0:
        return Decimal("0.0000")
    return rate(to_decimal(numerator) / denom)


def format_ringgit(value: Numeric, decimal_places: int = 0) -> str:
    """
    Format value as a ringgit string with thousands separators.

    Whole-ringgit output rounds ties up, matching ``round_whole``.

    Examples:
        >>> format_ringgit(1234567.891)
        'RM1,234,568'
        >>> format_ringgit(1234.5, decimal_places=2)
        'RM1,234.50'
    """
    if decimal_places == 0:
        return f"RM{round_whole(value):,}"
    amount = _round_half_up(to_decimal(value), Decimal(1).scaleb(-decimal_places))
    return f"RM{amount:,.{decimal_places}f}"


def is_valid_number(value: object) -> bool:
    """True for finite ints/floats/Decimals (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(value)


def is_non_negative(value: object) -> bool:
    """True for finite numbers that are >= 0."""
    return is_valid_number(value) and value >= 0


def require_non_negative(value: object, name: str) -> None:
    """
    Guard for calculator preconditions.

    Raises:
        ValueError: if ``value`` is negative, NaN, infinite or not a number.
    """
    if not is_non_negative(value):
        raise ValueError(f"{name} must be a valid non-negative number, got {value!r}")
