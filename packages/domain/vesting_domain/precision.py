"""Fixed-precision arithmetic for asset amounts and fiat values.

Asset amounts are carried at subunit resolution (1e-8 of a whole unit, the
satoshi for Bitcoin). Every operation that accumulates amounts works on
integer subunits and converts back once, so repeated fractional additions
never drift:

    sum_amounts([0.01] * 10) == Decimal("0.10000000")   # not 0.09999999999999999

Fiat values are Decimals rounded half-up to cents.

All functions are pure. Validation failures raise InvalidAmount carrying the
offending value and the caller-supplied context string.
"""

import math
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Iterable, Union

from .errors import InvalidAmount

Number = Union[int, float, Decimal]

# =============================================================================
# Constants
# =============================================================================

SUBUNITS_PER_UNIT = 100_000_000

# 21M whole units plus margin
MAX_SAFE_AMOUNT = Decimal("25000000")

SUBUNIT = Decimal("0.00000001")
CENT = Decimal("0.01")

# Enough digits for 16-digit subunit counts times 17-digit float quotes
_WORKING_PRECISION = 50


# =============================================================================
# Validation helpers
# =============================================================================

def _as_decimal(value: Number, context: str) -> Decimal:
    """Convert a numeric input to Decimal, rejecting NaN/Inf and non-numbers.

    Floats go through their shortest repr, so 0.1 becomes Decimal("0.1")
    rather than the binary expansion.
    """
    if isinstance(value, bool):
        raise InvalidAmount(value, context, "not a number")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidAmount(value, context, "must be finite")
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidAmount(value, context, "must be finite")
        return Decimal(repr(value))
    raise InvalidAmount(value, context, "not a number")


def validate_price(price: Number, context: str = "unit price") -> Decimal:
    """Validate an externally supplied quote and return it as a Decimal.

    Args:
        price: Fiat price per whole unit
        context: Operation description for error messages

    Returns:
        The price as Decimal

    Raises:
        InvalidAmount: If the price is negative, NaN/Inf or not numeric
    """
    dec = _as_decimal(price, context)
    if dec < 0:
        raise InvalidAmount(price, context, "prices cannot be negative")
    return dec


# =============================================================================
# Subunit conversion
# =============================================================================

def to_subunits(amount: Number, context: str = "asset amount") -> int:
    """Convert an asset amount to integer subunits.

    Amounts finer than one subunit are rounded half-up.

    Args:
        amount: Amount in whole units (e.g. 0.015 BTC)
        context: Operation description for error messages

    Returns:
        Integer subunits (e.g. 1_500_000)

    Raises:
        InvalidAmount: If negative, non-finite, non-numeric or above MAX_SAFE_AMOUNT
    """
    dec = _as_decimal(amount, context)
    if dec < 0:
        raise InvalidAmount(amount, context, "asset amounts cannot be negative")
    if dec > MAX_SAFE_AMOUNT:
        raise InvalidAmount(amount, context, "exceeds maximum safe amount")
    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION
        return int((dec * SUBUNITS_PER_UNIT).to_integral_value(rounding=ROUND_HALF_UP))


def from_subunits(subunits: int) -> Decimal:
    """Convert integer subunits back to a whole-unit Decimal with 8 places.

    Example:
        >>> from_subunits(1_500_000)
        Decimal('0.01500000')
    """
    if isinstance(subunits, bool) or not isinstance(subunits, int):
        raise InvalidAmount(subunits, "subunit conversion", "subunits must be an integer")
    if subunits < 0:
        raise InvalidAmount(subunits, "subunit conversion", "subunits cannot be negative")
    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION
        return (Decimal(subunits) / SUBUNITS_PER_UNIT).quantize(SUBUNIT)


def quantize_amount(amount: Number, context: str = "asset amount") -> Decimal:
    """Validate an amount and snap it to subunit resolution."""
    return from_subunits(to_subunits(amount, context))


# =============================================================================
# Arithmetic
# =============================================================================

def value_at(amount: Number, unit_price: Number, context: str = "value calculation") -> Decimal:
    """Fiat value of an asset amount at a unit price, rounded half-up to cents.

    The amount is converted to subunits first so the result depends only on
    the subunit count and the quote.

    Args:
        amount: Asset amount in whole units
        unit_price: Fiat price per whole unit
        context: Operation description for error messages

    Returns:
        Fiat value as Decimal with 2 places

    Example:
        >>> value_at(Decimal("0.5"), 11000)
        Decimal('5500.00')
    """
    subunits = to_subunits(amount, f"{context} (amount)")
    price = validate_price(unit_price, f"{context} (price)")
    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION
        value = Decimal(subunits) * price / SUBUNITS_PER_UNIT
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


def sum_amounts(amounts: Iterable[Number], context: str = "asset sum") -> Decimal:
    """Sum asset amounts at integer subunit resolution.

    Args:
        amounts: Asset amounts in whole units
        context: Operation description for error messages

    Returns:
        Exact sum as Decimal with 8 places
    """
    total = 0
    for amount in amounts:
        total += to_subunits(amount, context)
    return from_subunits(total)


def sum_fiat(values: Iterable[Number], context: str = "fiat sum") -> Decimal:
    """Sum fiat values exactly and round the total to cents."""
    total = Decimal("0")
    for value in values:
        total += _as_decimal(value, context)
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def apply_percent(amount: Number, percent: Number, context: str = "percent of amount") -> Decimal:
    """Take `percent` percent of an asset amount, rounded half-up to a subunit.

    Example:
        >>> apply_percent(Decimal("0.02"), 50)
        Decimal('0.01000000')
    """
    subunits = to_subunits(amount, context)
    pct = _as_decimal(percent, context)
    if pct < 0:
        raise InvalidAmount(percent, context, "percent cannot be negative")
    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION
        scaled = (Decimal(subunits) * pct / 100).to_integral_value(rounding=ROUND_HALF_UP)
    return from_subunits(int(scaled))


def percentage(value: Number, total: Number, context: str = "percentage calculation") -> Decimal:
    """Ratio of value to total as a fraction (0.1 = 10%).

    Returns 0 when total is 0 instead of dividing by zero. For value <= total
    the result lies in [0, 1].
    """
    numerator = _as_decimal(value, context)
    denominator = _as_decimal(total, context)
    if numerator < 0:
        raise InvalidAmount(value, context, "value cannot be negative")
    if denominator < 0:
        raise InvalidAmount(total, context, "total cannot be negative")
    if denominator == 0:
        return Decimal("0")
    return numerator / denominator
