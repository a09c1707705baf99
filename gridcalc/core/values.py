"""
Fixed-precision price and quantity helpers.

All arithmetic in gridcalc runs on decimal.Decimal. Values are quantized with
ROUND_HALF_EVEN to a configured number of fractional digits, once per
computed result. Intermediate arithmetic runs in the ARITHMETIC context
(MAX_DIGITS significant digits) rather than the 28-digit default.
"""

from decimal import Context, Decimal, ROUND_HALF_EVEN, InvalidOperation, localcontext
from typing import Union

from .errors import ContractViolation


DEFAULT_PRICE_PLACES = 8
DEFAULT_QUANTITY_PLACES = 8

# Significant digits carried by engine arithmetic and quantization
MAX_DIGITS = 60
ARITHMETIC = Context(prec=MAX_DIGITS, rounding=ROUND_HALF_EVEN)

ZERO = Decimal("0")
ONE = Decimal("1")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """
    Convert a user supplied number to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1") and not the
    binary expansion.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ContractViolation(f"Not a number: {value!r}")
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value.strip() if isinstance(value, str) else value)
        except InvalidOperation:
            raise ContractViolation(f"Not a number: {value!r}") from None
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        raise ContractViolation(f"Not a number: {value!r}")

    if not result.is_finite():
        raise ContractViolation(f"Number must be finite, got {value!r}")
    return result


def quantum(places: int) -> Decimal:
    """Smallest step for the given number of fractional digits."""
    if places < 0:
        raise ContractViolation(f"places must be >= 0, got {places}")
    return ONE.scaleb(-places)


def precise():
    """Context manager for engine arithmetic at MAX_DIGITS precision."""
    return localcontext(ARITHMETIC)


def fits(value: Decimal, places: int) -> bool:
    """True if value rounded to `places` fractional digits fits in MAX_DIGITS."""
    return value.adjusted() + places + 1 <= MAX_DIGITS


def quantize(value: Decimal, places: int) -> Decimal:
    """
    Round value half-even to `places` fractional digits.

    Raises:
        ContractViolation: if the result needs more than MAX_DIGITS digits
    """
    step = quantum(places)
    with precise():
        try:
            return value.quantize(step, rounding=ROUND_HALF_EVEN)
        except InvalidOperation:
            raise ContractViolation(
                f"{value} cannot be held to {places} places in {MAX_DIGITS} digits"
            ) from None


def quantize_price(value: Decimal, places: int = DEFAULT_PRICE_PLACES) -> Decimal:
    return quantize(value, places)


def quantize_quantity(value: Decimal, places: int = DEFAULT_QUANTITY_PLACES) -> Decimal:
    return quantize(value, places)


def crosses(price: Decimal, trigger: Decimal, descending: bool) -> bool:
    """
    Direction-aware level comparison.

    Args:
        price: Observed price
        trigger: Level trigger price
        descending: True for a ladder below the anchor (long grid)

    Returns:
        True when the observed price has reached the trigger
    """
    if descending:
        return price <= trigger
    return price >= trigger
