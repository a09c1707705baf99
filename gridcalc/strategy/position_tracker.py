"""
Position Tracker: owns the running position of a grid and applies fills.

State is never mutated in place. apply_fill returns a new PositionState and
the caller replaces its reference.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Dict

from loguru import logger

from ..core.errors import ContractViolation
from ..core.values import DEFAULT_PRICE_PLACES, ZERO, precise, quantize_price


@dataclass(frozen=True)
class PositionState:
    """Average entry price and size of the position built by a grid"""
    average_price: Decimal = ZERO       # 0 while flat
    total_quantity: Decimal = ZERO
    last_fill_quantity: Decimal = ZERO  # 0 until the first fill
    filled_levels: int = 0
    total_cost: Decimal = ZERO          # Sum of price * quantity at MAX_DIGITS precision, never quantized

    @classmethod
    def flat(cls) -> 'PositionState':
        """State at the start of a run"""
        return cls()

    @property
    def is_flat(self) -> bool:
        return self.total_quantity == ZERO

    def to_dict(self) -> Dict[str, str]:
        return {
            'average_price': str(self.average_price),
            'total_quantity': str(self.total_quantity),
            'last_fill_quantity': str(self.last_fill_quantity),
            'filled_levels': str(self.filled_levels),
            'total_cost': str(self.total_cost),
        }


def apply_fill(
    state: PositionState,
    price: Decimal,
    quantity: Decimal,
    price_places: int = DEFAULT_PRICE_PLACES,
) -> PositionState:
    """
    Add one fill to the position.

    The average price is derived from the running cost (kept unquantized
    at MAX_DIGITS precision) and rounded half-even once, so earlier rounded
    averages never feed back into later ones.

    Args:
        state: Position before the fill
        price: Fill price, must be positive
        quantity: Fill quantity, must be positive
        price_places: Fractional digits kept on the average price

    Returns:
        New PositionState after the fill
    """
    if quantity <= ZERO:
        raise ContractViolation(f"Fill quantity must be positive, got {quantity}")
    if price <= ZERO:
        raise ContractViolation(f"Fill price must be positive, got {price}")
    if state.total_quantity < ZERO:
        raise ContractViolation(f"Position quantity went negative: {state.total_quantity}")

    with precise():
        new_total = state.total_quantity + quantity
        new_cost = state.total_cost + price * quantity
        mean = new_cost / new_total
    new_average = quantize_price(mean, price_places)

    new_state = replace(
        state,
        average_price=new_average,
        total_quantity=new_total,
        last_fill_quantity=quantity,
        filled_levels=state.filled_levels + 1,
        total_cost=new_cost,
    )

    logger.debug(f"Fill applied: {quantity} @ {price} -> total {new_total}, avg {new_average}")
    return new_state
