"""Position sizing for triggered grid levels."""

from decimal import Decimal

from ..core.config import GridConfig, SizingMode
from ..core.errors import DegenerateQuantity
from ..core.values import ZERO, precise, quantize_quantity
from .position_tracker import PositionState


def quantity_for(config: GridConfig, state: PositionState) -> Decimal:
    """
    Calculate the quantity to transact at the next triggered level.

    Multiplier modes fall back to base_quantity while there is nothing to
    multiply (flat position or no previous fill).

    Args:
        config: Grid configuration
        state: Position before the fill

    Returns:
        Quantity rounded half-even to config.quantity_places, always > 0
    """
    mode = config.sizing_mode

    if mode is SizingMode.FIXED:
        raw = config.base_quantity
    elif mode is SizingMode.CURRENT_MULTIPLE:
        if state.total_quantity == ZERO:
            raw = config.base_quantity
        else:
            with precise():
                raw = config.multiplier * state.total_quantity
    elif mode is SizingMode.INCREMENT_MULTIPLE:
        if state.last_fill_quantity == ZERO:
            raw = config.base_quantity
        else:
            with precise():
                raw = config.multiplier * state.last_fill_quantity
    else:
        raise ValueError(f"Unhandled sizing mode: {mode!r}")

    quantity = quantize_quantity(raw, config.quantity_places)
    if quantity <= ZERO:
        raise DegenerateQuantity(
            f"Sizing mode '{mode.value}' produced quantity {quantity} "
            f"(raw {raw}) at level {state.filled_levels}"
        )
    return quantity
