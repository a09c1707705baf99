"""
Grid Level Generator: translates a configuration and a reference price into
trigger prices.

FIXED grids anchor every level to the reference (initial) price. AVERAGE
grids only know their next level, one step away from the current average.
Every trigger lies strictly beyond the one before it (or the reference for
the first level); generation stops at the first level that would not.
"""

from decimal import Decimal
from typing import List, Optional, Sequence

from loguru import logger

from ..core.config import GridConfig, GridType, SizingMode
from ..core.errors import InvalidConfiguration, PriceNonPositive
from ..core.values import ONE, ZERO, precise, quantize_price
from .data_models import GridLevel
from .position_tracker import PositionState


def step_price(config: GridConfig, reference_price: Decimal, offset: Decimal) -> Decimal:
    """
    Price `offset` (a fraction) away from the reference, direction-aware.

    Args:
        config: Grid configuration
        reference_price: Anchor of the step
        offset: Fraction between reference and trigger (0.02 == 2%)

    Returns:
        Trigger price rounded half-even to config.price_places

    Raises:
        PriceNonPositive: if the step lands on zero or below
    """
    with precise():
        factor = ONE - offset if config.descending else ONE + offset
        raw = reference_price * factor
    price = quantize_price(raw, config.price_places)
    if price <= ZERO:
        raise PriceNonPositive(
            f"Offset {offset} from {reference_price} is non-positive ({price})"
        )
    return price


def _beyond(config: GridConfig, price: Decimal, previous: Decimal) -> bool:
    # Strictly past the previous trigger in the grid's direction
    return price < previous if config.descending else price > previous


def _planned_quantity(config: GridConfig) -> Optional[Decimal]:
    # Multiplier modes depend on the live position, only known at trigger time
    if config.sizing_mode is SizingMode.FIXED:
        return config.base_quantity
    return None


def levels(config: GridConfig, reference_price: Decimal) -> List[GridLevel]:
    """
    Snapshot of the grid levels from a reference price.

    Pure function of its inputs. FIXED returns up to config.level_count
    levels, AVERAGE returns at most the single next level. Generation stops
    at the first level that would be priced at or below zero, or that
    rounds onto the previous trigger.

    Args:
        config: Grid configuration
        reference_price: Price the levels are measured from

    Returns:
        Ordered list of GridLevel, strictly descending for LONG and strictly
        ascending for SHORT
    """
    config.validate()
    if reference_price <= ZERO:
        raise InvalidConfiguration(f"Reference price must be positive, got {reference_price}")

    count = config.level_count if config.grid_type is GridType.FIXED else 1
    planned = _planned_quantity(config)

    result: List[GridLevel] = []
    previous = reference_price
    for index in range(count):
        try:
            price = step_price(config, reference_price, config.offset_for(index))
        except PriceNonPositive as e:
            logger.debug(f"Grid generation stopped after {len(result)} levels: {e}")
            break
        if not _beyond(config, price, previous):
            logger.debug(
                f"Grid generation stopped after {len(result)} levels: "
                f"level {index} rounds to {price}, not past {previous}"
            )
            break
        result.append(GridLevel(index=index, trigger_price=price, planned_quantity=planned))
        previous = price

    return result


def next_level(
    config: GridConfig,
    state: PositionState,
    fixed_levels: Optional[Sequence[GridLevel]] = None,
) -> Optional[GridLevel]:
    """
    The level that is pending for a given position.

    Args:
        config: Grid configuration
        state: Current position
        fixed_levels: Precomputed FIXED ladder, computed from
            config.initial_price when not given

    Returns:
        The next GridLevel, or None when the grid has no more valid levels
    """
    index = state.filled_levels
    if index >= config.level_count:
        return None

    if config.grid_type is GridType.FIXED:
        ladder = fixed_levels if fixed_levels is not None else levels(config, config.initial_price)
        if index >= len(ladder):
            return None
        return ladder[index]

    if config.grid_type is GridType.AVERAGE:
        reference = config.initial_price if state.is_flat else state.average_price
        try:
            price = step_price(config, reference, config.offset_for(index))
        except PriceNonPositive as e:
            logger.debug(f"No further average level: {e}")
            return None
        if not _beyond(config, price, reference):
            logger.debug(f"No further average level: {price} does not move past {reference}")
            return None
        return GridLevel(index=index, trigger_price=price, planned_quantity=_planned_quantity(config))

    raise ValueError(f"Unhandled grid type: {config.grid_type!r}")
