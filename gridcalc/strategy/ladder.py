"""
Ladder projection: what the position looks like if every level fills in turn.
"""

from typing import List

from ..core.config import GridConfig
from .data_models import LadderRow
from .simulation import GridSimulation


def project_ladder(config: GridConfig) -> List[LadderRow]:
    """
    Walk the grid level by level, filling each one at its trigger price.

    Uses the simulation driver with a synthetic tick at every pending
    trigger, so AVERAGE grids re-anchor after each fill exactly as they do
    in a live run.

    Args:
        config: Grid configuration

    Returns:
        One LadderRow per level, at most config.level_count rows
    """
    simulation = GridSimulation(config)
    rows: List[LadderRow] = []

    while not simulation.is_exhausted:
        level = simulation.pending_level
        event = simulation.on_tick(level.trigger_price)
        rows.append(LadderRow(
            level_index=event.level_index,
            trigger_price=event.price,
            quantity=event.quantity,
            total_quantity=event.resulting_total_quantity,
            average_price=event.resulting_average_price,
            total_cost=simulation.state.total_cost,
        ))

    return rows
