"""
Grid Level, Sizing and Simulation Module
"""

from .data_models import FillEvent, GridLevel, LadderRow, SimulationPhase
from .grid_levels import levels, next_level, step_price
from .ladder import project_ladder
from .position_sizing import quantity_for
from .position_tracker import PositionState, apply_fill
from .simulation import GridSimulation, SimulationResult, run_simulation, simulate

__all__ = [
    "FillEvent",
    "GridLevel",
    "LadderRow",
    "SimulationPhase",
    "levels",
    "next_level",
    "step_price",
    "project_ladder",
    "quantity_for",
    "PositionState",
    "apply_fill",
    "GridSimulation",
    "SimulationResult",
    "run_simulation",
    "simulate",
]
