"""gridcalc - grid trading level and position sizing engine."""

from .core import (
    ContractViolation,
    DegenerateQuantity,
    Direction,
    GridCalcError,
    GridConfig,
    GridType,
    InvalidConfiguration,
    PriceNonPositive,
    SizingMode,
)
from .strategy import (
    FillEvent,
    GridLevel,
    GridSimulation,
    LadderRow,
    PositionState,
    SimulationPhase,
    SimulationResult,
    apply_fill,
    levels,
    next_level,
    project_ladder,
    quantity_for,
    run_simulation,
    simulate,
)

__version__ = "0.1.0"
