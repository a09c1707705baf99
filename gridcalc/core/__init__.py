"""Configuration, value types and error kinds"""

from .config import Direction, GridConfig, GridType, SizingMode
from .errors import (
    ContractViolation,
    DegenerateQuantity,
    GridCalcError,
    InvalidConfiguration,
    PriceNonPositive,
)

__all__ = [
    'Direction',
    'GridConfig',
    'GridType',
    'SizingMode',
    'GridCalcError',
    'InvalidConfiguration',
    'DegenerateQuantity',
    'PriceNonPositive',
    'ContractViolation',
]
