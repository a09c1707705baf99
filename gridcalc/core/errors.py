"""
Error kinds raised by the grid engine.
"""

from typing import Sequence, Tuple


class GridCalcError(Exception):
    """Base class for every error raised by gridcalc"""


class InvalidConfiguration(GridCalcError, ValueError):
    """Configuration rejected before anything is computed"""


class DegenerateQuantity(GridCalcError, ArithmeticError):
    """
    Sizing would produce a zero or negative quantity.

    When raised from a running simulation, `fills` holds the FillEvents that
    were emitted before the failure. Those fills are not rolled back.
    """

    def __init__(self, message: str, fills: Sequence = ()):
        super().__init__(message)
        self.fills: Tuple = tuple(fills)


class PriceNonPositive(GridCalcError):
    """A computed or observed price is zero or negative"""


class ContractViolation(GridCalcError):
    """A caller broke an API contract (e.g. applying a negative fill)"""
