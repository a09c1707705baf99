"""
Shared data models for the grid engine.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


class SimulationPhase(Enum):
    """Simulation driver states"""
    AWAITING_NEXT_LEVEL = "awaiting_next_level"
    FILLED = "filled"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class GridLevel:
    """One trigger price in the grid"""
    index: int                                  # 0-based position in the ladder
    trigger_price: Decimal
    planned_quantity: Optional[Decimal] = None  # Only known up front for fixed sizing


@dataclass(frozen=True)
class FillEvent:
    """Immutable record of one triggered level"""
    level_index: int
    price: Decimal                      # Fill price (the level's trigger price)
    quantity: Decimal
    resulting_average_price: Decimal
    resulting_total_quantity: Decimal
    tick_price: Optional[Decimal] = None  # Observation that crossed the level

    def to_dict(self) -> Dict[str, Any]:
        return {
            'level_index': self.level_index,
            'price': str(self.price),
            'quantity': str(self.quantity),
            'resulting_average_price': str(self.resulting_average_price),
            'resulting_total_quantity': str(self.resulting_total_quantity),
            'tick_price': None if self.tick_price is None else str(self.tick_price),
        }


@dataclass(frozen=True)
class LadderRow:
    """One line of a projected ladder, assuming every level fills in turn"""
    level_index: int
    trigger_price: Decimal
    quantity: Decimal
    total_quantity: Decimal
    average_price: Decimal
    total_cost: Decimal

    @property
    def level_number(self) -> int:
        """1-based level number for display"""
        return self.level_index + 1
