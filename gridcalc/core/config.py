"""
Configuration for a single grid run.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from .errors import ContractViolation, InvalidConfiguration
from .values import (
    DEFAULT_PRICE_PLACES,
    DEFAULT_QUANTITY_PLACES,
    ONE,
    ZERO,
    fits,
    to_decimal,
)


class Direction(str, Enum):
    """Which side of the anchor the grid is laid out on"""
    LONG = "long"    # buy levels below the anchor
    SHORT = "short"  # sell levels above the anchor


class GridType(str, Enum):
    """How trigger prices are anchored"""
    FIXED = "fixed"      # every level from the initial price
    AVERAGE = "average"  # next level from the running average price


class SizingMode(str, Enum):
    """How much to transact at a triggered level"""
    FIXED = "fixed"
    CURRENT_MULTIPLE = "current-multiple"
    INCREMENT_MULTIPLE = "increment-multiple"

    @property
    def needs_multiplier(self) -> bool:
        return self is not SizingMode.FIXED


def _parse_enum(enum_cls, value: Any, field_name: str):
    if isinstance(value, enum_cls):
        return value
    raw = str(value).strip().lower().replace("_", "-")
    for member in enum_cls:
        if member.value == raw:
            return member
    allowed = ", ".join(f"'{m.value}'" for m in enum_cls)
    raise InvalidConfiguration(f"Invalid {field_name}: {value!r}. Must be one of {allowed}")


def _parse_decimal(value: Any, field_name: str) -> Decimal:
    try:
        return to_decimal(value)
    except ContractViolation:
        raise InvalidConfiguration(f"{field_name} must be a number, got {value!r}") from None


def _parse_percents(value: Union[str, Sequence[Any]]) -> Tuple[Decimal, ...]:
    """Accepts a sequence or a comma-separated string such as '0.01,0.02'."""
    if isinstance(value, str):
        value = [part for part in value.split(",") if part.strip()]
    return tuple(_parse_decimal(part, "level_percents") for part in value)


@dataclass(frozen=True)
class GridConfig:
    """Configuration parameters for one grid strategy run"""

    # Required parameters
    direction: Direction
    grid_type: GridType
    sizing_mode: SizingMode
    step_percent: Optional[Decimal]  # Fraction between levels (0.02 == 2%), optional with level_percents
    base_quantity: Decimal           # First fill size, and every size in FIXED mode
    max_levels: Optional[int]        # Upper bound on grid depth, defaults to len(level_percents)
    initial_price: Decimal           # Anchor price

    # Optional parameters with defaults
    multiplier: Optional[Decimal] = None   # Required for multiplier sizing modes
    price_places: int = DEFAULT_PRICE_PLACES
    quantity_places: int = DEFAULT_QUANTITY_PLACES
    level_percents: Optional[Tuple[Decimal, ...]] = None  # Per-level offsets, override step_percent

    def __post_init__(self):
        # Frozen: normalise through object.__setattr__, then reject bad values
        object.__setattr__(self, "direction", _parse_enum(Direction, self.direction, "direction"))
        object.__setattr__(self, "grid_type", _parse_enum(GridType, self.grid_type, "grid_type"))
        object.__setattr__(self, "sizing_mode", _parse_enum(SizingMode, self.sizing_mode, "sizing_mode"))
        for name in ("step_percent", "base_quantity", "initial_price", "multiplier"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, Decimal):
                object.__setattr__(self, name, _parse_decimal(value, name))
        if self.level_percents is not None:
            object.__setattr__(self, "level_percents", _parse_percents(self.level_percents))
            if self.max_levels is None:
                object.__setattr__(self, "max_levels", len(self.level_percents))
        self.validate()

    @property
    def descending(self) -> bool:
        """Long grids step down from the anchor, short grids step up"""
        return self.direction is Direction.LONG

    @property
    def level_count(self) -> int:
        """Number of levels the grid can fill"""
        if self.level_percents is not None:
            return min(self.max_levels, len(self.level_percents))
        return self.max_levels

    def offset_for(self, index: int) -> Decimal:
        """
        Fraction between level `index` (0-based) and its reference price.

        FIXED levels are all measured from the anchor, so a uniform step
        accumulates. AVERAGE levels are one step from the running average.
        """
        if self.level_percents is not None:
            return self.level_percents[index]
        if self.grid_type is GridType.FIXED:
            return (index + 1) * self.step_percent
        return self.step_percent

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'GridConfig':
        """
        Create config from a plain mapping (CLI, config file or API).

        Enum fields accept their string values and numeric fields accept
        anything Decimal can parse. `level_percents` accepts a list or a
        comma-separated string. The result is validated.
        """
        required = ["direction", "grid_type", "sizing_mode", "base_quantity", "initial_price"]
        if data.get("level_percents") is None:
            required[3:3] = ["step_percent", "max_levels"]
        missing = [name for name in required if data.get(name) is None]
        if missing:
            raise InvalidConfiguration(f"Missing required fields: {', '.join(missing)}")

        try:
            max_levels = None if data.get("max_levels") is None else int(data["max_levels"])
            price_places = int(data.get("price_places", DEFAULT_PRICE_PLACES))
            quantity_places = int(data.get("quantity_places", DEFAULT_QUANTITY_PLACES))
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration(f"Integer field is not an integer: {e}") from None

        return cls(
            direction=data["direction"],
            grid_type=data["grid_type"],
            sizing_mode=data["sizing_mode"],
            step_percent=data.get("step_percent"),
            base_quantity=data["base_quantity"],
            max_levels=max_levels,
            initial_price=data["initial_price"],
            multiplier=data.get("multiplier"),
            price_places=price_places,
            quantity_places=quantity_places,
            level_percents=data.get("level_percents"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        data = {
            'direction': self.direction.value,
            'grid_type': self.grid_type.value,
            'sizing_mode': self.sizing_mode.value,
            'base_quantity': str(self.base_quantity),
            'max_levels': self.max_levels,
            'initial_price': str(self.initial_price),
            'price_places': self.price_places,
            'quantity_places': self.quantity_places,
        }
        if self.step_percent is not None:
            data['step_percent'] = str(self.step_percent)
        if self.multiplier is not None:
            data['multiplier'] = str(self.multiplier)
        if self.level_percents is not None:
            data['level_percents'] = [str(p) for p in self.level_percents]
        return data

    def validate(self) -> bool:
        """Validate configuration parameters"""
        if not isinstance(self.direction, Direction):
            raise InvalidConfiguration(f"Invalid direction: {self.direction!r}")

        if not isinstance(self.grid_type, GridType):
            raise InvalidConfiguration(f"Invalid grid_type: {self.grid_type!r}")

        if not isinstance(self.sizing_mode, SizingMode):
            raise InvalidConfiguration(f"Invalid sizing_mode: {self.sizing_mode!r}")

        if self.step_percent is None:
            if self.level_percents is None:
                raise InvalidConfiguration("step_percent is required when level_percents is not set")
        elif self.step_percent <= ZERO:
            raise InvalidConfiguration(f"step_percent must be positive, got {self.step_percent}")

        if self.level_percents is not None:
            self._validate_level_percents()

        if self.base_quantity <= ZERO:
            raise InvalidConfiguration(f"base_quantity must be positive, got {self.base_quantity}")

        if self.initial_price <= ZERO:
            raise InvalidConfiguration(f"initial_price must be positive, got {self.initial_price}")

        if isinstance(self.max_levels, bool) or not isinstance(self.max_levels, int) or self.max_levels < 1:
            raise InvalidConfiguration(f"max_levels must be an integer >= 1, got {self.max_levels!r}")

        if self.sizing_mode.needs_multiplier:
            if self.multiplier is None:
                raise InvalidConfiguration(
                    f"multiplier is required for sizing mode '{self.sizing_mode.value}'"
                )
            if self.multiplier <= ZERO:
                raise InvalidConfiguration(f"multiplier must be positive, got {self.multiplier}")

        if self.price_places < 0 or self.quantity_places < 0:
            raise InvalidConfiguration("price_places and quantity_places must be >= 0")

        if not fits(self.initial_price, self.price_places):
            raise InvalidConfiguration(
                f"initial_price {self.initial_price} is too large for {self.price_places} price places"
            )

        if not fits(self.base_quantity, self.quantity_places):
            raise InvalidConfiguration(
                f"base_quantity {self.base_quantity} is too large for {self.quantity_places} quantity places"
            )

        return True

    def _validate_level_percents(self) -> None:
        if not self.level_percents:
            raise InvalidConfiguration("level_percents cannot be empty")

        for percent in self.level_percents:
            if percent <= ZERO or percent >= ONE:
                raise InvalidConfiguration(
                    f"Invalid level percent: {percent}. Must be between 0 and 1 (exclusive)"
                )

        # A FIXED ladder is measured from one anchor, so its offsets must grow
        if self.grid_type is GridType.FIXED:
            for previous, current in zip(self.level_percents, self.level_percents[1:]):
                if current <= previous:
                    raise InvalidConfiguration(
                        f"level_percents must be strictly increasing for a fixed grid, "
                        f"got {previous} then {current}"
                    )
