"""
Loads grid definitions from a YAML file.

Layout:

    grid:                     # main configuration
      direction: long
      grid_type: fixed
      sizing_mode: fixed
      step_percent: 0.02      # or level_percents: [0.01, 0.02, 0.035]
      base_quantity: 10
      max_levels: 5
      initial_price: 100
    strategies:               # optional named variants, same fields + name
      - name: doubling
        ...
"""
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..core.config import Direction, GridConfig, GridType, SizingMode
from ..core.errors import InvalidConfiguration
from .config import Settings


class GridSection(BaseModel):
    """Schema for one grid definition in a config file."""
    model_config = ConfigDict(extra="forbid")

    direction: Direction = Direction.LONG
    grid_type: GridType
    sizing_mode: SizingMode
    step_percent: Optional[Decimal] = Field(default=None, gt=0, description="Fraction between levels")
    base_quantity: Decimal = Field(..., gt=0)
    multiplier: Optional[Decimal] = Field(default=None, gt=0)
    max_levels: Optional[int] = Field(default=None, ge=1)
    initial_price: Decimal = Field(..., gt=0)
    price_places: Optional[int] = Field(default=None, ge=0)
    quantity_places: Optional[int] = Field(default=None, ge=0)
    level_percents: Optional[List[Decimal]] = Field(
        default=None, min_length=1, description="Per-level offsets, override step_percent"
    )

    @field_validator(
        "step_percent", "base_quantity", "multiplier", "initial_price", "level_percents", mode="before"
    )
    @classmethod
    def _float_through_str(cls, value: Any) -> Any:
        # YAML gives floats; 0.1 must stay 0.1
        if isinstance(value, float):
            return str(value)
        if isinstance(value, list):
            return [str(v) if isinstance(v, float) else v for v in value]
        return value

    @model_validator(mode="after")
    def _spacing_given(self) -> "GridSection":
        if self.level_percents is None:
            if self.step_percent is None:
                raise ValueError("step_percent is required when level_percents is not set")
            if self.max_levels is None:
                raise ValueError("max_levels is required when level_percents is not set")
        return self

    def to_grid_config(self, settings: Optional[Settings] = None) -> GridConfig:
        settings = settings or Settings()
        data = self.model_dump(exclude={"name"})
        if data["price_places"] is None:
            data["price_places"] = settings.price_places
        if data["quantity_places"] is None:
            data["quantity_places"] = settings.quantity_places
        return GridConfig.from_dict(data)


class NamedStrategy(GridSection):
    """A grid definition listed under `strategies`."""
    name: str = Field(..., min_length=1)


class GridFile(BaseModel):
    """Schema for a whole config file."""
    model_config = ConfigDict(extra="forbid")

    grid: GridSection
    strategies: List[NamedStrategy] = Field(default_factory=list)

    def strategy_names(self) -> List[str]:
        return [s.name for s in self.strategies]

    def get_strategy(self, name: str) -> NamedStrategy:
        for strategy in self.strategies:
            if strategy.name == name:
                return strategy
        if not self.strategies:
            raise InvalidConfiguration("No strategies defined in config file")
        raise InvalidConfiguration(f"Strategy '{name}' not found in config")

    def grid_config(self, name: Optional[str] = None, settings: Optional[Settings] = None) -> GridConfig:
        """GridConfig for the main section, or for a named strategy."""
        section = self.grid if name is None else self.get_strategy(name)
        return section.to_grid_config(settings)


def parse_config(data: Dict[str, Any]) -> GridFile:
    """Validate an already loaded mapping."""
    if not isinstance(data, dict):
        raise InvalidConfiguration("Config file must contain a mapping at the top level")
    try:
        grid_file = GridFile.model_validate(data)
    except ValidationError as e:
        raise InvalidConfiguration(f"Invalid config: {e}") from e

    names = grid_file.strategy_names()
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise InvalidConfiguration(f"Duplicate strategy names: {', '.join(duplicates)}")

    if grid_file.grid.sizing_mode.needs_multiplier and grid_file.grid.multiplier is None:
        raise InvalidConfiguration(
            f"Multiplier is required for sizing mode '{grid_file.grid.sizing_mode.value}'"
        )
    for strategy in grid_file.strategies:
        if strategy.sizing_mode.needs_multiplier and strategy.multiplier is None:
            raise InvalidConfiguration(
                f"Multiplier is required for strategy '{strategy.name}' "
                f"with sizing mode '{strategy.sizing_mode.value}'"
            )
    return grid_file


def load_config_file(path: Union[str, Path]) -> GridFile:
    """
    Load and validate a YAML config file.

    Args:
        path: Path of the YAML file

    Returns:
        Validated GridFile
    """
    config_path = Path(path)
    if not config_path.exists():
        raise InvalidConfiguration(f"Config file '{config_path}' not found")

    with open(config_path, "r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle)
        except yaml.YAMLError as e:
            raise InvalidConfiguration(f"Could not parse {config_path}: {e}") from e

    grid_file = parse_config(data)
    logger.debug(f"Loaded {config_path} with {len(grid_file.strategies)} named strategies")
    return grid_file
