"""
Pytest configuration and fixtures for gridcalc tests.
"""
from decimal import Decimal
from typing import Any, Dict

import pytest
from hypothesis import settings, strategies as st

from gridcalc.core.config import Direction, GridConfig, GridType, SizingMode

# Fills log at DEBUG, so no per-example deadline
settings.register_profile("gridcalc", deadline=None, max_examples=100)
settings.load_profile("gridcalc")

# ============================================================================
# HYPOTHESIS STRATEGIES
# ============================================================================

@st.composite
def price_strategy(draw, min_value="1", max_value="100000"):
    """Generate realistic price values."""
    return draw(st.decimals(min_value=Decimal(min_value), max_value=Decimal(max_value),
                            places=2, allow_nan=False, allow_infinity=False))

@st.composite
def quantity_strategy(draw, min_value="0.0001", max_value="1000"):
    """Generate positive fill quantities."""
    return draw(st.decimals(min_value=Decimal(min_value), max_value=Decimal(max_value),
                            places=4, allow_nan=False, allow_infinity=False))

@st.composite
def step_strategy(draw):
    """Generate grid steps between 0.1% and 20%."""
    return draw(st.decimals(min_value=Decimal("0.001"), max_value=Decimal("0.2"),
                            places=3, allow_nan=False, allow_infinity=False))

@st.composite
def grid_config_strategy(draw, grid_type=None, sizing_mode=None, direction=None):
    """Generate valid GridConfig objects."""
    mode = sizing_mode or draw(st.sampled_from(list(SizingMode)))
    multiplier = None
    if mode.needs_multiplier:
        multiplier = draw(st.decimals(min_value=Decimal("0.1"), max_value=Decimal("3"),
                                      places=2, allow_nan=False, allow_infinity=False))
    return GridConfig(
        direction=direction or draw(st.sampled_from(list(Direction))),
        grid_type=grid_type or draw(st.sampled_from(list(GridType))),
        sizing_mode=mode,
        step_percent=draw(step_strategy()),
        base_quantity=draw(quantity_strategy(min_value="0.01", max_value="100")),
        multiplier=multiplier,
        max_levels=draw(st.integers(min_value=1, max_value=40)),
        initial_price=draw(price_strategy()),
    )

# ============================================================================
# FIXTURES - Configuration
# ============================================================================

def make_config(**overrides: Any) -> GridConfig:
    """Helper to build a validated GridConfig with sensible defaults."""
    data: Dict[str, Any] = {
        "direction": "long",
        "grid_type": "fixed",
        "sizing_mode": "fixed",
        "step_percent": "0.02",
        "base_quantity": "10",
        "max_levels": 3,
        "initial_price": "100",
    }
    data.update(overrides)
    return GridConfig.from_dict(data)

@pytest.fixture
def fixed_long_config():
    """100 anchor, 2% steps, three buy levels: 98 / 96 / 94."""
    return make_config()

@pytest.fixture
def fixed_short_config():
    """100 anchor, 2% steps, three sell levels: 102 / 104 / 106."""
    return make_config(direction="short")

@pytest.fixture
def average_long_config():
    """Average grid with 1% steps and fixed size 100."""
    return make_config(grid_type="average", step_percent="0.01", base_quantity="100", max_levels=5)

@pytest.fixture
def sample_yaml(tmp_path):
    """A config file with a main grid and two named strategies."""
    path = tmp_path / "grid.yaml"
    path.write_text(
        "grid:\n"
        "  direction: long\n"
        "  grid_type: fixed\n"
        "  sizing_mode: fixed\n"
        "  step_percent: 0.02\n"
        "  base_quantity: 10\n"
        "  max_levels: 3\n"
        "  initial_price: 100\n"
        "strategies:\n"
        "  - name: martingale\n"
        "    grid_type: average\n"
        "    sizing_mode: current-multiple\n"
        "    multiplier: 1\n"
        "    step_percent: 0.01\n"
        "    base_quantity: 1\n"
        "    max_levels: 4\n"
        "    initial_price: 50\n"
        "  - name: short-ladder\n"
        "    direction: short\n"
        "    grid_type: fixed\n"
        "    sizing_mode: increment-multiple\n"
        "    multiplier: 1.5\n"
        "    step_percent: 0.05\n"
        "    base_quantity: 2\n"
        "    max_levels: 2\n"
        "    initial_price: 200\n",
        encoding="utf-8",
    )
    return path
