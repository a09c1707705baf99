"""
Tests for YAML config loading and environment settings.
"""
from decimal import Decimal

import pytest

from gridcalc.core.config import Direction, GridType, SizingMode
from gridcalc.core.errors import InvalidConfiguration
from gridcalc.utils.config import Settings
from gridcalc.utils.config_loader import load_config_file, parse_config


def _grid(**overrides):
    data = {
        "grid_type": "fixed",
        "sizing_mode": "fixed",
        "step_percent": 0.02,
        "base_quantity": 10,
        "max_levels": 3,
        "initial_price": 100,
    }
    data.update(overrides)
    return data


class TestLoadConfigFile:

    def test_main_grid(self, sample_yaml):
        grid_file = load_config_file(sample_yaml)
        config = grid_file.grid_config()
        assert config.direction is Direction.LONG
        assert config.grid_type is GridType.FIXED
        assert config.step_percent == Decimal("0.02")
        assert config.max_levels == 3

    def test_named_strategies(self, sample_yaml):
        grid_file = load_config_file(sample_yaml)
        assert grid_file.strategy_names() == ["martingale", "short-ladder"]

        martingale = grid_file.grid_config("martingale")
        assert martingale.grid_type is GridType.AVERAGE
        assert martingale.sizing_mode is SizingMode.CURRENT_MULTIPLE
        assert martingale.multiplier == Decimal("1")
        assert martingale.initial_price == Decimal("50")

        short = grid_file.grid_config("short-ladder")
        assert short.direction is Direction.SHORT
        assert short.multiplier == Decimal("1.5")
        assert short.step_percent == Decimal("0.05")

    def test_unknown_strategy(self, sample_yaml):
        with pytest.raises(InvalidConfiguration, match="'missing' not found"):
            load_config_file(sample_yaml).grid_config("missing")

    def test_no_strategies_defined(self, tmp_path):
        path = tmp_path / "main-only.yaml"
        path.write_text(
            "grid:\n"
            "  grid_type: average\n"
            "  sizing_mode: fixed\n"
            "  step_percent: 0.01\n"
            "  base_quantity: 1\n"
            "  max_levels: 2\n"
            "  initial_price: 10\n",
            encoding="utf-8",
        )
        grid_file = load_config_file(path)
        assert grid_file.strategies == []
        with pytest.raises(InvalidConfiguration, match="No strategies defined"):
            grid_file.grid_config("anything")

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidConfiguration, match="not found"):
            load_config_file(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("grid: [unclosed\n", encoding="utf-8")
        with pytest.raises(InvalidConfiguration, match="Could not parse"):
            load_config_file(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(InvalidConfiguration, match="mapping"):
            load_config_file(path)


class TestParseConfig:

    def test_floats_keep_their_decimal_text(self):
        config = parse_config({"grid": _grid(step_percent=0.1, base_quantity=0.3)}).grid_config()
        assert config.step_percent == Decimal("0.1")
        assert config.base_quantity == Decimal("0.3")

    def test_places_default_from_settings(self):
        settings = Settings(price_places=2, quantity_places=3)
        config = parse_config({"grid": _grid()}).grid_config(settings=settings)
        assert config.price_places == 2
        assert config.quantity_places == 3

    def test_places_in_file_win(self):
        settings = Settings(price_places=2)
        config = parse_config({"grid": _grid(price_places=4)}).grid_config(settings=settings)
        assert config.price_places == 4

    @pytest.mark.parametrize("field,value", [
        ("step_percent", 0),
        ("base_quantity", -1),
        ("initial_price", 0),
        ("max_levels", 0),
        ("grid_type", "geometric"),
        ("sizing_mode", "double"),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(InvalidConfiguration):
            parse_config({"grid": _grid(**{field: value})})

    def test_unknown_field_rejected(self):
        with pytest.raises(InvalidConfiguration):
            parse_config({"grid": _grid(levels_per_side=4)})

    def test_missing_grid_section(self):
        with pytest.raises(InvalidConfiguration):
            parse_config({"strategies": []})

    def test_main_grid_needs_multiplier(self):
        with pytest.raises(InvalidConfiguration, match="Multiplier is required"):
            parse_config({"grid": _grid(sizing_mode="current-multiple")})

    def test_strategy_needs_multiplier(self):
        data = {
            "grid": _grid(),
            "strategies": [dict(_grid(sizing_mode="increment-multiple"), name="bad")],
        }
        with pytest.raises(InvalidConfiguration, match="strategy 'bad'"):
            parse_config(data)

    def test_duplicate_strategy_names(self):
        data = {
            "grid": _grid(),
            "strategies": [dict(_grid(), name="twin"), dict(_grid(), name="twin")],
        }
        with pytest.raises(InvalidConfiguration, match="Duplicate strategy names: twin"):
            parse_config(data)


class TestLevelPercents:

    def test_floats_keep_their_decimal_text(self):
        section = _grid(step_percent=None, max_levels=None, level_percents=[0.01, 0.02, 0.035])
        config = parse_config({"grid": section}).grid_config()
        assert config.level_percents == (Decimal("0.01"), Decimal("0.02"), Decimal("0.035"))
        assert config.step_percent is None
        assert config.max_levels == 3

    def test_max_levels_caps_the_list(self):
        section = _grid(max_levels=2, level_percents=[0.01, 0.02, 0.035])
        config = parse_config({"grid": section}).grid_config()
        assert config.level_count == 2

    def test_spacing_required(self):
        with pytest.raises(InvalidConfiguration, match="step_percent is required"):
            parse_config({"grid": _grid(step_percent=None)})

    def test_max_levels_required_without_list(self):
        with pytest.raises(InvalidConfiguration, match="max_levels is required"):
            parse_config({"grid": _grid(max_levels=None)})

    def test_empty_list_rejected(self):
        with pytest.raises(InvalidConfiguration):
            parse_config({"grid": _grid(level_percents=[])})

    @pytest.mark.parametrize("percents", [[0.01, 1.2], [0.02, 0.01]])
    def test_bad_offsets_rejected_on_build(self, percents):
        grid_file = parse_config({"grid": _grid(level_percents=percents)})
        with pytest.raises(InvalidConfiguration, match="level"):
            grid_file.grid_config()

    def test_named_strategy_with_offsets(self):
        data = {
            "grid": _grid(),
            "strategies": [dict(_grid(grid_type="average", level_percents=[0.03, 0.01]), name="uneven")],
        }
        config = parse_config(data).grid_config("uneven")
        assert config.offset_for(0) == Decimal("0.03")
        assert config.offset_for(1) == Decimal("0.01")


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("GRIDCALC_LOG_LEVEL", "GRIDCALC_PRICE_PLACES", "GRIDCALC_QUANTITY_PLACES"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.log_level == "INFO"
        assert settings.price_places == 8
        assert settings.quantity_places == 8

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("GRIDCALC_PRICE_PLACES", "4")
        monkeypatch.setenv("GRIDCALC_LOG_LEVEL", "DEBUG")
        settings = Settings(_env_file=None)
        assert settings.price_places == 4
        assert settings.log_level == "DEBUG"
