"""
gridcalc - Grid Trading Level and Position Calculator
Main entry point with CLI interface.
"""

import argparse
import sys
from decimal import Decimal
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from loguru import logger

from .core.config import Direction, GridConfig, GridType, SizingMode
from .core.errors import DegenerateQuantity, GridCalcError
from .core.values import quantize_price, to_decimal
from .strategy.data_models import FillEvent, GridLevel, LadderRow
from .strategy.grid_levels import levels
from .strategy.ladder import project_ladder
from .strategy.simulation import GridSimulation
from .utils.config import Settings, load_settings
from .utils.config_loader import GridFile, GridSection, load_config_file
from .utils.logging import configure_logging, get_run_logger


RULE = "-" * 72
DEFAULT_LEVELS = 5


def _add_grid_arguments(parser: argparse.ArgumentParser, settings: Settings) -> None:
    parser.add_argument("-p", "--price", type=str, required=True, help="Initial (anchor) price")
    parser.add_argument("-g", "--grid-type", choices=[t.value for t in GridType], required=True,
                        help="fixed: levels from the initial price; average: next level from the average price")
    parser.add_argument("-m", "--mode", choices=[m.value for m in SizingMode], required=True,
                        help="Position sizing mode")
    parser.add_argument("-t", "--step", type=str, default=None,
                        help="Step between levels as a fraction (0.02 = 2%%)")
    parser.add_argument("-l", "--level-percents", type=str, default=None,
                        help="Comma-separated per-level offsets, e.g. '0.01,0.02,0.035' (overrides --step)")
    parser.add_argument("-n", "--levels", type=int, default=None,
                        help="Maximum number of levels (5, or one per --level-percents entry)")
    parser.add_argument("-s", "--size", type=str, default="100", help="Base quantity")
    parser.add_argument("-x", "--multiplier", type=str, default=None,
                        help="Multiplier for current-multiple / increment-multiple modes")
    parser.add_argument("-d", "--direction", choices=[d.value for d in Direction], default="long",
                        help="long: buy levels below the price; short: sell levels above it")
    parser.add_argument("--price-places", type=int, default=settings.price_places,
                        help="Fractional digits kept on prices")
    parser.add_argument("--quantity-places", type=int, default=settings.quantity_places,
                        help="Fractional digits kept on quantities")


def _add_tick_arguments(parser: argparse.ArgumentParser, required: bool) -> None:
    group = parser.add_mutually_exclusive_group(required=required)
    group.add_argument("--ticks", type=Path, help="File with one price per line")
    group.add_argument("--prices", type=str, help="Comma-separated prices, e.g. '99,97.5,96'")


def parse_arguments(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None):
    """Parse command line arguments."""
    settings = settings or load_settings()

    parser = argparse.ArgumentParser(
        prog="gridcalc",
        description="gridcalc - Grid trading level and position calculator",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Console log level")
    parser.add_argument("--log-file", default=settings.log_file, help="Optional DEBUG log file")

    commands = parser.add_subparsers(dest="command", required=True)

    calculate = commands.add_parser("calculate", help="Project the ladder assuming every level fills",
                                    formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    _add_grid_arguments(calculate, settings)

    snapshot = commands.add_parser("levels", help="Show trigger prices from a reference price",
                                   formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    _add_grid_arguments(snapshot, settings)
    snapshot.add_argument("-r", "--reference", type=str, default=None,
                          help="Reference price (defaults to --price)")

    run = commands.add_parser("simulate", help="Run a price sequence through the grid",
                              formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    _add_grid_arguments(run, settings)
    _add_tick_arguments(run, required=True)

    from_config = commands.add_parser("from-config", help="Run calculation from a YAML config file")
    from_config.add_argument("-c", "--config", type=Path, required=True, help="Path to YAML config file")
    from_config.add_argument("-n", "--name", default=None,
                             help="Strategy name to use (uses the main config if not specified)")
    _add_tick_arguments(from_config, required=False)

    list_strategies = commands.add_parser("list-strategies", help="List all strategies in a config file")
    list_strategies.add_argument("-c", "--config", type=Path, required=True, help="Path to YAML config file")

    return parser.parse_args(argv)


def config_from_args(args) -> GridConfig:
    """Build a validated GridConfig from CLI flags."""
    max_levels = args.levels
    if max_levels is None and not args.level_percents:
        max_levels = DEFAULT_LEVELS
    return GridConfig.from_dict({
        "direction": args.direction,
        "grid_type": args.grid_type,
        "sizing_mode": args.mode,
        "step_percent": args.step,
        "base_quantity": args.size,
        "multiplier": args.multiplier,
        "max_levels": max_levels,
        "level_percents": args.level_percents or None,
        "initial_price": args.price,
        "price_places": args.price_places,
        "quantity_places": args.quantity_places,
    })


def read_ticks(args) -> Iterator[Decimal]:
    """Prices from --prices or --ticks, lazily for files."""
    if args.prices:
        for raw in args.prices.split(","):
            if raw.strip():
                yield to_decimal(raw)
        return

    with open(args.ticks, "r", encoding="utf-8") as handle:
        for line in handle:
            line = line.split("#", 1)[0].strip()
            if line:
                yield to_decimal(line)


def print_config_header(config: GridConfig, title: str = "Grid Trading Calculator") -> None:
    print(f"\n=== {title} ===")
    print(f"Initial Price: {config.initial_price}")
    print(f"Direction: {config.direction.value}")
    print(f"Grid Type: {config.grid_type.value}")
    if config.level_percents is not None:
        print(f"Level Offsets: {', '.join(f'{p * 100}%' for p in config.level_percents)}")
    else:
        print(f"Step: {config.step_percent * 100}%")
    print(f"Sizing Mode: {config.sizing_mode.value}")
    print(f"Base Quantity: {config.base_quantity}")
    if config.sizing_mode.needs_multiplier:
        print(f"Multiplier: {config.multiplier}x")
    print(f"Max Levels: {config.level_count}")


def print_ladder(config: GridConfig, rows: List[LadderRow]) -> None:
    print(f"\n{RULE}")
    print(f"{'Level':<6} {'Price':>14} {'Size':>14} {'Total':>14} {'Avg Price':>14} {'Cost':>14}")
    print(RULE)
    for row in rows:
        print(f"{row.level_number:<6} {row.trigger_price:>14} {row.quantity:>14} {row.total_quantity:>14} "
              f"{row.average_price:>14} {quantize_price(row.total_cost, config.price_places):>14}")
    print(RULE)


def print_levels(grid_levels: List[GridLevel]) -> None:
    print(f"\n{RULE}")
    print(f"{'Level':<6} {'Trigger Price':>20} {'Planned Size':>20}")
    print(RULE)
    for level in grid_levels:
        planned = "at trigger" if level.planned_quantity is None else level.planned_quantity
        print(f"{level.index + 1:<6} {level.trigger_price:>20} {planned:>20}")
    print(RULE)


def print_fill(event: FillEvent) -> None:
    print(f"{event.level_index + 1:<6} {event.tick_price:>14} {event.price:>14} {event.quantity:>14} "
          f"{event.resulting_total_quantity:>14} {event.resulting_average_price:>14}")


def run_ticks(config: GridConfig, ticks: Iterator[Decimal]) -> GridSimulation:
    """Drive a simulation and print every fill as it happens."""
    simulation = GridSimulation(config)
    print(f"\n{RULE}")
    print(f"{'Level':<6} {'Tick':>14} {'Fill Price':>14} {'Size':>14} {'Total':>14} {'Avg Price':>14}")
    print(RULE)
    try:
        for event in simulation.run(ticks):
            print_fill(event)
    finally:
        print(RULE)
        print(f"Ticks: {simulation.ticks_seen} | Fills: {len(simulation.fills)} | "
              f"Phase: {simulation.phase.value}")
        if simulation.pending_level is not None:
            print(f"Next trigger: {simulation.pending_level.trigger_price}")
    return simulation


def _spacing(section: GridSection) -> str:
    if section.level_percents:
        return f"Levels: {', '.join(str(p) for p in section.level_percents)}"
    return f"Step: {section.step_percent} x {section.max_levels} levels"


def list_strategies(grid_file: GridFile) -> None:
    print("\n=== Available Strategies ===\n")

    main_grid = grid_file.grid
    print("Main Configuration:")
    print(f"  Grid Type: {main_grid.grid_type.value}")
    print(f"  Sizing Mode: {main_grid.sizing_mode.value}")
    print(f"  {_spacing(main_grid)}")

    if grid_file.strategies:
        print("\nNamed Strategies:")
        for strategy in grid_file.strategies:
            print(f"\n  Strategy: '{strategy.name}'")
            print(f"    Grid Type: {strategy.grid_type.value}")
            print(f"    Sizing Mode: {strategy.sizing_mode.value}")
            print(f"    {_spacing(strategy)}")
            if strategy.multiplier is not None:
                print(f"    Multiplier: {strategy.multiplier}x")
    else:
        print("\nNo named strategies defined.")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the calculator."""
    settings = load_settings()
    args = parse_arguments(argv, settings)
    configure_logging(args.log_level, args.log_file)

    try:
        if args.command == "calculate":
            config = config_from_args(args)
            print_config_header(config)
            print_ladder(config, project_ladder(config))

        elif args.command == "levels":
            config = config_from_args(args)
            reference = to_decimal(args.reference) if args.reference else config.initial_price
            print_config_header(config, title=f"Grid Levels from {reference}")
            print_levels(levels(config, reference))

        elif args.command == "simulate":
            config = config_from_args(args)
            print_config_header(config, title="Grid Simulation")
            run_ticks(config, read_ticks(args))

        elif args.command == "from-config":
            grid_file = load_config_file(args.config)
            name = args.name or "main"
            config = grid_file.grid_config(args.name, settings)
            run_logger = get_run_logger(name)
            run_logger.info(f"Running strategy '{name}' from {args.config}")
            print_config_header(config, title=f"Strategy '{name}'")
            if args.ticks or args.prices:
                run_ticks(config, read_ticks(args))
            else:
                print_ladder(config, project_ladder(config))

        elif args.command == "list-strategies":
            list_strategies(load_config_file(args.config))

    except DegenerateQuantity as e:
        logger.error(f"Simulation stopped after {len(e.fills)} fills: {e}")
        return 1
    except GridCalcError as e:
        logger.error(f"Error: {e}")
        return 1
    except OSError as e:
        logger.error(f"Could not read input: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
