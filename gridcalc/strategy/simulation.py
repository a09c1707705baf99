"""
Grid Simulation Driver: feeds price observations through the grid.

Per tick: compare against the pending level, size from the pre-fill state,
apply the fill, emit a FillEvent and recompute the pending level. At most
one level fills per tick, so a tick that gaps through several levels only
fills the first one and later ticks fill the rest in arrival order.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from loguru import logger

from ..core.config import GridConfig, GridType
from ..core.errors import DegenerateQuantity
from ..core.values import Number, ZERO, crosses, to_decimal
from .data_models import FillEvent, GridLevel, SimulationPhase
from .grid_levels import levels, next_level
from .position_sizing import quantity_for
from .position_tracker import PositionState, apply_fill


class GridSimulation:
    """
    Single run of a grid over a stream of prices.

    Owns its PositionState; nothing is shared between instances, so
    independent runs can execute on separate threads or processes.
    """

    def __init__(self, config: GridConfig):
        """
        Initialize the simulation.

        Args:
            config: Grid configuration, validated here before any tick is read
        """
        config.validate()
        self.config = config
        self.state = PositionState.flat()
        self.fills: List[FillEvent] = []
        self.ticks_seen = 0

        # FIXED ladders never move once computed from the initial price
        self.fixed_levels: Optional[Tuple[GridLevel, ...]] = None
        if config.grid_type is GridType.FIXED:
            self.fixed_levels = tuple(levels(config, config.initial_price))

        self.phase = SimulationPhase.AWAITING_NEXT_LEVEL
        self.pending_level: Optional[GridLevel] = None
        self._advance()

        if config.level_percents is not None:
            spacing = f"levels at {', '.join(str(p) for p in config.level_percents)}"
        else:
            spacing = f"step {config.step_percent}"
        logger.info(
            f"GridSimulation initialized - {config.direction.value} {config.grid_type.value} grid, "
            f"sizing {config.sizing_mode.value}, anchor {config.initial_price}, "
            f"{spacing}, max levels {config.level_count}"
        )

    @property
    def is_exhausted(self) -> bool:
        return self.phase is SimulationPhase.EXHAUSTED

    def _advance(self) -> None:
        """Move to the next pending level or to EXHAUSTED."""
        if self.state.filled_levels >= self.config.level_count:
            self.pending_level = None
            self._set_phase(SimulationPhase.EXHAUSTED)
            return

        self.pending_level = next_level(self.config, self.state, self.fixed_levels)
        if self.pending_level is None:
            self._set_phase(SimulationPhase.EXHAUSTED)
        else:
            self._set_phase(SimulationPhase.AWAITING_NEXT_LEVEL)
            logger.debug(
                f"Pending level {self.pending_level.index}: trigger {self.pending_level.trigger_price}"
            )

    def _set_phase(self, phase: SimulationPhase) -> None:
        if phase is not self.phase:
            logger.debug(f"Phase: {self.phase.value} -> {phase.value}")
            self.phase = phase

    def on_tick(self, price: Number) -> Optional[FillEvent]:
        """
        Process one price observation.

        Args:
            price: Observed market price

        Returns:
            FillEvent if the pending level was crossed, None otherwise

        Raises:
            DegenerateQuantity: sizing failed; `fills` holds the events
                emitted before the failure
        """
        if self.phase is SimulationPhase.EXHAUSTED:
            return None

        tick = to_decimal(price)
        self.ticks_seen += 1

        if tick <= ZERO:
            logger.warning(f"Ignoring non-positive price observation: {tick}")
            return None

        level = self.pending_level
        if not crosses(tick, level.trigger_price, self.config.descending):
            return None

        try:
            quantity = quantity_for(self.config, self.state)
        except DegenerateQuantity as e:
            logger.error(f"Simulation aborted at level {level.index}: {e}")
            raise DegenerateQuantity(str(e), fills=self.fills) from e

        self.state = apply_fill(self.state, level.trigger_price, quantity, self.config.price_places)
        self._set_phase(SimulationPhase.FILLED)

        event = FillEvent(
            level_index=level.index,
            price=level.trigger_price,
            quantity=quantity,
            resulting_average_price=self.state.average_price,
            resulting_total_quantity=self.state.total_quantity,
            tick_price=tick,
        )
        self.fills.append(event)

        logger.info(
            f"Level {level.index} filled: {quantity} @ {level.trigger_price} (tick {tick}) "
            f"-> total {self.state.total_quantity}, avg {self.state.average_price}"
        )

        self._advance()
        if self.is_exhausted:
            logger.info(f"Grid exhausted after {self.state.filled_levels} fills")
        return event

    def run(self, ticks: Iterable[Number]) -> Iterator[FillEvent]:
        """
        Lazily consume ticks and yield fills.

        Stops pulling ticks once the grid is exhausted.
        """
        if self.is_exhausted:
            return
        for price in ticks:
            event = self.on_tick(price)
            if event is not None:
                yield event
            if self.is_exhausted:
                return


def simulate(config: GridConfig, ticks: Iterable[Number]) -> Iterator[FillEvent]:
    """
    Run a grid over a sequence of prices.

    The configuration is validated before this returns, so a bad config
    fails before any tick is consumed. The returned iterator is lazy and
    not restartable.

    Args:
        config: Grid configuration
        ticks: Ordered price observations

    Returns:
        Iterator of FillEvent in fill order
    """
    simulation = GridSimulation(config)
    return simulation.run(ticks)


@dataclass(frozen=True)
class SimulationResult:
    """Everything a finished run produced"""
    fills: Tuple[FillEvent, ...]
    state: PositionState
    phase: SimulationPhase
    ticks_seen: int


def run_simulation(config: GridConfig, ticks: Iterable[Number]) -> SimulationResult:
    """
    Eagerly run a grid over a finite sequence of prices.

    Returns:
        SimulationResult with the fills, the final position and phase
    """
    simulation = GridSimulation(config)
    for _ in simulation.run(ticks):
        pass
    return SimulationResult(
        fills=tuple(simulation.fills),
        state=simulation.state,
        phase=simulation.phase,
        ticks_seen=simulation.ticks_seen,
    )
