from __future__ import annotations

import logging
import threading
from typing import Callable, Union

from snake_charmer.game import TICK_MS, Direction, SimulationEngine, SimulationState, StepResult

logger = logging.getLogger(__name__)

KEY_DIRECTIONS = {
    "up": Direction.UP,
    "right": Direction.RIGHT,
    "down": Direction.DOWN,
    "left": Direction.LEFT,
}


class TickDriver:
    """Calls ``engine.step()`` once per elapsed period until the game ends.

    The host feeds wall-clock time through ``advance``; leftover time is
    carried to the next call so ticks stay on a fixed period.
    """

    def __init__(self, engine: SimulationEngine, period_ms: int = TICK_MS) -> None:
        if period_ms <= 0:
            raise ValueError(f"period_ms must be > 0, got {period_ms}")
        self.engine = engine
        self.period_ms = period_ms
        self.ticks = 0
        self._elapsed = 0.0
        self._cancelled = False

    @property
    def running(self) -> bool:
        return not self._cancelled and not self.engine.terminal

    def cancel(self) -> None:
        if not self._cancelled:
            logger.debug("Tick driver cancelled after %d ticks", self.ticks)
        self._cancelled = True

    def advance(self, elapsed_ms: float) -> int:
        """Add ``elapsed_ms`` of time and run every tick that fell due."""
        if not self.running:
            return 0

        self._elapsed += elapsed_ms
        stepped = 0
        while self._elapsed >= self.period_ms and self.running:
            self._elapsed -= self.period_ms
            self.engine.step()
            self.ticks += 1
            stepped += 1

        if not self.running:
            self._elapsed = 0.0
            logger.debug("Tick driver stopped at tick %d", self.ticks)
        return stepped


class LockedEngine:
    """Serialises engine calls for hosts that deliver input on another thread."""

    def __init__(self, engine: SimulationEngine) -> None:
        self.engine = engine
        self._lock = threading.RLock()

    @property
    def terminal(self) -> bool:
        with self._lock:
            return self.engine.terminal

    def step(self) -> StepResult:
        with self._lock:
            return self.engine.step()

    def relocate_target(self, direction: Union[Direction, str]) -> SimulationState:
        with self._lock:
            return self.engine.relocate_target(direction)

    def snapshot(self) -> SimulationState:
        with self._lock:
            return self.engine.snapshot()

    def subscribe(self, callback: Callable[[SimulationState], None]) -> Callable[[], None]:
        with self._lock:
            return self.engine.subscribe(callback)
