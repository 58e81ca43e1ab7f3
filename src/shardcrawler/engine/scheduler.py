from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..settings import GameMode

logger = logging.getLogger(__name__)


@dataclass
class SchedulerConfig:
    """Configuration for the scheduler.

    Attributes:
        step_ms: Fixed hazard tick interval in real mode.
        max_ticks_per_update: Cap on ticks fired by one update so a long stall cannot spiral.
    """

    step_ms: float = 100.0
    max_ticks_per_update: Optional[int] = None


class Scheduler:
    """Headless driver clock.

    In turn mode hazards tick only when :meth:`request_turn_tick` is called after an
    accepted player turn. In real mode :meth:`update` accumulates elapsed time and fires
    one tick per fixed step, decoupled from input. ``on_frame`` runs once per update in
    both modes. A rendering backend calls :meth:`update` from its own frame loop.
    """

    def __init__(
        self,
        on_tick: Callable[[], None],
        on_frame: Optional[Callable[[float], None]] = None,
        config: Optional[SchedulerConfig] = None,
        mode: GameMode = GameMode.TURN,
    ) -> None:
        self.config = config or SchedulerConfig()
        self._on_tick = on_tick
        self._on_frame = on_frame
        self._mode = mode
        self._accumulator = 0.0
        self._running = False
        self._ticks = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def mode(self) -> GameMode:
        return self._mode

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def accumulator(self) -> float:
        return self._accumulator

    def start(self) -> None:
        """Start the scheduler. Safe to call multiple times; subsequent calls are no-ops."""
        if self._running:
            logger.debug("Scheduler.start() called while already running")
            return
        self._running = True
        self._accumulator = 0.0
        logger.info("Scheduler started (mode=%s, step_ms=%s)", self._mode.value, self.config.step_ms)

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        logger.info("Scheduler stopped after %d ticks", self._ticks)

    def set_mode(self, mode: GameMode) -> None:
        """Switch policy. Any partially accumulated step is discarded."""
        if mode == self._mode:
            return
        self._mode = mode
        self._accumulator = 0.0
        logger.debug("Scheduler mode -> %s", mode.value)

    def update(self, dt_ms: float) -> int:
        """Advance the clock by ``dt_ms``. Returns the number of hazard ticks fired."""
        if not self._running:
            logger.debug("update() called while not running; ignored")
            return 0
        fired = 0
        if self._mode == GameMode.REAL:
            self._accumulator += dt_ms
            limit = self.config.max_ticks_per_update
            while self._accumulator >= self.config.step_ms:
                if limit is not None and fired >= limit:
                    self._accumulator = 0.0
                    break
                self._tick()
                self._accumulator -= self.config.step_ms
                fired += 1
        if self._on_frame is not None:
            self._on_frame(dt_ms)
        return fired

    def request_turn_tick(self) -> None:
        self._tick()

    def _tick(self) -> None:
        self._ticks += 1
        self._on_tick()
