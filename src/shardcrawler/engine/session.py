from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Any, Callable, Optional

from ..config import DEFAULT_TUNING, GameTuning
from ..core.events import EventBus
from ..game.rules import (
    ActionOutcome,
    advance_hazards_and_projectiles,
    refresh_visibility,
    resolve_player_action,
)
from ..game.run import RoomTransition, advance_after_portal, end_run, is_better_run, new_world
from ..game.world import GameWorld, RunStats
from ..input.actions import InputAction
from ..persistence import MemoryRecordStore, RecordStore
from ..settings import GameMode, Settings
from .scheduler import Scheduler, SchedulerConfig

logger = logging.getLogger(__name__)


def random_seed_string() -> str:
    return uuid.uuid4().hex[:8]


class GameSession:
    """Owns one world at a time and feeds it input actions and clock time.

    - ``pause`` toggles pause on a live run; ``restart`` always starts a fresh run.
    - Before the first run only ``interact`` and ``restart`` do anything; both start one.
    - Other actions are dropped unless a run is live and unpaused.
    - Hazards tick once per accepted turn in turn mode and once per fixed step in real mode.
    - When a run ends the best-run record is compared and saved.
    """

    def __init__(
        self,
        store: Optional[RecordStore] = None,
        tuning: GameTuning = DEFAULT_TUNING,
        seed_factory: Callable[[], str] = random_seed_string,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.store: RecordStore = store if store is not None else MemoryRecordStore()
        self.tuning = tuning
        self.seed_factory = seed_factory
        self.bus = bus or EventBus()
        self.settings: Settings = self.store.load_settings()
        self.best_run: Optional[RunStats] = self.store.load_best_run()
        self.world: Optional[GameWorld] = None
        self.scheduler = Scheduler(
            on_tick=self._on_tick,
            on_frame=self._on_frame,
            config=SchedulerConfig(step_ms=float(tuning.realtime_step_ms)),
            mode=self.settings.mode,
        )

    @property
    def live(self) -> bool:
        return self.world is not None and not self.world.run.over

    def start_run(self, seed_string: Optional[str] = None) -> GameWorld:
        seed = seed_string or self.settings.custom_seed or self.seed_factory()
        self.world = new_world(seed, replace(self.settings, custom_seed=None), self.tuning, self.bus)
        self.scheduler.set_mode(self.settings.mode)
        self.scheduler.start()
        self.best_run = self.store.load_best_run()
        return self.world

    def restart(self) -> GameWorld:
        logger.info("Restarting run")
        return self.start_run()

    def toggle_pause(self) -> None:
        if not self.live:
            return
        self.world.paused = not self.world.paused
        logger.debug("Paused=%s", self.world.paused)

    def apply_settings(self, **changes: Any) -> Settings:
        """Persist a settings patch. Mode applies immediately; difficulty applies from the next run."""
        updated = Settings.from_dict({**self.settings.to_dict(), **changes})
        self.store.save_settings(updated)
        self.settings = updated
        self.scheduler.set_mode(updated.mode)
        if self.world is not None:
            self.world.settings = replace(updated, custom_seed=None)
            self.world.damage.screen_shake = updated.screen_shake
        return updated

    def toggle_mode(self) -> Settings:
        nxt = GameMode.REAL if self.settings.mode == GameMode.TURN else GameMode.TURN
        return self.apply_settings(mode=nxt.value)

    def handle(self, action: InputAction) -> Optional[ActionOutcome]:
        """Consume one input action. Returns the player outcome when the action reached the world."""
        if self.world is None:
            if action in (InputAction.INTERACT, InputAction.RESTART):
                self.start_run()
            return None
        if action == InputAction.PAUSE:
            self.toggle_pause()
            return None
        if action == InputAction.RESTART:
            self.restart()
            return None
        if not self.live or self.world.paused:
            return None
        return self._handle_player_action(action)

    def update(self, dt_ms: float) -> int:
        """Advance wall-clock time; returns the number of real-mode hazard ticks fired."""
        return self.scheduler.update(dt_ms)

    def _handle_player_action(self, action: InputAction) -> ActionOutcome:
        world = self.world
        outcome = resolve_player_action(world, action)
        if not outcome.took_turn:
            return outcome
        refresh_visibility(world)
        if outcome.died:
            self._finish(victory=False)
            return outcome
        if outcome.entered_portal:
            if advance_after_portal(world) == RoomTransition.RUN_COMPLETE:
                self._record(world.run.stats)
            return outcome
        if self.scheduler.mode == GameMode.TURN:
            self.scheduler.request_turn_tick()
        return outcome

    def _on_tick(self) -> None:
        world = self.world
        if world is None or world.run.over or world.paused:
            return
        result = advance_hazards_and_projectiles(world)
        if result.died:
            self._finish(victory=False)
            return
        refresh_visibility(world)

    def _on_frame(self, dt_ms: float) -> None:
        world = self.world
        if world is None:
            return
        if not world.run.over and not world.paused:
            world.run.stats.time_ms += dt_ms
        world.damage.tick_shake()

    def _finish(self, victory: bool) -> None:
        stats = end_run(self.world, victory)
        self._record(stats)

    def _record(self, stats: RunStats) -> None:
        if is_better_run(stats, self.best_run):
            self.best_run = replace(stats)
            self.store.save_best_run(self.best_run)
