from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config import DEFAULT_TUNING, GameTuning
from ..core.events import EventBus
from ..dungeon.layout import DepthLayout, RoomState
from ..errors import ConfigError
from ..fov.fog_of_war import FogOfWar
from ..settings import Settings
from .damage import DamageService
from .entities import EntityIds, Player, Projectile


@dataclass
class RunStats:
    """Cumulative statistics for one run; also the best-run record handed to persistence."""

    seed_string: str
    seed: int
    depth_reached: int = 1
    shards_collected: int = 0
    turns: int = 0
    time_ms: float = 0.0
    victory: bool = False

    def validate(self) -> None:
        if self.depth_reached < 1:
            raise ConfigError("depth_reached must be >= 1")
        if self.shards_collected < 0 or self.turns < 0 or self.time_ms < 0:
            raise ConfigError("run counters must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        self.validate()
        return {
            "seed_string": self.seed_string,
            "seed": self.seed,
            "depth_reached": self.depth_reached,
            "shards_collected": self.shards_collected,
            "turns": self.turns,
            "time_ms": int(round(self.time_ms)),
            "victory": self.victory,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "RunStats":
        try:
            stats = RunStats(
                seed_string=str(data["seed_string"]),
                seed=int(data["seed"]),
                depth_reached=int(data.get("depth_reached", 1)),
                shards_collected=int(data.get("shards_collected", 0)),
                turns=int(data.get("turns", 0)),
                time_ms=float(data.get("time_ms", 0)),
                victory=bool(data.get("victory", False)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigError(f"Malformed run record: {exc}") from exc
        stats.validate()
        return stats

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), sort_keys=True)

    @staticmethod
    def from_json(s: str) -> "RunStats":
        return RunStats.from_dict(json.loads(s))


class RunStatus(str, Enum):
    RUNNING = "running"
    DEFEAT = "defeat"
    VICTORY = "victory"


@dataclass
class RunState:
    """Everything the turn engine mutates for one run. Layouts are generated once, up front."""

    seed_string: str
    seed: int
    layouts: List[DepthLayout]
    player: Player
    stats: RunStats
    fog: FogOfWar
    ids: EntityIds
    depth: int = 0
    room_index: int = 0
    projectiles: List[Projectile] = field(default_factory=list)
    status: RunStatus = RunStatus.RUNNING

    @property
    def room(self) -> RoomState:
        return self.layouts[self.depth].rooms[self.room_index]

    @property
    def over(self) -> bool:
        return self.status != RunStatus.RUNNING


class GameWorld:
    """Run state plus the services resolution reads: tuning, settings, event bus and damage."""

    def __init__(
        self,
        run: RunState,
        settings: Optional[Settings] = None,
        tuning: GameTuning = DEFAULT_TUNING,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.run = run
        self.settings = settings or Settings()
        self.tuning = tuning
        self.difficulty = tuning.difficulty(self.settings.difficulty)
        self.bus = bus or EventBus()
        self.damage = DamageService(self.bus, self.settings.screen_shake, tuning.screen_shake_frames)
        self.message = ""
        self.paused = False

    @property
    def current_room(self) -> RoomState:
        return self.run.room

    @property
    def player(self) -> Player:
        return self.run.player

    @property
    def shake_timer(self) -> int:
        return self.damage.shake_timer

    def notify(self, message: str) -> None:
        self.message = message
