from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from importlib.resources import files as resource_files
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)


class Difficulty(str, Enum):
    RELAXED = "relaxed"
    STANDARD = "standard"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Union[str, "Difficulty"]) -> "Difficulty":
        if isinstance(value, Difficulty):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ConfigError(f"Unknown difficulty level: {value!r}") from exc


@dataclass(frozen=True)
class DifficultyTuning:
    """Per-difficulty knobs applied during generation and hazard setup."""

    shard_delta: int
    sentinel_delay: int
    spike_cycle: int
    extra_turret_chance: float
    patch_chance: float


DEFAULT_DIFFICULTIES: Dict[Difficulty, DifficultyTuning] = {
    Difficulty.RELAXED: DifficultyTuning(
        shard_delta=-2, sentinel_delay=1, spike_cycle=6, extra_turret_chance=0.0, patch_chance=0.45
    ),
    Difficulty.STANDARD: DifficultyTuning(
        shard_delta=0, sentinel_delay=0, spike_cycle=5, extra_turret_chance=0.15, patch_chance=0.25
    ),
    Difficulty.HARD: DifficultyTuning(
        shard_delta=2, sentinel_delay=0, spike_cycle=3, extra_turret_chance=0.35, patch_chance=0.1
    ),
}


@dataclass(frozen=True)
class GameTuning:
    """Every constant the level builder and turn engine read.

    Sizes are (width, height) tuples. Probabilities are in [0, 1].
    """

    max_depth: int = 5
    rooms_per_depth: int = 4
    max_player_hp: int = 3
    player_start_hp: int = 1
    base_shard_target: int = 3
    shard_increment: int = 2
    base_room_size: Tuple[int, int] = (24, 16)
    min_room_size: Tuple[int, int] = (14, 10)
    room_shrink_roll: int = 6
    carve_steps_per_cell: int = 4
    carve_side_chance: float = 0.05
    vision_radius: int = 7
    max_projectiles: int = 32
    realtime_step_ms: int = 100
    hazard_cap: int = 6
    hazard_clearance: int = 4
    item_clearance: int = 2
    sentinel_chance: float = 0.4
    turret_chance: float = 0.3
    blink_chance: float = 0.2
    shard_score: int = 10
    screen_shake_frames: int = 8
    difficulties: Dict[Difficulty, DifficultyTuning] = field(
        default_factory=lambda: dict(DEFAULT_DIFFICULTIES)
    )

    def difficulty(self, level: Union[str, Difficulty]) -> DifficultyTuning:
        return self.difficulties[Difficulty.parse(level)]

    def turret_fire_rate(self, depth: int) -> int:
        return max(3, 6 - depth)


DEFAULT_TUNING = GameTuning()

_SIZE_FIELDS = ("base_room_size", "min_room_size")


def _coerce_scalar(name: str, value: Any, template: Any) -> Any:
    try:
        if name in _SIZE_FIELDS:
            width, height = value
            return (int(width), int(height))
        if isinstance(template, bool):
            return bool(value)
        if isinstance(template, int):
            return int(value)
        if isinstance(template, float):
            return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value for {name}: {value!r}") from exc
    return value


def tuning_from_mapping(raw: Mapping[str, Any], base: GameTuning = DEFAULT_TUNING) -> GameTuning:
    """Overlay a plain mapping (as parsed from YAML) on top of ``base``."""
    known = {f.name for f in fields(GameTuning)}
    overrides: Dict[str, Any] = {}
    for key, value in raw.items():
        if key == "difficulties":
            continue
        if key not in known:
            logger.warning("Ignoring unknown tuning key %r", key)
            continue
        overrides[key] = _coerce_scalar(key, value, getattr(base, key))

    difficulties = dict(base.difficulties)
    for name, values in (raw.get("difficulties") or {}).items():
        level = Difficulty.parse(name)
        if not isinstance(values, Mapping):
            raise ConfigError(f"Difficulty block for {name!r} must be a mapping")
        current = difficulties[level]
        patch: Dict[str, Any] = {}
        for f in fields(DifficultyTuning):
            if f.name in values:
                patch[f.name] = _coerce_scalar(f.name, values[f.name], getattr(current, f.name))
        difficulties[level] = replace(current, **patch)
    overrides["difficulties"] = difficulties

    tuning = replace(base, **overrides)
    _validate(tuning)
    return tuning


def _validate(tuning: GameTuning) -> None:
    if tuning.max_depth < 1:
        raise ConfigError("max_depth must be >= 1")
    if tuning.rooms_per_depth < 2:
        raise ConfigError("rooms_per_depth must be >= 2 so the key can precede the lock")
    for name in _SIZE_FIELDS:
        width, height = getattr(tuning, name)
        if width < 3 or height < 3:
            raise ConfigError(f"{name} must be at least 3x3")
    if tuning.room_shrink_roll < 1:
        raise ConfigError("room_shrink_roll must be >= 1")
    for level, diff in tuning.difficulties.items():
        if diff.spike_cycle < 1:
            raise ConfigError(f"spike_cycle for {level.value} must be >= 1")
        if not (0.0 <= diff.patch_chance <= 1.0):
            raise ConfigError(f"patch_chance for {level.value} must be within [0, 1]")


def load_tuning(path: Optional[Union[str, Path]] = None) -> GameTuning:
    """Load tuning from YAML.

    If path is None, loads the embedded default resource at
    shardcrawler/data/tuning.yaml.
    """
    if path is None:
        data = resource_files("shardcrawler").joinpath("data").joinpath("tuning.yaml").read_text(encoding="utf-8")
        logger.debug("Loaded embedded tuning resource")
    else:
        p = Path(path)
        if not p.exists():
            raise ConfigError(f"Tuning file not found: {p}")
        data = p.read_text(encoding="utf-8")
        logger.debug("Loaded tuning from path: %s", p)

    try:
        raw = yaml.safe_load(data) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed tuning YAML: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ConfigError("Tuning document must be a mapping")
    tuning = tuning_from_mapping(raw)
    logger.info("Tuning loaded: depths=%d rooms=%d", tuning.max_depth, tuning.rooms_per_depth)
    return tuning


__all__ = [
    "Difficulty",
    "DifficultyTuning",
    "GameTuning",
    "DEFAULT_TUNING",
    "DEFAULT_DIFFICULTIES",
    "load_tuning",
    "tuning_from_mapping",
]
