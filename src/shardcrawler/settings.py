from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .config import Difficulty
from .errors import ConfigError

log = logging.getLogger(__name__)


class GameMode(str, Enum):
    TURN = "turn"   # hazards advance once per accepted player turn
    REAL = "real"   # hazards advance on a fixed time step


@dataclass
class Settings:
    mode: GameMode = GameMode.TURN
    difficulty: Difficulty = Difficulty.STANDARD
    color_mode: str = "default"
    audio: bool = False
    screen_shake: float = 0.0  # 0..1
    custom_seed: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize settings to a JSON-friendly dict."""
        d = asdict(self)
        d["mode"] = self.mode.value
        d["difficulty"] = self.difficulty.value
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Settings":
        """Create settings from a dict, merging over defaults with validation and clamping."""
        try:
            mode = GameMode(d.get("mode", GameMode.TURN.value))
        except ValueError as exc:
            raise ConfigError(f"Unknown mode: {d.get('mode')!r}") from exc
        custom_seed = d.get("custom_seed")
        return cls(
            mode=mode,
            difficulty=Difficulty.parse(d.get("difficulty", Difficulty.STANDARD.value)),
            color_mode=str(d.get("color_mode", "default")),
            audio=bool(d.get("audio", False)),
            screen_shake=_clamp(d.get("screen_shake", 0.0), 0.0, 1.0),
            custom_seed=None if custom_seed in (None, "") else str(custom_seed),
        )


def _clamp(val: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, float(val)))
