from __future__ import annotations

import logging
import math
from typing import Any, Dict

from ..core.events import EventBus
from .entities import Player

logger = logging.getLogger(__name__)


class DamageService:
    """Applies damage to the player, emits events and arms the screen-shake timer."""

    def __init__(self, bus: EventBus, screen_shake: float = 0.0, shake_frames: int = 8) -> None:
        self.bus = bus
        self.screen_shake = screen_shake
        self.shake_frames = shake_frames
        self.shake_timer = 0

    def apply_damage(self, target: Player, amount: int, source: str) -> Dict[str, Any]:
        if amount <= 0:
            raise ValueError("Damage amount must be positive")
        pre_hp = target.hp
        target.hp = max(0, target.hp - amount)
        post_hp = target.hp
        if self.screen_shake > 0:
            self.shake_timer = max(self.shake_timer, math.ceil(self.shake_frames * self.screen_shake))
        self.bus.emit(
            "damage",
            {
                "target_id": target.id,
                "amount": amount,
                "source": source,
                "hp_before": pre_hp,
                "hp_after": post_hp,
            },
        )
        died = post_hp == 0
        if died:
            target.alive = False
            logger.info("Player died to %s at (%d,%d)", source, target.pos.x, target.pos.y)
            self.bus.emit("player_died", {"target_id": target.id, "source": source})
        return {"died": died, "hp_before": pre_hp, "hp_after": post_hp}

    def tick_shake(self) -> None:
        """Consume one frame of screen shake (renderer side)."""
        if self.shake_timer > 0:
            self.shake_timer -= 1
