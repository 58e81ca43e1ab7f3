from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..game.entities import Hazard, Item, Portal, Shard
from ..map.grid import Point
from .tiles import TileMap


class RoomPhase(str, Enum):
    EXPLORING = "exploring"
    PORTAL_ACTIVE = "portal-active"


@dataclass
class RoomState:
    """A fully generated room. Built once by the level builder and mutated only by the turn engine."""

    tile_map: TileMap
    spawn: Point
    shards: List[Shard]
    hazards: List[Hazard]
    items: List[Item]
    portal: Optional[Portal]
    shard_target: int
    door_targets: Dict[Point, int] = field(default_factory=dict)
    seen: List[bool] = field(default_factory=list)
    collected: int = 0

    def __post_init__(self) -> None:
        if not self.seen:
            self.seen = [False] * self.tile_map.size.area

    @property
    def phase(self) -> RoomPhase:
        if self.portal is not None and self.portal.active:
            return RoomPhase.PORTAL_ACTIVE
        return RoomPhase.EXPLORING

    @property
    def quota_met(self) -> bool:
        return self.collected >= self.shard_target

    def signature_payload(self) -> dict:
        return {
            "size": [self.tile_map.width, self.tile_map.height],
            "tiles": self.tile_map.to_ascii(),
            "spawn": [self.spawn.x, self.spawn.y],
            "shards": [[s.id, s.pos.x, s.pos.y] for s in self.shards],
            "hazards": [[h.id, h.kind.value, h.pos.x, h.pos.y] for h in self.hazards],
            "items": [[i.id, i.kind.value, i.pos.x, i.pos.y] for i in self.items],
            "portal": None if self.portal is None else [self.portal.id, self.portal.pos.x, self.portal.pos.y],
            "target": self.shard_target,
        }


@dataclass
class DepthLayout:
    """Exactly ``rooms_per_depth`` rooms; the key room always precedes the locked-door room."""

    rooms: List[RoomState]
    locked_door_room_index: int
    key_room_index: int

    def __post_init__(self) -> None:
        if not (0 <= self.key_room_index < self.locked_door_room_index < len(self.rooms)):
            raise ValueError(
                f"key room {self.key_room_index} must precede locked-door room "
                f"{self.locked_door_room_index} within {len(self.rooms)} rooms"
            )

    def signature(self) -> str:
        """Deterministic signature of layout content (tiles + entities + gating indices)."""
        payload = {
            "locked": self.locked_door_room_index,
            "key": self.key_room_index,
            "rooms": [r.signature_payload() for r in self.rooms],
        }
        raw = str(payload).encode("utf-8")
        h = hashlib.blake2b(raw, digest_size=16)
        return h.hexdigest()


def run_signature(layouts: Sequence[DepthLayout]) -> str:
    h = hashlib.blake2b(digest_size=16)
    for layout in layouts:
        h.update(layout.signature().encode("ascii"))
    return h.hexdigest()
