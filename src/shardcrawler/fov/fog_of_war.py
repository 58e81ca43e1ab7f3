from __future__ import annotations

from enum import Enum
from typing import List
import logging

from ..dungeon.tiles import TileMap
from ..map.grid import Point, Size, in_bounds, index_of
from .fov import compute_visibility

logger = logging.getLogger(__name__)


class FogTileState(str, Enum):
    UNSEEN = "unseen"         # never seen; fully dark
    SEEN = "seen"             # seen before but not currently visible; dim
    VISIBLE = "visible"       # currently visible; full brightness


class FogOfWar:
    """
    Current-visibility bitmap for the active room.

    The room's own ``seen`` list is the long-term memory; :meth:`update` writes
    every currently visible cell into it. The renderer reads both.
    """

    def __init__(self, size: Size) -> None:
        self.size = size
        self.visible: List[bool] = [False] * size.area

    def reset(self, size: Size) -> None:
        """Forget current visibility and resize (e.g., on entering a new room)."""
        self.size = size
        self.visible = [False] * size.area
        logger.debug("FogOfWar reset to %dx%d", size.width, size.height)

    def update(self, tile_map: TileMap, seen: List[bool], origin: Point, radius: int) -> None:
        if tile_map.size != self.size:
            self.reset(tile_map.size)
        self.visible = compute_visibility(origin, radius, tile_map.size, lambda p: tile_map.tile_at(p).transparent)
        for i, v in enumerate(self.visible):
            if v:
                seen[i] = True

    def is_visible(self, p: Point) -> bool:
        return in_bounds(p, self.size) and self.visible[index_of(p, self.size)]

    def state(self, p: Point, seen: List[bool]) -> FogTileState:
        if not in_bounds(p, self.size):
            raise IndexError("Tile out of bounds")
        idx = index_of(p, self.size)
        if self.visible[idx]:
            return FogTileState.VISIBLE
        if seen[idx]:
            return FogTileState.SEEN
        return FogTileState.UNSEEN
