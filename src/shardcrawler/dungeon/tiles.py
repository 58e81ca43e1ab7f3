from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Sequence

from ..map.grid import Point, Size, in_bounds, index_of

logger = logging.getLogger(__name__)


class TileType(str, Enum):
    WALL = "wall"
    FLOOR = "floor"
    DOOR = "door"
    LOCKED_DOOR = "locked-door"
    VOID = "void"


ASCII_TILES: Dict[str, TileType] = {
    "#": TileType.WALL,
    ".": TileType.FLOOR,
    "+": TileType.DOOR,
    "L": TileType.LOCKED_DOOR,
    " ": TileType.VOID,
}
TILE_GLYPHS: Dict[TileType, str] = {t: ch for ch, t in ASCII_TILES.items()}


@dataclass
class Tile:
    """One grid cell. Only locked doors carry ``locked=True``."""

    type: TileType = TileType.WALL
    locked: bool = False

    @property
    def passable(self) -> bool:
        return self.type in (TileType.FLOOR, TileType.DOOR)

    @property
    def transparent(self) -> bool:
        return self.type != TileType.WALL

    @property
    def blocks_hazards(self) -> bool:
        """Walls and locked doors stop sentinels and projectiles."""
        return self.type in (TileType.WALL, TileType.LOCKED_DOOR)


@dataclass
class TileMap:
    """
    Flat row-major tile storage. ``tiles[y * width + x]``.

    Tiles change after generation only through :meth:`unlock`.
    """

    size: Size
    tiles: List[Tile] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.size.width <= 0 or self.size.height <= 0:
            raise ValueError("TileMap width/height must be > 0")
        if not self.tiles:
            self.tiles = [Tile() for _ in range(self.size.area)]
        if len(self.tiles) != self.size.area:
            raise ValueError("Tile count does not match map size")

    @classmethod
    def filled(cls, size: Size, tile_type: TileType = TileType.WALL) -> "TileMap":
        return cls(size, [Tile(tile_type) for _ in range(size.area)])

    @classmethod
    def from_ascii(cls, rows: Sequence[str]) -> "TileMap":
        """
        Build a TileMap from ASCII rows for tests/tools.
        '#' wall, '.' floor, '+' door, 'L' locked door, ' ' void.
        """
        if not rows:
            raise ValueError("rows must not be empty")
        width = len(rows[0])
        for r in rows:
            if len(r) != width:
                raise ValueError("All rows must be same width")
        tiles: List[Tile] = []
        for row in rows:
            for ch in row:
                if ch not in ASCII_TILES:
                    raise ValueError(f"Unknown tile glyph {ch!r}")
                t = ASCII_TILES[ch]
                tiles.append(Tile(t, locked=t == TileType.LOCKED_DOOR))
        return cls(Size(width, len(rows)), tiles)

    @property
    def width(self) -> int:
        return self.size.width

    @property
    def height(self) -> int:
        return self.size.height

    def in_bounds(self, p: Point) -> bool:
        return in_bounds(p, self.size)

    def tile_at(self, p: Point) -> Tile:
        if not self.in_bounds(p):
            raise IndexError(f"Tile out of bounds: ({p.x},{p.y})")
        return self.tiles[index_of(p, self.size)]

    def set_type(self, p: Point, tile_type: TileType) -> None:
        self.tiles[index_of(p, self.size)] = Tile(tile_type, locked=tile_type == TileType.LOCKED_DOOR)

    def unlock(self, p: Point) -> bool:
        """Turn a locked door into an open door. Returns False when there is nothing to unlock."""
        tile = self.tile_at(p)
        if tile.type != TileType.LOCKED_DOOR:
            return False
        tile.type = TileType.DOOR
        tile.locked = False
        logger.debug("Unlocked door at (%d,%d)", p.x, p.y)
        return True

    def cells_of(self, tile_type: TileType) -> List[Point]:
        """Row-major list of every cell with the given type."""
        return [
            Point(x, y)
            for y in range(self.height)
            for x in range(self.width)
            if self.tiles[y * self.width + x].type == tile_type
        ]

    def floor_cells(self) -> List[Point]:
        return self.cells_of(TileType.FLOOR)

    def to_ascii(self) -> List[str]:
        return [
            "".join(TILE_GLYPHS[self.tiles[y * self.width + x].type] for x in range(self.width))
            for y in range(self.height)
        ]
