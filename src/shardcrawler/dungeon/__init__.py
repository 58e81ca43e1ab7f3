from .tiles import Tile, TileMap, TileType
from .layout import DepthLayout, RoomPhase, RoomState
from .generation import generate_run

__all__ = ["Tile", "TileMap", "TileType", "DepthLayout", "RoomPhase", "RoomState", "generate_run"]
