import sys
from dataclasses import replace
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from shardcrawler.config import DEFAULT_TUNING  # noqa: E402
from shardcrawler.dungeon.layout import DepthLayout, RoomState  # noqa: E402
from shardcrawler.dungeon.tiles import TileMap  # noqa: E402
from shardcrawler.game.entities import EntityIds, Item, Portal, Shard  # noqa: E402
from shardcrawler.game.run import world_from_layouts  # noqa: E402
from shardcrawler.map.grid import Point  # noqa: E402
from shardcrawler.settings import Settings  # noqa: E402

OPEN_ROOM = [
    "#########",
    "#.......#",
    "#.......#",
    "#.......#",
    "#.......#",
    "#########",
]


@pytest.fixture
def ids():
    return EntityIds()


@pytest.fixture
def room_factory(ids):
    """Build a RoomState from ASCII rows. Positions are (x, y) tuples."""

    def make(
        rows=None,
        spawn=(1, 1),
        shards=(),
        items=(),
        hazards=(),
        portal=(7, 4),
        target=1,
    ):
        tile_map = TileMap.from_ascii(rows or OPEN_ROOM)
        return RoomState(
            tile_map=tile_map,
            spawn=Point(*spawn),
            shards=[Shard(ids.next(), Point(*p)) for p in shards],
            hazards=list(hazards),
            items=[Item(ids.next(), Point(*p), kind=kind) for p, kind in items],
            portal=None if portal is None else Portal(ids.next(), Point(*portal)),
            shard_target=target,
        )

    return make


@pytest.fixture
def world_factory(ids, room_factory):
    """Wrap rooms into a one-or-more depth run; every depth reuses fresh copies of the filler room."""

    def make(first_room=None, depths=1, rooms_per_depth=2, settings=None, **tuning_overrides):
        layouts = []
        for d in range(depths):
            rooms = [room_factory() for _ in range(rooms_per_depth)]
            if d == 0 and first_room is not None:
                rooms[0] = first_room
            layouts.append(DepthLayout(rooms=rooms, locked_door_room_index=1, key_room_index=0))
        tuning = replace(DEFAULT_TUNING, max_depth=depths, rooms_per_depth=rooms_per_depth, **tuning_overrides)
        return world_from_layouts(layouts, "test-seed", settings or Settings(), tuning, ids)

    return make
