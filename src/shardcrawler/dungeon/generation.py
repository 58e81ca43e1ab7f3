from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from ..config import DEFAULT_TUNING, Difficulty, DifficultyTuning, GameTuning
from ..game.constants import DIRECTIONS
from ..game.entities import (
    EntityIds,
    Hazard,
    Item,
    ItemKind,
    Portal,
    Shard,
    make_sentinel,
    make_spike,
    make_turret,
)
from ..map.grid import Point, Size, in_bounds, manhattan
from ..rng import SeededRNG, rng_from_string
from .layout import DepthLayout, RoomState, run_signature
from .pathfinding import find_path, flood_fill
from .tiles import TileMap, TileType

logger = logging.getLogger(__name__)


@dataclass
class GenerationContext:
    """Everything one room build reads: the shared RNG thread, tuning, depth and the id source."""

    rng: SeededRNG
    tuning: GameTuning
    difficulty: DifficultyTuning
    depth: int
    ids: EntityIds


def carve_tile_map(rng: SeededRNG, tuning: GameTuning = DEFAULT_TUNING) -> TileMap:
    """Random-walk carve from the map centre, then drop anything the walk cannot reach.

    Width and height are each ``max(min, baseline - next_int(shrink_roll))``.
    """
    base_w, base_h = tuning.base_room_size
    min_w, min_h = tuning.min_room_size
    width = max(min_w, base_w - rng.next_int(tuning.room_shrink_roll))
    height = max(min_h, base_h - rng.next_int(tuning.room_shrink_roll))
    tile_map = TileMap.filled(Size(width, height), TileType.WALL)

    start = tile_map.size.center()
    walker = start
    total_steps = width * height * tuning.carve_steps_per_cell
    for _ in range(total_steps):
        _carve(tile_map, walker, rng, tuning.carve_side_chance)
        d = DIRECTIONS[rng.next_int(len(DIRECTIONS))]
        nxt = walker.offset(d.x, d.y)
        if in_bounds(nxt, tile_map.size):
            walker = nxt

    ensure_connectivity(tile_map, start)
    logger.debug("Carved %dx%d room with %d floor cells", width, height, len(tile_map.floor_cells()))
    return tile_map


def _carve(tile_map: TileMap, p: Point, rng: SeededRNG, side_chance: float) -> None:
    tile_map.set_type(p, TileType.FLOOR)
    for d in DIRECTIONS:
        n = p.offset(d.x, d.y)
        if not in_bounds(n, tile_map.size):
            continue
        # The roll is only drawn for wall neighbours.
        if tile_map.tile_at(n).type == TileType.WALL and rng.next() < side_chance:
            tile_map.set_type(n, TileType.FLOOR)


def ensure_connectivity(tile_map: TileMap, start: Point) -> None:
    """Force every cell not reachable from ``start`` back to wall."""
    reachable = flood_fill(start, tile_map.size, lambda p: tile_map.tile_at(p).type != TileType.WALL)
    for y in range(tile_map.height):
        for x in range(tile_map.width):
            p = Point(x, y)
            if p not in reachable:
                tile_map.set_type(p, TileType.WALL)


def shard_target_for(ctx: GenerationContext, room_index: int) -> int:
    t = ctx.tuning
    raw = t.base_shard_target + ctx.depth * t.shard_increment + room_index * t.shard_increment + ctx.difficulty.shard_delta
    return max(1, raw)


def pick_farthest(start: Point, candidates: List[Point]) -> Point:
    """First candidate with the greatest Manhattan distance from ``start``."""
    best = candidates[0] if candidates else start
    best_dist = -1
    for c in candidates:
        dist = manhattan(start, c)
        if dist > best_dist:
            best_dist = dist
            best = c
    return best


def place_hazards(ctx: GenerationContext, tile_map: TileMap, spawn: Point, shard_target: int) -> List[Hazard]:
    t = ctx.tuning
    hazards: List[Hazard] = []
    floors = tile_map.floor_cells()
    ctx.rng.shuffle_in_place(floors)
    budget = min(t.hazard_cap, 2 + ctx.depth + shard_target // 3)
    for p in floors:
        if manhattan(p, spawn) < t.hazard_clearance:
            continue
        if len(hazards) >= budget:
            break
        roll = ctx.rng.next()
        if roll < t.sentinel_chance:
            hazards.append(make_sentinel(ctx.ids, p, ctx.difficulty.sentinel_delay))
        elif roll < t.sentinel_chance + t.turret_chance + ctx.difficulty.extra_turret_chance:
            facing = DIRECTIONS[ctx.rng.next_int(len(DIRECTIONS))]
            hazards.append(make_turret(ctx.ids, p, facing, t.turret_fire_rate(ctx.depth)))
        else:
            hazards.append(make_spike(ctx.ids, p, ctx.difficulty.spike_cycle))
    return hazards


def place_items(ctx: GenerationContext, tile_map: TileMap, spawn: Point, place_key: bool) -> List[Item]:
    items: List[Item] = []
    floors = [p for p in tile_map.floor_cells() if manhattan(p, spawn) > ctx.tuning.item_clearance]
    ctx.rng.shuffle_in_place(floors)
    if place_key and floors:
        items.append(Item(ctx.ids.next(), floors.pop(0), kind=ItemKind.KEY))
    if floors and ctx.rng.next() < ctx.difficulty.patch_chance:
        items.append(Item(ctx.ids.next(), floors.pop(0), kind=ItemKind.PATCH))
    if floors and ctx.rng.next() < ctx.tuning.blink_chance:
        items.append(Item(ctx.ids.next(), floors.pop(0), kind=ItemKind.BLINK))
    return items


def build_room(ctx: GenerationContext, room_index: int, locked_door: bool, place_key: bool) -> RoomState:
    tile_map = carve_tile_map(ctx.rng, ctx.tuning)
    floors = tile_map.floor_cells()
    spawn_index = ctx.rng.next_int(max(len(floors), 1))
    spawn = floors[spawn_index] if floors else tile_map.size.center()
    target = pick_farthest(spawn, floors)
    path = find_path(spawn, target, tile_map.size, lambda p: tile_map.tile_at(p).type != TileType.WALL)
    shard_target = shard_target_for(ctx, room_index)

    shard_cells = [p for p in floors if manhattan(p, spawn) > 1][: shard_target + 2]
    shards = [Shard(ctx.ids.next(), p) for p in shard_cells]
    portal = Portal(ctx.ids.next(), target)

    door_targets = {}
    if locked_door:
        if len(path) > 3:
            door = path[len(path) // 2]
            tile_map.set_type(door, TileType.LOCKED_DOOR)
            door_targets[door] = 1
            logger.debug("Depth %d room %d: locked door at (%d,%d)", ctx.depth, room_index, door.x, door.y)
        else:
            logger.debug(
                "Depth %d room %d: spawn->portal path too short (%d) for a locked door",
                ctx.depth, room_index, len(path),
            )

    hazards = place_hazards(ctx, tile_map, spawn, shard_target)
    items = place_items(ctx, tile_map, spawn, place_key)
    return RoomState(
        tile_map=tile_map,
        spawn=spawn,
        shards=shards,
        hazards=hazards,
        items=items,
        portal=portal,
        shard_target=shard_target,
        door_targets=door_targets,
    )


def build_depth_layout(
    rng: SeededRNG,
    depth: int,
    difficulty: Union[str, Difficulty],
    ids: EntityIds,
    tuning: GameTuning = DEFAULT_TUNING,
) -> DepthLayout:
    ctx = GenerationContext(rng=rng, tuning=tuning, difficulty=tuning.difficulty(difficulty), depth=depth, ids=ids)
    rooms_per_depth = tuning.rooms_per_depth
    # Never the first room, so a key room always exists before it.
    locked_index = rng.next_int(rooms_per_depth - 1) + 1
    key_index = rng.next_int(locked_index)
    rooms = [
        build_room(ctx, i, locked_door=i == locked_index, place_key=i == key_index)
        for i in range(rooms_per_depth)
    ]
    return DepthLayout(rooms=rooms, locked_door_room_index=locked_index, key_room_index=key_index)


def generate_layouts(
    rng: SeededRNG,
    difficulty: Union[str, Difficulty],
    ids: EntityIds,
    tuning: GameTuning = DEFAULT_TUNING,
) -> List[DepthLayout]:
    """All depth layouts for one run, drawn from a single RNG thread in depth order."""
    return [build_depth_layout(rng, depth, difficulty, ids, tuning) for depth in range(tuning.max_depth)]


def generate_run(
    seed_string: str,
    difficulty: Union[str, Difficulty] = Difficulty.STANDARD,
    tuning: GameTuning = DEFAULT_TUNING,
    ids: Optional[EntityIds] = None,
) -> List[DepthLayout]:
    """Deterministic per (seed, difficulty, tuning): identical inputs give identical layouts draw-for-draw."""
    rng = rng_from_string(seed_string)
    layouts = generate_layouts(rng, difficulty, ids if ids is not None else EntityIds(), tuning)
    logger.debug("Generated run for seed %r (%d): %s", rng.seed_string, rng.seed, run_signature(layouts))
    return layouts


__all__ = [
    "GenerationContext",
    "carve_tile_map",
    "ensure_connectivity",
    "build_room",
    "build_depth_layout",
    "generate_layouts",
    "generate_run",
    "pick_farthest",
    "shard_target_for",
]
