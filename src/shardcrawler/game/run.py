from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from ..config import DEFAULT_TUNING, GameTuning
from ..core.events import EventBus
from ..dungeon.generation import generate_run
from ..dungeon.layout import DepthLayout
from ..fov.fog_of_war import FogOfWar
from ..rng import normalize_seed
from ..settings import Settings
from .constants import DEFAULT_FACING
from .entities import EntityIds, Player
from .rules import refresh_visibility
from .world import GameWorld, RunState, RunStats, RunStatus

logger = logging.getLogger(__name__)


class RoomTransition(str, Enum):
    NEXT_ROOM = "next-room"
    NEXT_DEPTH = "next-depth"
    RUN_COMPLETE = "run-complete"


def new_world(
    seed_string: Optional[str] = None,
    settings: Optional[Settings] = None,
    tuning: GameTuning = DEFAULT_TUNING,
    bus: Optional[EventBus] = None,
) -> GameWorld:
    """Generate every depth for the seed and place the player at depth 0, room 0.

    ``settings.custom_seed`` wins over ``seed_string`` when set.
    """
    settings = settings or Settings()
    seed_text, _ = normalize_seed(settings.custom_seed or seed_string or "")
    ids = EntityIds()
    layouts = generate_run(seed_text, settings.difficulty, tuning, ids)
    return world_from_layouts(layouts, seed_text, settings, tuning, ids, bus)


def world_from_layouts(
    layouts: List[DepthLayout],
    seed_string: str,
    settings: Optional[Settings] = None,
    tuning: GameTuning = DEFAULT_TUNING,
    ids: Optional[EntityIds] = None,
    bus: Optional[EventBus] = None,
) -> GameWorld:
    """Wrap already generated layouts in a fresh run. ``ids`` must continue the generation sequence."""
    seed_text, seed = normalize_seed(seed_string)
    if ids is None:
        ids = EntityIds(_highest_id(layouts))
    first = layouts[0].rooms[0]
    player = Player(
        ids.next(),
        first.spawn,
        hp=tuning.player_start_hp,
        max_hp=tuning.player_start_hp,
        facing=DEFAULT_FACING,
    )
    run = RunState(
        seed_string=seed_text,
        seed=seed,
        layouts=layouts,
        player=player,
        stats=RunStats(seed_string=seed_text, seed=seed),
        fog=FogOfWar(first.tile_map.size),
        ids=ids,
    )
    world = GameWorld(run, settings, tuning, bus)
    refresh_visibility(world)
    logger.info("Run started: seed=%r (%d) difficulty=%s", seed_text, seed, world.settings.difficulty.value)
    return world


def _highest_id(layouts: List[DepthLayout]) -> int:
    highest = 0
    for layout in layouts:
        for room in layout.rooms:
            for group in (room.shards, room.hazards, room.items):
                for entity in group:
                    highest = max(highest, entity.id)
            if room.portal is not None:
                highest = max(highest, room.portal.id)
    return highest


def enter_room(world: GameWorld) -> None:
    """Reset per-visit state for the room the run now points at."""
    run = world.run
    room = run.room
    room.collected = 0
    run.projectiles = []
    run.player.pos = room.spawn
    run.player.facing = DEFAULT_FACING
    run.fog.reset(room.tile_map.size)
    refresh_visibility(world)
    world.bus.emit("room_entered", {"depth": run.depth, "room": run.room_index})


def advance_after_portal(world: GameWorld) -> RoomTransition:
    """Move past the current room. On the last room of the last depth the run ends
    with victory and stays pointed at that room."""
    run = world.run
    tuning = world.tuning
    transition = RoomTransition.NEXT_ROOM
    if run.room_index + 1 < tuning.rooms_per_depth:
        run.room_index += 1
    else:
        if run.depth + 1 >= tuning.max_depth:
            end_run(world, victory=True)
            return RoomTransition.RUN_COMPLETE
        run.room_index = 0
        run.depth += 1
        run.stats.depth_reached = max(run.stats.depth_reached, run.depth + 1)
        transition = RoomTransition.NEXT_DEPTH
        logger.info("Entering depth %d", run.depth + 1)
        world.bus.emit("depth_entered", {"depth": run.depth})
    enter_room(world)
    return transition


def end_run(world: GameWorld, victory: bool) -> RunStats:
    run = world.run
    stats = run.stats
    stats.depth_reached = min(world.tuning.max_depth, max(stats.depth_reached, run.depth + 1))
    stats.victory = victory
    run.status = RunStatus.VICTORY if victory else RunStatus.DEFEAT
    logger.info(
        "Run over (%s): depth=%d shards=%d turns=%d",
        run.status.value, stats.depth_reached, stats.shards_collected, stats.turns,
    )
    world.bus.emit("run_complete", stats.to_dict())
    return stats


def is_better_run(candidate: RunStats, best: Optional[RunStats]) -> bool:
    """Victory first, then depth reached, then shards collected."""
    if best is None:
        return True
    key_new = (candidate.victory, candidate.depth_reached, candidate.shards_collected)
    key_best = (best.victory, best.depth_reached, best.shards_collected)
    return key_new > key_best
