from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..dungeon.pathfinding import find_path
from ..dungeon.tiles import TileMap
from ..map.grid import Point, in_bounds
from .entities import Hazard, HazardKind, Player, Projectile

if TYPE_CHECKING:  # pragma: no cover
    from .world import GameWorld

logger = logging.getLogger(__name__)


def step_sentinel(sentinel: Hazard, target: Player, tile_map: TileMap) -> None:
    """Wait out the cooldown, else take one BFS step toward the player and re-arm the cooldown."""
    if sentinel.cooldown > 0:
        sentinel.cooldown -= 1
        return
    path = find_path(sentinel.pos, target.pos, tile_map.size, lambda p: not tile_map.tile_at(p).blocks_hazards)
    if len(path) > 1:
        sentinel.pos = path[1]
    sentinel.cooldown = sentinel.delay


def tick_spike(spike: Hazard) -> None:
    spike.timer = (spike.timer + 1) % spike.cycle_length
    spike.active = spike.timer >= spike.cycle_length // 2


def tick_turret(world: "GameWorld", turret: Hazard) -> None:
    turret.counter += 1
    if turret.counter < turret.fire_rate:
        return
    turret.counter = 0
    run = world.run
    if len(run.projectiles) >= world.tuning.max_projectiles:
        logger.debug("Projectile cap reached; turret %d spawn dropped", turret.id)
        return
    facing = turret.facing or Point(1, 0)
    projectile = Projectile(run.ids.next(), turret.pos, dir=facing)
    run.projectiles.append(projectile)
    world.bus.emit("projectile_spawned", {"id": projectile.id, "x": turret.pos.x, "y": turret.pos.y})


def update_hazards(world: "GameWorld") -> bool:
    """Tick every alive hazard in the current room. Returns True if the player died."""
    room = world.current_room
    player = world.player
    died = False
    for hazard in room.hazards:
        if not hazard.alive:
            continue
        if hazard.kind == HazardKind.SENTINEL:
            step_sentinel(hazard, player, room.tile_map)
            if hazard.pos == player.pos:
                died = world.damage.apply_damage(player, 1, "sentinel")["died"] or died
        elif hazard.kind == HazardKind.TURRET:
            tick_turret(world, hazard)
        elif hazard.kind == HazardKind.SPIKE:
            tick_spike(hazard)
            if hazard.active and hazard.pos == player.pos:
                died = world.damage.apply_damage(player, 1, "spike")["died"] or died
    return died


def advance_projectiles(world: "GameWorld") -> bool:
    """Step every live projectile once, then drop the spent ones. Returns True if the player died."""
    tile_map = world.current_room.tile_map
    player = world.player
    died = False
    for projectile in world.run.projectiles:
        if not projectile.alive:
            continue
        projectile.pos = projectile.pos.offset(projectile.dir.x, projectile.dir.y)
        if not in_bounds(projectile.pos, tile_map.size):
            projectile.alive = False
            continue
        if tile_map.tile_at(projectile.pos).blocks_hazards:
            projectile.alive = False
            continue
        if projectile.pos == player.pos:
            projectile.alive = False
            died = world.damage.apply_damage(player, 1, "projectile")["died"] or died
    world.run.projectiles = [p for p in world.run.projectiles if p.alive]
    return died
