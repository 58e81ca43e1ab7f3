"""Turn resolution.

``resolve_player_action`` applies one player intent to the current room;
``advance_hazards_and_projectiles`` runs one hazard/projectile tick. The two
are independent so either a turn-driven or a fixed-step driver can compose
them.

Blocked actions never raise: they come back with ``took_turn=False`` and an
advisory message.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..dungeon.tiles import TileType
from ..input.actions import InputAction, direction_for
from ..map.grid import Point, in_bounds
from .entities import Item, ItemKind
from .hazards import advance_projectiles, update_hazards
from .world import GameWorld

logger = logging.getLogger(__name__)

BLINK_DISTANCE = 2


@dataclass
class ActionOutcome:
    took_turn: bool = False
    entered_portal: bool = False
    died: bool = False
    message: Optional[str] = None


@dataclass
class TileResult:
    died: bool = False
    entered_portal: bool = False


def resolve_player_action(world: GameWorld, action: InputAction) -> ActionOutcome:
    """Apply one player intent. ``pause`` and ``restart`` are driver concerns and never take a turn."""
    outcome = ActionOutcome()
    world.message = ""
    delta = direction_for(action)
    if delta is not None:
        attempt_move(world, delta, outcome)
    elif action == InputAction.INTERACT:
        interact(world, outcome)
    if outcome.took_turn:
        world.run.stats.turns += 1
    outcome.message = world.message or None
    return outcome


def attempt_move(world: GameWorld, delta: Point, outcome: ActionOutcome) -> None:
    player = world.player
    if delta.x == 0 and delta.y == 0:
        # Waiting consumes the turn without touching the current cell.
        outcome.took_turn = True
        return
    tile_map = world.current_room.tile_map
    target = player.pos.offset(delta.x, delta.y)
    if not in_bounds(target, tile_map.size):
        world.notify("Blocked")
        return
    tile = tile_map.tile_at(target)
    if tile.type == TileType.LOCKED_DOOR:
        if player.keys <= 0:
            world.notify("Door is locked")
            world.bus.emit("door_locked", {"x": target.x, "y": target.y})
            return
        tile_map.unlock(target)
        player.keys -= 1
        world.notify("Door unlocked")
        world.bus.emit("door_unlocked", {"x": target.x, "y": target.y})
    if not tile.passable:
        world.notify("Blocked")
        return
    player.pos = target
    player.facing = delta
    result = resolve_tile(world, target)
    outcome.took_turn = True
    outcome.died = result.died
    outcome.entered_portal = result.entered_portal


def interact(world: GameWorld, outcome: ActionOutcome) -> None:
    """Enter an active portal underfoot, else spend a blink charge along the facing."""
    player = world.player
    room = world.current_room
    portal = room.portal
    if portal is not None and portal.active and portal.pos == player.pos:
        outcome.took_turn = True
        outcome.entered_portal = True
        return
    if player.blink_charges <= 0:
        world.notify("No blink charges")
        return
    target = player.pos.offset(player.facing.x * BLINK_DISTANCE, player.facing.y * BLINK_DISTANCE)
    if not in_bounds(target, room.tile_map.size) or room.tile_map.tile_at(target).type in (
        TileType.WALL,
        TileType.LOCKED_DOOR,
    ):
        world.notify("Nothing to blink onto")
        return
    origin = player.pos
    player.pos = target
    player.blink_charges -= 1
    world.notify("Blink")
    world.bus.emit("blink", {"from": origin.as_tuple(), "to": target.as_tuple()})
    result = resolve_tile(world, target)
    outcome.took_turn = True
    outcome.died = result.died
    outcome.entered_portal = result.entered_portal


def resolve_tile(world: GameWorld, position: Point) -> TileResult:
    """Tile effects in fixed order: shard, item, hazard contact, portal entry, portal activation."""
    room = world.current_room
    player = world.player
    for shard in room.shards:
        if shard.at(position):
            shard.alive = False
            room.collected += 1
            player.shards += 1
            player.score += world.tuning.shard_score
            world.run.stats.shards_collected += 1
            world.bus.emit("shard_collected", {"id": shard.id, "collected": room.collected, "target": room.shard_target})
            break

    for item in room.items:
        if item.at(position):
            collect_item(world, item)
            break

    for hazard in room.hazards:
        if hazard.at(position):
            died = world.damage.apply_damage(player, 1, hazard.kind.value)["died"]
            if not died:
                world.notify("Ouch")
            return TileResult(died=died)

    entered = room.portal is not None and room.portal.active and room.portal.pos == position
    check_portal(world)
    return TileResult(entered_portal=entered)


def collect_item(world: GameWorld, item: Item) -> None:
    item.alive = False
    player = world.player
    if item.kind == ItemKind.KEY:
        player.keys += 1
        world.notify("Picked up a key")
    elif item.kind == ItemKind.PATCH:
        if player.max_hp < world.tuning.max_player_hp:
            player.max_hp += 1
        player.hp = min(player.max_hp, player.hp + 1)
        world.notify("Patched up")
    else:
        player.blink_charges += 1
        world.notify("Blink ready")
    world.bus.emit("item_collected", {"id": item.id, "kind": item.kind.value})


def check_portal(world: GameWorld) -> None:
    room = world.current_room
    if room.portal is None or room.portal.active:
        return
    if room.quota_met:
        room.portal.active = True
        world.notify("Portal opened")
        world.bus.emit("portal_opened", {"id": room.portal.id, "x": room.portal.pos.x, "y": room.portal.pos.y})
        logger.debug("Portal opened after %d/%d shards", room.collected, room.shard_target)


def advance_hazards_and_projectiles(world: GameWorld) -> ActionOutcome:
    """One hazard/projectile tick. Only ``died`` is meaningful on the returned outcome."""
    died = update_hazards(world)
    died = advance_projectiles(world) or died
    return ActionOutcome(took_turn=True, died=died)


def refresh_visibility(world: GameWorld) -> None:
    room = world.current_room
    world.run.fog.update(room.tile_map, room.seen, world.player.pos, world.tuning.vision_radius)
