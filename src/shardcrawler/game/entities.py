from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..map.grid import Point
from .constants import DEFAULT_FACING


class EntityIds:
    """Strictly increasing id source shared by generation and the run that follows it.

    Ids start at 1 and are never reused. Pass one instance explicitly wherever
    entities are created.
    """

    def __init__(self, start: int = 0) -> None:
        self._last = start

    def next(self) -> int:
        self._last += 1
        return self._last

    @property
    def last(self) -> int:
        return self._last

    def __repr__(self) -> str:
        return f"EntityIds(last={self._last})"


@dataclass
class Entity:
    """Base entity in the world grid."""
    id: int
    pos: Point
    alive: bool = True

    def at(self, p: Point) -> bool:
        return self.alive and self.pos == p


@dataclass
class Shard(Entity):
    pass


class ItemKind(str, Enum):
    KEY = "key"
    PATCH = "patch"
    BLINK = "blink"


@dataclass
class Item(Entity):
    kind: ItemKind = ItemKind.KEY


@dataclass
class Portal(Entity):
    active: bool = False


class HazardKind(str, Enum):
    SENTINEL = "sentinel"
    TURRET = "turret"
    SPIKE = "spike"


@dataclass
class Hazard(Entity):
    """Single record for every hazard variant, discriminated by ``kind``.

    sentinel: cooldown/delay. turret: facing/fire_rate/counter.
    spike: cycle_length/timer/active. Fields of other variants stay at defaults.
    """
    kind: HazardKind = HazardKind.SENTINEL
    cooldown: int = 0
    delay: int = 0
    facing: Optional[Point] = None
    fire_rate: int = 0
    counter: int = 0
    cycle_length: int = 0
    timer: int = 0
    active: bool = False


@dataclass
class Projectile(Entity):
    dir: Point = Point(1, 0)


@dataclass
class Player(Entity):
    hp: int = 1
    max_hp: int = 1
    shards: int = 0
    keys: int = 0
    blink_charges: int = 0
    score: int = 0
    facing: Point = field(default=DEFAULT_FACING)

    @property
    def dead(self) -> bool:
        return self.hp <= 0

    def __repr__(self) -> str:
        return f"Player(@{self.pos.x},{self.pos.y} hp={self.hp}/{self.max_hp} keys={self.keys})"


def make_sentinel(ids: EntityIds, pos: Point, delay: int) -> Hazard:
    return Hazard(ids.next(), pos, kind=HazardKind.SENTINEL, cooldown=0, delay=delay)


def make_turret(ids: EntityIds, pos: Point, facing: Point, fire_rate: int) -> Hazard:
    return Hazard(ids.next(), pos, kind=HazardKind.TURRET, facing=facing, fire_rate=fire_rate, counter=0)


def make_spike(ids: EntityIds, pos: Point, cycle_length: int) -> Hazard:
    return Hazard(ids.next(), pos, kind=HazardKind.SPIKE, cycle_length=cycle_length, timer=0, active=False)
