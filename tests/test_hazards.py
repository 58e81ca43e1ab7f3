from shardcrawler.game.constants import RIGHT, UP
from shardcrawler.game.entities import EntityIds, make_sentinel, make_spike, make_turret
from shardcrawler.game.hazards import tick_spike
from shardcrawler.game.rules import advance_hazards_and_projectiles
from shardcrawler.map.grid import Point

CORRIDOR = [
    "##########",
    "#........#",
    "##########",
]


def test_adjacent_sentinel_lands_on_player_and_hits(room_factory, world_factory, ids):
    sentinel = make_sentinel(ids, Point(2, 1), 0)
    world = world_factory(room_factory(hazards=[sentinel]))
    world.player.hp = world.player.max_hp = 3

    outcome = advance_hazards_and_projectiles(world)

    assert sentinel.pos == world.player.pos
    assert world.player.hp == 2
    assert outcome.died is False


def test_sentinel_kill_reports_death(room_factory, world_factory, ids):
    world = world_factory(room_factory(hazards=[make_sentinel(ids, Point(2, 1), 0)]))
    assert advance_hazards_and_projectiles(world).died is True
    assert world.player.hp == 0


def test_sentinel_cooldown(room_factory, world_factory, ids):
    sentinel = make_sentinel(ids, Point(6, 1), 1)
    world = world_factory(room_factory(rows=CORRIDOR, hazards=[sentinel], portal=(8, 1)))

    advance_hazards_and_projectiles(world)
    assert sentinel.pos == Point(5, 1)
    assert sentinel.cooldown == 1
    advance_hazards_and_projectiles(world)
    assert sentinel.pos == Point(5, 1)
    assert sentinel.cooldown == 0
    advance_hazards_and_projectiles(world)
    assert sentinel.pos == Point(4, 1)


def test_sentinel_does_not_path_through_locked_door(room_factory, world_factory, ids):
    rows = [
        "#######",
        "#..L..#",
        "#######",
    ]
    sentinel = make_sentinel(ids, Point(5, 1), 0)
    world = world_factory(room_factory(rows=rows, hazards=[sentinel], portal=(4, 1)))
    advance_hazards_and_projectiles(world)
    assert sentinel.pos == Point(5, 1)


def test_dead_hazards_are_skipped(room_factory, world_factory, ids):
    sentinel = make_sentinel(ids, Point(2, 1), 0)
    sentinel.alive = False
    world = world_factory(room_factory(hazards=[sentinel]))
    advance_hazards_and_projectiles(world)
    assert sentinel.pos == Point(2, 1)


def test_turret_fires_on_its_rate(room_factory, world_factory, ids):
    turret = make_turret(ids, Point(3, 1), RIGHT, 2)
    world = world_factory(room_factory(rows=CORRIDOR, hazards=[turret], portal=(8, 1)))

    advance_hazards_and_projectiles(world)
    assert world.run.projectiles == []
    assert turret.counter == 1

    advance_hazards_and_projectiles(world)
    assert turret.counter == 0
    assert len(world.run.projectiles) == 1
    projectile = world.run.projectiles[0]
    # spawned on the turret, then stepped once in the same tick
    assert projectile.pos == Point(4, 1)
    assert projectile.dir == RIGHT
    assert projectile.id > world.player.id
    assert "projectile_spawned" in world.bus.names()


def test_projectile_removed_at_wall(room_factory, world_factory, ids):
    turret = make_turret(ids, Point(7, 1), RIGHT, 1)
    world = world_factory(room_factory(rows=CORRIDOR, hazards=[turret], portal=(8, 1)))
    advance_hazards_and_projectiles(world)
    assert [p.pos for p in world.run.projectiles] == [Point(8, 1)]
    turret.alive = False
    advance_hazards_and_projectiles(world)
    assert world.run.projectiles == []


def test_projectile_leaving_bounds_is_removed(room_factory, world_factory, ids):
    turret = make_turret(ids, Point(1, 0), UP, 1)
    world = world_factory(room_factory(rows=["....", "...."], spawn=(3, 1), hazards=[turret], portal=None))
    advance_hazards_and_projectiles(world)
    assert world.run.projectiles == []


def test_projectile_hits_player(room_factory, world_factory, ids):
    turret = make_turret(ids, Point(3, 1), RIGHT, 1)
    world = world_factory(room_factory(rows=CORRIDOR, spawn=(5, 1), hazards=[turret], portal=(8, 1)))
    world.player.hp = world.player.max_hp = 3

    advance_hazards_and_projectiles(world)
    assert world.player.hp == 3
    turret.alive = False
    outcome = advance_hazards_and_projectiles(world)
    assert world.player.hp == 2
    assert outcome.died is False
    assert world.run.projectiles == []


def test_projectile_cap_drops_new_spawns(room_factory, world_factory, ids):
    turrets = [make_turret(ids, Point(x, 1), RIGHT, 1) for x in (2, 3, 4)]
    world = world_factory(
        room_factory(rows=CORRIDOR, spawn=(1, 1), hazards=turrets, portal=(8, 1)),
        max_projectiles=2,
    )
    advance_hazards_and_projectiles(world)
    assert len(world.run.projectiles) == 2


def test_spike_cycle():
    spike = make_spike(EntityIds(), Point(0, 0), 4)
    states = []
    for _ in range(5):
        tick_spike(spike)
        states.append((spike.timer, spike.active))
    assert states == [(1, False), (2, True), (3, True), (0, False), (1, False)]


def test_active_spike_under_player_hurts(room_factory, world_factory, ids):
    spike = make_spike(ids, Point(1, 1), 4)
    world = world_factory(room_factory(hazards=[spike]))
    world.player.hp = world.player.max_hp = 3

    advance_hazards_and_projectiles(world)
    assert world.player.hp == 3
    advance_hazards_and_projectiles(world)
    assert world.player.hp == 2
    advance_hazards_and_projectiles(world)
    assert world.player.hp == 1
    advance_hazards_and_projectiles(world)
    assert world.player.hp == 1