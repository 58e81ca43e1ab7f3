import logging

import pytest

from shardcrawler.core.events import EventBus
from shardcrawler.game.damage import DamageService
from shardcrawler.game.entities import Player
from shardcrawler.input.actions import InputAction, direction_for
from shardcrawler.map.grid import Point


def test_subscribe_emit_unsubscribe():
    bus = EventBus()
    got = []
    handler = got.append
    bus.subscribe("shard_collected", handler)
    bus.emit("shard_collected", {"id": 1})
    bus.unsubscribe("shard_collected", handler)
    bus.unsubscribe("shard_collected", handler)
    bus.emit("shard_collected", {"id": 2})
    assert got == [{"id": 1}]


def test_failing_handler_is_logged_and_others_still_run(caplog):
    bus = EventBus()
    got = []

    def broken(_payload):
        raise RuntimeError("speaker unplugged")

    bus.subscribe("damage", broken)
    bus.subscribe("damage", got.append)
    with caplog.at_level(logging.ERROR):
        bus.emit("damage", 1)
    assert got == [1]
    assert "speaker unplugged" in caplog.text


def test_history_is_bounded():
    bus = EventBus(history_size=3)
    for i in range(5):
        bus.emit(f"e{i}")
    assert bus.names() == ["e2", "e3", "e4"]
    bus.clear_history()
    assert bus.names() == []


def test_damage_service_reports_death_and_shake():
    bus = EventBus()
    damage = DamageService(bus, screen_shake=0.3, shake_frames=8)
    player = Player(1, Point(0, 0), hp=2, max_hp=2)

    first = damage.apply_damage(player, 1, "spike")
    assert first == {"died": False, "hp_before": 2, "hp_after": 1}
    assert damage.shake_timer == 3

    second = damage.apply_damage(player, 5, "sentinel")
    assert second["died"] is True
    assert player.hp == 0
    assert player.dead
    assert bus.names() == ["damage", "damage", "player_died"]

    with pytest.raises(ValueError):
        damage.apply_damage(player, 0, "nothing")

    damage.tick_shake()
    assert damage.shake_timer == 2


def test_input_actions_and_directions():
    assert len(InputAction) == 8
    assert direction_for(InputAction.MOVE_UP) == Point(0, -1)
    assert direction_for(InputAction.MOVE_DOWN) == Point(0, 1)
    assert direction_for(InputAction.MOVE_LEFT) == Point(-1, 0)
    assert direction_for(InputAction.MOVE_RIGHT) == Point(1, 0)
    assert direction_for(InputAction.WAIT) == Point(0, 0)
    for action in (InputAction.INTERACT, InputAction.PAUSE, InputAction.RESTART):
        assert direction_for(action) is None
    assert InputAction("move_left") is InputAction.MOVE_LEFT
