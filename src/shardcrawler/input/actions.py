from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from ..game.constants import DOWN, LEFT, RIGHT, STILL, UP
from ..map.grid import Point


class InputAction(str, Enum):
    """Logical input actions used throughout the game.

    This enum abstracts away the details of the physical input devices
    (keyboard, gamepad, etc.) so that the game logic operates solely on
    semantic actions.
    """

    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    WAIT = "wait"
    INTERACT = "interact"
    PAUSE = "pause"
    RESTART = "restart"


_DIRECTIONS: Dict[InputAction, Point] = {
    InputAction.MOVE_UP: UP,
    InputAction.MOVE_DOWN: DOWN,
    InputAction.MOVE_LEFT: LEFT,
    InputAction.MOVE_RIGHT: RIGHT,
    InputAction.WAIT: STILL,
}


def direction_for(action: InputAction) -> Optional[Point]:
    """Movement delta for an action; ``wait`` is (0, 0), non-movement actions give None."""
    return _DIRECTIONS.get(action)


__all__ = ["InputAction", "direction_for"]
