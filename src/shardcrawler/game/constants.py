from typing import Tuple

from ..map.grid import Point

# Cardinal directions as (dx, dy), in carve/facing draw order
RIGHT = Point(1, 0)
LEFT = Point(-1, 0)
DOWN = Point(0, 1)
UP = Point(0, -1)

DIRECTIONS: Tuple[Point, ...] = (RIGHT, LEFT, DOWN, UP)

STILL = Point(0, 0)

DEFAULT_FACING = DOWN
