from __future__ import annotations

from collections import deque
from typing import Callable, List
import logging

from ..map.grid import Point, Size, in_bounds, index_of, manhattan, neighbors4

logger = logging.getLogger(__name__)

CellPredicate = Callable[[Point], bool]


def trace_line(start: Point, end: Point) -> List[Point]:
    """
    Bresenham's line algorithm. Returns the list of points from start to end inclusive.

    Lines are always rasterized from the lexicographically smaller endpoint, so
    ``trace_line(b, a)`` is exactly ``trace_line(a, b)`` reversed.
    """
    if (end.x, end.y) < (start.x, start.y):
        return trace_line(end, start)[::-1]

    points: List[Point] = []

    x0, y0 = start.x, start.y
    x1, y1 = end.x, end.y
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        points.append(Point(x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy

    return points


def line_of_sight(start: Point, end: Point, passable: CellPredicate, inclusive: bool = False) -> bool:
    """
    True when every cell strictly between start and end satisfies ``passable``.

    The origin is never checked. With ``inclusive`` the end cell must pass as well.
    """
    line = trace_line(start, end)
    stop = len(line) if inclusive else len(line) - 1
    for idx in range(1, stop):
        if not passable(line[idx]):
            return False
    return True


def compute_visibility(origin: Point, radius: int, size: Size, is_transparent: CellPredicate) -> List[bool]:
    """
    Flat visibility field (``y * width + x``) around ``origin``.

    Breadth-first from the origin, bounded by Manhattan ``radius``. A cell is
    visible when an inclusive line of sight to it crosses only transparent
    cells; expansion stops at the first non-visible cell on each frontier.
    The origin is always visible.
    """
    visible = [False] * size.area
    if not in_bounds(origin, size):
        raise ValueError("Origin out of bounds")
    if radius < 0:
        raise ValueError("radius must be >= 0")

    queue = deque([origin])
    visited = {origin}
    while queue:
        current = queue.popleft()
        if manhattan(origin, current) > radius:
            continue
        idx = index_of(current, size)
        visible[idx] = line_of_sight(origin, current, is_transparent, inclusive=True)
        if not visible[idx]:
            continue
        for nxt in neighbors4(current):
            if not in_bounds(nxt, size) or nxt in visited:
                continue
            visited.add(nxt)
            queue.append(nxt)

    logger.debug("Visibility from (%d,%d) radius %d -> %d cells", origin.x, origin.y, radius, sum(visible))
    return visible
