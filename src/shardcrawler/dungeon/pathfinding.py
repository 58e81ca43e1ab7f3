from collections import deque
from typing import Callable, Dict, List, Optional, Set

from ..map.grid import Point, Size, in_bounds, neighbors4

CellPredicate = Callable[[Point], bool]


def flood_fill(start: Point, size: Size, passable: CellPredicate) -> Set[Point]:
    """Breadth-first set of passable cells reachable from ``start`` (4-neigh).

    Out-of-bounds and impassable cells are never included; an impassable start yields an empty set.
    """
    reachable: Set[Point] = set()
    q = deque([start])
    while q:
        p = q.popleft()
        if p in reachable:
            continue
        if not in_bounds(p, size) or not passable(p):
            continue
        reachable.add(p)
        for n in neighbors4(p):
            if n not in reachable:
                q.append(n)
    return reachable


def find_path(start: Point, goal: Point, size: Size, passable: CellPredicate) -> List[Point]:
    """Breadth-first shortest path from start to goal, both inclusive.

    Ties resolve in ``neighbors4`` order (+x, -x, +y, -y). Returns [] when the goal is unreachable.
    The start cell itself is not tested against ``passable``.
    """
    q = deque([start])
    came_from: Dict[Point, Optional[Point]] = {start: None}
    while q:
        current = q.popleft()
        if current == goal:
            break
        for nxt in neighbors4(current):
            if nxt in came_from or not in_bounds(nxt, size) or not passable(nxt):
                continue
            came_from[nxt] = current
            q.append(nxt)

    if goal not in came_from:
        return []
    path: List[Point] = []
    cursor: Optional[Point] = goal
    while cursor is not None:
        path.append(cursor)
        cursor = came_from[cursor]
    path.reverse()
    return path
