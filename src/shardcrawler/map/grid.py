from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from ..rng import SeededRNG


@dataclass(frozen=True)
class Point:
    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "Point":
        return Point(self.x + dx, self.y + dy)

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Size:
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    def center(self) -> Point:
        return Point(self.width // 2, self.height // 2)


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def origin(self) -> Point:
        return Point(self.x, self.y)

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    def contains(self, p: Point) -> bool:
        return self.x <= p.x < self.x + self.width and self.y <= p.y < self.y + self.height


def in_bounds(point: Point, size: Size) -> bool:
    return 0 <= point.x < size.width and 0 <= point.y < size.height


def index_of(point: Point, size: Size) -> int:
    """Flat row-major index (``y * width + x``)."""
    return point.y * size.width + point.x


def point_at(index: int, size: Size) -> Point:
    return Point(index % size.width, index // size.width)


def manhattan(a: Point, b: Point) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


def neighbors4(point: Point) -> List[Point]:
    """Axis-aligned neighbours in +x, -x, +y, -y order. Not bounds-filtered."""
    return [
        Point(point.x + 1, point.y),
        Point(point.x - 1, point.y),
        Point(point.x, point.y + 1),
        Point(point.x, point.y - 1),
    ]


def rect_points(rect: Rect) -> List[Point]:
    return [
        Point(x, y)
        for y in range(rect.y, rect.y + rect.height)
        for x in range(rect.x, rect.x + rect.width)
    ]


def random_rect(rng: SeededRNG, bounds: Rect) -> Rect:
    """Sample a rectangle of at least 3x3 lying inside ``bounds``.

    ``bounds`` must be wider and taller than 3, otherwise the generator raises.
    """
    width = rng.next_int(bounds.width - 3) + 3
    height = rng.next_int(bounds.height - 3) + 3
    x = rng.next_int(bounds.width - width) + bounds.x
    y = rng.next_int(bounds.height - height) + bounds.y
    return Rect(x, y, width, height)


__all__ = [
    "Point",
    "Size",
    "Rect",
    "in_bounds",
    "index_of",
    "point_at",
    "manhattan",
    "neighbors4",
    "rect_points",
    "random_rect",
]
