import pytest

from shardcrawler.dungeon.tiles import TileMap
from shardcrawler.fov.fog_of_war import FogOfWar, FogTileState
from shardcrawler.fov.fov import compute_visibility, line_of_sight, trace_line
from shardcrawler.map.grid import Point, Size, index_of, manhattan


def test_trace_line_endpoints_and_adjacency():
    line = trace_line(Point(0, 0), Point(5, 2))
    assert line[0] == Point(0, 0)
    assert line[-1] == Point(5, 2)
    for a, b in zip(line, line[1:]):
        assert max(abs(a.x - b.x), abs(a.y - b.y)) == 1


@pytest.mark.parametrize(
    "a,b",
    [
        (Point(0, 0), Point(5, 2)),
        (Point(3, 7), Point(0, 1)),
        (Point(2, 2), Point(6, 5)),
        (Point(4, 0), Point(0, 4)),
        (Point(1, 1), Point(1, 6)),
    ],
)
def test_trace_line_is_direction_symmetric(a, b):
    assert trace_line(b, a) == list(reversed(trace_line(a, b)))


def test_trace_line_single_cell():
    assert trace_line(Point(2, 2), Point(2, 2)) == [Point(2, 2)]


def test_line_of_sight_excludes_endpoints_unless_inclusive():
    wall = Point(3, 0)
    passable = lambda p: p != wall  # noqa: E731
    assert line_of_sight(Point(0, 0), wall, passable)
    assert not line_of_sight(Point(0, 0), wall, passable, inclusive=True)
    assert not line_of_sight(Point(0, 0), Point(5, 0), passable)


def test_visibility_radius_bound_and_origin():
    size = Size(15, 15)
    origin = Point(7, 7)
    visible = compute_visibility(origin, 4, size, lambda p: True)
    assert visible[index_of(origin, size)]
    for y in range(size.height):
        for x in range(size.width):
            p = Point(x, y)
            assert visible[index_of(p, size)] == (manhattan(origin, p) <= 4)


def test_visibility_radius_zero_only_origin():
    size = Size(5, 5)
    visible = compute_visibility(Point(2, 2), 0, size, lambda p: True)
    assert sum(visible) == 1


def test_walls_block_sight():
    tile_map = TileMap.from_ascii([
        ".......",
        "...#...",
        ".......",
    ])
    visible = compute_visibility(Point(1, 1), 10, tile_map.size, lambda p: tile_map.tile_at(p).transparent)
    assert visible[index_of(Point(2, 1), tile_map.size)]
    assert not visible[index_of(Point(3, 1), tile_map.size)]
    assert not visible[index_of(Point(5, 1), tile_map.size)]


def test_invalid_visibility_arguments():
    with pytest.raises(ValueError):
        compute_visibility(Point(-1, 0), 3, Size(3, 3), lambda p: True)
    with pytest.raises(ValueError):
        compute_visibility(Point(0, 0), -1, Size(3, 3), lambda p: True)


def test_fog_marks_seen_and_remembers():
    tile_map = TileMap.from_ascii(["." * 12])
    seen = [False] * tile_map.size.area
    fog = FogOfWar(tile_map.size)

    fog.update(tile_map, seen, Point(0, 0), 2)
    assert fog.state(Point(2, 0), seen) == FogTileState.VISIBLE
    assert fog.state(Point(5, 0), seen) == FogTileState.UNSEEN

    fog.update(tile_map, seen, Point(11, 0), 2)
    assert fog.state(Point(2, 0), seen) == FogTileState.SEEN
    assert fog.is_visible(Point(10, 0))
    assert not fog.is_visible(Point(20, 0))


def test_fog_reset_resizes():
    fog = FogOfWar(Size(3, 3))
    fog.reset(Size(6, 2))
    assert len(fog.visible) == 12
    assert not any(fog.visible)
    with pytest.raises(IndexError):
        fog.state(Point(0, 3), [False] * 12)
