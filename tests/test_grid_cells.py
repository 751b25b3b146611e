import pytest

from delve.dungeon import BRUSH, FLOOR, WALL, Grid, OutOfBoundsError
from delve.dungeon.tiles import kind_to_char


def test_new_grid_is_all_wall_and_unexplored():
    g = Grid(4, 3)
    assert (g.width, g.height) == (4, 3)
    for x, y in g.coords():
        c = g.cell(x, y)
        assert c.kind == WALL and c.blocked and c.block_sight and not c.explored


def test_out_of_bounds_lookup_raises_and_never_clamps():
    g = Grid(5, 5)
    for x, y in [(-1, 0), (0, -1), (5, 0), (0, 5), (99, 99)]:
        assert not g.in_bounds(x, y)
        with pytest.raises(OutOfBoundsError):
            g.cell(x, y)
    # still an IndexError for callers that only know the builtin
    with pytest.raises(IndexError):
        g.is_walkable(5, 0)


def test_terrain_flags_follow_kind():
    g = Grid(3, 1)
    g.set_kind(0, 0, FLOOR)
    g.set_kind(1, 0, BRUSH)
    assert g.is_walkable(0, 0) and not g.blocks_sight(0, 0)
    assert g.is_walkable(1, 0) and g.blocks_sight(1, 0)
    assert not g.is_walkable(2, 0) and g.blocks_sight(2, 0)
    assert [kind_to_char(g.cell(x, 0).kind) for x in range(3)] == [".", '"', "#"]


def test_invalid_dimensions_rejected():
    with pytest.raises(ValueError):
        Grid(0, 4)


def test_can_step_rejects_diagonal_squeeze_between_two_walls():
    g = Grid.open(3, 3)
    g.set_kind(1, 0, WALL)
    g.set_kind(0, 1, WALL)
    # (0,0) -> (1,1) squeezes between (1,0) and (0,1)
    assert not g.can_step(0, 0, 1, 1)
    # one wall is enough to pass
    g.set_kind(0, 1, FLOOR)
    assert g.can_step(0, 0, 1, 1)
    # off the grid is never a legal step
    assert not g.can_step(0, 0, -1, 0)


def test_explored_coords_tracks_flags():
    g = Grid.open(2, 2)
    g.cell(1, 1).explored = True
    assert g.explored_coords() == frozenset({(1, 1)})
    assert g.count(FLOOR) == 4
