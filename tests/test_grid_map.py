import numpy as np
import pytest

from tileworld.grid_map import GridMap, MapDimensionError, Position, Tile, can_walk


def _ring_map():
    return GridMap.from_rows(
        [
            "#####",
            "#...#",
            "#.#.#",
            "#...#",
            "#####",
        ]
    )


def test_new_map_is_all_wall_and_hidden():
    gm = GridMap(4, 3)
    assert gm.walkable.shape == (3, 4)
    assert not gm.walkable.any()
    assert not gm.visible.any()
    assert not gm.explored.any()


@pytest.mark.parametrize("width,height", [(0, 5), (5, 0), (-1, 3), (3, -2)])
def test_non_positive_dimensions_rejected(width, height):
    with pytest.raises(MapDimensionError):
        GridMap(width, height)
    # Callers catching ValueError still see it
    with pytest.raises(ValueError):
        GridMap(width, height)


def test_from_rows_rejects_ragged_rows():
    with pytest.raises(MapDimensionError):
        GridMap.from_rows(["...", ".."])


def test_from_rows_accepts_boolean_rows():
    gm = GridMap.from_rows([[True, False], [False, True]])
    assert gm.is_walkable(0, 0)
    assert not gm.is_walkable(1, 0)
    assert gm.is_walkable(1, 1)


def test_can_walk_out_of_bounds_is_false():
    gm = _ring_map()
    for x, y in [(-1, 0), (0, -1), (5, 2), (2, 5), (-3, -3), (100, 100)]:
        assert can_walk(gm, x, y) is False


def test_can_walk_matches_walkable_flag_in_bounds():
    gm = _ring_map()
    for y in range(gm.height):
        for x in range(gm.width):
            assert can_walk(gm, x, y) == bool(gm.walkable[y, x])


def test_tile_snapshot_and_bounds():
    gm = _ring_map()
    gm.visible[1, 1] = True
    assert gm.tile(1, 1) == Tile(walkable=True, visible=True, explored=False)
    with pytest.raises(IndexError):
        gm.tile(5, 0)


def test_set_walkable_edits_tile():
    gm = _ring_map()
    gm.set_walkable(0, 2, True)
    assert can_walk(gm, 0, 2)
    with pytest.raises(IndexError):
        gm.set_walkable(-1, 2, True)


def test_floor_positions_row_major():
    gm = GridMap.from_rows([".#", ".."])
    assert gm.floor_positions() == [Position(0, 0), Position(0, 1), Position(1, 1)]
    assert gm.walkable_count() == 3
    assert gm.walkable_fraction() == pytest.approx(0.75)


def test_reveal_resets_visible_but_keeps_explored():
    gm = _ring_map()
    gm.reveal([(1, 1), (2, 1)])
    assert gm.visible[1, 1] and gm.visible[1, 2]
    gm.reveal([(3, 3), (-1, 7)])
    assert not gm.visible[1, 1]
    assert gm.visible[3, 3]
    assert gm.explored[1, 1] and gm.explored[1, 2] and gm.explored[3, 3]
    assert int(np.count_nonzero(gm.visible)) == 1


def test_copy_and_rows_roundtrip_preserve_map():
    gm = _ring_map()
    gm.explored[2, 1] = True
    clone = gm.copy()
    assert clone == gm
    clone.set_walkable(2, 2, True)
    assert clone != gm
    assert GridMap.from_rows(gm.to_rows()).walkable.tolist() == gm.walkable.tolist()


def test_position_interchangeable_with_tuple():
    assert Position(2, 3) == (2, 3)
    assert (2, 3) in {Position(2, 3)}
    assert Position(2, 3) in {(2, 3)}
