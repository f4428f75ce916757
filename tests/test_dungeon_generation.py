import pytest

from game_rng import GameRNG
from tileworld.dungeon import Digger, generate_dungeon
from tileworld.grid_map import MapDimensionError
from tileworld.reachability import reachable_from
from tileworld.settings import DungeonSettings

SEEDS = [1, 123, 321, 555, 999, 2024]


@pytest.mark.parametrize("seed", SEEDS)
def test_map_has_requested_shape(seed):
    gm, _ = generate_dungeon(40, 25, seed)
    assert gm.height == 25
    assert gm.width == 40
    assert gm.walkable.shape == (25, 40)
    rows = gm.to_rows()
    assert len(rows) == 25
    assert all(len(row) == 40 for row in rows)


@pytest.mark.parametrize("seed", SEEDS)
def test_start_in_bounds_and_walkable(seed):
    gm, start = generate_dungeon(40, 25, seed)
    assert gm.in_bounds(start.x, start.y)
    assert gm.walkable[start.y, start.x]


@pytest.mark.parametrize("width,height", [(80, 50), (20, 10), (12, 12), (7, 5)])
def test_start_walkable_across_sizes(width, height):
    gm, start = generate_dungeon(width, height, 42)
    assert gm.in_bounds(*start)
    assert gm.is_walkable(*start)


def test_reasonable_number_of_floor_tiles():
    gm, _ = generate_dungeon(40, 25, 123)
    assert gm.walkable_count() > 40


def test_deterministic_with_same_seed():
    a_map, a_start = generate_dungeon(40, 25, 999)
    b_map, b_start = generate_dungeon(40, 25, 999)
    assert a_map.walkable.tolist() == b_map.walkable.tolist()
    assert a_start == b_start


def test_different_seeds_differ():
    a_map, _ = generate_dungeon(40, 25, 1)
    b_map, _ = generate_dungeon(40, 25, 2)
    assert a_map.walkable.tolist() != b_map.walkable.tolist()


def test_rng_handle_matches_seed():
    by_seed = generate_dungeon(30, 20, 77)
    by_handle = generate_dungeon(30, 20, rng=GameRNG(seed=77))
    assert by_seed.map.walkable.tolist() == by_handle.map.walkable.tolist()
    assert by_seed.start == by_handle.start


@pytest.mark.parametrize("seed", SEEDS)
def test_border_ring_never_carved(seed):
    gm, _ = generate_dungeon(40, 25, seed)
    assert not gm.walkable[0, :].any()
    assert not gm.walkable[-1, :].any()
    assert not gm.walkable[:, 0].any()
    assert not gm.walkable[:, -1].any()


@pytest.mark.parametrize("seed", SEEDS)
def test_layout_is_connected(seed):
    gm, start = generate_dungeon(60, 30, seed)
    assert len(reachable_from(gm, *start)) == gm.walkable_count()


@pytest.mark.parametrize("seed", SEEDS)
def test_rooms_do_not_overlap_and_respect_size_ranges(seed):
    settings = DungeonSettings()
    digger = Digger(60, 30, GameRNG(seed=seed), settings)
    digger.carve()
    assert digger.rooms
    # The first room may be clipped to fit the map; later rooms are not
    for room in digger.rooms[1:]:
        assert settings.room_width[0] <= room.width <= settings.room_width[1]
        assert settings.room_height[0] <= room.height <= settings.room_height[1]
    for i, a in enumerate(digger.rooms):
        for b in digger.rooms[i + 1:]:
            assert not a.intersects(b)
    for room in digger.rooms:
        for y in range(room.y1, room.y2 + 1):
            for x in range(room.x1, room.x2 + 1):
                assert digger.dug[y, x]


def test_corridors_are_straight_dug_runs():
    settings = DungeonSettings()
    longest = settings.corridor_length[1] + 1
    total = 0
    for seed in SEEDS:
        digger = Digger(60, 30, GameRNG(seed=seed), settings)
        digger.carve()
        for start, end in digger.corridors:
            assert start.x == end.x or start.y == end.y
            assert abs(start.x - end.x) + abs(start.y - end.y) + 1 <= longest
            for x in range(min(start.x, end.x), max(start.x, end.x) + 1):
                for y in range(min(start.y, end.y), max(start.y, end.y) + 1):
                    assert digger.dug[y, x]
        total += len(digger.corridors)
    assert total > 0


def test_reaches_dug_percentage():
    settings = DungeonSettings()
    digger = Digger(80, 50, GameRNG(seed=4), settings)
    digger.carve()
    area = 78 * 48
    assert digger.dug_count / area >= settings.dug_percentage


def test_tiny_map_falls_back_to_fixed_start():
    gm, start = generate_dungeon(2, 2, 5)
    assert gm.walkable_count() == 0
    assert start == (1, 1)


def test_single_cell_fallback_is_clamped_in_bounds():
    gm, start = generate_dungeon(1, 1, 5)
    assert start == (0, 0)
    assert gm.in_bounds(*start)


@pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-5, 10)])
def test_invalid_dimensions_raise(width, height):
    with pytest.raises(MapDimensionError):
        generate_dungeon(width, height, 1)
