import pytest

from game_rng import GameRNG
from tileworld.grid_map import GridMap
from tileworld.reachability import (
    ExitSite,
    exit_site_candidates,
    find_exit_site,
    reachable_from,
)


def _two_rooms():
    return GridMap.from_rows(
        [
            "#########",
            "#...#...#",
            "#...#...#",
            "#########",
        ]
    )


def test_reachable_stays_inside_its_room():
    gm = _two_rooms()
    reach = reachable_from(gm, 1, 1)
    assert (1, 1) in reach
    assert len(reach) == 6
    assert all(x < 4 for x, _ in reach)


@pytest.mark.parametrize("x,y", [(-1, 0), (9, 1), (0, 0), (4, 1)])
def test_wall_or_out_of_bounds_origin_is_empty(x, y):
    assert reachable_from(_two_rooms(), x, y) == set()


def test_query_does_not_modify_map():
    gm = _two_rooms()
    before = gm.copy()
    reachable_from(gm, 1, 1)
    assert gm == before


def test_door_edit_is_seen_by_next_query():
    gm = _two_rooms()
    assert (5, 1) not in reachable_from(gm, 1, 1)
    gm.set_walkable(4, 1, True)
    reach = reachable_from(gm, 1, 1)
    assert (4, 1) in reach
    assert (5, 1) in reach
    assert len(reach) == 13


def test_exit_candidates_are_boundary_walls_next_to_reachable_floor():
    gm = _two_rooms()
    sites = exit_site_candidates(gm, 1, 1)
    assert sites
    reach = reachable_from(gm, 1, 1)
    for site in sites:
        assert isinstance(site, ExitSite)
        door, inside = site
        assert door.x in (0, gm.width - 1) or door.y in (0, gm.height - 1)
        assert not gm.is_walkable(*door)
        assert inside in reach
        assert abs(door.x - inside.x) + abs(door.y - inside.y) == 1
    doors = {site.door for site in sites}
    assert (1, 0) in doors
    assert (0, 2) in doors
    assert (5, 0) not in doors


def test_find_exit_site_is_deterministic():
    a = find_exit_site(_two_rooms(), 5, 2, GameRNG(seed=9))
    b = find_exit_site(_two_rooms(), 5, 2, GameRNG(seed=9))
    assert a == b
    assert a.inside.x > 4


def test_find_exit_site_without_candidates_returns_none():
    # Every boundary tile is floor, so there is no wall to turn into a door
    gm = GridMap.from_rows(
        [
            "......",
            ".####.",
            ".#..#.",
            ".####.",
            "......",
        ]
    )
    assert exit_site_candidates(gm, 0, 0) == []
    assert find_exit_site(gm, 0, 0, GameRNG(seed=1)) is None
    assert find_exit_site(gm, 1, 1, GameRNG(seed=1)) is None
