# tileworld/reachability.py
"""Connectivity queries over the walkable tiles of a :class:`GridMap`."""

from collections import deque
from typing import List, NamedTuple, Optional, Set

import structlog

from game_rng import GameRNG
from tileworld.grid_map import GridMap, Position

log = structlog.get_logger(__name__)

NEIGHBOURS_4 = ((1, 0), (-1, 0), (0, 1), (0, -1))


class ExitSite(NamedTuple):
    """A boundary wall suitable for an exit door and the floor tile in front of it."""
    door: Position
    inside: Position


def reachable_from(grid: GridMap, x: int, y: int) -> Set[Position]:
    """Breadth-first flood fill over 4-connected walkable tiles.

    The origin is included.  An out-of-bounds or non-walkable origin gives an
    empty set.  The map is only read.
    """
    seen: Set[Position] = set()
    if not grid.is_walkable(x, y):
        return seen

    origin = Position(x, y)
    seen.add(origin)
    queue = deque([origin])
    while queue:
        cx, cy = queue.popleft()
        for dx, dy in NEIGHBOURS_4:
            nx, ny = cx + dx, cy + dy
            candidate = Position(nx, ny)
            if candidate not in seen and grid.is_walkable(nx, ny):
                seen.add(candidate)
                queue.append(candidate)

    log.debug("Flood fill finished", origin=origin, reachable=len(seen))
    return seen


def exit_site_candidates(grid: GridMap, x: int, y: int) -> List[ExitSite]:
    """Boundary walls whose inward neighbour is reachable from ``(x, y)``.

    Results are ordered top edge, bottom edge (by column), then left edge,
    right edge (by row).  Corner cells can appear twice, once per edge.
    """
    reach = reachable_from(grid, x, y)
    if not reach:
        return []
    w, h = grid.width, grid.height
    sites: List[ExitSite] = []

    def consider(door: Position, inside: Position) -> None:
        if not grid.in_bounds(*inside):
            return
        if not grid.walkable[door.y, door.x] and inside in reach:
            sites.append(ExitSite(door, inside))

    for bx in range(w):
        consider(Position(bx, 0), Position(bx, 1))
        consider(Position(bx, h - 1), Position(bx, h - 2))
    for by in range(h):
        consider(Position(0, by), Position(1, by))
        consider(Position(w - 1, by), Position(w - 2, by))
    return sites


def find_exit_site(grid: GridMap, x: int, y: int, rng: GameRNG) -> Optional[ExitSite]:
    """Pick a random exit site reachable from ``(x, y)``, or ``None`` if there is none."""
    sites = exit_site_candidates(grid, x, y)
    if not sites:
        log.info("No reachable boundary wall for an exit", origin=(x, y))
        return None
    site = rng.choice(sites)
    log.debug("Chose exit site", door=site.door, inside=site.inside, candidates=len(sites))
    return site


__all__ = ["ExitSite", "exit_site_candidates", "find_exit_site", "reachable_from"]
