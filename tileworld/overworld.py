# tileworld/overworld.py
"""Cellular-automaton overworld generation.

Cells start open at random and are then smoothed by a neighbourhood majority
vote, which turns salt-and-pepper noise into blob-shaped clearings and woods.
"""

from typing import Final, Optional, Tuple

import numba
import numpy as np
import structlog

from game_rng import GameRNG, resolve_rng
from tileworld.grid_map import GenerationResult, GridMap, Position, clamp_to_bounds
from tileworld.settings import OverworldSettings

log = structlog.get_logger(__name__)

FALLBACK_START: Final[Tuple[int, int]] = (1, 1)


@numba.njit(cache=True)
def _smooth_step(
    open_grid: np.ndarray, closed_threshold: int, survive_threshold: int
) -> np.ndarray:
    """One majority-vote pass over the 8-neighbourhood.

    An open cell closes when more than ``closed_threshold`` of its in-bounds
    neighbours are closed.  A closed cell stays closed while at least
    ``survive_threshold`` neighbours are closed, so with the defaults (4, 4) a
    closed cell on an even split holds and an open one stays open.  Cells
    beyond the map edge are not counted.
    """
    height, width = open_grid.shape
    result = np.empty_like(open_grid)
    for y in range(height):
        for x in range(width):
            closed = 0
            for ny in range(y - 1, y + 2):
                for nx in range(x - 1, x + 2):
                    if nx == x and ny == y:
                        continue
                    if 0 <= ny < height and 0 <= nx < width and not open_grid[ny, nx]:
                        closed += 1
            if open_grid[y, x]:
                result[y, x] = closed <= closed_threshold
            else:
                result[y, x] = closed < survive_threshold
    return result


def _randomize(grid: GridMap, rng: GameRNG, open_probability: float) -> None:
    for y in range(grid.height):
        for x in range(grid.width):
            grid.walkable[y, x] = rng.get_float() < open_probability


def _pick_start(grid: GridMap, rng: GameRNG, candidates: int) -> Position:
    floors = grid.floor_positions()
    if not floors:
        start = clamp_to_bounds(grid, *FALLBACK_START)
        log.warning("Overworld has no open tiles, using fallback start", start=start)
        return start
    cx, cy = grid.width // 2, grid.height // 2
    # sorted() is stable, so ties keep row-major order
    floors = sorted(floors, key=lambda p: abs(p.x - cx) + abs(p.y - cy))
    pool = min(candidates, len(floors))
    return floors[rng.get_int(0, pool - 1)]


def generate_overworld(
    width: int,
    height: int,
    seed: Optional[int] = None,
    *,
    rng: Optional[GameRNG] = None,
    settings: Optional[OverworldSettings] = None,
) -> GenerationResult:
    """Synthesize open terrain and choose a start tile near the map centre."""
    grid = GridMap(width, height)
    settings = settings or OverworldSettings()
    rng = resolve_rng(seed, rng)
    log.info(
        "Starting overworld generation", width=width, height=height, seed=rng.initial_seed
    )

    _randomize(grid, rng, settings.open_probability)
    open_grid = grid.walkable.copy()
    for _ in range(settings.smoothing_iterations):
        open_grid = _smooth_step(
            open_grid,
            settings.closed_neighbour_threshold,
            settings.closed_survive_neighbours,
        )
    grid.walkable[:] = open_grid

    open_fraction = grid.walkable_fraction()
    if open_fraction < settings.min_open_fraction:
        # Single inversion only; the result is not re-checked.
        np.logical_not(grid.walkable, out=grid.walkable)
        log.info(
            "Overworld too closed, inverted terrain",
            open_fraction=open_fraction,
            inverted_fraction=grid.walkable_fraction(),
        )

    start = _pick_start(grid, rng, settings.start_candidates)
    log.info(
        "Overworld generation complete",
        start=start,
        open_fraction=round(grid.walkable_fraction(), 3),
    )
    return GenerationResult(grid, start)


__all__ = ["generate_overworld"]
