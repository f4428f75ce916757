# tileworld/sampling.py
from typing import Collection, List, Optional, Tuple

import structlog

from game_rng import GameRNG
from tileworld.grid_map import GridMap, Position

log = structlog.get_logger(__name__)


def sample_floors(
    grid: GridMap,
    count: int,
    exclude: Collection[Tuple[int, int]] = frozenset(),
    min_manhattan: int = 0,
    origin: Optional[Tuple[int, int]] = None,
    *,
    rng: GameRNG,
) -> List[Position]:
    """Draw up to ``count`` distinct walkable tiles without replacement.

    The pool is every walkable tile not in ``exclude``; when ``origin`` is
    given and ``min_manhattan`` is positive, tiles closer than
    ``min_manhattan`` to ``origin`` are dropped too.  A pool smaller than
    ``count`` simply yields a shorter list.
    """
    pool = [p for p in grid.floor_positions() if p not in exclude]
    if origin is not None and min_manhattan > 0:
        ox, oy = origin
        pool = [p for p in pool if abs(p.x - ox) + abs(p.y - oy) >= min_manhattan]

    picked: List[Position] = []
    while len(picked) < count and pool:
        picked.append(pool.pop(rng.get_int(0, len(pool) - 1)))

    if len(picked) < count:
        log.debug("Floor pool exhausted", requested=count, returned=len(picked))
    return picked


__all__ = ["sample_floors"]
