# tileworld/pathfinding.py
"""Single-step A* for turn-based agents.

Each call plans a full shortest path and hands back only the first step; the
caller re-plans next turn.  Occupancy is passed in as a block set and is never
modified here.
"""

import heapq
from typing import AbstractSet, Collection, Dict, Final, List, Optional, Sequence, Set, Tuple

import structlog

from game_rng import GameRNG
from tileworld.grid_map import GridMap, Position

log = structlog.get_logger(__name__)

GridPoint = Tuple[int, int]

DIRECTIONS_4: Final[Tuple[GridPoint, ...]] = ((1, 0), (-1, 0), (0, 1), (0, -1))
EMPTY_BLOCKS: Final[AbstractSet[GridPoint]] = frozenset()


def _heuristic(a: GridPoint, b: GridPoint) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def a_star_path(
    grid: GridMap,
    start: GridPoint,
    goal: GridPoint,
    blocked: Collection[GridPoint] = EMPTY_BLOCKS,
) -> List[Position]:
    """Shortest 4-connected path from ``start`` to ``goal`` inclusive of both ends.

    A tile is passable when it is in bounds, walkable and not in ``blocked``.
    The goal only has to be in bounds: it is usually occupied by whatever the
    agent is chasing.  The start must be passable, which is why callers free
    the agent's own tile first.  Returns ``[]`` when no path exists.
    """
    start = Position(*start)
    goal = Position(*goal)

    def passable(x: int, y: int) -> bool:
        return grid.is_walkable(x, y) and (x, y) not in blocked

    if not grid.in_bounds(goal.x, goal.y) or not passable(start.x, start.y):
        return []
    if start == goal:
        return [start]

    # Heap entries: (f, g, tie, node); ``tie`` keeps ordering deterministic.
    counter = 0
    open_heap: List[Tuple[int, int, int, Position]] = [
        (_heuristic(start, goal), 0, counter, start)
    ]
    came_from: Dict[Position, Position] = {}
    g_score: Dict[Position, int] = {start: 0}
    closed: Set[Position] = set()

    while open_heap:
        _, g, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        if current == goal:
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            path.reverse()
            return path
        closed.add(current)

        for dx, dy in DIRECTIONS_4:
            nx, ny = current.x + dx, current.y + dy
            neighbour = Position(nx, ny)
            if neighbour != goal and not passable(nx, ny):
                continue
            tentative = g + 1
            if tentative < g_score.get(neighbour, tentative + 1):
                g_score[neighbour] = tentative
                came_from[neighbour] = current
                counter += 1
                heapq.heappush(
                    open_heap,
                    (tentative + _heuristic(neighbour, goal), tentative, counter, neighbour),
                )
    return []


def a_star_next_step(
    grid: GridMap,
    start: GridPoint,
    goal: GridPoint,
    blocked: Collection[GridPoint] = EMPTY_BLOCKS,
) -> Optional[Position]:
    """First step on the shortest path toward ``goal``.

    ``None`` means the path has fewer than two nodes: the agent is already at
    ``goal`` or no path exists.  Remove the agent's own tile from ``blocked``
    before calling.
    """
    path = a_star_path(grid, start, goal, blocked)
    if len(path) < 2:
        return None
    return path[1]


def plan_turn(
    grid: GridMap,
    agents: Sequence[GridPoint],
    target: GridPoint,
    rng: GameRNG,
    occupied: Collection[GridPoint] = (),
) -> List[Position]:
    """Move every agent one step toward ``target`` for a single turn.

    Agents are planned in order against one shared occupancy set: an agent's
    own tile is freed before it plans and its new tile is claimed before the
    next agent plans, so two agents never end up on the same tile.  Agents
    orthogonally adjacent to ``target`` hold position.  When no step toward
    the target is available the agent tries one random orthogonal nudge and
    otherwise stays put.  Returns the new positions in agent order.
    """
    target = Position(*target)
    positions = [Position(*a) for a in agents]
    blocks: Set[GridPoint] = set(positions)
    blocks.add(target)
    blocks.update((int(x), int(y)) for x, y in occupied)

    for index, current in enumerate(positions):
        blocks.discard(current)
        if _heuristic(current, target) == 1:
            blocks.add(current)
            continue

        # Snapshot keeps each planning call independent of later edits.
        step = a_star_next_step(grid, current, target, frozenset(blocks))
        new_pos = current
        if step is not None and step not in blocks and grid.is_walkable(*step):
            new_pos = step
        else:
            dx, dy = rng.choice(DIRECTIONS_4)
            nudge = Position(current.x + dx, current.y + dy)
            if grid.is_walkable(*nudge) and nudge not in blocks:
                new_pos = nudge

        positions[index] = new_pos
        blocks.add(new_pos)

    log.debug("Planned turn", agents=len(positions), target=target)
    return positions


__all__ = ["a_star_next_step", "a_star_path", "plan_turn"]
