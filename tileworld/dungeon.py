# tileworld/dungeon.py
"""Room-and-corridor dungeon generation.

The layout grows outward from a room carved near the map centre.  Each step
picks a remembered wall, works out which way is "outside" and tries to attach a
room or a corridor there.  Corridors that end in rock leave priority walls at
their tip so the next feature continues from them, which keeps dead ends rare.
"""

from typing import Dict, Final, List, NamedTuple, Optional, Tuple

import numpy as np
import structlog

from game_rng import GameRNG, resolve_rng
from tileworld.grid_map import GenerationResult, GridMap, Position, clamp_to_bounds
from tileworld.settings import DungeonSettings

log = structlog.get_logger(__name__)

DIRECTIONS_4: Final[Tuple[Tuple[int, int], ...]] = ((0, -1), (1, 0), (0, 1), (-1, 0))
WALL_NORMAL: Final[int] = 1
WALL_PRIORITY: Final[int] = 2
# Used when carving produced nothing at all
FALLBACK_START: Final[Tuple[int, int]] = (1, 1)


class Rect(NamedTuple):
    """An inclusive rectangle of floor tiles."""
    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def width(self) -> int:
        return self.x2 - self.x1 + 1

    @property
    def height(self) -> int:
        return self.y2 - self.y1 + 1

    def intersects(self, other: "Rect") -> bool:
        return (
            self.x1 <= other.x2
            and self.x2 >= other.x1
            and self.y1 <= other.y2
            and self.y2 >= other.y1
        )


class Corridor(NamedTuple):
    start: Position
    end: Position


class Digger:
    """Carves rooms and corridors into a boolean ``dug`` grid.

    The outermost ring of cells is never carved.  All randomness comes from the
    supplied ``rng`` so a digger built from the same seed produces the same
    layout.
    """

    def __init__(
        self, width: int, height: int, rng: GameRNG, settings: DungeonSettings
    ) -> None:
        self.width = width
        self.height = height
        self.rng = rng
        self.settings = settings
        self.dug: np.ndarray = np.zeros((height, width), dtype=bool, order="C")
        self.walls: Dict[Tuple[int, int], int] = {}
        self.dug_count = 0
        self.rooms: List[Rect] = []
        self.corridors: List[Corridor] = []

    # ------------------------------------------------------------------
    # Cell predicates
    # ------------------------------------------------------------------
    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _is_wall(self, x: int, y: int) -> bool:
        return self._in_bounds(x, y) and not self.dug[y, x]

    def _can_be_dug(self, x: int, y: int) -> bool:
        if x < 1 or y < 1 or x >= self.width - 1 or y >= self.height - 1:
            return False
        return not self.dug[y, x]

    def _dig(self, x: int, y: int) -> None:
        if not self.dug[y, x]:
            self.dug[y, x] = True
            self.dug_count += 1

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def carve(self) -> None:
        area = (self.width - 2) * (self.height - 2)
        if area <= 0:
            log.warning(
                "Map too small to carve anything", width=self.width, height=self.height
            )
            return

        self._first_room()
        iterations = 0
        while True:
            if iterations >= self.settings.max_iterations:
                log.warning("Digger stopped at iteration limit", iterations=iterations)
                break
            iterations += 1

            wall = self._find_wall()
            if wall is None:
                log.debug("Digger ran out of walls", iterations=iterations)
                break
            wx, wy = wall
            direction = self._digging_direction(wx, wy)
            if direction is not None:
                dx, dy = direction
                for _ in range(self.settings.feature_attempts):
                    if self._try_feature(wx, wy, dx, dy):
                        self._remove_surrounding_walls(wx, wy)
                        self._remove_surrounding_walls(wx - dx, wy - dy)
                        break

            priority_walls = sum(1 for p in self.walls.values() if p == WALL_PRIORITY)
            if self.dug_count / area >= self.settings.dug_percentage and not priority_walls:
                break

        log.info(
            "Digger finished",
            rooms=len(self.rooms),
            corridors=len(self.corridors),
            dug=self.dug_count,
            area=area,
            iterations=iterations,
        )

    def _first_room(self) -> None:
        s = self.settings
        cx, cy = self.width // 2, self.height // 2
        room_w = self.rng.get_int(*s.room_width)
        room_h = self.rng.get_int(*s.room_height)
        x1 = cx - self.rng.get_int(0, room_w - 1)
        y1 = cy - self.rng.get_int(0, room_h - 1)

        # Keep the room inside the uncarvable border ring
        room_w = min(room_w, self.width - 2)
        room_h = min(room_h, self.height - 2)
        x1 = min(max(x1, 1), self.width - 1 - room_w)
        y1 = min(max(y1, 1), self.height - 1 - room_h)
        room = Rect(x1, y1, x1 + room_w - 1, y1 + room_h - 1)
        self._create_room(room)
        log.debug("Carved first room", room=room)

    def _find_wall(self) -> Optional[Tuple[int, int]]:
        priority = sorted(p for p, v in self.walls.items() if v == WALL_PRIORITY)
        pool = priority or sorted(p for p, v in self.walls.items() if v != WALL_PRIORITY)
        if not pool:
            return None
        wall = self.rng.choice(pool)
        del self.walls[wall]
        return wall

    def _digging_direction(self, cx: int, cy: int) -> Optional[Tuple[int, int]]:
        """Direction pointing away from the single carved neighbour of ``(cx, cy)``."""
        if cx <= 0 or cy <= 0 or cx >= self.width - 1 or cy >= self.height - 1:
            return None
        found: Optional[Tuple[int, int]] = None
        for dx, dy in DIRECTIONS_4:
            if self.dug[cy + dy, cx + dx]:
                if found is not None:
                    return None
                found = (dx, dy)
        if found is None:
            return None
        return -found[0], -found[1]

    def _remove_surrounding_walls(self, cx: int, cy: int) -> None:
        for dx, dy in DIRECTIONS_4:
            self.walls.pop((cx + dx, cy + dy), None)
            self.walls.pop((cx + 2 * dx, cy + 2 * dy), None)

    def _try_feature(self, x: int, y: int, dx: int, dy: int) -> bool:
        s = self.settings
        total = s.room_weight + s.corridor_weight
        if self.rng.get_int(1, total) <= s.room_weight:
            return self._try_room(x, y, dx, dy)
        return self._try_corridor(x, y, dx, dy)

    # ------------------------------------------------------------------
    # Rooms
    # ------------------------------------------------------------------
    def _try_room(self, x: int, y: int, dx: int, dy: int) -> bool:
        s = self.settings
        room_w = self.rng.get_int(*s.room_width)
        room_h = self.rng.get_int(*s.room_height)
        if dx == 1:
            y1 = y - self.rng.get_int(0, room_h - 1)
            room = Rect(x + 1, y1, x + room_w, y1 + room_h - 1)
        elif dx == -1:
            y1 = y - self.rng.get_int(0, room_h - 1)
            room = Rect(x - room_w, y1, x - 1, y1 + room_h - 1)
        elif dy == 1:
            x1 = x - self.rng.get_int(0, room_w - 1)
            room = Rect(x1, y + 1, x1 + room_w - 1, y + room_h)
        else:
            x1 = x - self.rng.get_int(0, room_w - 1)
            room = Rect(x1, y - room_h, x1 + room_w - 1, y - 1)

        if not self._room_is_valid(room):
            return False
        self._create_room(room, door=(x, y))
        log.debug("Carved room", room=room, door=(x, y))
        return True

    def _room_is_valid(self, room: Rect) -> bool:
        for ry in range(room.y1 - 1, room.y2 + 2):
            for rx in range(room.x1 - 1, room.x2 + 2):
                on_border = rx in (room.x1 - 1, room.x2 + 1) or ry in (room.y1 - 1, room.y2 + 1)
                if on_border:
                    if not self._is_wall(rx, ry):
                        return False
                elif not self._can_be_dug(rx, ry):
                    return False
        return True

    def _create_room(self, room: Rect, door: Optional[Tuple[int, int]] = None) -> None:
        for ry in range(room.y1 - 1, room.y2 + 2):
            for rx in range(room.x1 - 1, room.x2 + 2):
                on_border = rx in (room.x1 - 1, room.x2 + 1) or ry in (room.y1 - 1, room.y2 + 1)
                if not on_border or (rx, ry) == door:
                    self._dig(rx, ry)
                elif self._in_bounds(rx, ry):
                    self.walls[(rx, ry)] = WALL_NORMAL
        self.rooms.append(room)

    # ------------------------------------------------------------------
    # Corridors
    # ------------------------------------------------------------------
    def _try_corridor(self, x: int, y: int, dx: int, dy: int) -> bool:
        length = self.rng.get_int(*self.settings.corridor_length)
        # Perpendicular to the digging direction
        nx, ny = dy, -dx

        cells = length + 1
        for i in range(length + 1):
            cx, cy = x + i * dx, y + i * dy
            if (
                not self._can_be_dug(cx, cy)
                or not self._is_wall(cx + nx, cy + ny)
                or not self._is_wall(cx - nx, cy - ny)
            ):
                cells = i
                break
        if cells == 0:
            return False

        ex, ey = x + (cells - 1) * dx, y + (cells - 1) * dy
        ends_with_wall = self._is_wall(ex + dx, ey + dy)
        if cells == 1 and ends_with_wall:
            return False
        first_corner_bad = not self._is_wall(ex + dx + nx, ey + dy + ny)
        second_corner_bad = not self._is_wall(ex + dx - nx, ey + dy - ny)
        if ends_with_wall and (first_corner_bad or second_corner_bad):
            return False

        for i in range(cells):
            self._dig(x + i * dx, y + i * dy)
        if ends_with_wall:
            self.walls[(ex + dx, ey + dy)] = WALL_PRIORITY
            self.walls[(ex + nx, ey + ny)] = WALL_PRIORITY
            self.walls[(ex - nx, ey - ny)] = WALL_PRIORITY

        corridor = Corridor(Position(x, y), Position(ex, ey))
        self.corridors.append(corridor)
        log.debug("Carved corridor", start=corridor.start, end=corridor.end)
        return True


def generate_dungeon(
    width: int,
    height: int,
    seed: Optional[int] = None,
    *,
    rng: Optional[GameRNG] = None,
    settings: Optional[DungeonSettings] = None,
) -> GenerationResult:
    """Carve a room-and-corridor dungeon and pick a random floor tile as start.

    Carving and start selection share one random stream, carving first, so the
    same ``(width, height, seed)`` always gives the same map and start.
    """
    grid = GridMap(width, height)
    settings = settings or DungeonSettings()
    rng = resolve_rng(seed, rng)
    log.info(
        "Starting dungeon generation", width=width, height=height, seed=rng.initial_seed
    )

    digger = Digger(width, height, rng, settings)
    digger.carve()
    grid.walkable[:] = digger.dug

    floors = grid.floor_positions()
    if floors:
        start = floors[rng.get_int(0, len(floors) - 1)]
    else:
        start = clamp_to_bounds(grid, *FALLBACK_START)
        log.warning("Dungeon has no floor tiles, using fallback start", start=start)

    log.info("Dungeon generation complete", start=start, floors=len(floors))
    return GenerationResult(grid, start)


__all__ = ["Corridor", "Digger", "Rect", "generate_dungeon"]
