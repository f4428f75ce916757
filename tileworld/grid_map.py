# tileworld/grid_map.py
from typing import Iterable, List, NamedTuple, Sequence, Union

import numpy as np
import structlog

log = structlog.get_logger(__name__)

FLOOR_CHAR = "."
WALL_CHAR = "#"


class MapDimensionError(ValueError):
    """Raised for non-positive map dimensions or ragged row data."""


class Position(NamedTuple):
    """Integer tile coordinate. Compares and hashes like a plain ``(x, y)`` tuple."""

    x: int
    y: int


class Tile(NamedTuple):
    walkable: bool
    visible: bool
    explored: bool


class GridMap:
    def __init__(self, width: int, height: int):
        """
        Initializes an all-wall map with cleared visibility flags.
        """
        if width <= 0 or height <= 0:
            log.error("Invalid map dimensions", width=width, height=height)
            raise MapDimensionError("Map width and height must be positive integers.")
        self._width = width
        self._height = height

        # Use C order so rows are contiguous
        self.walkable: np.ndarray = np.zeros((height, width), dtype=bool, order="C")
        self.visible: np.ndarray = np.zeros((height, width), dtype=bool, order="C")
        self.explored: np.ndarray = np.zeros((height, width), dtype=bool, order="C")
        log.debug("GridMap arrays initialized", shape=(height, width))

    @classmethod
    def from_rows(cls, rows: Sequence[Union[str, Sequence[bool]]]) -> "GridMap":
        """Build a map from rows of walkable flags or ``"#"``/``"."`` strings."""
        if not rows:
            raise MapDimensionError("Cannot build a map from zero rows.")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            log.error("Ragged map rows", widths=sorted({len(r) for r in rows}))
            raise MapDimensionError("Every map row must have the same length.")
        grid = cls(width, len(rows))
        for y, row in enumerate(rows):
            if isinstance(row, str):
                grid.walkable[y, :] = [ch != WALL_CHAR for ch in row]
            else:
                grid.walkable[y, :] = [bool(v) for v in row]
        return grid

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def in_bounds(self, x: int, y: int) -> bool:
        """Checks if the given coordinates are within the map boundaries."""
        return 0 <= x < self._width and 0 <= y < self._height

    def is_walkable(self, x: int, y: int) -> bool:
        """Checks if the tile at (x, y) is walkable. Out of bounds is never walkable."""
        if not self.in_bounds(x, y):
            return False
        return bool(self.walkable[y, x])

    def set_walkable(self, x: int, y: int, walkable: bool) -> None:
        """Edit one tile, e.g. when structure placement carves a door."""
        if not self.in_bounds(x, y):
            log.error("Tile edit out of bounds", pos=(x, y))
            raise IndexError(f"({x}, {y}) is outside a {self._width}x{self._height} map")
        self.walkable[y, x] = walkable

    def tile(self, x: int, y: int) -> Tile:
        if not self.in_bounds(x, y):
            raise IndexError(f"({x}, {y}) is outside a {self._width}x{self._height} map")
        return Tile(
            walkable=bool(self.walkable[y, x]),
            visible=bool(self.visible[y, x]),
            explored=bool(self.explored[y, x]),
        )

    def floor_positions(self) -> List[Position]:
        """All walkable tiles in row-major order."""
        ys, xs = np.nonzero(self.walkable)
        return [Position(int(x), int(y)) for y, x in zip(ys, xs)]

    def walkable_count(self) -> int:
        return int(np.count_nonzero(self.walkable))

    def walkable_fraction(self) -> float:
        return self.walkable_count() / float(self._width * self._height)

    def reveal(self, positions: Iterable[Sequence[int]]) -> None:
        """Replace the visible set with ``positions`` and mark them explored."""
        self.visible.fill(False)
        for x, y in positions:
            if self.in_bounds(x, y):
                self.visible[y, x] = True
                self.explored[y, x] = True

    def copy(self) -> "GridMap":
        clone = GridMap(self._width, self._height)
        clone.walkable[:] = self.walkable
        clone.visible[:] = self.visible
        clone.explored[:] = self.explored
        return clone

    def to_rows(self) -> List[str]:
        return [
            "".join(FLOOR_CHAR if cell else WALL_CHAR for cell in row)
            for row in self.walkable
        ]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridMap):
            return NotImplemented
        return (
            self._width == other._width
            and self._height == other._height
            and np.array_equal(self.walkable, other.walkable)
            and np.array_equal(self.visible, other.visible)
            and np.array_equal(self.explored, other.explored)
        )

    def __repr__(self) -> str:
        return f"GridMap(width={self._width}, height={self._height}, floors={self.walkable_count()})"


class GenerationResult(NamedTuple):
    map: GridMap
    start: Position


def can_walk(grid: GridMap, x: int, y: int) -> bool:
    """True when ``(x, y)`` is inside ``grid`` and walkable."""
    return grid.is_walkable(x, y)


def clamp_to_bounds(grid: GridMap, x: int, y: int) -> Position:
    return Position(min(max(x, 0), grid.width - 1), min(max(y, 0), grid.height - 1))


__all__ = [
    "GenerationResult",
    "GridMap",
    "MapDimensionError",
    "Position",
    "Tile",
    "can_walk",
    "clamp_to_bounds",
]
