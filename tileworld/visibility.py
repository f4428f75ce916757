"""Field of view over a :class:`GridMap` by recursive shadowcasting.

:class:`ShadowCaster` knows nothing about maps: it is driven by three
callables (opacity, visibility writes and distance).  :func:`compute_visible`
wires it to a map, and :func:`update_fov` also stores the result in the map's
visible/explored flags.
"""

from __future__ import annotations

from typing import Callable, Final, Set, Tuple

import structlog

from tileworld.grid_map import GridMap, Position

log = structlog.get_logger(__name__)

# (xx, xy, yx, yy) transforms mapping octant-local (dx, dy) onto the map.
OCTANTS: Final[Tuple[Tuple[int, int, int, int], ...]] = (
    (1, 0, 0, 1),
    (0, 1, 1, 0),
    (0, -1, 1, 0),
    (-1, 0, 0, 1),
    (-1, 0, 0, -1),
    (0, -1, -1, 0),
    (0, 1, -1, 0),
    (1, 0, 0, -1),
)


def manhattan(dx: int, dy: int) -> int:
    return abs(dx) + abs(dy)


class ShadowCaster:
    """Recursive shadowcasting driven by callbacks.

    ``blocks_light(x, y)`` must answer ``True`` for opaque tiles and for
    anything off the map.  ``set_visible(x, y)`` may be handed off-map
    coordinates and has to drop them.  ``get_distance(dx, dy)`` measures the
    offset from the origin against the radius.

    A tile whose two origin-side orthogonal neighbours both block light stays
    dark and casts a shadow of its own, so diagonal gaps between walls do not
    leak light.
    """

    def __init__(
        self,
        *,
        blocks_light: Callable[[int, int], bool],
        set_visible: Callable[[int, int], None],
        get_distance: Callable[[int, int], float],
    ) -> None:
        self.blocks_light = blocks_light
        self.set_visible = set_visible
        self.get_distance = get_distance

    def compute(self, origin_x: int, origin_y: int, radius: int) -> None:
        self.set_visible(origin_x, origin_y)
        if radius <= 0:
            return
        for octant in OCTANTS:
            self._scan(origin_x, origin_y, radius, octant, 1, 1.0, 0.0)

    def _scan(
        self,
        ox: int,
        oy: int,
        radius: int,
        octant: Tuple[int, int, int, int],
        depth: int,
        start_slope: float,
        end_slope: float,
    ) -> None:
        """Light rows ``depth..radius`` of one octant between two slopes."""
        if start_slope < end_slope:
            return
        xx, xy, yx, yy = octant

        for row in range(depth, radius + 1):
            dy = -row
            in_shadow = False
            resume_slope = start_slope
            # Columns run from the octant diagonal in towards the axis
            for dx in range(-row, 1):
                left = (dx - 0.5) / (dy + 0.5)
                right = (dx + 0.5) / (dy - 0.5)
                if start_slope < right:
                    continue
                if end_slope > left:
                    break

                tx = ox + dx * xx + dy * xy
                ty = oy + dx * yx + dy * yy
                # Movement is 4-connected, so two walls meeting at a corner seal it
                pinched = self._pinched(ox, oy, tx, ty)
                if not pinched and self.get_distance(tx - ox, ty - oy) <= radius:
                    self.set_visible(tx, ty)

                opaque = pinched or self.blocks_light(tx, ty)
                if in_shadow:
                    if opaque:
                        resume_slope = right
                    else:
                        in_shadow = False
                        start_slope = resume_slope
                elif opaque and row < radius:
                    in_shadow = True
                    self._scan(ox, oy, radius, octant, row + 1, start_slope, left)
                    resume_slope = right
            if in_shadow:
                break

    def _pinched(self, ox: int, oy: int, tx: int, ty: int) -> bool:
        """True when both orthogonal tiles between ``(tx, ty)`` and the origin block light."""
        sx = (tx > ox) - (tx < ox)
        sy = (ty > oy) - (ty < oy)
        if not sx or not sy:
            return False
        return self.blocks_light(tx - sx, ty) and self.blocks_light(tx, ty - sy)


def compute_visible(
    grid: GridMap, origin_x: int, origin_y: int, radius: int
) -> Set[Position]:
    """Return every tile visible from ``(origin_x, origin_y)``.

    Non-walkable tiles block light but are themselves visible.  Distance is
    measured in Manhattan steps, so an open field of view is a diamond.  The
    origin is always part of the result and nothing outside the map ever is.
    """
    if not grid.in_bounds(origin_x, origin_y):
        log.error("FOV origin out of bounds", origin=(origin_x, origin_y))
        raise ValueError(
            f"FOV origin ({origin_x}, {origin_y}) is outside a "
            f"{grid.width}x{grid.height} map"
        )

    visible: Set[Position] = set()

    def blocks_light(tx: int, ty: int) -> bool:
        return not grid.in_bounds(tx, ty) or not grid.walkable[ty, tx]

    def set_visible(tx: int, ty: int) -> None:
        if grid.in_bounds(tx, ty):
            visible.add(Position(tx, ty))

    caster = ShadowCaster(
        blocks_light=blocks_light,
        set_visible=set_visible,
        get_distance=manhattan,
    )
    caster.compute(origin_x, origin_y, radius)

    # Origin is guaranteed regardless of what the sweep produced.
    visible.add(Position(origin_x, origin_y))
    log.debug(
        "Computed FOV", origin=(origin_x, origin_y), radius=radius, count=len(visible)
    )
    return visible


def update_fov(grid: GridMap, origin_x: int, origin_y: int, radius: int) -> Set[Position]:
    """Recompute visibility and write it into ``grid``'s visible/explored flags."""
    visible = compute_visible(grid, origin_x, origin_y, radius)
    grid.reveal(visible)
    return visible


__all__ = ["OCTANTS", "ShadowCaster", "compute_visible", "manhattan", "update_fov"]
