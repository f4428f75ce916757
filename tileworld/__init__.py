"""Tile-grid world engine: map generation, field of view, connectivity and pathfinding."""

from tileworld.dungeon import generate_dungeon
from tileworld.grid_map import (
    GenerationResult,
    GridMap,
    MapDimensionError,
    Position,
    Tile,
    can_walk,
)
from tileworld.overworld import generate_overworld
from tileworld.pathfinding import a_star_next_step, a_star_path, plan_turn
from tileworld.reachability import ExitSite, find_exit_site, reachable_from
from tileworld.sampling import sample_floors
from tileworld.settings import WorldSettings, load_settings
from tileworld.visibility import compute_visible, update_fov

__all__ = [
    "ExitSite",
    "GenerationResult",
    "GridMap",
    "MapDimensionError",
    "Position",
    "Tile",
    "WorldSettings",
    "a_star_next_step",
    "a_star_path",
    "can_walk",
    "compute_visible",
    "find_exit_site",
    "generate_dungeon",
    "generate_overworld",
    "load_settings",
    "plan_turn",
    "reachable_from",
    "sample_floors",
    "update_fov",
]
