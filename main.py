# main.py
"""Generate a region and print it as ASCII for a quick visual check."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Set

import structlog

from tileworld.dungeon import generate_dungeon
from tileworld.grid_map import GridMap, MapDimensionError, Position
from tileworld.overworld import generate_overworld
from tileworld.settings import SettingsError, WorldSettings, load_settings
from tileworld.visibility import update_fov
from utils.logging_utils import setup_logging

log = structlog.get_logger()

# --- Paths relative to this script's location ---
SCRIPT_DIR = Path(__file__).parent.resolve()
DEFAULT_CONFIG_FILE = SCRIPT_DIR / "config" / "worldgen.yaml"

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 50
EXIT_OK = 0
EXIT_USAGE = 2


def render_map(
    grid: GridMap, start: Position, visible: Optional[Set[Position]] = None
) -> List[str]:
    """Render ``grid`` as text rows; tiles outside ``visible`` print blank."""
    lines: List[str] = []
    for y, row in enumerate(grid.to_rows()):
        chars = list(row)
        if visible is not None:
            chars = [ch if (x, y) in visible else " " for x, ch in enumerate(chars)]
        if y == start.y:
            chars[start.x] = "@"
        lines.append("".join(chars))
    return lines


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a dungeon or overworld map and print it as ASCII."
    )
    parser.add_argument(
        "--kind",
        choices=("dungeon", "overworld"),
        default="dungeon",
        help="Which generator to run (default: dungeon).",
    )
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH, help="Map width.")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT, help="Map height.")
    parser.add_argument(
        "--seed", type=int, default=None, help="RNG seed (default: random)."
    )
    parser.add_argument(
        "--fov-radius",
        type=int,
        default=None,
        help="Only show tiles visible from the start within this radius.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Settings YAML (default: {DEFAULT_CONFIG_FILE.name} if present).",
    )
    parser.add_argument(
        "--log-level", default="warning", help="Logging level (default: warning)."
    )
    return parser


def _resolve_settings(config_path: Optional[Path]) -> WorldSettings:
    if config_path is not None:
        return load_settings(config_path)
    if DEFAULT_CONFIG_FILE.is_file():
        return load_settings(DEFAULT_CONFIG_FILE)
    return WorldSettings()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the preview tool."""
    args = build_parser().parse_args(argv)
    try:
        setup_logging(args.log_level)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        settings = _resolve_settings(args.config)
        if args.kind == "overworld":
            result = generate_overworld(
                args.width, args.height, args.seed, settings=settings.overworld
            )
        else:
            result = generate_dungeon(
                args.width, args.height, args.seed, settings=settings.dungeon
            )
    except (FileNotFoundError, SettingsError, MapDimensionError) as e:
        log.error("Cannot generate map", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    visible = None
    if args.fov_radius is not None:
        visible = update_fov(result.map, result.start.x, result.start.y, args.fov_radius)

    for line in render_map(result.map, result.start, visible):
        print(line)
    log.info(
        "Preview finished",
        kind=args.kind,
        start=result.start,
        floors=result.map.walkable_count(),
    )
    return EXIT_OK


def cli() -> None:
    logging.captureWarnings(True)
    sys.exit(main())


if __name__ == "__main__":
    cli()
