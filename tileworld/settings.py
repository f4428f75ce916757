"""Generation settings and their YAML loader.

Defaults mirror the values the generators were tuned with.  A settings file
only needs to name the values it overrides::

    dungeon:
      room_width: [4, 10]
      dug_percentage: 0.2
    overworld:
      smoothing_iterations: 4
    fov_radius: 8
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Final, Tuple

import structlog
import yaml

log = structlog.get_logger(__name__)

DEFAULT_FOV_RADIUS: Final[int] = 8


class SettingsError(ValueError):
    """Raised when a settings file or value cannot be used."""


@dataclass(frozen=True)
class DungeonSettings:
    room_width: Tuple[int, int] = (4, 10)
    room_height: Tuple[int, int] = (3, 8)
    corridor_length: Tuple[int, int] = (2, 8)
    # Fraction of the interior that must be carved before growth may stop
    dug_percentage: float = 0.2
    feature_attempts: int = 20
    max_iterations: int = 10_000
    room_weight: int = 4
    corridor_weight: int = 4

    def __post_init__(self) -> None:
        for name in ("room_width", "room_height", "corridor_length"):
            low, high = getattr(self, name)
            if low < 1 or low > high:
                raise SettingsError(f"dungeon.{name} must be a range 1 <= min <= max")
        if not 0.0 <= self.dug_percentage <= 1.0:
            raise SettingsError("dungeon.dug_percentage must lie in [0, 1]")
        if self.feature_attempts < 1 or self.max_iterations < 1:
            raise SettingsError("dungeon attempt limits must be positive")
        if self.room_weight < 0 or self.corridor_weight < 0:
            raise SettingsError("dungeon feature weights must not be negative")
        if self.room_weight + self.corridor_weight == 0:
            raise SettingsError("dungeon feature weights must not both be zero")


@dataclass(frozen=True)
class OverworldSettings:
    open_probability: float = 0.45
    smoothing_iterations: int = 4
    # More closed neighbours than this turns a cell closed
    closed_neighbour_threshold: int = 4
    # A closed cell stays closed with at least this many closed neighbours
    closed_survive_neighbours: int = 4
    min_open_fraction: float = 0.15
    start_candidates: int = 200

    def __post_init__(self) -> None:
        if not 0.0 <= self.open_probability <= 1.0:
            raise SettingsError("overworld.open_probability must lie in [0, 1]")
        if self.smoothing_iterations < 0:
            raise SettingsError("overworld.smoothing_iterations must not be negative")
        if not 0 <= self.closed_neighbour_threshold <= 8:
            raise SettingsError("overworld.closed_neighbour_threshold must lie in [0, 8]")
        if not 0 <= self.closed_survive_neighbours <= 9:
            raise SettingsError("overworld.closed_survive_neighbours must lie in [0, 9]")
        if not 0.0 <= self.min_open_fraction <= 1.0:
            raise SettingsError("overworld.min_open_fraction must lie in [0, 1]")
        if self.start_candidates < 1:
            raise SettingsError("overworld.start_candidates must be positive")


@dataclass(frozen=True)
class WorldSettings:
    dungeon: DungeonSettings = field(default_factory=DungeonSettings)
    overworld: OverworldSettings = field(default_factory=OverworldSettings)
    fov_radius: int = DEFAULT_FOV_RADIUS


def _coerce_value(section_name: str, key: str, default: Any, value: Any) -> Any:
    """Convert a raw YAML value to the type of the field default."""
    if isinstance(default, tuple) and (
        not isinstance(value, (list, tuple)) or len(value) != 2
    ):
        raise SettingsError(f"{section_name}.{key} must be a [min, max] pair")
    try:
        if isinstance(value, bool):
            raise TypeError("a boolean is not a number")
        if isinstance(default, tuple):
            return (int(value[0]), int(value[1]))
        return type(default)(value)
    except (TypeError, ValueError) as e:
        log.error("Bad setting value", section=section_name, key=key, value=value)
        raise SettingsError(
            f"{section_name}.{key} must be {type(default).__name__}, got {value!r}"
        ) from e


def _coerce_section(cls: type, section_name: str, raw: Any) -> Any:
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise SettingsError(f"'{section_name}' must be a mapping")
    known = {f.name: f for f in fields(cls)}
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            log.warning("Ignoring unknown setting", section=section_name, key=key)
            continue
        values[key] = _coerce_value(section_name, key, getattr(cls(), key), value)
    return replace(cls(), **values)


def settings_from_dict(data: Dict[str, Any]) -> WorldSettings:
    """Build :class:`WorldSettings` from an already parsed mapping."""
    for key in data:
        if key not in ("dungeon", "overworld", "fov_radius"):
            log.warning("Ignoring unknown settings section", key=key)
    try:
        fov_radius = int(data.get("fov_radius", DEFAULT_FOV_RADIUS))
    except (TypeError, ValueError) as e:
        raise SettingsError("fov_radius must be an integer") from e
    return WorldSettings(
        dungeon=_coerce_section(DungeonSettings, "dungeon", data.get("dungeon")),
        overworld=_coerce_section(OverworldSettings, "overworld", data.get("overworld")),
        fov_radius=fov_radius,
    )


def load_settings(config_path: Path | str) -> WorldSettings:
    """Load generation settings from a YAML file."""
    config_path = Path(config_path)
    if not config_path.is_file():
        log.error("Settings file not found", path=str(config_path))
        raise FileNotFoundError(f"Settings file not found: {config_path}")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        log.error("Error parsing settings YAML", path=str(config_path), error=str(e))
        raise SettingsError(f"Invalid YAML in {config_path}") from e
    if config_data is None:
        log.warning("Settings file is empty, using defaults", path=str(config_path))
        return WorldSettings()
    if not isinstance(config_data, dict):
        log.error("Settings root is not a mapping", path=str(config_path))
        raise SettingsError(f"Settings root must be a mapping: {config_path}")
    settings = settings_from_dict(config_data)
    log.info("Settings loaded", path=str(config_path))
    return settings


__all__ = [
    "DEFAULT_FOV_RADIUS",
    "DungeonSettings",
    "OverworldSettings",
    "SettingsError",
    "WorldSettings",
    "load_settings",
    "settings_from_dict",
]
