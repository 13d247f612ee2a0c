# dungen/config.py
"""Generation parameters and room-type configuration.

Configs are plain dataclasses. ``DungeonConfig.validate`` is the single gate
that rejects unusable parameters; the pipeline calls it before any
partitioning starts so a bad config never leaves partial state behind.

A YAML file can describe both the dungeon parameters and the room types::

    dungeon_width: 60
    dungeon_length: 60
    room_width_min: 6
    room_length_min: 6
    max_iterations: 4
    corridor_width: 2
    room_types:
      - room_type: shop
        name: Merchant
        is_unique: true
        spawn_weight: 5
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import structlog
import yaml

from dungen.constants import RoomType

log = structlog.get_logger()

BOTTOM_MODIFIER_RANGE: Tuple[float, float] = (0.0, 0.3)
TOP_MODIFIER_RANGE: Tuple[float, float] = (0.7, 1.0)
PILLAR_SIZE_RANGE: Tuple[float, float] = (0.3, 1.0)
ALLOWED_ROOM_OFFSETS: Tuple[int, ...] = (0, 1, 2)


class ConfigurationError(ValueError):
    """Raised when generation parameters are invalid or cannot be satisfied."""


@dataclass
class RoomTypeData:
    """Per-type settings for rooms of one semantic role."""

    room_type: RoomType
    name: str = ""
    is_unique: bool = False
    spawn_weight: float = 10.0
    min_objects: int = 0
    max_objects: int = 5
    debug_color: Tuple[int, int, int] = (255, 255, 255)

    def __post_init__(self) -> None:
        if not isinstance(self.room_type, RoomType):
            self.room_type = RoomType(str(self.room_type).lower())
        if not self.name:
            self.name = self.room_type.name.title()
        self.debug_color = tuple(self.debug_color)  # type: ignore[assignment]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoomTypeData":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            log.warning("Ignoring unknown room type keys", keys=sorted(unknown))
        if "room_type" not in data:
            raise ConfigurationError("room type entry is missing 'room_type'")
        try:
            return cls(**{k: v for k, v in data.items() if k in known})
        except ValueError as e:
            raise ConfigurationError(f"invalid room type entry: {e}") from e


@dataclass
class RoomTypeConfig:
    """Ordered list of room-type entries used by the type assigner."""

    entries: List[RoomTypeData] = field(default_factory=list)

    def get(self, room_type: RoomType) -> Optional[RoomTypeData]:
        for entry in self.entries:
            if entry.room_type == room_type:
                return entry
        return None

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    @classmethod
    def default(cls) -> "RoomTypeConfig":
        return cls(
            entries=[
                RoomTypeData(RoomType.START, "Entrance", is_unique=True, spawn_weight=0.0,
                             debug_color=(0, 255, 0)),
                RoomTypeData(RoomType.BOSS, "Boss Lair", is_unique=True, spawn_weight=0.0,
                             min_objects=1, max_objects=1, debug_color=(255, 0, 0)),
                RoomTypeData(RoomType.NORMAL, "Chamber", spawn_weight=60.0),
                RoomTypeData(RoomType.SHOP, "Merchant", is_unique=True, spawn_weight=10.0,
                             min_objects=1, max_objects=3, debug_color=(255, 215, 0)),
                RoomTypeData(RoomType.TRAP, "Trap Room", spawn_weight=15.0,
                             min_objects=2, max_objects=6, debug_color=(255, 128, 0)),
                RoomTypeData(RoomType.PUZZLE, "Puzzle Room", spawn_weight=15.0,
                             min_objects=1, max_objects=4, debug_color=(128, 0, 255)),
            ]
        )

    @classmethod
    def from_list(cls, items: List[Dict[str, Any]]) -> "RoomTypeConfig":
        return cls(entries=[RoomTypeData.from_dict(item) for item in items])


@dataclass
class DungeonConfig:
    dungeon_width: int = 60
    dungeon_length: int = 60
    room_width_min: int = 6
    room_length_min: int = 6
    max_iterations: int = 4
    room_bottom_corner_modifier: float = 0.1
    room_top_corner_modifier: float = 0.9
    room_offset: int = 1
    corridor_width: int = 2
    wall_height: float = 3.0
    wall_thickness: float = 0.3
    use_corner_pillars: bool = True
    corner_pillar_size: float = 0.6
    enable_room_types: bool = True
    room_types: Optional[RoomTypeConfig] = None

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` describing the first bad field."""
        problems = list(self._problems())
        if problems:
            field_name, message = problems[0]
            log.error(
                "Invalid dungeon configuration",
                field=field_name,
                problem=message,
                problem_count=len(problems),
            )
            raise ConfigurationError(f"{field_name}: {message}")

    def _problems(self):
        if self.dungeon_width <= 0 or self.dungeon_length <= 0:
            yield "dungeon_width", "dungeon bounds must be positive"
        if self.room_width_min <= 0 or self.room_length_min <= 0:
            yield "room_width_min", "minimum room dimensions must be positive"
        if self.room_width_min > self.dungeon_width:
            yield "room_width_min", "minimum room width exceeds dungeon width"
        if self.room_length_min > self.dungeon_length:
            yield "room_length_min", "minimum room length exceeds dungeon length"
        if self.max_iterations < 0:
            yield "max_iterations", "must not be negative"
        lo, hi = BOTTOM_MODIFIER_RANGE
        if not lo <= self.room_bottom_corner_modifier <= hi:
            yield "room_bottom_corner_modifier", f"must be within [{lo}, {hi}]"
        lo, hi = TOP_MODIFIER_RANGE
        if not lo <= self.room_top_corner_modifier <= hi:
            yield "room_top_corner_modifier", f"must be within [{lo}, {hi}]"
        if self.room_offset not in ALLOWED_ROOM_OFFSETS:
            yield "room_offset", f"must be one of {ALLOWED_ROOM_OFFSETS}"
        if self.corridor_width < 1:
            yield "corridor_width", "must be at least 1"
        if self.wall_height <= 0:
            yield "wall_height", "must be positive"
        if self.wall_thickness <= 0:
            yield "wall_thickness", "must be positive"
        lo, hi = PILLAR_SIZE_RANGE
        if not lo <= self.corner_pillar_size <= hi:
            yield "corner_pillar_size", f"must be within [{lo}, {hi}]"
        for entry in self.room_types or []:
            if entry.spawn_weight < 0:
                yield "room_types", f"{entry.room_type.value}: negative spawn weight"
            if entry.min_objects < 0 or entry.min_objects > entry.max_objects:
                yield "room_types", f"{entry.room_type.value}: bad object bounds"

    def resolved_room_types(self) -> Optional[RoomTypeConfig]:
        """Room types the assigner should use, or None when typing is off."""
        if not self.enable_room_types:
            return None
        return self.room_types if self.room_types is not None else RoomTypeConfig.default()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DungeonConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            log.warning("Ignoring unknown dungeon config keys", keys=sorted(unknown))
        values = {k: v for k, v in data.items() if k in known and k != "room_types"}
        room_types = data.get("room_types")
        if room_types is not None:
            if not isinstance(room_types, list):
                raise ConfigurationError("room_types must be a list of mappings")
            values["room_types"] = RoomTypeConfig.from_list(room_types)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.room_types is not None:
            data["room_types"] = [
                {**asdict(entry), "room_type": entry.room_type.value,
                 "debug_color": list(entry.debug_color)}
                for entry in self.room_types
            ]
        return data


# --- Config Loading Helpers ---
def load_yaml_config(config_path: Path, config_name: str) -> Dict[str, Any]:
    """Loads a generic YAML configuration file."""
    if not config_path.is_file():
        log.error(f"{config_name} config file not found", path=str(config_path))
        raise FileNotFoundError(f"{config_name} configuration file not found: {config_path}")
    try:
        with config_path.open("r") as f:
            config_data = yaml.safe_load(f)
        if config_data is None:
            log.warning(f"{config_name} config file is empty.", path=str(config_path))
            return {}
        log.info(f"{config_name} config loaded", path=str(config_path))
        return config_data
    except yaml.YAMLError as e:
        log.error(f"Error parsing YAML for {config_name}", path=str(config_path), error=str(e), exc_info=True)
        raise


def load_dungeon_config(config_path: Path | str) -> DungeonConfig:
    """Read a :class:`DungeonConfig` from a YAML mapping and validate it."""
    data = load_yaml_config(Path(config_path), "Dungeon")
    if not isinstance(data, dict):
        raise ConfigurationError("dungeon config must be a YAML mapping")
    config = DungeonConfig.from_dict(data)
    config.validate()
    return config


__all__ = [
    "ConfigurationError",
    "DungeonConfig",
    "RoomTypeConfig",
    "RoomTypeData",
    "load_dungeon_config",
    "load_yaml_config",
]
