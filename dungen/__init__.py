"""Procedural BSP dungeon generation.

Splits a rectangular area into a partition tree, carves a room in every
leaf, links sibling subtrees with corridors, rasterizes everything onto a
cell grid and derives merged wall geometry with corner pillars from it.

Typical use::

    from dungen import DungeonConfig, generate

    result = generate(seed=42, config=DungeonConfig(dungeon_width=40, dungeon_length=40))
    vertices, uvs, triangles = result.geometry.as_arrays()
"""

from dungen.config import (
    ConfigurationError,
    DungeonConfig,
    RoomTypeConfig,
    RoomTypeData,
    load_dungeon_config,
)
from dungen.constants import CellType, Orientation, RoomType
from dungen.corridors import Corridor, connect_rooms
from dungen.dungeon_rng import DungeonRNG
from dungen.generator import DungeonGenerator, DungeonResult, generate
from dungen.geometry import Rect
from dungen.grid import DungeonGrid, GridCell
from dungen.mesh import GeometryBuffer, build_floor_mesh
from dungen.partition import PartitionTree, partition_space
from dungen.room_types import assign_room_types, get_room_by_type, get_rooms_by_type
from dungen.rooms import Room, carve_room, carve_rooms
from dungen.seed_store import load_seed, save_seed
from dungen.walls import (
    CornerKind,
    CornerPillar,
    WallMeshBuilder,
    WallSegment,
    find_boundary_segments,
    find_corner_pillars,
    merge_segments,
)

__version__ = "0.1.0"

__all__ = [
    "CellType",
    "ConfigurationError",
    "CornerKind",
    "CornerPillar",
    "Corridor",
    "DungeonConfig",
    "DungeonGenerator",
    "DungeonGrid",
    "DungeonRNG",
    "DungeonResult",
    "GeometryBuffer",
    "GridCell",
    "Orientation",
    "PartitionTree",
    "Rect",
    "Room",
    "RoomType",
    "RoomTypeConfig",
    "RoomTypeData",
    "WallMeshBuilder",
    "WallSegment",
    "assign_room_types",
    "build_floor_mesh",
    "carve_room",
    "carve_rooms",
    "connect_rooms",
    "find_boundary_segments",
    "find_corner_pillars",
    "generate",
    "get_room_by_type",
    "get_rooms_by_type",
    "load_dungeon_config",
    "load_seed",
    "merge_segments",
    "partition_space",
    "save_seed",
]
