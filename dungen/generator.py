# dungen/generator.py
"""End-to-end dungeon generation.

``generate`` runs one full pass: partition, carve, type, rasterize, connect,
and build the wall and floor meshes. ``DungeonGenerator`` keeps the latest
result around for hosts that regenerate on demand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from dungen.config import DungeonConfig
from dungen.connectivity import find_unreachable_rooms
from dungen.constants import RoomType
from dungen.corridors import Corridor, connect_rooms
from dungen.dungeon_rng import DungeonRNG, random_seed
from dungen.geometry import Point, Rect
from dungen.grid import DungeonGrid, GridCell
from dungen.mesh import GeometryBuffer, build_floor_mesh
from dungen.partition import PartitionTree, partition_space
from dungen.room_types import assign_room_types, get_room_by_type, get_rooms_by_type
from dungen.rooms import Room, carve_rooms
from dungen.walls import WallBuildReport, WallMeshBuilder

log = structlog.get_logger()


@dataclass
class DungeonResult:
    seed: int
    config: DungeonConfig
    tree: PartitionTree
    rooms: List[Room]
    corridors: List[Corridor]
    grid: DungeonGrid
    geometry: GeometryBuffer
    floor_geometry: GeometryBuffer
    wall_report: WallBuildReport
    unreachable_room_ids: List[int] = field(default_factory=list)

    @property
    def areas(self) -> List[Rect]:
        """Room rectangles followed by corridor rectangles."""
        rects = [room.rect for room in self.rooms]
        for corridor in self.corridors:
            rects.extend(corridor.rects)
        return rects

    @property
    def start_room(self) -> Optional[Room]:
        return get_room_by_type(self.rooms, RoomType.START)

    @property
    def boss_room(self) -> Optional[Room]:
        return get_room_by_type(self.rooms, RoomType.BOSS)

    @property
    def is_connected(self) -> bool:
        return not self.unreachable_room_ids

    def get_room_by_type(self, room_type: RoomType) -> Optional[Room]:
        return get_room_by_type(self.rooms, room_type)

    def get_rooms_by_type(self, room_type: RoomType) -> List[Room]:
        return get_rooms_by_type(self.rooms, room_type)

    def get_room(self, room_id: int) -> Optional[Room]:
        for room in self.rooms:
            if room.room_id == room_id:
                return room
        return None

    def get_cell(self, pos: Point) -> Optional[GridCell]:
        return self.grid.get_cell(pos)

    def get_available_cells_in_room(self, room: Room) -> List[Point]:
        return self.grid.get_available_cells_in_room(room)


def generate(seed: Optional[int] = None, config: Optional[DungeonConfig] = None) -> DungeonResult:
    """Generate a complete dungeon from ``seed`` and ``config``.

    The config is validated before any work starts. A ``None`` seed is
    replaced by one drawn from the OS, and the seed actually used is stored
    on the result.
    """
    config = config if config is not None else DungeonConfig()
    config.validate()
    seed = seed if seed is not None else random_seed()

    log.info(
        "Starting dungeon generation",
        seed=seed,
        width=config.dungeon_width,
        length=config.dungeon_length,
        max_iterations=config.max_iterations,
    )
    rng = DungeonRNG(seed=seed)

    log.info("Splitting BSP tree...")
    tree = partition_space(
        config.dungeon_width,
        config.dungeon_length,
        config.max_iterations,
        config.room_width_min,
        config.room_length_min,
        rng,
    )

    log.info("Defining rooms...")
    rooms = carve_rooms(tree, config, rng)

    room_types = config.resolved_room_types()
    if room_types is not None:
        log.info("Assigning room types...")
        assign_room_types(rooms, room_types, rng)

    log.info("Connecting rooms...")
    corridors = connect_rooms(tree, rooms, config.corridor_width, rng)

    log.info("Rasterizing grid...")
    grid = DungeonGrid(config.dungeon_width, config.dungeon_length)
    grid.stamp_rooms(rooms)
    grid.stamp_corridors(corridors)

    log.info("Building wall mesh...")
    builder = WallMeshBuilder(
        wall_height=config.wall_height,
        wall_thickness=config.wall_thickness,
        use_corner_pillars=config.use_corner_pillars,
        corner_pillar_size=config.corner_pillar_size,
    )
    geometry, wall_report = builder.build_with_report(grid)

    result = DungeonResult(
        seed=seed,
        config=config,
        tree=tree,
        rooms=rooms,
        corridors=corridors,
        grid=grid,
        geometry=geometry,
        floor_geometry=GeometryBuffer(),
        wall_report=wall_report,
    )
    result.floor_geometry = build_floor_mesh(result.areas)
    start = result.start_room if result.start_room is not None else (rooms[0] if rooms else None)
    result.unreachable_room_ids = find_unreachable_rooms(grid, rooms, start)

    log.info(
        "Dungeon generation complete",
        seed=seed,
        rooms=len(rooms),
        corridors=len(corridors),
        wall_vertices=geometry.vertex_count,
        connected=result.is_connected,
    )
    return result


class DungeonGenerator:
    """Holds a config and the most recent generation result."""

    def __init__(self, config: Optional[DungeonConfig] = None):
        self.config = config if config is not None else DungeonConfig()
        self.result: Optional[DungeonResult] = None
        self.last_seed: Optional[int] = None

    def clear(self) -> None:
        if self.result is not None:
            log.debug("Discarding previous dungeon", seed=self.last_seed)
        self.result = None

    def generate(self, seed: Optional[int] = None) -> DungeonResult:
        self.clear()
        seed = seed if seed is not None else random_seed()
        self.result = generate(seed, self.config)
        self.last_seed = seed
        return self.result

    def regenerate(self) -> DungeonResult:
        """Rebuild the last dungeon from its seed (new seed if none yet)."""
        return self.generate(self.last_seed)

    # --- Queries on the current dungeon (None / empty before generation) ---
    def get_room_by_type(self, room_type: RoomType) -> Optional[Room]:
        return self.result.get_room_by_type(room_type) if self.result else None

    def get_rooms_by_type(self, room_type: RoomType) -> List[Room]:
        return self.result.get_rooms_by_type(room_type) if self.result else []

    def get_cell(self, pos: Point) -> Optional[GridCell]:
        return self.result.get_cell(pos) if self.result else None

    def get_available_cells_in_room(self, room: Room) -> List[Point]:
        return self.result.get_available_cells_in_room(room) if self.result else []


__all__ = ["DungeonGenerator", "DungeonResult", "generate"]
