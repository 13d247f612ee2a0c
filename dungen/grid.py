# dungen/grid.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional

import numpy as np
import structlog

from dungen.constants import WALKABLE_CELLS, CellType
from dungen.geometry import Point, Rect

log = structlog.get_logger()

NO_ROOM = -1


@dataclass(frozen=True)
class GridCell:
    """Read-only view of one grid cell."""

    position: Point
    cell_type: CellType
    room_id: Optional[int] = None
    occupied: bool = False
    placed_object: Any = None

    @property
    def is_walkable(self) -> bool:
        return self.cell_type in WALKABLE_CELLS


class DungeonGrid:
    def __init__(self, width: int, length: int):
        """
        Initializes an all-EMPTY grid covering ``[0, width) x [0, length)``.
        """
        if width <= 0 or length <= 0:
            log.error("Invalid grid dimensions", width=width, length=length)
            raise ValueError("Grid width and length must be positive integers.")
        self._width = width
        self._length = length
        log.info("Initializing DungeonGrid", width=width, length=length)

        # Arrays are indexed [y, x] like the rest of the map code
        self.cell_types: np.ndarray = np.full(
            (length, width), fill_value=CellType.EMPTY, dtype=np.uint8, order="C"
        )
        self.room_ids: np.ndarray = np.full(
            (length, width), fill_value=NO_ROOM, dtype=np.int32, order="C"
        )
        self.occupied: np.ndarray = np.zeros((length, width), dtype=bool, order="C")
        self.placed_objects: Dict[Point, Any] = {}

    @property
    def width(self) -> int:
        return self._width

    @property
    def length(self) -> int:
        return self._length

    @property
    def cell_count(self) -> int:
        return self._width * self._length

    def in_bounds(self, pos: Point) -> bool:
        x, y = pos
        return 0 <= x < self._width and 0 <= y < self._length

    # --- Cell access ---
    def set_cell_type(self, pos: Point, cell_type: CellType, room_id: Optional[int] = None) -> None:
        """Overwrite the type and owner of one cell. Out-of-bounds writes are ignored."""
        if not self.in_bounds(pos):
            return
        x, y = pos
        self.cell_types[y, x] = cell_type
        self.room_ids[y, x] = NO_ROOM if room_id is None else room_id

    def cell_type_at(self, pos: Point) -> Optional[CellType]:
        if not self.in_bounds(pos):
            return None
        x, y = pos
        return CellType(int(self.cell_types[y, x]))

    def get_cell(self, pos: Point) -> Optional[GridCell]:
        if not self.in_bounds(pos):
            return None
        x, y = pos
        owner = int(self.room_ids[y, x])
        return GridCell(
            position=(x, y),
            cell_type=CellType(int(self.cell_types[y, x])),
            room_id=None if owner == NO_ROOM else owner,
            occupied=bool(self.occupied[y, x]),
            placed_object=self.placed_objects.get((x, y)),
        )

    def cells_of_type(self, cell_type: CellType) -> List[Point]:
        ys, xs = np.nonzero(self.cell_types == cell_type)
        return sorted(zip(xs.tolist(), ys.tolist()))

    def iter_cells(self) -> Iterator[GridCell]:
        for x in range(self._width):
            for y in range(self._length):
                yield self.get_cell((x, y))  # type: ignore[misc]

    def count(self, cell_type: CellType) -> int:
        return int(np.count_nonzero(self.cell_types == cell_type))

    def as_array(self) -> np.ndarray:
        return self.cell_types.copy()

    def clear(self) -> None:
        self.cell_types.fill(CellType.EMPTY)
        self.room_ids.fill(NO_ROOM)
        self.occupied.fill(False)
        self.placed_objects.clear()
        log.debug("DungeonGrid cleared", width=self._width, length=self._length)

    # --- Rasterization ---
    def _clip(self, rect: Rect) -> Optional[Rect]:
        clipped = Rect(
            max(0, rect.x1), max(0, rect.y1),
            min(self._width, rect.x2), min(self._length, rect.y2),
        )
        return None if clipped.is_empty else clipped

    def stamp_rooms(self, rooms: Iterable[Any]) -> None:
        """Stamp room floors, then one-cell walls along each side of each room.

        Only the four side lines are walled; the diagonal corner cells stay
        untouched.
        """
        rooms = list(rooms)
        for room in rooms:
            r = self._clip(room.rect)
            if r is None:
                log.warning("Room outside grid bounds", room_id=room.room_id, rect=room.rect)
                continue
            self.cell_types[r.y1:r.y2, r.x1:r.x2] = CellType.FLOOR
            self.room_ids[r.y1:r.y2, r.x1:r.x2] = room.room_id

        for room in rooms:
            x1, y1, x2, y2 = room.rect
            sides = (
                Rect(x1, y1 - 1, x2, y1),  # south
                Rect(x1, y2, x2, y2 + 1),  # north
                Rect(x1 - 1, y1, x1, y2),  # west
                Rect(x2, y1, x2 + 1, y2),  # east
            )
            for side in sides:
                line = self._clip(side)
                if line is None:
                    continue
                view = self.cell_types[line.y1:line.y2, line.x1:line.x2]
                owners = self.room_ids[line.y1:line.y2, line.x1:line.x2]
                mask = view != CellType.FLOOR
                view[mask] = CellType.WALL
                owners[mask] = NO_ROOM

        log.info(
            "Rooms stamped",
            rooms=len(rooms),
            floor_cells=self.count(CellType.FLOOR),
            wall_cells=self.count(CellType.WALL),
        )

    def stamp_corridors(self, corridors: Iterable[Any]) -> None:
        """Stamp corridor cells everywhere except over room floors."""
        stamped = 0
        for corridor in corridors:
            for rect in corridor.rects:
                r = self._clip(rect)
                if r is None:
                    continue
                view = self.cell_types[r.y1:r.y2, r.x1:r.x2]
                owners = self.room_ids[r.y1:r.y2, r.x1:r.x2]
                mask = view != CellType.FLOOR
                view[mask] = CellType.CORRIDOR
                owners[mask] = NO_ROOM
                stamped += int(np.count_nonzero(mask))
        log.info("Corridors stamped", corridor_cells=self.count(CellType.CORRIDOR), written=stamped)

    # --- Occupancy ---
    def is_cell_available(self, pos: Point) -> bool:
        if not self.in_bounds(pos):
            return False
        x, y = pos
        return bool(self.cell_types[y, x] == CellType.FLOOR and not self.occupied[y, x])

    def occupy_cell(self, pos: Point, placed_object: Any = None) -> bool:
        """Mark a cell as occupied. Returns False when the cell is out of bounds."""
        if not self.in_bounds(pos):
            return False
        x, y = pos
        self.occupied[y, x] = True
        if placed_object is not None:
            self.placed_objects[(x, y)] = placed_object
        return True

    def clear_cell_occupancy(self, pos: Point) -> None:
        if not self.in_bounds(pos):
            return
        x, y = pos
        self.occupied[y, x] = False
        self.placed_objects.pop((x, y), None)

    def get_available_cells_in_room(self, room: Any) -> List[Point]:
        r = self._clip(room.rect)
        if r is None:
            return []
        return [pos for pos in r.cells() if self.is_cell_available(pos)]


__all__ = ["DungeonGrid", "GridCell", "NO_ROOM"]
