# dungen/connectivity.py
"""Reachability checks over the walkable cells of a generated grid."""

from __future__ import annotations

from collections import deque
from typing import List, Optional, Sequence, Set

import numpy as np
import structlog

from dungen.constants import WALKABLE_CELLS
from dungen.geometry import Point
from dungen.grid import DungeonGrid
from dungen.rooms import Room

log = structlog.get_logger()


def flood_walkable(grid: DungeonGrid, origin: Point) -> Set[Point]:
    """All walkable cells 4-connected to ``origin`` (empty if origin is blocked)."""
    if grid.cell_type_at(origin) not in WALKABLE_CELLS:
        return set()
    visited = {origin}
    queue = deque([origin])
    while queue:
        cx, cy = queue.popleft()
        for dx, dy in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            nxt = (cx + dx, cy + dy)
            if nxt in visited:
                continue
            if grid.cell_type_at(nxt) in WALKABLE_CELLS:
                visited.add(nxt)
                queue.append(nxt)
    return visited


def find_unreachable_rooms(
    grid: DungeonGrid, rooms: Sequence[Room], start: Optional[Room] = None
) -> List[int]:
    """Ids of rooms with no floor cell reachable from the start room.

    ``start`` defaults to the first room.
    """
    if not rooms:
        return []
    start = start if start is not None else rooms[0]
    reached = flood_walkable(grid, start.center)
    unreachable = [
        room.room_id
        for room in rooms
        if not any(cell in reached for cell in room.rect.cells())
    ]
    if unreachable:
        log.error(
            "Rooms unreachable from start",
            start=start.room_id,
            unreachable=unreachable,
            reached_cells=len(reached),
        )
    else:
        log.debug("All rooms reachable", start=start.room_id, reached_cells=len(reached))
    return unreachable


def unreachable_walkable_cells(grid: DungeonGrid, origin: Point) -> List[Point]:
    """Walkable cells that the flood fill from ``origin`` does not reach."""
    reached = flood_walkable(grid, origin)
    walkable = np.isin(grid.cell_types, np.array(sorted(int(t) for t in WALKABLE_CELLS)))
    ys, xs = np.nonzero(walkable)
    return sorted(p for p in zip(xs.tolist(), ys.tolist()) if p not in reached)


__all__ = ["find_unreachable_rooms", "flood_walkable", "unreachable_walkable_cells"]
