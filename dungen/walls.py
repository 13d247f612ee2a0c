# dungen/walls.py
"""Procedural wall geometry from the cell grid.

Walls are derived from the grid only: every open edge of a FLOOR or CORRIDOR
cell becomes a unit segment, collinear unit segments are fused into runs, and
each run is emitted as a thin box standing on the edge line. Corner pillars
fill the gaps where two runs meet at an angle.

Edge coordinates are grid corner points. The north edge of cell ``(x, y)``
is the horizontal edge starting at ``(x, y + 1)``, its south edge starts at
``(x, y)``, its east edge is the vertical edge starting at ``(x + 1, y)`` and
its west edge starts at ``(x, y)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import structlog

from dungen.constants import (
    BLOCKING_CELLS,
    BOUNDED_CELLS,
    WALKABLE_CELLS,
    CellType,
    Orientation,
)
from dungen.geometry import Point
from dungen.grid import DungeonGrid
from dungen.mesh import GeometryBuffer

log = structlog.get_logger()

DEFAULT_WALL_HEIGHT = 3.0
DEFAULT_WALL_THICKNESS = 0.3
DEFAULT_PILLAR_SIZE = 0.6

_BOUNDED_VALUES = np.array(sorted(int(t) for t in BOUNDED_CELLS), dtype=np.uint8)
_BLOCKING_VALUES = np.array(sorted(int(t) for t in BLOCKING_CELLS), dtype=np.uint8)

# Diagonal directions checked around each scan cell
_CORNER_DIRECTIONS: Tuple[Tuple[int, int], ...] = ((-1, -1), (1, -1), (1, 1), (-1, 1))


@dataclass(frozen=True)
class WallSegment:
    start: Point
    length: int
    orientation: Orientation

    @property
    def end(self) -> Point:
        x, y = self.start
        if self.orientation is Orientation.HORIZONTAL:
            return x + self.length, y
        return x, y + self.length


class CornerKind(Enum):
    OUTER = "outer"  # convex corner of a room or corridor
    INNER = "inner"  # concave corner, e.g. where a corridor leaves a room
    TRANSITION = "transition"  # floor meets corridor at a wall corner


@dataclass(frozen=True)
class CornerPillar:
    position: Point
    kind: CornerKind


@dataclass
class WallBuildReport:
    unit_segment_count: int = 0
    merged_segment_count: int = 0
    pillar_counts: Dict[str, int] = field(default_factory=dict)
    vertex_count: int = 0
    triangle_count: int = 0
    segments: List[WallSegment] = field(default_factory=list)
    pillars: List[CornerPillar] = field(default_factory=list)

    @property
    def pillar_count(self) -> int:
        return sum(self.pillar_counts.values())


# --- Boundary detection ---
def _neighbour_view(padded: np.ndarray, dx: int, dy: int, width: int, length: int) -> np.ndarray:
    return padded[1 + dy:1 + dy + length, 1 + dx:1 + dx + width]


def find_boundary_segments(grid: DungeonGrid) -> List[WallSegment]:
    """Unit segments on every edge between a FLOOR/CORRIDOR cell and a blocking cell.

    Cells outside the grid count as EMPTY. DOOR neighbours leave the edge open.
    """
    types = grid.cell_types
    width, length = grid.width, grid.length
    padded = np.pad(types, 1, mode="constant", constant_values=int(CellType.EMPTY))
    bounded = np.isin(types, _BOUNDED_VALUES)

    # (dx, dy, start offset, orientation) per edge of a cell
    edges = (
        (0, 1, (0, 1), Orientation.HORIZONTAL),  # north
        (0, -1, (0, 0), Orientation.HORIZONTAL),  # south
        (1, 0, (1, 0), Orientation.VERTICAL),  # east
        (-1, 0, (0, 0), Orientation.VERTICAL),  # west
    )
    found: Dict[Tuple[Point, Orientation], WallSegment] = {}
    for dx, dy, (ox, oy), orientation in edges:
        blocked = bounded & np.isin(_neighbour_view(padded, dx, dy, width, length), _BLOCKING_VALUES)
        ys, xs = np.nonzero(blocked)
        for x, y in zip(xs.tolist(), ys.tolist()):
            start = (x + ox, y + oy)
            found.setdefault((start, orientation), WallSegment(start, 1, orientation))

    return sorted(found.values(), key=_segment_sort_key)


def _segment_sort_key(segment: WallSegment):
    x, y = segment.start
    if segment.orientation is Orientation.HORIZONTAL:
        return 0, y, x
    return 1, x, y


# --- Run-length merge ---
def merge_segments(segments: Iterable[WallSegment]) -> List[WallSegment]:
    """Fuse collinear, touching segments into the longest possible runs.

    Horizontal segments are grouped by row and fused along x, vertical ones by
    column along y. Any gap, even of one unit, starts a new run.
    """
    lines: Dict[Tuple[Orientation, int], List[Tuple[int, int]]] = {}
    for segment in segments:
        x, y = segment.start
        if segment.orientation is Orientation.HORIZONTAL:
            key, pos = (segment.orientation, y), x
        else:
            key, pos = (segment.orientation, x), y
        lines.setdefault(key, []).append((pos, pos + segment.length))

    merged: List[WallSegment] = []
    for (orientation, fixed), spans in lines.items():
        spans.sort()
        run_start, run_end = spans[0]
        for lo, hi in spans[1:]:
            if lo <= run_end:
                run_end = max(run_end, hi)
                continue
            merged.append(_make_segment(orientation, fixed, run_start, run_end))
            run_start, run_end = lo, hi
        merged.append(_make_segment(orientation, fixed, run_start, run_end))

    merged.sort(key=_segment_sort_key)
    return merged


def _make_segment(orientation: Orientation, fixed: int, lo: int, hi: int) -> WallSegment:
    start = (lo, fixed) if orientation is Orientation.HORIZONTAL else (fixed, lo)
    return WallSegment(start, hi - lo, orientation)


# --- Corner pillars ---
def _classify_corner(
    grid: DungeonGrid, x: int, y: int, dx: int, dy: int
) -> Optional[CornerKind]:
    scan = grid.cell_type_at((x, y))
    side_x = grid.cell_type_at((x + dx, y))
    side_y = grid.cell_type_at((x, y + dy))
    diagonal = grid.cell_type_at((x + dx, y + dy))

    side_x_open = side_x in WALKABLE_CELLS
    side_y_open = side_y in WALKABLE_CELLS
    if not side_x_open and not side_y_open:
        return CornerKind.OUTER
    if not side_x_open or not side_y_open:
        # Straight wall continues through this corner
        return None
    if diagonal in WALKABLE_CELLS:
        return None
    kinds = {scan, side_x, side_y}
    if CellType.FLOOR in kinds and CellType.CORRIDOR in kinds:
        return CornerKind.TRANSITION
    return CornerKind.INNER


def find_corner_pillars(grid: DungeonGrid) -> List[CornerPillar]:
    """Classify the wall corners around every FLOOR or CORRIDOR cell.

    Each corner point gets at most one pillar; the first classification seen
    in x-major scan order wins.
    """
    bounded = np.isin(grid.cell_types, _BOUNDED_VALUES)
    ys, xs = np.nonzero(bounded)
    scan_cells = sorted(zip(xs.tolist(), ys.tolist()))

    pillars: Dict[Point, CornerPillar] = {}
    for x, y in scan_cells:
        for dx, dy in _CORNER_DIRECTIONS:
            point = (x + (1 if dx > 0 else 0), y + (1 if dy > 0 else 0))
            if point in pillars:
                continue
            kind = _classify_corner(grid, x, y, dx, dy)
            if kind is not None:
                pillars[point] = CornerPillar(point, kind)
    return list(pillars.values())


# --- Geometry ---
class WallMeshBuilder:
    def __init__(
        self,
        wall_height: float = DEFAULT_WALL_HEIGHT,
        wall_thickness: float = DEFAULT_WALL_THICKNESS,
        use_corner_pillars: bool = True,
        corner_pillar_size: float = DEFAULT_PILLAR_SIZE,
    ):
        if wall_height <= 0 or wall_thickness <= 0 or corner_pillar_size <= 0:
            log.error(
                "Invalid wall dimensions",
                wall_height=wall_height,
                wall_thickness=wall_thickness,
                corner_pillar_size=corner_pillar_size,
            )
            raise ValueError("Wall height, thickness and pillar size must be positive.")
        self.wall_height = wall_height
        self.wall_thickness = wall_thickness
        self.use_corner_pillars = use_corner_pillars
        self.corner_pillar_size = corner_pillar_size

    def add_segment(self, buffer: GeometryBuffer, segment: WallSegment) -> None:
        x, y = segment.start
        half = self.wall_thickness / 2.0
        if segment.orientation is Orientation.HORIZONTAL:
            buffer.add_box(x, y - half, x + segment.length, y + half, self.wall_height)
        else:
            buffer.add_box(x - half, y, x + half, y + segment.length, self.wall_height)

    def add_pillar(self, buffer: GeometryBuffer, pillar: CornerPillar) -> None:
        px, py = pillar.position
        half = self.corner_pillar_size / 2.0
        buffer.add_box(px - half, py - half, px + half, py + half, self.wall_height)

    def build_with_report(self, grid: DungeonGrid) -> Tuple[GeometryBuffer, WallBuildReport]:
        units = find_boundary_segments(grid)
        segments = merge_segments(units)
        pillars = find_corner_pillars(grid) if self.use_corner_pillars else []

        buffer = build_walls(segments, pillars, self)

        counts: Dict[str, int] = {}
        for pillar in pillars:
            counts[pillar.kind.value] = counts.get(pillar.kind.value, 0) + 1
        report = WallBuildReport(
            unit_segment_count=len(units),
            merged_segment_count=len(segments),
            pillar_counts=counts,
            vertex_count=buffer.vertex_count,
            triangle_count=buffer.triangle_count,
            segments=segments,
            pillars=pillars,
        )
        log.info(
            "Wall mesh built",
            unit_segments=report.unit_segment_count,
            merged_segments=report.merged_segment_count,
            pillars=counts,
            vertices=report.vertex_count,
            triangles=report.triangle_count,
        )
        return buffer, report

    def build(self, grid: DungeonGrid) -> GeometryBuffer:
        buffer, _ = self.build_with_report(grid)
        return buffer


def build_walls(
    segments: Sequence[WallSegment],
    pillars: Sequence[CornerPillar],
    builder: WallMeshBuilder,
) -> GeometryBuffer:
    """Emit geometry for already computed segments and pillars."""
    buffer = GeometryBuffer()
    for segment in segments:
        builder.add_segment(buffer, segment)
    for pillar in pillars:
        builder.add_pillar(buffer, pillar)
    return buffer


__all__ = [
    "CornerKind",
    "CornerPillar",
    "WallBuildReport",
    "WallMeshBuilder",
    "WallSegment",
    "build_walls",
    "find_boundary_segments",
    "find_corner_pillars",
    "merge_segments",
]
