import numpy as np
import pytest

from dungen.constants import CellType, Orientation
from dungen.geometry import Rect
from dungen.grid import DungeonGrid
from dungen.rooms import Room
from dungen.walls import (
    CornerKind,
    WallMeshBuilder,
    WallSegment,
    find_boundary_segments,
    find_corner_pillars,
    merge_segments,
)

H = Orientation.HORIZONTAL
V = Orientation.VERTICAL


def grid_with_cells(width, length, cells):
    grid = DungeonGrid(width, length)
    for pos, cell_type in cells.items():
        grid.set_cell_type(pos, cell_type)
    return grid


def single_room_grid():
    grid = DungeonGrid(10, 10)
    grid.stamp_rooms([Room(room_id=0, rect=Rect(2, 2, 5, 4), leaf_index=0)])
    return grid


def test_single_room_boundary_and_merge():
    grid = single_room_grid()
    units = find_boundary_segments(grid)
    assert len(units) == 10
    assert all(s.length == 1 for s in units)
    assert merge_segments(units) == [
        WallSegment((2, 2), 3, H),
        WallSegment((2, 4), 3, H),
        WallSegment((2, 2), 2, V),
        WallSegment((5, 2), 2, V),
    ]


def test_single_room_outer_pillars():
    pillars = find_corner_pillars(single_room_grid())
    assert {p.position for p in pillars} == {(2, 2), (5, 2), (5, 4), (2, 4)}
    assert all(p.kind is CornerKind.OUTER for p in pillars)


def test_grid_edge_counts_as_empty():
    cells = {(x, y): CellType.FLOOR for x in range(3) for y in range(3)}
    grid = grid_with_cells(3, 3, cells)
    assert len(find_boundary_segments(grid)) == 12
    assert len(merge_segments(find_boundary_segments(grid))) == 4


def test_merge_unbroken_run():
    units = [WallSegment((x, 5), 1, H) for x in range(7)]
    assert merge_segments(units) == [WallSegment((0, 5), 7, H)]


def test_merge_gap_breaks_run():
    units = [WallSegment((0, 1), 1, V), WallSegment((0, 2), 1, V), WallSegment((0, 4), 1, V)]
    assert merge_segments(units) == [WallSegment((0, 1), 2, V), WallSegment((0, 4), 1, V)]


def test_merge_keeps_orientations_apart():
    units = [WallSegment((0, 0), 1, H), WallSegment((0, 0), 1, V), WallSegment((1, 0), 1, H)]
    assert merge_segments(units) == [WallSegment((0, 0), 2, H), WallSegment((0, 0), 1, V)]


def test_no_wall_between_floor_and_corridor():
    grid = grid_with_cells(5, 3, {(1, 1): CellType.FLOOR, (2, 1): CellType.CORRIDOR})
    segments = find_boundary_segments(grid)
    assert WallSegment((2, 1), 1, V) not in segments
    assert len(segments) == 6


def test_door_neighbour_leaves_gap():
    grid = single_room_grid()
    grid.set_cell_type((5, 2), CellType.DOOR)
    east = [s for s in merge_segments(find_boundary_segments(grid)) if s.orientation is V and s.start[0] == 5]
    assert east == [WallSegment((5, 3), 1, V)]


def test_door_cells_get_no_pillars_of_their_own():
    grid = single_room_grid()
    grid.set_cell_type((5, 2), CellType.DOOR)
    positions = {p.position for p in find_corner_pillars(grid)}
    assert (6, 2) not in positions
    assert (6, 3) not in positions
    assert all(x <= 5 for x, _ in positions)


def test_wall_cells_are_not_walled():
    grid = grid_with_cells(3, 3, {(1, 1): CellType.WALL})
    assert find_boundary_segments(grid) == []
    assert find_corner_pillars(grid) == []


def test_inner_corner_of_l_shape():
    cells = {(1, 1): CellType.FLOOR, (2, 1): CellType.FLOOR, (1, 2): CellType.FLOOR}
    pillars = {p.position: p.kind for p in find_corner_pillars(grid_with_cells(5, 5, cells))}
    assert pillars[(2, 2)] is CornerKind.INNER
    assert pillars[(1, 1)] is CornerKind.OUTER
    assert pillars[(3, 1)] is CornerKind.OUTER
    assert pillars[(1, 3)] is CornerKind.OUTER


def test_transition_corner_where_floor_meets_corridor():
    cells = {(1, 1): CellType.FLOOR, (2, 1): CellType.CORRIDOR, (1, 2): CellType.FLOOR}
    pillars = {p.position: p.kind for p in find_corner_pillars(grid_with_cells(5, 5, cells))}
    assert pillars[(2, 2)] is CornerKind.TRANSITION


def test_straight_wall_has_no_pillar_midway():
    cells = {(x, 1): CellType.FLOOR for x in range(1, 5)}
    positions = {p.position for p in find_corner_pillars(grid_with_cells(6, 3, cells))}
    assert positions == {(1, 1), (5, 1), (5, 2), (1, 2)}


def test_box_counts_and_extent():
    builder = WallMeshBuilder(wall_height=3.0, wall_thickness=0.3, use_corner_pillars=True)
    geometry, report = builder.build_with_report(single_room_grid())
    assert report.unit_segment_count == 10
    assert report.merged_segment_count == 4
    assert report.pillar_counts == {"outer": 4}
    boxes = report.merged_segment_count + report.pillar_count
    assert geometry.vertex_count == boxes * 20
    assert geometry.triangle_count == boxes * 10

    vertices, uvs, triangles = geometry.as_arrays()
    assert vertices.dtype == np.float32 and triangles.dtype == np.uint32
    assert uvs.shape == (vertices.shape[0], 2)
    assert triangles.max() < vertices.shape[0]
    assert vertices[:, 1].min() == 0.0
    assert vertices[:, 1].max() == pytest.approx(3.0)

    # First box is the south wall of the room: x spans the run exactly
    first = vertices[:20]
    assert first[:, 0].min() == pytest.approx(2.0)
    assert first[:, 0].max() == pytest.approx(5.0)
    assert first[:, 2].min() == pytest.approx(1.85)
    assert first[:, 2].max() == pytest.approx(2.15)


def test_pillars_can_be_disabled():
    builder = WallMeshBuilder(use_corner_pillars=False)
    geometry, report = builder.build_with_report(single_room_grid())
    assert report.pillar_count == 0
    assert geometry.vertex_count == 4 * 20


def test_pillar_box_is_centered_on_corner():
    builder = WallMeshBuilder(corner_pillar_size=0.6)
    geometry, report = builder.build_with_report(single_room_grid())
    vertices, _, _ = geometry.as_arrays()
    pillar = vertices[4 * 20:5 * 20]
    px, py = report.pillars[0].position
    assert pillar[:, 0].min() == pytest.approx(px - 0.3)
    assert pillar[:, 0].max() == pytest.approx(px + 0.3)
    assert pillar[:, 2].min() == pytest.approx(py - 0.3)
    assert pillar[:, 2].max() == pytest.approx(py + 0.3)


def test_grid_without_walkable_cells_gives_empty_mesh():
    geometry = WallMeshBuilder().build(DungeonGrid(4, 4))
    assert geometry.is_empty
    vertices, uvs, triangles = geometry.as_arrays()
    assert vertices.shape == (0, 3) and triangles.shape == (0, 3)


def test_invalid_builder_parameters():
    with pytest.raises(ValueError):
        WallMeshBuilder(wall_height=0)
    with pytest.raises(ValueError):
        WallMeshBuilder(wall_thickness=-0.1)
