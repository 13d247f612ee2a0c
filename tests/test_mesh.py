import numpy as np
import pytest

from dungen.geometry import Rect
from dungen.mesh import QUAD_UVS, GeometryBuffer, build_floor_mesh


def face_normals(vertices, triangles):
    a = vertices[triangles[:, 0]]
    b = vertices[triangles[:, 1]]
    c = vertices[triangles[:, 2]]
    return np.cross(b - a, c - a)


def test_add_quad_indices_and_uvs():
    buffer = GeometryBuffer()
    first = buffer.add_quad((0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0))
    second = buffer.add_quad((0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1))
    assert (first, second) == (0, 4)
    assert buffer.triangles == [0, 1, 2, 0, 2, 3, 4, 5, 6, 4, 6, 7]
    assert buffer.uvs[:4] == list(QUAD_UVS)
    assert buffer.vertex_count == 8
    assert buffer.triangle_count == 4


def test_box_faces_point_outwards_and_skip_bottom():
    buffer = GeometryBuffer()
    buffer.add_box(1.0, 2.0, 3.0, 2.5, 3.0)
    vertices, _, triangles = buffer.as_arrays()
    assert vertices.shape == (20, 3)
    assert triangles.shape == (10, 3)

    center = np.array([2.0, 1.5, 2.25], dtype=np.float32)
    normals = face_normals(vertices, triangles)
    centroids = vertices[triangles].mean(axis=1)
    outward = np.einsum("ij,ij->i", normals, centroids - center)
    assert np.all(outward > 0)
    # Only the top cap faces up; nothing faces down
    assert np.count_nonzero(normals[:, 1] > 0) == 2
    assert np.all(normals[:, 1] >= 0)


def test_bounds_and_stats():
    buffer = GeometryBuffer()
    assert buffer.bounds() == ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    buffer.add_box(-1.0, 0.0, 2.0, 4.0, 3.0)
    assert buffer.bounds() == ((-1.0, 0.0, 0.0), (2.0, 3.0, 4.0))
    stats = buffer.stats()
    assert stats.vertex_count == 20
    assert stats.triangle_count == 10
    assert stats.quad_count == 5
    assert not stats.is_empty


def test_empty_buffer_arrays():
    vertices, uvs, triangles = GeometryBuffer().as_arrays()
    assert vertices.shape == (0, 3) and vertices.dtype == np.float32
    assert uvs.shape == (0, 2)
    assert triangles.shape == (0, 3) and triangles.dtype == np.uint32


def test_clear_empties_buffer():
    buffer = GeometryBuffer()
    buffer.add_box(0, 0, 1, 1, 1)
    buffer.clear()
    assert buffer.is_empty
    assert buffer.triangles == []


def test_floor_mesh_one_upward_quad_per_area():
    areas = [Rect(0, 0, 4, 3), Rect(4, 1, 6, 2), Rect(5, 5, 5, 8)]
    floor = build_floor_mesh(areas)
    assert floor.vertex_count == 8
    vertices, uvs, triangles = floor.as_arrays()
    normals = face_normals(vertices, triangles)
    assert np.all(normals[:, 1] > 0)
    assert np.all(vertices[:, 1] == 0.0)
    # World-space UVs follow the grid x and y
    np.testing.assert_allclose(uvs, vertices[:, [0, 2]])
    assert floor.to_dict()["triangles"][:3] == [0, 1, 2]


def test_box_height_and_extent():
    buffer = GeometryBuffer()
    buffer.add_box(2.0, 1.85, 5.0, 2.15, 3.0)
    vertices, _, _ = buffer.as_arrays()
    assert vertices[:, 0].min() == pytest.approx(2.0)
    assert vertices[:, 0].max() == pytest.approx(5.0)
    assert vertices[:, 1].max() == pytest.approx(3.0)
