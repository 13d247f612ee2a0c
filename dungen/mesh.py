"""
Vertex/UV/triangle buffers for the generated wall and floor geometry.

Grid coordinates ``(gx, gy)`` map to world ``(gx, 0, gy)``; y is up. Faces
are wound counter-clockwise when seen from their outward normal (right-handed
cross product of the first two edges points out of the face).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from dungen.geometry import Rect

Vec3 = Tuple[float, float, float]
Vec2 = Tuple[float, float]

QUAD_UVS: Tuple[Vec2, Vec2, Vec2, Vec2] = ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0))


@dataclass
class MeshStats:
    vertex_count: int
    triangle_count: int
    quad_count: int
    bounds_min: Vec3
    bounds_max: Vec3

    @property
    def is_empty(self) -> bool:
        return self.vertex_count == 0


class GeometryBuffer:
    """Append-only mesh data: positions, UVs and a flat triangle index list."""

    def __init__(self):
        self.vertices: List[Vec3] = []
        self.uvs: List[Vec2] = []
        self.triangles: List[int] = []
        self._bounds_min: Optional[List[float]] = None
        self._bounds_max: Optional[List[float]] = None

    def clear(self):
        self.vertices.clear()
        self.uvs.clear()
        self.triangles.clear()
        self._bounds_min = None
        self._bounds_max = None

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles) // 3

    @property
    def is_empty(self) -> bool:
        return not self.vertices

    def _update_bounds(self, v: Vec3):
        if self._bounds_min is None:
            self._bounds_min = list(v)
            self._bounds_max = list(v)
            return
        for axis in range(3):
            self._bounds_min[axis] = min(self._bounds_min[axis], v[axis])
            self._bounds_max[axis] = max(self._bounds_max[axis], v[axis])

    def add_quad(
        self,
        v0: Vec3,
        v1: Vec3,
        v2: Vec3,
        v3: Vec3,
        uvs: Optional[Tuple[Vec2, Vec2, Vec2, Vec2]] = None,
    ) -> int:
        """Append one quad as two triangles ``(0,1,2)`` and ``(0,2,3)``.

        Returns the index of the quad's first vertex.
        """
        base = len(self.vertices)
        for v in (v0, v1, v2, v3):
            v = (float(v[0]), float(v[1]), float(v[2]))
            self.vertices.append(v)
            self._update_bounds(v)
        self.uvs.extend(uvs if uvs is not None else QUAD_UVS)
        self.triangles.extend((base, base + 1, base + 2, base, base + 2, base + 3))
        return base

    def add_box(self, x0: float, z0: float, x1: float, z1: float, height: float) -> None:
        """Append an open-bottomed box over the world rectangle ``[x0, x1] x [z0, z1]``.

        Emits four side faces and a top cap, one quad each.
        """
        v0 = (x0, 0.0, z0)
        v1 = (x1, 0.0, z0)
        v2 = (x1, 0.0, z1)
        v3 = (x0, 0.0, z1)
        v4 = (x0, height, z0)
        v5 = (x1, height, z0)
        v6 = (x1, height, z1)
        v7 = (x0, height, z1)

        self.add_quad(v3, v2, v6, v7)  # +z
        self.add_quad(v1, v0, v4, v5)  # -z
        self.add_quad(v0, v3, v7, v4)  # -x
        self.add_quad(v2, v1, v5, v6)  # +x
        self.add_quad(v7, v6, v5, v4)  # top

    def bounds(self) -> Tuple[Vec3, Vec3]:
        if self._bounds_min is None:
            return (0.0, 0.0, 0.0), (0.0, 0.0, 0.0)
        return tuple(self._bounds_min), tuple(self._bounds_max)  # type: ignore[return-value]

    def as_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Vertices ``(N, 3)`` and UVs ``(N, 2)`` as float32, triangles ``(M, 3)`` as uint32."""
        if not self.vertices:
            return (
                np.zeros((0, 3), dtype=np.float32),
                np.zeros((0, 2), dtype=np.float32),
                np.zeros((0, 3), dtype=np.uint32),
            )
        vertices = np.array(self.vertices, dtype=np.float32)
        uvs = np.array(self.uvs, dtype=np.float32)
        triangles = np.array(self.triangles, dtype=np.uint32).reshape(-1, 3)
        return vertices, uvs, triangles

    def stats(self) -> MeshStats:
        bounds_min, bounds_max = self.bounds()
        return MeshStats(
            vertex_count=self.vertex_count,
            triangle_count=self.triangle_count,
            quad_count=self.triangle_count // 2,
            bounds_min=bounds_min,
            bounds_max=bounds_max,
        )

    def to_dict(self) -> Dict[str, list]:
        return {
            "vertices": [list(v) for v in self.vertices],
            "uvs": [list(uv) for uv in self.uvs],
            "triangles": list(self.triangles),
        }


def build_floor_mesh(areas: Iterable[Rect], height: float = 0.0) -> GeometryBuffer:
    """One upward-facing quad per area with world-space UVs."""
    buffer = GeometryBuffer()
    for rect in areas:
        if rect.is_empty:
            continue
        corners = (
            (rect.x1, rect.y1),
            (rect.x1, rect.y2),
            (rect.x2, rect.y2),
            (rect.x2, rect.y1),
        )
        buffer.add_quad(
            *[(float(x), height, float(z)) for x, z in corners],
            uvs=tuple((float(x), float(z)) for x, z in corners),  # type: ignore[arg-type]
        )
    return buffer


__all__ = ["GeometryBuffer", "MeshStats", "QUAD_UVS", "build_floor_mesh"]
