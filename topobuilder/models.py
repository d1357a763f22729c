"""Data classes for points, triangles, meshes and solids."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
import trimesh


@dataclass(frozen=True)
class Point2D:
    x: float
    y: float


@dataclass(frozen=True)
class Point3D:
    """Elevation sample: planar location (x, y) and known elevation z."""
    x: float
    y: float
    z: float

    @property
    def xy(self) -> Point2D:
        return Point2D(self.x, self.y)


@dataclass(frozen=True)
class Edge:
    """Unordered pair of point indices, smaller index first."""
    a: int
    b: int

    @classmethod
    def of(cls, i: int, j: int) -> "Edge":
        return cls(i, j) if i <= j else cls(j, i)


@dataclass(frozen=True)
class Triangle:
    a: int
    b: int
    c: int

    @property
    def indices(self) -> Tuple[int, int, int]:
        return (self.a, self.b, self.c)

    def edges(self) -> Tuple[Edge, Edge, Edge]:
        return (Edge.of(self.a, self.b),
                Edge.of(self.b, self.c),
                Edge.of(self.c, self.a))

    def references(self, index: int) -> bool:
        return index in (self.a, self.b, self.c)


@dataclass
class TriangleMesh:
    """Unique points plus the triangles connecting them."""
    points: List[Point3D]
    triangles: List[Triangle] = field(default_factory=list)

    @property
    def num_triangles(self) -> int:
        return len(self.triangles)

    @property
    def is_degenerate(self) -> bool:
        """True when triangulation produced nothing (collinear input)."""
        return not self.triangles

    def vertices_array(self) -> np.ndarray:
        """(N, 3) float64 array of point coordinates."""
        if not self.points:
            return np.zeros((0, 3), dtype=np.float64)
        return np.array([(p.x, p.y, p.z) for p in self.points], dtype=np.float64)

    def faces_array(self) -> np.ndarray:
        """(M, 3) int64 array of triangle indices."""
        if not self.triangles:
            return np.zeros((0, 3), dtype=np.int64)
        return np.array([t.indices for t in self.triangles], dtype=np.int64)

    def corners(self, triangle: Triangle) -> Tuple[Point3D, Point3D, Point3D]:
        return (self.points[triangle.a],
                self.points[triangle.b],
                self.points[triangle.c])


@dataclass
class FacetedMesh:
    """Lightweight vertex/face surface for visualization only."""
    vertices: np.ndarray
    faces: np.ndarray
    one_based: bool = False

    @property
    def num_faces(self) -> int:
        return len(self.faces)

    def to_trimesh(self) -> trimesh.Trimesh:
        faces = self.faces - 1 if self.one_based else self.faces
        return trimesh.Trimesh(vertices=self.vertices, faces=faces, process=False)


class SkipReason(Enum):
    DEGENERATE = 'degenerate'
    VALIDATION_FAILED = 'validation_failed'


@dataclass
class PrismResult:
    """Outcome of building one prism: either a mesh or a skip reason."""
    prism: Optional[trimesh.Trimesh] = None
    reason: Optional[SkipReason] = None
    detail: str = ''
    triangle_index: Optional[int] = None

    @classmethod
    def ok(cls, prism: trimesh.Trimesh, triangle_index: Optional[int] = None):
        return cls(prism=prism, triangle_index=triangle_index)

    @classmethod
    def skip(cls, reason: SkipReason, detail: str = '',
             triangle_index: Optional[int] = None):
        return cls(reason=reason, detail=detail, triangle_index=triangle_index)

    @property
    def is_ok(self) -> bool:
        return self.prism is not None


@dataclass
class Solid:
    """Accumulated terrain body plus any parts that refused to union."""
    body: trimesh.Trimesh
    detached: List[trimesh.Trimesh] = field(default_factory=list)
    merged_count: int = 1

    @property
    def parts(self) -> List[trimesh.Trimesh]:
        return [self.body] + list(self.detached)

    @property
    def volume(self) -> float:
        return float(sum(part.volume for part in self.parts))

    @property
    def bounds(self) -> np.ndarray:
        """(2, 3) array of min/max corners over all parts."""
        stacked = np.vstack([part.bounds for part in self.parts])
        return np.array([stacked.min(axis=0), stacked.max(axis=0)])

    def to_mesh(self) -> trimesh.Trimesh:
        """All parts concatenated into one mesh (no boolean merge)."""
        if not self.detached:
            return self.body
        return trimesh.util.concatenate(self.parts)
