"""Incremental (Bowyer–Watson) 2D Delaunay triangulation.

Points are inserted one at a time, in input order, into a triangulation
seeded with a single scaffold triangle large enough to contain them all.
Each insertion removes every triangle whose circumcircle strictly contains
the new point and fans the resulting polygonal hole to that point.  When
all points are in, triangles touching the scaffold are discarded.
"""

import logging
import time
from typing import Dict, List, Sequence, Tuple

from .constants import (COLLINEAR_EPSILON, SCAFFOLD_DROP, SCAFFOLD_FALLBACK_SIZE,
                        SCAFFOLD_MIN_EXTENT, SCAFFOLD_SPAN)
from .errors import InsufficientPoints
from .geometry import bounding_box, in_circumcircle, orientation
from .models import Edge, Point2D, Point3D, Triangle, TriangleMesh

logger = logging.getLogger(__name__)


def scaffold_vertices(points: Sequence) -> List[Point2D]:
    """Three vertices of a triangle that strictly contains every point."""
    min_x, min_y, max_x, max_y = bounding_box(points)
    delta = max(max_x - min_x, max_y - min_y)
    if delta < SCAFFOLD_MIN_EXTENT:
        # All points coincide: size the scaffold from coordinate magnitude
        delta = max(abs(min_x), abs(max_x), abs(min_y), abs(max_y)) + 1.0
    if delta < SCAFFOLD_MIN_EXTENT:
        delta = SCAFFOLD_FALLBACK_SIZE

    mid_x = (min_x + max_x) / 2.0
    mid_y = (min_y + max_y) / 2.0
    return [
        Point2D(mid_x - SCAFFOLD_SPAN * delta, mid_y - SCAFFOLD_DROP * delta),
        Point2D(mid_x + SCAFFOLD_SPAN * delta, mid_y - SCAFFOLD_DROP * delta),
        Point2D(mid_x, mid_y + SCAFFOLD_SPAN * delta),
    ]


class DelaunayTriangulator:
    """Bowyer–Watson triangulator over the plan projection of 3D points."""

    def __init__(self, epsilon: float = COLLINEAR_EPSILON):
        self.epsilon = epsilon
        self.stats = {
            'points': 0,
            'triangles': 0,
            'scaffold_dropped': 0,
            'collinear_dropped': 0,
            'elapsed_ms': 0.0,
        }

    def triangulate(self, points: Sequence[Point3D]) -> TriangleMesh:
        """Triangulate ``points`` and return a TriangleMesh over them.

        Raises InsufficientPoints for fewer than 3 points.  Collinear input
        yields a mesh with no triangles (``mesh.is_degenerate``).
        """
        points = list(points)
        n = len(points)
        if n < 3:
            raise InsufficientPoints(n)

        t0 = time.perf_counter()
        vertices = points + scaffold_vertices(points)
        triangles: List[Tuple[int, int, int]] = [(n, n + 1, n + 2)]

        for i in range(n):
            triangles = self._insert(i, vertices, triangles)

        result = []
        scaffold_dropped = 0
        collinear_dropped = 0
        for a, b, c in triangles:
            if a >= n or b >= n or c >= n:
                scaffold_dropped += 1
                continue
            orient = orientation(vertices[a], vertices[b], vertices[c])
            if abs(orient) < self.epsilon:
                collinear_dropped += 1
                continue
            # Emit counter-clockwise so the surface faces +Z
            result.append(Triangle(a, b, c) if orient > 0 else Triangle(a, c, b))

        elapsed_ms = (time.perf_counter() - t0) * 1000.0
        self.stats.update({
            'points': n,
            'triangles': len(result),
            'scaffold_dropped': scaffold_dropped,
            'collinear_dropped': collinear_dropped,
            'elapsed_ms': elapsed_ms,
        })

        if result:
            logger.info(f"Delaunay: {n} points → {len(result)} triangles "
                        f"({elapsed_ms:.1f} ms)")
        else:
            logger.warning(f"Delaunay: {n} points produced no triangles "
                           f"(input is collinear or degenerate)")
        if collinear_dropped:
            logger.debug(f"Dropped {collinear_dropped} zero-area triangles")

        return TriangleMesh(points=points, triangles=result)

    def _insert(self, index, vertices, triangles):
        """Insert vertices[index] and return the updated triangle list."""
        p = vertices[index]
        kept = []
        edge_counts: Dict[Edge, int] = {}

        for tri in triangles:
            a, b, c = tri
            if in_circumcircle(p, vertices[a], vertices[b], vertices[c],
                               self.epsilon):
                for edge in (Edge.of(a, b), Edge.of(b, c), Edge.of(c, a)):
                    edge_counts[edge] = edge_counts.get(edge, 0) + 1
            else:
                kept.append(tri)

        # Edges shared by two bad triangles are inside the hole
        for edge, count in edge_counts.items():
            if count == 1:
                kept.append((edge.a, edge.b, index))
        return kept


def triangulate(points: Sequence[Point3D]) -> TriangleMesh:
    """Triangulate with default settings."""
    return DelaunayTriangulator().triangulate(points)
