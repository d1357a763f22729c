"""Per-triangle prism construction: extrude the plan triangle, slice the top.

Each terrain triangle becomes a closed body whose base is the triangle's
plan projection at Z = 0 and whose top is the plane through the three
original 3D vertices.  The block is extruded past the highest vertex and
then cut by that plane, keeping the part below it.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import numpy as np
import trimesh
from shapely.geometry import Polygon
from shapely.geometry.polygon import orient
from tqdm import tqdm

from .constants import (COLLINEAR_EPSILON, DEFAULT_EXTRUSION_BUFFER,
                        DEFAULT_MIN_VOLUME, DEFAULT_Z_TOLERANCE,
                        MIN_EXTRUSION_HEIGHT)
from .errors import FatalGeometryError
from .geometry import as_vector, plane_normal
from .models import PrismResult, SkipReason, Triangle, TriangleMesh

logger = logging.getLogger(__name__)


class PrismBuilder:
    """Turn terrain triangles into sloped-top prisms.

    Parameters
    ----------
    extrusion_buffer : float
        Height added above ``max(top Z, 0)`` before slicing.
    min_volume : float
        Prisms (and bases, by area) smaller than this are rejected.
    z_tolerance : float
        Slack allowed on the Z extents check after slicing.
    """

    def __init__(self, extrusion_buffer: float = DEFAULT_EXTRUSION_BUFFER,
                 min_volume: float = DEFAULT_MIN_VOLUME,
                 z_tolerance: float = DEFAULT_Z_TOLERANCE):
        self.extrusion_buffer = extrusion_buffer
        self.min_volume = min_volume
        self.z_tolerance = z_tolerance

    def build(self, triangle: Triangle, mesh: TriangleMesh,
              index: Optional[int] = None) -> PrismResult:
        """Build the prism for one triangle of ``mesh``.

        Never raises for bad geometry: the outcome is a PrismResult that is
        either ``ok`` or a ``skip`` with a reason.  Faults outside plain
        geometry errors (out of memory, kernel crashes) raise
        FatalGeometryError.
        """
        label = f"T{index}" if index is not None else str(triangle.indices)
        n_points = len(mesh.points)
        if any(i < 0 or i >= n_points for i in triangle.indices):
            return self._skip(SkipReason.DEGENERATE,
                              f"{label}: vertex index out of range", index)

        p1, p2, p3 = mesh.corners(triangle)
        normal = plane_normal(p1, p2, p3)
        if np.linalg.norm(normal) < COLLINEAR_EPSILON:
            return self._skip(SkipReason.DEGENERATE,
                              f"{label}: collinear top triangle", index)

        base = Polygon([(p1.x, p1.y), (p2.x, p2.y), (p3.x, p3.y)])
        if not base.is_valid or base.area < self.min_volume:
            return self._skip(SkipReason.DEGENERATE,
                              f"{label}: base area too small ({base.area:.1e})",
                              index)

        top_zs = (p1.z, p2.z, p3.z)
        max_top = max(top_zs)
        min_top = min(top_zs)
        height = max(max(max_top, 0.0) + self.extrusion_buffer,
                     MIN_EXTRUSION_HEIGHT)

        try:
            block = trimesh.creation.extrude_polygon(orient(base, sign=1.0),
                                                     height=height)
            # slice_plane keeps the side the normal points to: point it down
            cut_normal = -normal if normal[2] >= 0 else normal
            prism = block.slice_plane(as_vector(p1), cut_normal, cap=True)
        except (ValueError, RuntimeError, IndexError) as e:
            return self._skip(SkipReason.VALIDATION_FAILED,
                              f"{label}: extrude/slice failed: {e}", index)
        except Exception as e:
            logger.error(f"Fatal error while building prism {label}: {e}")
            raise FatalGeometryError(f"Prism {label} aborted: {e}") from e

        problem = self._validate(prism, min_top, max_top)
        if problem:
            return self._skip(SkipReason.VALIDATION_FAILED,
                              f"{label}: {problem}", index)

        logger.debug(f"  prism {label}: volume={prism.volume:.4f}, "
                     f"z=[{prism.bounds[0][2]:.3f}, {prism.bounds[1][2]:.3f}]")
        return PrismResult.ok(prism, triangle_index=index)

    def build_all(self, mesh: TriangleMesh, workers: int = 1,
                  progress: bool = False) -> List[PrismResult]:
        """Build one PrismResult per triangle, in triangle order.

        With ``workers > 1`` prisms are built on a thread pool; results are
        still returned in triangle order.
        """
        jobs = list(enumerate(mesh.triangles))

        def _one(job):
            i, tri = job
            return self.build(tri, mesh, index=i)

        if workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(tqdm(pool.map(_one, jobs), total=len(jobs),
                                    desc="Prisms", disable=not progress))
        else:
            results = [_one(job) for job in tqdm(jobs, desc="Prisms",
                                                 disable=not progress)]

        built = sum(1 for r in results if r.is_ok)
        logger.info(f"Prisms: {built}/{len(results)} built, "
                    f"{len(results) - built} skipped")
        return results

    def _validate(self, prism, min_top: float, max_top: float) -> Optional[str]:
        """Return a description of the first failed check, or None."""
        if prism is None or len(prism.faces) == 0:
            return "slice produced an empty body"
        if not prism.is_volume:
            trimesh.repair.fix_normals(prism)
            if not prism.is_volume:
                return "sliced body is not a closed volume"
        volume = prism.volume
        if volume < self.min_volume:
            return f"volume {volume:.3e} below {self.min_volume:.1e}"

        z_min = prism.bounds[0][2]
        z_max = prism.bounds[1][2]
        tol = self.z_tolerance
        if abs(z_min) > tol:
            return f"base not at Z=0 (min Z {z_min:.3f})"
        if z_max > max_top + tol or z_max < min_top - tol:
            return (f"top Z {z_max:.3f} outside expected "
                    f"[{min_top:.3f}, {max_top:.3f}]")
        return None

    @staticmethod
    def _skip(reason: SkipReason, detail: str, index) -> PrismResult:
        logger.warning(f"  Skipping prism {detail}")
        return PrismResult.skip(reason, detail, triangle_index=index)


def build(triangle: Triangle, mesh: TriangleMesh,
          extrusion_buffer: float = DEFAULT_EXTRUSION_BUFFER,
          min_volume: float = DEFAULT_MIN_VOLUME) -> PrismResult:
    """Build one prism with the given settings."""
    return PrismBuilder(extrusion_buffer=extrusion_buffer,
                        min_volume=min_volume).build(triangle, mesh)
