"""TerrainBuilder — thin orchestrator that runs the reconstruction stages."""

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .config import ReconstructionConfig
from .delaunay import DelaunayTriangulator
from .errors import NoValidPrisms
from .export import export
from .models import FacetedMesh, Point3D, PrismResult, TriangleMesh
from .points import collect
from .prism import PrismBuilder
from .solid import AssemblyResult, SolidAssembler

logger = logging.getLogger(__name__)


@dataclass
class Reconstruction:
    """Everything one run produced."""
    raw_count: int
    points: List[Point3D]
    mesh: TriangleMesh
    assembly: AssemblyResult
    surface: Optional[FacetedMesh] = None
    skipped: Dict[str, int] = field(default_factory=dict)
    elapsed_seconds: float = 0.0

    @property
    def solid(self):
        return self.assembly.solid

    def summary(self) -> dict:
        solid = self.assembly.solid
        lo, hi = solid.bounds
        return {
            'raw_points': self.raw_count,
            'unique_points': len(self.points),
            'triangles': self.mesh.num_triangles,
            'prisms_built': self.mesh.num_triangles - sum(self.skipped.values()),
            'prisms_skipped': dict(self.skipped),
            'merged_parts': solid.merged_count,
            'separate_parts': len(solid.detached),
            'union_failures': [
                {'part': f.part_index, 'message': f.message}
                for f in self.assembly.union_failures
            ],
            'volume': round(solid.volume, 6),
            'bounds': [lo.tolist(), hi.tolist()],
            'watertight': bool(solid.body.is_watertight),
            'valid': self.assembly.valid,
            'surface_faces': self.surface.num_faces if self.surface else 0,
            'elapsed_seconds': round(self.elapsed_seconds, 2),
        }


class TerrainBuilder:
    def __init__(self, config: Optional[ReconstructionConfig] = None,
                 progress: bool = False):
        """
        config: reconstruction settings; defaults when omitted.
        progress: show a progress bar while prisms are built.
        """
        self.config = config or ReconstructionConfig()
        self.progress = progress
        self.triangulator = DelaunayTriangulator()
        self.prism_builder = PrismBuilder(
            extrusion_buffer=self.config.extrusion_buffer,
            min_volume=self.config.min_volume,
            z_tolerance=self.config.z_tolerance,
        )
        self.assembler = SolidAssembler(min_volume=self.config.min_volume,
                                        order=self.config.union_order,
                                        z_tolerance=self.config.z_tolerance)

    def triangulate(self, raw_points: Iterable[Point3D]) -> TriangleMesh:
        """Deduplicate and triangulate without building any solid."""
        unique = collect(raw_points, self.config.xy_tolerance)
        logger.info(f"Found {len(unique)} unique XY points")
        return self.triangulator.triangulate(unique)

    def reconstruct(self, raw_points: Iterable[Point3D]) -> Reconstruction:
        """Run the full pipeline once.

        Raises InsufficientPoints, NoValidPrisms or FatalGeometryError; in
        those cases nothing is returned, so no partial result escapes.
        """
        t0 = time.perf_counter()
        raw = list(raw_points)
        logger.info(f"Reconstructing terrain from {len(raw)} raw points")

        unique = collect(raw, self.config.xy_tolerance)
        logger.info(f"Found {len(unique)} unique XY points")
        mesh = self.triangulator.triangulate(unique)

        surface = export(mesh) if self.config.build_surface and mesh.triangles else None

        results = self.prism_builder.build_all(mesh, workers=self.config.workers,
                                               progress=self.progress)
        prisms = [r.prism for r in results if r.is_ok]
        skipped = _tally_skips(results)
        if not prisms:
            logger.error(f"No valid prisms from {len(results)} triangles")
            raise NoValidPrisms(len(results))

        assembly = self.assembler.assemble(prisms)

        elapsed = time.perf_counter() - t0
        logger.info(f"Terrain solid ready in {elapsed:.1f}s "
                    f"(volume={assembly.volume:.3f}, valid={assembly.valid})")
        return Reconstruction(raw_count=len(raw), points=unique, mesh=mesh,
                              assembly=assembly, surface=surface,
                              skipped=skipped, elapsed_seconds=elapsed)


def _tally_skips(results: List[PrismResult]) -> Dict[str, int]:
    counts = Counter(r.reason.value for r in results if not r.is_ok)
    return dict(counts)


def reconstruct(raw_points: Iterable[Point3D],
                config: Optional[ReconstructionConfig] = None) -> Reconstruction:
    """One-shot reconstruction with the given (or default) settings."""
    return TerrainBuilder(config).reconstruct(raw_points)
