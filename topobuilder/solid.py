"""Progressive boolean union of prisms into one terrain solid.

Prisms are merged one by one into a running body.  A union that fails is
not fatal: the offending prism is kept as a detached part of the result
and the failure is recorded.  Boolean union is not associative around
near-degenerate geometry, so the merge order matters and is fixed by the
caller (triangle emission order by default).
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import trimesh

from .constants import (DEFAULT_MIN_VOLUME, DEFAULT_Z_TOLERANCE,
                        UNION_VOLUME_RTOL)
from .errors import FatalGeometryError, NoValidPrisms
from .models import Solid

logger = logging.getLogger(__name__)

UNION_ORDERS = ('emission', 'centroid')


@dataclass
class UnionFailure:
    """A prism that could not be merged into the running body."""
    part_index: int
    message: str


@dataclass
class AssemblyResult:
    solid: Solid
    valid: bool
    union_failures: List[UnionFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def volume(self) -> float:
        return self.solid.volume


def _union(body: trimesh.Trimesh, part: trimesh.Trimesh,
           min_volume: float = DEFAULT_MIN_VOLUME) -> trimesh.Trimesh:
    """Union two closed meshes, raising ValueError if the engine returns
    nothing usable.

    Prisms only touch along shared faces, so the merged volume must equal
    the sum of both inputs.  A result that lost (or gained) volume is
    rejected rather than accepted as a merge.
    """
    merged = trimesh.boolean.union([body, part])
    if merged is None or len(merged.faces) == 0:
        raise ValueError("union produced an empty mesh")
    expected = body.volume + part.volume
    drift = merged.volume - expected
    if abs(drift) > UNION_VOLUME_RTOL * abs(expected) + min_volume:
        raise ValueError(f"union changed volume by {drift:+.4f} "
                         f"(expected {expected:.4f})")
    return merged


class SolidAssembler:
    """Merge prisms into a single body and validate the outcome.

    Parameters
    ----------
    min_volume : float
        Floor for the final solid's volume.
    order : str
        ``'emission'`` keeps the given prism order; ``'centroid'`` sorts
        prisms by plan-view centroid first, which makes the result
        independent of input order.
    z_tolerance : float
        How far below Z = 0 the final solid may reach.
    """

    def __init__(self, min_volume: float = DEFAULT_MIN_VOLUME,
                 order: str = 'emission',
                 z_tolerance: float = DEFAULT_Z_TOLERANCE):
        if order not in UNION_ORDERS:
            raise ValueError(f"Unknown union order {order!r}, "
                             f"expected one of {UNION_ORDERS}")
        self.min_volume = min_volume
        self.order = order
        self.z_tolerance = z_tolerance

    def assemble(self, prisms: Sequence[trimesh.Trimesh]) -> AssemblyResult:
        """Union ``prisms`` into one Solid.

        Raises NoValidPrisms for an empty sequence and FatalGeometryError
        for anything the union engine throws that is not a plain union
        failure.
        """
        prisms = [p for p in prisms if p is not None]
        if not prisms:
            raise NoValidPrisms(0)

        if self.order == 'centroid':
            prisms = sorted(prisms, key=lambda m: (float(m.centroid[0]),
                                                   float(m.centroid[1])))

        t0 = time.perf_counter()
        logger.info(f"Unioning {len(prisms)} prism(s)...")

        body = prisms[0]
        detached: List[trimesh.Trimesh] = []
        failures: List[UnionFailure] = []
        merged_count = 1

        try:
            for i, part in enumerate(prisms[1:], start=1):
                try:
                    body = _union(body, part, self.min_volume)
                    merged_count += 1
                except (ValueError, RuntimeError) as e:
                    logger.warning(f"  Union with part {i} failed ({e}); "
                                   f"keeping it as a separate body")
                    failures.append(UnionFailure(part_index=i, message=str(e)))
                    detached.append(part)
        except Exception as e:
            logger.error(f"Fatal error while unioning prisms: {e}")
            raise FatalGeometryError(f"Union aborted: {e}") from e

        solid = Solid(body=body, detached=detached, merged_count=merged_count)
        elapsed = time.perf_counter() - t0
        valid = self._validate(solid)

        logger.info(f"Union finished: {merged_count} merged, "
                    f"{len(detached)} separate, volume={solid.volume:.3f} "
                    f"({elapsed:.1f}s)")
        return AssemblyResult(solid=solid, valid=valid,
                              union_failures=failures,
                              elapsed_seconds=elapsed)

    def _validate(self, solid: Solid) -> bool:
        volume = solid.volume
        if volume < self.min_volume:
            logger.warning(f"Final solid volume {volume:.3e} is below "
                           f"{self.min_volume:.1e}")
            return False
        z_min = float(solid.bounds[0][2])
        if z_min < -self.z_tolerance:
            logger.warning(f"Final solid dips below Z=0 (min Z {z_min:.3f})")
            return False
        if not solid.body.is_watertight:
            logger.warning("Final solid body is not watertight")
        return True


def assemble(prisms: Sequence[trimesh.Trimesh],
             min_volume: float = DEFAULT_MIN_VOLUME,
             order: Optional[str] = None) -> AssemblyResult:
    """Assemble with the given settings."""
    return SolidAssembler(min_volume=min_volume,
                          order=order or 'emission').assemble(prisms)
