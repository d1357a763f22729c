"""Deduplicate raw elevation samples into a unique planar point set.

Samples are grouped on a quantised grid: the cell key of a point is
``(round(x / tol), round(y / tol))``.  All samples sharing a cell collapse
into one point carrying the highest elevation seen in that cell.

Two samples closer than ``tol`` but straddling a cell boundary (for
example x = 0.49 * tol and x = 0.51 * tol) land in different cells and are
kept apart.  Grouping is by cell, not by true distance.
"""

import logging
from typing import Dict, Iterable, List, Tuple

from .constants import DEFAULT_XY_TOLERANCE, MIN_TOLERANCE
from .models import Point3D

logger = logging.getLogger(__name__)


def grid_key(x: float, y: float, tolerance: float) -> Tuple[int, int]:
    """Quantised cell of a planar location."""
    return round(x / tolerance), round(y / tolerance)


def collect(raw_points: Iterable[Point3D],
            tolerance: float = DEFAULT_XY_TOLERANCE) -> List[Point3D]:
    """Return one point per occupied grid cell, keeping the maximum Z.

    Parameters
    ----------
    raw_points : iterable of Point3D
        Samples in arrival order; duplicates and near-duplicates allowed.
    tolerance : float
        Cell size along each axis.  Values <= 0 are clamped to 1e-9.

    Returns
    -------
    list[Point3D] — one sample per cell, in order of first appearance of
    the cell.  Within a cell the highest sample wins and the earliest one
    wins a tie.
    """
    tolerance = max(tolerance, MIN_TOLERANCE)
    cells: Dict[Tuple[int, int], Point3D] = {}
    raw_count = 0

    for p in raw_points:
        raw_count += 1
        key = grid_key(p.x, p.y, tolerance)
        kept = cells.get(key)
        if kept is None or p.z > kept.z:
            cells[key] = p

    unique = list(cells.values())
    merged = raw_count - len(unique)
    if merged:
        logger.info(f"Consolidated {merged} duplicate XY samples "
                    f"({raw_count} raw → {len(unique)} unique, tol={tolerance})")
    else:
        logger.debug(f"No duplicate XY samples among {raw_count} points")
    return unique
