"""Elevation point sources: plain-text XYZ / CSV files and arrays."""

import logging
import math
import pathlib
import re
from typing import List

import numpy as np

from .errors import PointSourceError
from .models import Point3D

logger = logging.getLogger(__name__)

_SPLIT = re.compile(r"[,\s]+")


def _fields(line: str) -> List[str]:
    if ';' in line:
        # semicolon-separated files may write decimal commas
        return [f.strip().replace(',', '.') for f in line.split(';') if f.strip()]
    return [f for f in _SPLIT.split(line) if f]


def _is_number(field: str) -> bool:
    try:
        float(field)
    except ValueError:
        return False
    return True


def _parse_row(fields: List[str]):
    if len(fields) < 3:
        raise ValueError(f"expected 3 columns, got {len(fields)}")
    x, y, z = (float(f) for f in fields[:3])
    return x, y, z


def read_points(path) -> List[Point3D]:
    """Read ``x y z`` rows from a text file.

    Columns may be separated by whitespace, commas or semicolons; extra
    columns are ignored.  In semicolon-separated rows a comma is a decimal
    mark (``1,5;2,5;3,0``).  ``#`` starts a comment line and a first data
    line whose leading field is not a number is taken as a header.  Rows
    with fewer than 3 columns raise PointSourceError; rows with non-finite
    values are dropped with a warning.
    """
    path = pathlib.Path(path)
    if not path.exists():
        raise PointSourceError(f"Point file not found: {path}")

    points: List[Point3D] = []
    skipped = 0
    seen_data = False

    with open(path, 'r', encoding='utf-8') as f:
        for line_no, line in enumerate(f, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith('#'):
                continue
            fields = _fields(stripped)
            if not seen_data and fields and not _is_number(fields[0]):
                seen_data = True
                logger.debug(f"{path.name}:{line_no}: treating as header")
                continue
            seen_data = True
            try:
                x, y, z = _parse_row(fields)
            except ValueError as e:
                raise PointSourceError(f"{path.name}:{line_no}: {e}") from e
            if not all(math.isfinite(v) for v in (x, y, z)):
                skipped += 1
                continue
            points.append(Point3D(x, y, z))

    if skipped:
        logger.warning(f"Dropped {skipped} rows with non-finite values "
                       f"from {path.name}")
    logger.info(f"Read {len(points)} elevation points from {path.name}")
    return points


def points_from_array(array) -> List[Point3D]:
    """Convert an (N, 3) array-like of x, y, z into Point3D samples."""
    arr = np.asarray(array, dtype=np.float64)
    if arr.size == 0:
        return []
    if arr.ndim != 2 or arr.shape[1] < 3:
        raise PointSourceError(f"Expected an (N, 3) array, got shape {arr.shape}")
    finite = np.isfinite(arr[:, :3]).all(axis=1)
    if not finite.all():
        logger.warning(f"Dropped {int((~finite).sum())} non-finite rows")
    return [Point3D(float(x), float(y), float(z))
            for x, y, z in arr[finite, :3]]
