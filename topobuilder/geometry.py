"""Planar predicates and small vector helpers used by the triangulator
and the prism builder.

Points are anything with ``.x`` / ``.y`` (and ``.z`` for 3D helpers).
"""

import math

import numpy as np

from .constants import COLLINEAR_EPSILON


def orientation(a, b, c) -> float:
    """Twice the signed area of triangle abc in plan view.

    Positive for counter-clockwise, negative for clockwise.
    """
    return (b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x)


def is_collinear(a, b, c, eps: float = COLLINEAR_EPSILON) -> bool:
    return abs(orientation(a, b, c)) < eps


def in_circumcircle(p, a, b, c, eps: float = COLLINEAR_EPSILON) -> bool:
    """Return True if p lies strictly inside the circumcircle of abc.

    The determinant is evaluated with p translated to the origin and its
    sign is read against the winding of abc, so the answer does not depend
    on vertex order.  Collinear triples have no circumcircle and always
    return False.
    """
    orient = orientation(a, b, c)
    if abs(orient) < eps:
        return False

    ax, ay = a.x - p.x, a.y - p.y
    bx, by = b.x - p.x, b.y - p.y
    cx, cy = c.x - p.x, c.y - p.y

    a_sq = ax * ax + ay * ay
    b_sq = bx * bx + by * by
    c_sq = cx * cx + cy * cy

    det = (ax * (by * c_sq - cy * b_sq)
           - ay * (bx * c_sq - cx * b_sq)
           + a_sq * (bx * cy - cx * by))

    if orient > 0:
        return det > eps
    return det < -eps


def circumcircle(a, b, c):
    """Return ((cx, cy), radius) of the circle through a, b, c.

    Returns None for collinear input.
    """
    d = 2.0 * orientation(a, b, c)
    if abs(d) < COLLINEAR_EPSILON:
        return None
    b_x, b_y = b.x - a.x, b.y - a.y
    c_x, c_y = c.x - a.x, c.y - a.y
    b_sq = b_x * b_x + b_y * b_y
    c_sq = c_x * c_x + c_y * c_y
    ux = (c_y * b_sq - b_y * c_sq) / d
    uy = (b_x * c_sq - c_x * b_sq) / d
    return (a.x + ux, a.y + uy), math.hypot(ux, uy)


def bounding_box(points):
    """(min_x, min_y, max_x, max_y) of a non-empty point sequence."""
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def as_vector(p) -> np.ndarray:
    return np.array([p.x, p.y, p.z], dtype=np.float64)


def plane_normal(p1, p2, p3) -> np.ndarray:
    """Unnormalised normal of the plane through three 3D points."""
    v1 = as_vector(p1)
    return np.cross(as_vector(p2) - v1, as_vector(p3) - v1)
