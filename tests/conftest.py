"""Shared pytest fixtures: small point sets and a seeded random terrain."""

import logging

import numpy as np
import pytest

from topobuilder.models import Point3D


# =============================================================================
# Logging
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    logging.getLogger("topobuilder").setLevel(logging.DEBUG)
    yield


# =============================================================================
# Point sets
# =============================================================================

@pytest.fixture
def square_points():
    """Four corners of a 10 x 10 square with differing elevations."""
    return [
        Point3D(0.0, 0.0, 10.0),
        Point3D(10.0, 0.0, 12.0),
        Point3D(10.0, 10.0, 15.0),
        Point3D(0.0, 10.0, 11.0),
    ]


@pytest.fixture
def collinear_points():
    return [Point3D(0.0, 0.0, 1.0), Point3D(1.0, 0.0, 1.0), Point3D(2.0, 0.0, 1.0)]


@pytest.fixture
def random_points():
    """40 samples of a smooth hill over a 100 x 100 area."""
    rng = np.random.default_rng(42)
    xy = rng.uniform(0.0, 100.0, size=(40, 2))
    z = 5.0 + 20.0 * np.exp(-((xy[:, 0] - 50.0) ** 2 + (xy[:, 1] - 50.0) ** 2) / 800.0)
    return [Point3D(float(x), float(y), float(h)) for (x, y), h in zip(xy, z)]


@pytest.fixture
def grid_points():
    """5 x 4 regular grid with a tilted surface, jittered off the lattice."""
    rng = np.random.default_rng(7)
    points = []
    for j in range(4):
        for i in range(5):
            x = i * 10.0 + rng.uniform(-1.0, 1.0)
            y = j * 10.0 + rng.uniform(-1.0, 1.0)
            points.append(Point3D(x, y, 2.0 + 0.1 * x + 0.05 * y))
    return points
