from collections import defaultdict

import pytest

from topobuilder.models import Point3D
from topobuilder.points import collect, grid_key


def test_near_duplicates_keep_highest_sample():
    raw = [Point3D(5.0, 5.0, 10.0), Point3D(5.0005, 5.0005, 20.0)]
    unique = collect(raw, tolerance=0.001)
    assert len(unique) == 1
    assert unique[0].x == pytest.approx(5.0, abs=1e-3)
    assert unique[0].y == pytest.approx(5.0, abs=1e-3)
    assert unique[0].z == 20.0


def test_tie_keeps_first_seen_sample():
    first = Point3D(1.0, 1.0, 5.0)
    second = Point3D(1.0001, 1.0, 5.0)
    assert collect([first, second], tolerance=0.001) == [first]


def test_lower_later_sample_does_not_replace():
    high = Point3D(2.0, 2.0, 9.0)
    low = Point3D(2.0, 2.0, 1.0)
    assert collect([high, low], tolerance=0.001) == [high]


def test_output_follows_first_appearance_order():
    raw = [
        Point3D(0.0, 0.0, 1.0),
        Point3D(10.0, 0.0, 1.0),
        Point3D(0.0, 0.0, 3.0),    # replaces the first cell's sample in place
        Point3D(5.0, 5.0, 1.0),
    ]
    unique = collect(raw, tolerance=0.01)
    assert [(p.x, p.y) for p in unique] == [(0.0, 0.0), (10.0, 0.0), (5.0, 5.0)]
    assert unique[0].z == 3.0


def test_points_straddling_a_cell_boundary_stay_separate():
    # 0.02 apart with tolerance 1.0, but on either side of x = 0.5
    raw = [Point3D(0.49, 0.0, 1.0), Point3D(0.51, 0.0, 2.0)]
    assert grid_key(0.49, 0.0, 1.0) != grid_key(0.51, 0.0, 1.0)
    assert len(collect(raw, tolerance=1.0)) == 2


def test_distinct_points_are_all_kept(square_points):
    assert collect(square_points, tolerance=0.001) == square_points


def test_non_positive_tolerance_is_clamped():
    raw = [Point3D(0.0, 0.0, 1.0), Point3D(1.0, 0.0, 1.0)]
    assert len(collect(raw, tolerance=0.0)) == 2


def test_empty_input():
    assert collect([], tolerance=0.1) == []


def test_one_point_per_cell_with_group_maximum(random_points):
    tol = 5.0
    raw = list(random_points) + [Point3D(p.x + 0.1, p.y, p.z + 1.0)
                                 for p in random_points[:10]]
    unique = collect(raw, tolerance=tol)

    groups = defaultdict(list)
    for p in raw:
        groups[grid_key(p.x, p.y, tol)].append(p.z)

    keys = [grid_key(p.x, p.y, tol) for p in unique]
    assert len(set(keys)) == len(unique) == len(groups)
    for p, key in zip(unique, keys):
        assert p.z == max(groups[key])
