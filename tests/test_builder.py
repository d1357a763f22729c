import pytest

from topobuilder.builder import TerrainBuilder, reconstruct
from topobuilder.config import ReconstructionConfig
from topobuilder.errors import InsufficientPoints, NoValidPrisms
from topobuilder.models import Point3D


def test_square_terrain(square_points):
    result = reconstruct(square_points)
    assert result.mesh.num_triangles == 2
    assert len(result.solid.parts) == 1
    assert result.solid.volume > 0
    top = result.solid.bounds[1][2]
    assert 10.0 <= top <= 15.0 + 1e-6
    # either diagonal: 50 * (73/3) or 50 * (71/3)
    assert 50.0 * 71.0 / 3.0 - 1e-3 <= result.solid.volume <= 50.0 * 73.0 / 3.0 + 1e-3
    assert result.assembly.valid


def test_duplicates_collapse_before_triangulation(square_points):
    raw = square_points + [Point3D(0.0004, 0.0, 30.0)]
    result = reconstruct(raw)
    assert result.raw_count == 5
    assert len(result.points) == 4
    assert max(p.z for p in result.points) == 30.0


def test_collinear_input_has_no_valid_prisms(collinear_points):
    with pytest.raises(NoValidPrisms):
        reconstruct(collinear_points)


def test_two_unique_points_are_insufficient():
    raw = [Point3D(0, 0, 1), Point3D(1, 1, 2), Point3D(1.0001, 1.0, 3)]
    with pytest.raises(InsufficientPoints):
        reconstruct(raw)


def test_surface_matches_triangulation(grid_points):
    result = reconstruct(grid_points)
    assert result.surface is not None
    assert result.surface.num_faces == result.mesh.num_triangles
    assert len(result.surface.vertices) == len(result.points)


def test_surface_can_be_disabled(square_points):
    config = ReconstructionConfig(build_surface=False)
    assert reconstruct(square_points, config).surface is None


def test_summary_is_plain_data(grid_points):
    summary = TerrainBuilder().reconstruct(grid_points).summary()
    assert summary['raw_points'] == len(grid_points)
    assert summary['prisms_built'] == summary['triangles']
    assert summary['prisms_skipped'] == {}
    assert summary['separate_parts'] == len(summary['union_failures'])
    assert summary['valid'] is True
    assert len(summary['bounds']) == 2


def test_runs_are_independent(square_points, grid_points):
    builder = TerrainBuilder()
    first = builder.reconstruct(square_points)
    builder.reconstruct(grid_points)
    again = builder.reconstruct(square_points)
    assert again.solid.volume == pytest.approx(first.solid.volume)
    assert len(again.points) == 4


def test_parallel_prisms_give_same_volume(grid_points):
    serial = reconstruct(grid_points)
    parallel = reconstruct(grid_points, ReconstructionConfig(workers=4))
    assert parallel.solid.volume == pytest.approx(serial.solid.volume, rel=1e-9)


def test_below_datum_triangles_are_skipped_and_tallied():
    raw = [
        Point3D(0, 0, 5), Point3D(10, 0, 5), Point3D(0, 10, 5),
        Point3D(30, 30, -5), Point3D(40, 30, -5), Point3D(30, 40, -5),
    ]
    result = reconstruct(raw)
    assert result.skipped.get('validation_failed', 0) >= 1
    assert result.solid.volume > 0
