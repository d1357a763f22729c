import pytest
import trimesh

from topobuilder.delaunay import triangulate
from topobuilder.errors import FatalGeometryError, NoValidPrisms
from topobuilder.prism import PrismBuilder
from topobuilder.solid import SolidAssembler, assemble


def _prisms(points):
    mesh = triangulate(points)
    results = PrismBuilder().build_all(mesh)
    return [r.prism for r in results if r.is_ok]


def test_square_unions_into_one_body(square_points):
    prisms = _prisms(square_points)
    assert len(prisms) == 2

    result = assemble(prisms)
    solid = result.solid
    assert result.valid
    assert not result.union_failures
    assert solid.merged_count == 2
    assert solid.detached == []
    assert solid.body.is_watertight
    assert 10.0 <= solid.bounds[1][2] <= 15.0 + 1e-6
    assert solid.bounds[0][2] == pytest.approx(0.0, abs=1e-6)


def test_shared_faces_do_not_double_count(grid_points):
    prisms = _prisms(grid_points)
    total = sum(p.volume for p in prisms)
    result = assemble(prisms)
    # any part the engine could not merge cleanly is reported, not lost
    assert len(result.solid.detached) == len(result.union_failures)
    assert result.solid.merged_count + len(result.solid.detached) == len(prisms)
    assert result.solid.volume == pytest.approx(total, rel=1e-4)


def test_union_that_loses_volume_keeps_part_separate(square_points, monkeypatch):
    prisms = _prisms(square_points)

    def _drop_part(meshes, **kwargs):
        return meshes[0].copy()

    monkeypatch.setattr(trimesh.boolean, "union", _drop_part)
    result = assemble(prisms)
    assert len(result.union_failures) == 1
    assert "volume" in result.union_failures[0].message
    assert result.solid.body is prisms[0]
    assert result.solid.detached == [prisms[1]]
    assert result.solid.volume == pytest.approx(prisms[0].volume + prisms[1].volume)


def test_final_depth_check_uses_configured_tolerance(square_points):
    prism = _prisms(square_points)[0].copy()
    prism.apply_translation([0.0, 0.0, -0.05])
    assert SolidAssembler().assemble([prism]).valid is False
    assert SolidAssembler(z_tolerance=0.1).assemble([prism]).valid is True


def test_empty_input_raises():
    with pytest.raises(NoValidPrisms):
        assemble([])


def test_single_prism_is_the_solid(square_points):
    prism = _prisms(square_points)[0]
    result = assemble([prism])
    assert result.solid.body is prism
    assert result.solid.volume == pytest.approx(prism.volume)


def test_failed_union_keeps_part_separate(square_points, monkeypatch):
    prisms = _prisms(square_points)

    def _fail(meshes, **kwargs):
        raise ValueError("engine refused")

    monkeypatch.setattr(trimesh.boolean, "union", _fail)
    result = assemble(prisms)
    assert len(result.union_failures) == 1
    assert result.union_failures[0].part_index == 1
    assert result.solid.detached == [prisms[1]]
    assert result.solid.volume == pytest.approx(prisms[0].volume + prisms[1].volume)


def test_unexpected_engine_error_is_fatal(square_points, monkeypatch):
    prisms = _prisms(square_points)

    def _boom(meshes, **kwargs):
        raise MemoryError("kernel fault")

    monkeypatch.setattr(trimesh.boolean, "union", _boom)
    with pytest.raises(FatalGeometryError):
        assemble(prisms)


def test_volume_floor_marks_result_invalid(square_points):
    prisms = _prisms(square_points)
    result = SolidAssembler(min_volume=1e9).assemble(prisms)
    assert not result.valid
    assert result.solid.volume > 0


def test_centroid_order_is_input_order_independent(grid_points):
    prisms = _prisms(grid_points)
    a = SolidAssembler(order='centroid').assemble(prisms)
    b = SolidAssembler(order='centroid').assemble(list(reversed(prisms)))
    assert a.solid.volume == pytest.approx(b.solid.volume, rel=1e-9)


def test_unknown_order_rejected():
    with pytest.raises(ValueError):
        SolidAssembler(order='random')
