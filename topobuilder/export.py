"""Surface mesh export and file sinks for solids, surfaces and manifests.

``export`` turns a TriangleMesh into a plain vertex/face FacetedMesh for
viewing.  The ``write_*`` helpers persist results with trimesh, which
picks the format from the file suffix.
"""

import json
import logging
import pathlib

import numpy as np
import trimesh

from .constants import SCENE_FORMATS
from .models import FacetedMesh, Solid, TriangleMesh

logger = logging.getLogger(__name__)


def export(mesh: TriangleMesh, one_based: bool = False) -> FacetedMesh:
    """Structural copy of ``mesh`` as vertices plus face index triples.

    Faces are 0-based unless ``one_based`` is set (polyface convention).
    """
    vertices = mesh.vertices_array()
    faces = mesh.faces_array()
    if one_based:
        faces = faces + 1
    return FacetedMesh(vertices=vertices, faces=faces, one_based=one_based)


def _suffix(path: pathlib.Path) -> str:
    return path.suffix.lower().lstrip('.')


def write_surface(faceted: FacetedMesh, path) -> pathlib.Path:
    """Write the visualization surface to ``path``."""
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if faceted.num_faces == 0:
        raise ValueError("Surface has no faces to write")
    faceted.to_trimesh().export(str(path), file_type=_suffix(path))
    logger.info(f"Surface written: {path} ({faceted.num_faces} faces, "
                f"{len(faceted.vertices)} verts)")
    return path


def solid_scene(solid: Solid) -> trimesh.Scene:
    """Scene with one node per body: the merged terrain and each
    detached part."""
    scene = trimesh.Scene()
    scene.add_geometry(solid.body, node_name='terrain', geom_name='terrain')
    for i, part in enumerate(solid.detached, start=1):
        name = f"terrain_part_{i}"
        scene.add_geometry(part, node_name=name, geom_name=name)
    return scene


def write_solid(solid: Solid, path) -> pathlib.Path:
    """Write the solid to ``path``.

    Scene formats (3MF, glTF) keep detached parts as separate bodies;
    single-mesh formats (STL, PLY, OBJ, OFF) get all parts concatenated.
    """
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    file_type = _suffix(path)

    if file_type in SCENE_FORMATS:
        solid_scene(solid).export(str(path), file_type=file_type)
    else:
        solid.to_mesh().export(str(path), file_type=file_type)

    size_mb = path.stat().st_size / 1024 / 1024
    logger.info(f"Solid written: {path} ({len(solid.parts)} bodies, "
                f"{size_mb:.2f} MB)")
    return path


def _json_default(value):
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, pathlib.Path):
        return str(value)
    raise TypeError(f"Not JSON serialisable: {type(value).__name__}")


def write_manifest(summary: dict, path) -> pathlib.Path:
    """Write a reconstruction summary as indented JSON."""
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(summary, f, indent=2, default=_json_default)
    logger.info(f"Manifest: {path}")
    return path
