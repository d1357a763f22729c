"""TopoBuilder package — terrain surfaces and watertight solids from
scattered elevation points."""

from topobuilder.builder import Reconstruction, TerrainBuilder, reconstruct
from topobuilder.config import ReconstructionConfig, tolerance_for_units
from topobuilder.delaunay import DelaunayTriangulator, triangulate
from topobuilder.errors import (ConfigError, FatalGeometryError,
                                InsufficientPoints, NoValidPrisms,
                                PointSourceError, TopoBuilderError)
from topobuilder.export import export
from topobuilder.models import (Edge, FacetedMesh, Point2D, Point3D,
                                PrismResult, SkipReason, Solid, Triangle,
                                TriangleMesh)
from topobuilder.points import collect
from topobuilder.prism import PrismBuilder
from topobuilder.solid import AssemblyResult, SolidAssembler, UnionFailure, assemble

__version__ = "0.1.0"
