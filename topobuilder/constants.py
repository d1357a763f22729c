"""Numeric defaults and tolerances shared across the pipeline."""

# ── Configurable defaults ───────────────────────────────────────────────
DEFAULT_XY_TOLERANCE = 0.001      # planar dedup cell size (drawing units)
MILLIMETRE_XY_TOLERANCE = 0.1     # same, for drawings in millimetres
DEFAULT_EXTRUSION_BUFFER = 0.5    # headroom above the highest top vertex
DEFAULT_MIN_VOLUME = 1e-7         # volume floor for prisms and the final solid
DEFAULT_Z_TOLERANCE = 0.01        # slack on the post-slice Z extents check

# ── Fixed geometric thresholds ──────────────────────────────────────────
COLLINEAR_EPSILON = 1e-9
MIN_EXTRUSION_HEIGHT = 0.1
MIN_TOLERANCE = 1e-9
UNION_VOLUME_RTOL = 1e-5        # prisms never overlap: a union keeps the summed volume

# Scaffold triangle placement, as multiples of the point cloud extent
SCAFFOLD_SPAN = 20.0
SCAFFOLD_DROP = 10.0
SCAFFOLD_MIN_EXTENT = 1e-6
SCAFFOLD_FALLBACK_SIZE = 100.0

# Solid formats that hold several bodies as separate scene nodes
SCENE_FORMATS = frozenset({'3mf', 'glb', 'gltf'})
