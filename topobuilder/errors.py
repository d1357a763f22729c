"""Exception types raised by the reconstruction pipeline.

Only whole-run failures are exceptions.  Per-triangle and per-union
problems are reported as values (see ``models.PrismResult`` and
``solid.UnionFailure``) and never unwind the stack.
"""


class TopoBuilderError(Exception):
    """Base class for every error the pipeline raises on purpose."""


class InsufficientPoints(TopoBuilderError):
    """Fewer than 3 unique points survived deduplication."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"At least 3 unique points are required for triangulation, got {count}")


class NoValidPrisms(TopoBuilderError):
    """Every triangle was skipped, so there is nothing to assemble."""

    def __init__(self, attempted: int = 0):
        self.attempted = attempted
        super().__init__(
            f"No valid prisms could be built ({attempted} triangles attempted)")


class FatalGeometryError(TopoBuilderError):
    """Unexpected failure inside the geometry kernel; aborts the whole run."""


class ConfigError(TopoBuilderError, ValueError):
    """A configuration value is missing, unparsable or out of range."""


class PointSourceError(TopoBuilderError):
    """An elevation point file could not be read."""
