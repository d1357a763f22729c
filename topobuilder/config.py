"""Reconstruction settings, with environment / .env overrides."""

import dataclasses
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .constants import (DEFAULT_EXTRUSION_BUFFER, DEFAULT_MIN_VOLUME,
                        DEFAULT_XY_TOLERANCE, DEFAULT_Z_TOLERANCE,
                        MILLIMETRE_XY_TOLERANCE)
from .errors import ConfigError

ENV_PREFIX = "TOPOBUILDER_"

_MILLIMETRE_UNITS = frozenset({'mm', 'millimeter', 'millimeters',
                               'millimetre', 'millimetres'})


def tolerance_for_units(units: str) -> float:
    """Planar dedup tolerance for a drawing unit system.

    Millimetre drawings use 0.1, everything else 0.001.
    """
    if units and units.strip().lower() in _MILLIMETRE_UNITS:
        return MILLIMETRE_XY_TOLERANCE
    return DEFAULT_XY_TOLERANCE


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(ENV_PREFIX + name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{name}={raw!r} is not a number") from None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(ENV_PREFIX + name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{name}={raw!r} is not an integer") from None


@dataclass(frozen=True)
class ReconstructionConfig:
    xy_tolerance: float = DEFAULT_XY_TOLERANCE
    extrusion_buffer: float = DEFAULT_EXTRUSION_BUFFER
    min_volume: float = DEFAULT_MIN_VOLUME
    z_tolerance: float = DEFAULT_Z_TOLERANCE
    workers: int = 1
    build_surface: bool = True
    union_order: str = 'emission'

    def __post_init__(self):
        if self.xy_tolerance <= 0:
            raise ConfigError(f"xy_tolerance must be positive, got {self.xy_tolerance}")
        if self.extrusion_buffer < 0:
            raise ConfigError(f"extrusion_buffer must be >= 0, got {self.extrusion_buffer}")
        if self.min_volume <= 0:
            raise ConfigError(f"min_volume must be positive, got {self.min_volume}")
        if self.z_tolerance <= 0:
            raise ConfigError(f"z_tolerance must be positive, got {self.z_tolerance}")
        if self.workers < 1:
            raise ConfigError(f"workers must be >= 1, got {self.workers}")
        if self.union_order not in ('emission', 'centroid'):
            raise ConfigError(f"union_order must be 'emission' or 'centroid', "
                              f"got {self.union_order!r}")

    def replace(self, **changes) -> "ReconstructionConfig":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_env(cls, dotenv_path=None) -> "ReconstructionConfig":
        """Build a config from ``TOPOBUILDER_*`` variables.

        A ``.env`` file is loaded first; variables already set in the
        process environment take precedence over it.
        """
        load_dotenv(dotenv_path)
        no_surface = os.environ.get(ENV_PREFIX + "NO_SURFACE", "").strip().lower()
        return cls(
            xy_tolerance=_env_float("XY_TOLERANCE", DEFAULT_XY_TOLERANCE),
            extrusion_buffer=_env_float("EXTRUSION_BUFFER", DEFAULT_EXTRUSION_BUFFER),
            min_volume=_env_float("MIN_VOLUME", DEFAULT_MIN_VOLUME),
            z_tolerance=_env_float("Z_TOLERANCE", DEFAULT_Z_TOLERANCE),
            workers=_env_int("WORKERS", 1),
            build_surface=no_surface not in ("1", "true", "yes"),
            union_order=os.environ.get(ENV_PREFIX + "UNION_ORDER", "").strip() or 'emission',
        )
