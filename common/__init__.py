"""
Common utilities and infrastructure for the datum and projection library.

This package provides foundational components used across all modules:
- Geodetic constants with provenance
- pint unit registry plus datum rotation and scale conversions
- Shared enumerations and type aliases
- Logging configuration
"""

from common.constants import GeodeticConstants
from common.units import ppm_to_multiplier, rotation_to_radians, to_magnitude
from common.types import (
    Direction,
    ShiftParameterCount,
    PointKind,
    GeocentricMethod,
)
from common.logging_config import get_logger

__all__ = [
    "GeodeticConstants",
    "to_magnitude",
    "rotation_to_radians",
    "ppm_to_multiplier",
    "Direction",
    "ShiftParameterCount",
    "PointKind",
    "GeocentricMethod",
    "get_logger",
]
