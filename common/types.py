"""
Shared Type Definitions for the Conversion Library.

Enumerations and type aliases used across the ellipsoid, datum, point and
projection modules. Keeping them here lets the point types and the
numerical code agree on tags and direction flags without importing each
other.
"""

from enum import Enum, IntEnum
from typing import Optional, Sequence, Tuple, Union


class Direction(IntEnum):
    """Direction of a Helmert transform.

    FORWARD moves coordinates from a datum into the WGS84 frame; INVERSE
    moves them from WGS84 into the datum. The value is the sign applied to
    every shift parameter.
    """
    FORWARD = 1
    INVERSE = -1


class ShiftParameterCount(IntEnum):
    """Number of meaningful Bursa-Wolf parameters a datum carries."""
    NONE = 0
    THREE = 3
    SEVEN = 7


class PointKind(Enum):
    """Tag identifying a point representation."""
    GEODETIC = "geodetic"
    GEOCENTRIC = "geocentric"
    CARTESIAN = "cartesian"
    UTM = "utm"


class GeocentricMethod(Enum):
    """Geocentric to geodetic conversion method.

    ITERATIVE is the Hannover iteration (reference method); CLOSED_FORM is
    the single-step method of Toms (1996). Their error characteristics
    differ, so callers choose one explicitly.
    """
    ITERATIVE = "iterative"
    CLOSED_FORM = "closed_form"


# Units accepted by the datum parameter accessors
ARCSECONDS = "arcseconds"
RADIANS = "radians"
PPM = "ppm"
MULTIPLIER = "multiplier"


# Type aliases
Ordinates = Tuple[float, ...]
XYZ = Tuple[float, float, float]
ShiftParams = Optional[Union[str, Sequence[Union[float, int, str]]]]
