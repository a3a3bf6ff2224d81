"""
Geodetic Datum Model.

A datum is an ellipsoid anchored to a physical reference frame. Here the
anchoring is expressed as Bursa-Wolf (Helmert) shift parameters that move
geocentric coordinates from the datum into WGS84:

    [Dx, Dy, Dz]   displacement, meters
    [Rx, Ry, Rz]   rotation, seconds of arc (towgs84 convention)
    M              scale change, parts per million

The number of meaningful parameters is derived from their values, not
stored: all zero is NONE (already WGS84-equivalent), displacement only is
THREE, any rotation or scale is SEVEN.

References
----------
- Proj.4 `+towgs84` parameter convention.
- Bursa, M. (1962); Wolf, H. (1963). Seven-parameter similarity transform.
"""

from dataclasses import InitVar, dataclass, field
from typing import Dict, List, Optional, Tuple

from common.types import (
    ARCSECONDS,
    MULTIPLIER,
    PPM,
    RADIANS,
    Direction,
    ShiftParameterCount,
    ShiftParams,
)
from common.units import ppm_to_multiplier, rotation_to_radians
from geospatial.ellipsoid import WGS84, Ellipsoid, get_ellipsoid
from geospatial.exceptions import ValidationError


def parse_shift_parameters(shift_params: ShiftParams) -> List[float]:
    """Normalise 0, 3 or 7 shift parameters to a list of floats.

    Parameters
    ----------
    shift_params : str, sequence or None
        Either a sequence of numbers, or a string delimited by commas (when
        any comma is present) or by whitespace. None means no shift.

    Returns
    -------
    list of float
        Empty, 3 or 7 values.

    Raises
    ------
    ValidationError
        If the count is not 0, 3 or 7, or a value is not numeric.
    """
    if shift_params is None:
        return []

    if isinstance(shift_params, str):
        text = shift_params.strip()
        if not text:
            return []
        if "," in text:
            items = [item.strip() for item in text.split(",")]
        else:
            items = text.split()
    else:
        try:
            items = list(shift_params)
        except TypeError as e:
            raise ValidationError(
                "Shift parameters must be a delimited string or a sequence; "
                f"{type(shift_params).__name__} given instead"
            ) from e

    if len(items) not in (0, 3, 7):
        raise ValidationError(
            f"Either 3 or 7 shift parameters must be supplied; {len(items)} given"
        )

    values = []
    for index, item in enumerate(items):
        if item is None or isinstance(item, bool):
            raise ValidationError(f"Shift parameter {index} is not numeric: {item!r}")
        try:
            values.append(float(item))
        except (TypeError, ValueError) as e:
            raise ValidationError(
                f"Shift parameter {index} is not numeric: {item!r}"
            ) from e
    return values


@dataclass(frozen=True)
class Datum:
    """A reference ellipsoid with Bursa-Wolf parameters to WGS84.

    Parameters
    ----------
    ellipsoid : Ellipsoid, optional
        The datum ellipsoid (default: WGS84).
    shift_params : str or sequence, optional
        0, 3 or 7 shift parameters to WGS84 (default: no shift).
    code, name : str, optional
        Labels; ignored when comparing datums.

    Examples
    --------
    >>> osgb36 = Datum(
    ...     Ellipsoid.from_ab(6377340.189, 6356034.446),
    ...     "446.448,-125.157,542.060,0.1502,0.2470,0.8421,-20.4894",
    ... )
    >>> osgb36.get_shift_parameter_count()
    <ShiftParameterCount.SEVEN: 7>
    """
    ellipsoid: Optional[Ellipsoid] = None
    shift_params: InitVar[ShiftParams] = None
    code: Optional[str] = None
    name: Optional[str] = None
    displacement: Tuple[float, float, float] = field(init=False, default=(0.0, 0.0, 0.0))
    rotation: Tuple[float, float, float] = field(init=False, default=(0.0, 0.0, 0.0))
    scale: float = field(init=False, default=0.0)

    def __post_init__(self, shift_params: ShiftParams):
        if self.ellipsoid is None:
            object.__setattr__(self, "ellipsoid", WGS84)
        elif not isinstance(self.ellipsoid, Ellipsoid):
            raise ValidationError(
                f"Datum ellipsoid must be an Ellipsoid; got {type(self.ellipsoid).__name__}"
            )

        values = parse_shift_parameters(shift_params)
        if len(values) >= 3:
            object.__setattr__(self, "displacement", tuple(values[0:3]))
        if len(values) == 7:
            object.__setattr__(self, "rotation", tuple(values[3:6]))
            object.__setattr__(self, "scale", values[6])

    # ------------------------------------------------------------------
    # Shift parameters
    # ------------------------------------------------------------------

    def get_displacement_parameters(
        self,
        direction: Direction = Direction.FORWARD
    ) -> List[float]:
        """Displacement [Dx, Dy, Dz] in meters, negated for INVERSE."""
        factor = int(direction)
        return [factor * d for d in self.displacement]

    def get_rotational_parameters(
        self,
        unit: str = ARCSECONDS,
        direction: Direction = Direction.FORWARD
    ) -> List[float]:
        """Rotation [Rx, Ry, Rz], negated for INVERSE.

        Parameters
        ----------
        unit : str
            ARCSECONDS returns the values as supplied; RADIANS converts
            them for use in the Helmert transform.
        direction : Direction
            FORWARD (to WGS84) or INVERSE (from WGS84).
        """
        factor = int(direction)

        if unit == RADIANS:
            return [factor * rotation_to_radians(r) for r in self.rotation]

        if unit == ARCSECONDS:
            return [factor * r for r in self.rotation]

        raise ValidationError(f'Unsupported units "{unit}"')

    def get_scalar_parameter(
        self,
        unit: str = PPM,
        direction: Direction = Direction.FORWARD
    ) -> float:
        """Scale parameter, as PPM or as a multiplier 1 +/- ppm / 1e6."""
        factor = int(direction)

        if unit == MULTIPLIER:
            return ppm_to_multiplier(factor * self.scale)

        if unit == PPM:
            return factor * self.scale

        raise ValidationError(f'Unsupported units "{unit}"')

    def get_shift_parameter_count(self) -> ShiftParameterCount:
        """Classify the datum as NONE, THREE or SEVEN parameters."""
        if any(r != 0.0 for r in self.rotation) or self.scale != 0.0:
            return ShiftParameterCount.SEVEN

        if any(d != 0.0 for d in self.displacement):
            return ShiftParameterCount.THREE

        return ShiftParameterCount.NONE

    def get_shift_parameters(self) -> List[float]:
        """All meaningful shift parameters: 0, 3 or 7 values."""
        count = self.get_shift_parameter_count()

        if count == ShiftParameterCount.THREE:
            return list(self.displacement)

        if count == ShiftParameterCount.SEVEN:
            return list(self.displacement) + list(self.rotation) + [self.scale]

        return []

    def is_same(self, other: "Datum") -> bool:
        """True if both datums describe the same reference frame.

        The shift-parameter counts and values must match exactly and the
        ellipsoids must agree on a and rf within 1e-6. Codes and names
        are ignored.
        """
        if self.get_shift_parameter_count() != other.get_shift_parameter_count():
            return False

        if self.get_shift_parameters() != other.get_shift_parameters():
            return False

        return self.ellipsoid.matches(other.ellipsoid)

    # ------------------------------------------------------------------
    # "with" updates
    # ------------------------------------------------------------------

    def with_ellipsoid(self, ellipsoid: Ellipsoid) -> "Datum":
        return type(self)(ellipsoid, self.get_shift_parameters(), self.code, self.name)

    def with_shift_parameters(self, shift_params: ShiftParams) -> "Datum":
        return type(self)(self.ellipsoid, shift_params, self.code, self.name)

    # ------------------------------------------------------------------
    # Ellipsoid proxies
    # ------------------------------------------------------------------

    @property
    def a(self) -> float:
        return self.ellipsoid.a

    @property
    def b(self) -> float:
        return self.ellipsoid.b

    @property
    def rf(self) -> Optional[float]:
        return self.ellipsoid.rf

    @property
    def e(self) -> float:
        return self.ellipsoid.e

    @property
    def es(self) -> float:
        return self.ellipsoid.es

    @property
    def es2(self) -> float:
        return self.ellipsoid.es2

    def is_sphere(self) -> bool:
        return self.ellipsoid.is_sphere()


WGS84_DATUM = Datum(WGS84, None, "WGS84", "World Geodetic System 1984")

DATUMS: Dict[str, Datum] = {
    "WGS84": WGS84_DATUM,
    "OSGB36": Datum(
        get_ellipsoid("airy"),
        "446.448,-125.157,542.060,0.1502,0.2470,0.8421,-20.4894",
        "OSGB36",
        "Ordnance Survey of Great Britain 1936",
    ),
    "ED50": Datum(
        get_ellipsoid("intl"),
        (-87.0, -98.0, -121.0),
        "ED50",
        "European Datum 1950",
    ),
    "NAD27": Datum(
        get_ellipsoid("clrk66"),
        (-8.0, 160.0, 176.0),
        "NAD27",
        "North American Datum 1927",
    ),
}


def get_datum(code: str) -> Datum:
    """Look up a catalogue datum by code (case-insensitive)."""
    for key, datum in DATUMS.items():
        if key.lower() == str(code).lower():
            return datum
    raise ValidationError(f"Unknown datum code {code!r}. Known codes: {sorted(DATUMS)}")
