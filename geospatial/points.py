"""
Point Representations.

A closed set of immutable point types, each tagged with a `PointKind`:

- Geodetic    latitude/longitude in degrees, height in meters
- Geocentric  ECEF X/Y/Z in meters
- Cartesian   projected x/y in meters plus projection context
- Utm         projected easting/northing with zone and hemisphere

The types do not inherit from one another. They share a small capability
interface (`PointLike`): `kind`, `datum`, `to_ordinates()` and
`with_datum()`. `with_datum` only re-tags the point; moving coordinates
between datums is `geospatial.datum_shift.shift_datum`.

Degrees are a boundary concern of `Geodetic`. Everything below it
(geocentric conversion, projection math) works in radians.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Optional, Protocol

import numpy as np

from common.types import GeocentricMethod, Ordinates, PointKind
from geospatial.coordinate_models import convert_ecef_to_geodetic, geodetic_to_ecef
from geospatial.datum import WGS84_DATUM, Datum
from geospatial.exceptions import ValidationError


def _ordinate(value: Any, name: str) -> float:
    """Validate a numeric ordinate; None, booleans and non-numbers fail."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"Ordinate {name} must be numeric; got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Ordinate {name} must be numeric; got {value!r}") from e


def _check_datum(datum: Any) -> None:
    if not isinstance(datum, Datum):
        raise ValidationError(f"Expected a Datum; got {type(datum).__name__}")


def normalize_longitude(lon_deg: float) -> float:
    """Wrap a longitude in degrees into (-180, 180]."""
    wrapped = lon_deg - 360.0 * np.floor((lon_deg + 180.0) / 360.0)
    if wrapped == -180.0:
        return 180.0
    return float(wrapped)


class PointLike(Protocol):
    """Capability interface shared by every point type."""

    kind: ClassVar[PointKind]

    @property
    def datum(self) -> Datum:
        ...

    def to_ordinates(self) -> Ordinates:
        ...

    def with_datum(self, datum: Datum) -> "PointLike":
        ...


@dataclass(frozen=True)
class Geodetic:
    """Geodetic point: latitude and longitude in degrees, height in meters.

    Parameters
    ----------
    lat : float
        Latitude in degrees, within [-90, 90].
    lon : float
        Longitude in degrees; normalised into (-180, 180].
    height : float
        Height above the ellipsoid in meters.
    datum : Datum
        Reference datum (default: WGS84).

    Raises
    ------
    ValidationError
        If an ordinate is not numeric or the latitude is out of range.
    """
    lat: float
    lon: float
    height: float = 0.0
    datum: Datum = WGS84_DATUM

    kind: ClassVar[PointKind] = PointKind.GEODETIC

    def __post_init__(self):
        lat = _ordinate(self.lat, "lat")
        lon = _ordinate(self.lon, "lon")
        height = _ordinate(self.height, "height")
        _check_datum(self.datum)

        if not -90.0 <= lat <= 90.0:
            raise ValidationError(f"Latitude must be within [-90, 90]; got {lat}")
        if not np.isfinite(lon):
            raise ValidationError(f"Longitude must be finite; got {lon}")

        object.__setattr__(self, "lat", lat)
        object.__setattr__(self, "lon", normalize_longitude(lon))
        object.__setattr__(self, "height", height)

    @classmethod
    def from_radians(
        cls,
        lat_rad: float,
        lon_rad: float,
        height: float = 0.0,
        datum: Datum = WGS84_DATUM
    ) -> "Geodetic":
        """Create a point from latitude/longitude in radians."""
        lat_deg = float(np.degrees(_ordinate(lat_rad, "lat")))
        # Radian round-off can push a pole a hair past +/-90
        if 90.0 < abs(lat_deg) < 90.0 + 1e-9:
            lat_deg = float(np.copysign(90.0, lat_deg))
        return cls(lat_deg, float(np.degrees(_ordinate(lon_rad, "lon"))), height, datum)

    @property
    def lat_rad(self) -> float:
        return float(np.radians(self.lat))

    @property
    def lon_rad(self) -> float:
        return float(np.radians(self.lon))

    def to_radians(self) -> Ordinates:
        """(lat_rad, lon_rad, height_m)"""
        return self.lat_rad, self.lon_rad, self.height

    def to_ordinates(self) -> Ordinates:
        return self.lat, self.lon, self.height

    def with_datum(self, datum: Datum) -> "Geodetic":
        return Geodetic(self.lat, self.lon, self.height, datum)

    def to_geocentric(self) -> "Geocentric":
        """Convert to ECEF coordinates on this point's datum ellipsoid."""
        x, y, z = geodetic_to_ecef(
            self.lat_rad, self.lon_rad, self.height, self.datum.ellipsoid
        )
        return Geocentric(x, y, z, self.datum)


@dataclass(frozen=True)
class Geocentric:
    """Earth-Centered Earth-Fixed point in meters."""
    x: float
    y: float
    z: float
    datum: Datum = WGS84_DATUM

    kind: ClassVar[PointKind] = PointKind.GEOCENTRIC

    def __post_init__(self):
        for name in ("x", "y", "z"):
            object.__setattr__(self, name, _ordinate(getattr(self, name), name))
        _check_datum(self.datum)

    def to_ordinates(self) -> Ordinates:
        return self.x, self.y, self.z

    def with_datum(self, datum: Datum) -> "Geocentric":
        return Geocentric(self.x, self.y, self.z, datum)

    def to_geodetic(
        self,
        method: GeocentricMethod = GeocentricMethod.ITERATIVE,
        strict: bool = False
    ) -> Geodetic:
        """Convert to a geodetic point on the same datum.

        Parameters
        ----------
        method : GeocentricMethod
            ITERATIVE (reference) or CLOSED_FORM.
        strict : bool
            Raise instead of warn if the iteration does not converge.
        """
        lat, lon, height = convert_ecef_to_geodetic(
            self.x, self.y, self.z, self.datum.ellipsoid, method, strict
        )
        return Geodetic.from_radians(lat, lon, height, self.datum)


@dataclass(frozen=True)
class Cartesian:
    """Projected point: x/y in meters in the frame of a projection.

    The projection supplies the datum. `context` carries projection
    specific values such as the UTM zone and hemisphere; it is read-only.
    """
    x: float
    y: float
    context: Mapping[str, Any] = field(default_factory=dict, hash=False)
    projection: Optional[Any] = None

    kind: ClassVar[PointKind] = PointKind.CARTESIAN

    def __post_init__(self):
        object.__setattr__(self, "x", _ordinate(self.x, "x"))
        object.__setattr__(self, "y", _ordinate(self.y, "y"))
        object.__setattr__(self, "context", MappingProxyType(dict(self.context or {})))

    @property
    def datum(self) -> Datum:
        if self.projection is None:
            return WGS84_DATUM
        return self.projection.datum

    def _require_projection(self):
        if self.projection is None:
            raise ValidationError("Point has no projection to convert through")
        return self.projection

    def get_context_item(self, key: str, default: Any = None) -> Any:
        return self.context.get(key, default)

    def to_ordinates(self) -> Ordinates:
        return self.x, self.y

    def with_datum(self, datum: Datum) -> "Cartesian":
        # Without a projection the point is implicitly WGS84
        if self.projection is None and datum.is_same(WGS84_DATUM):
            return self
        projection = self._require_projection().with_datum(datum)
        return Cartesian(self.x, self.y, self.context, projection)

    def to_geodetic(self, datum: Optional[Datum] = None) -> Geodetic:
        """Inverse-project; the result is in `datum`, else the projection's."""
        return self._require_projection().unproject(self, datum)

    def to_utm(self) -> "Utm":
        """View this point as UTM; the context must name a zone."""
        zone = self.context.get("zone")
        if zone is None:
            raise ValidationError("Point context has no UTM zone")
        return Utm(self.x, self.y, zone, bool(self.context.get("south", False)), self.projection)


@dataclass(frozen=True)
class Utm:
    """UTM point: easting/northing in meters with zone and hemisphere."""
    easting: float
    northing: float
    zone: int
    south: bool = False
    projection: Optional[Any] = None

    kind: ClassVar[PointKind] = PointKind.UTM

    def __post_init__(self):
        object.__setattr__(self, "easting", _ordinate(self.easting, "easting"))
        object.__setattr__(self, "northing", _ordinate(self.northing, "northing"))
        object.__setattr__(self, "zone", validate_zone(self.zone))
        object.__setattr__(self, "south", bool(self.south))

    @property
    def datum(self) -> Datum:
        if self.projection is None:
            return WGS84_DATUM
        return self.projection.datum

    @property
    def context(self) -> Mapping[str, Any]:
        return MappingProxyType({"zone": self.zone, "south": self.south})

    def to_ordinates(self) -> Ordinates:
        return self.easting, self.northing

    def with_datum(self, datum: Datum) -> "Utm":
        if self.projection is None:
            if datum.is_same(WGS84_DATUM):
                return self
            raise ValidationError("Point has no projection to convert through")
        return Utm(
            self.easting, self.northing, self.zone, self.south,
            self.projection.with_datum(datum)
        )

    def to_cartesian(self) -> Cartesian:
        return Cartesian(self.easting, self.northing, self.context, self.projection)

    def to_geodetic(self, datum: Optional[Datum] = None) -> Geodetic:
        return self.to_cartesian().to_geodetic(datum)


def validate_zone(zone: Any) -> int:
    """Validate a UTM zone number in 1..60."""
    if zone is None or isinstance(zone, bool):
        raise ValidationError(f"UTM zone must be an integer in 1..60; got {zone!r}")
    try:
        number = int(zone)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"UTM zone must be an integer in 1..60; got {zone!r}") from e
    if number != float(zone) or not 1 <= number <= 60:
        raise ValidationError(f"UTM zone must be an integer in 1..60; got {zone!r}")
    return number
