"""
Projection Configuration.

`ProjectionConfig` enumerates every parameter a projection recognises,
together with the rule that converts it from user input:

    lat_0, lat_1, lat_2, lon_0   angle, degrees -> radians
    x_0, y_0, a, b               length, meters
    k_0, rf                      dimensionless float
    zone                         integer 1..60
    south                        boolean (north/utmnorth set it to False)
    ellipsoid                    Ellipsoid or catalogue code
    datum                        Datum or catalogue code
    towgs84                      0, 3 or 7 shift parameters
    title                        free text

Bare numbers are read in the default unit; pint quantities are converted,
so ``lat_0=Q_(0.5, 'radian')`` and ``lat_0=28.6`` are both accepted.

Example Usage
-------------
>>> config = ProjectionConfig.from_options(lat0=49, lon0=-2, k=0.9996012717)
>>> round(config.lon_0, 6)
-0.034907
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import pint

from common.units import to_magnitude
from geospatial.datum import WGS84_DATUM, Datum, get_datum, parse_shift_parameters
from geospatial.ellipsoid import Ellipsoid, get_ellipsoid
from geospatial.exceptions import ValidationError
from geospatial.points import validate_zone


def _angle(value: Any) -> float:
    return to_magnitude(value, "degree", "radian")


def _length(value: Any) -> float:
    return to_magnitude(value, "meter", "meter")


def _scalar(value: Any) -> float:
    return to_magnitude(value, "dimensionless", "dimensionless")


def _flag(value: Any) -> bool:
    # A bare "+south" style flag arrives as None or an empty string
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no", "off")
    return bool(value)


def _ellipsoid(value: Any) -> Ellipsoid:
    if isinstance(value, Ellipsoid):
        return value
    return get_ellipsoid(value)


def _datum(value: Any) -> Datum:
    if isinstance(value, Datum):
        return value
    return get_datum(value)


def _towgs84(value: Any) -> Tuple[float, ...]:
    return tuple(parse_shift_parameters(value))


# alias -> (field, converter)
OPTION_RULES: Dict[str, Tuple[str, Callable[[Any], Any]]] = {
    "title": ("title", str),
    "lat0": ("lat_0", _angle),
    "lat_0": ("lat_0", _angle),
    "lat1": ("lat_1", _angle),
    "lat_1": ("lat_1", _angle),
    "lat2": ("lat_2", _angle),
    "lat_2": ("lat_2", _angle),
    "lon0": ("lon_0", _angle),
    "lon_0": ("lon_0", _angle),
    "long0": ("lon_0", _angle),
    "x0": ("x_0", _length),
    "x_0": ("x_0", _length),
    "y0": ("y_0", _length),
    "y_0": ("y_0", _length),
    "k": ("k_0", _scalar),
    "k0": ("k_0", _scalar),
    "k_0": ("k_0", _scalar),
    "zone": ("zone", validate_zone),
    "south": ("south", _flag),
    "utmsouth": ("south", _flag),
    "north": ("south", lambda value: not _flag(value)),
    "utmnorth": ("south", lambda value: not _flag(value)),
    "a": ("a", _length),
    "b": ("b", _length),
    "rf": ("rf", _scalar),
    "ellps": ("ellipsoid", _ellipsoid),
    "ellipsoid": ("ellipsoid", _ellipsoid),
    "datum": ("datum", _datum),
    "towgs84": ("towgs84", _towgs84),
}


@dataclass(frozen=True)
class ProjectionConfig:
    """Validated projection parameters.

    Angles are stored in radians and lengths in meters. A field left as
    None means "not supplied"; each projection applies its own default.
    """
    title: Optional[str] = None
    lat_0: Optional[float] = None
    lat_1: Optional[float] = None
    lat_2: Optional[float] = None
    lon_0: Optional[float] = None
    k_0: Optional[float] = None
    x_0: Optional[float] = None
    y_0: Optional[float] = None
    zone: Optional[int] = None
    south: Optional[bool] = None
    a: Optional[float] = None
    b: Optional[float] = None
    rf: Optional[float] = None
    ellipsoid: Optional[Ellipsoid] = None
    datum: Optional[Datum] = None
    towgs84: Optional[Tuple[float, ...]] = None

    @classmethod
    def from_options(
        cls,
        mapping: Optional[Mapping[str, Any]] = None,
        **kwargs: Any
    ) -> "ProjectionConfig":
        """Build a configuration from named options.

        Parameters
        ----------
        mapping : mapping, optional
            Options by name; keyword arguments are merged over it.
        **kwargs
            Options by name.

        Raises
        ------
        ValidationError
            If an option is unknown or its value cannot be converted.
        """
        return cls().with_options(mapping, **kwargs)

    def with_options(
        self,
        mapping: Optional[Mapping[str, Any]] = None,
        **kwargs: Any
    ) -> "ProjectionConfig":
        """Return a copy with the given options applied over this one."""
        options = dict(mapping or {})
        options.update(kwargs)

        values: Dict[str, Any] = {}
        for key, value in options.items():
            rule = OPTION_RULES.get(str(key).lower())
            if rule is None:
                raise ValidationError(
                    f"Unknown projection option {key!r}. "
                    f"Known options: {sorted(OPTION_RULES)}"
                )
            name, convert = rule
            try:
                values[name] = convert(value)
            except ValidationError:
                raise
            except (TypeError, ValueError, pint.errors.PintError) as e:
                raise ValidationError(
                    f"Invalid value for projection option {key!r}: {value!r}"
                ) from e

        return replace(self, **values)

    def to_dict(self) -> Dict[str, Any]:
        """Supplied (non-None) fields by name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def with_datum(self, datum: Datum) -> "ProjectionConfig":
        """Bind to `datum`, dropping every ellipsoid and shift override."""
        return replace(
            self, datum=datum, a=None, b=None, rf=None, ellipsoid=None, towgs84=None
        )

    def resolve_datum(self) -> Datum:
        """Build the datum described by this configuration.

        Precedence: the explicit datum (default WGS84), then ellipsoid
        overrides (`ellps`, then `a`/`b`/`rf` pairs), then `towgs84`.
        """
        datum = self.datum if self.datum is not None else WGS84_DATUM
        ellipsoid = datum.ellipsoid

        if self.ellipsoid is not None:
            ellipsoid = self.ellipsoid

        if self.a is not None and self.b is not None:
            ellipsoid = Ellipsoid.from_ab(self.a, self.b)
        elif self.a is not None and self.rf is not None:
            ellipsoid = Ellipsoid.from_a_rf(self.a, self.rf)
        elif self.b is not None and self.rf is not None:
            ellipsoid = Ellipsoid.from_b_rf(self.b, self.rf)
        elif self.a is not None:
            ellipsoid = ellipsoid.with_a(self.a)
        elif self.b is not None:
            ellipsoid = ellipsoid.with_ab(ellipsoid.a, self.b)
        elif self.rf is not None:
            ellipsoid = ellipsoid.with_rf(self.rf)

        if ellipsoid is not datum.ellipsoid:
            datum = datum.with_ellipsoid(ellipsoid)

        if self.towgs84 is not None:
            datum = datum.with_shift_parameters(list(self.towgs84))

        return datum
