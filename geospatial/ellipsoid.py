"""
Reference Ellipsoid Model.

An ellipsoid is defined by its semi-major axis `a` and its inverse
flattening `rf`. Everything else (semi-minor axis, eccentricities,
flattening) is derived on first access and memoised. A missing `rf`
denotes a sphere.

Derived Parameters
------------------
b   = a (1 - 1/rf)                 semi-minor axis
e   = sqrt(1 - (b/a)^2)            eccentricity
es  = (a^2 - b^2) / a^2            first eccentricity squared
es2 = (a^2 - b^2) / b^2            second eccentricity squared
f   = 1/rf, or 0 for a sphere      flattening

Ellipsoids are immutable. The `with_*` methods return new values, so the
memoised derived parameters never go stale.
"""

from dataclasses import dataclass, replace
from functools import cached_property
from typing import Dict, Optional, Any

import numpy as np

from common.constants import GeodeticConstants
from geospatial.exceptions import ValidationError


SPHERE_TOLERANCE = GeodeticConstants.SPHERE_TOLERANCE.value


def _number(value: Any, name: str) -> float:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"Ellipsoid parameter {name} must be numeric; got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"Ellipsoid parameter {name} must be numeric; got {value!r}"
        ) from e


@dataclass(frozen=True)
class Ellipsoid:
    """Parameters defining a reference ellipsoid.

    Attributes
    ----------
    a : float
        Semi-major axis (equatorial radius) in meters.
    rf : float or None
        Inverse flattening; None for a sphere.
    code : str, optional
        Short identifier, e.g. "WGS84".
    name : str, optional
        Long name.

    Examples
    --------
    >>> Ellipsoid().rf
    298.257223563
    >>> Ellipsoid.from_ab(6356752, 6356752).f
    0.0
    """
    a: float = GeodeticConstants.WGS84_SEMI_MAJOR_AXIS.value
    rf: Optional[float] = GeodeticConstants.WGS84_INVERSE_FLATTENING.value
    code: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        a = _number(self.a, "a")
        if not a > 0:
            raise ValidationError(f"Semi-major axis must be positive; got {a}")
        object.__setattr__(self, "a", a)
        if self.rf is not None:
            object.__setattr__(self, "rf", _number(self.rf, "rf"))

    # ------------------------------------------------------------------
    # Alternative constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_a_rf(
        cls,
        a: float,
        rf: Optional[float],
        code: Optional[str] = None,
        name: Optional[str] = None
    ) -> "Ellipsoid":
        """Ellipsoid from semi-major axis and inverse flattening."""
        return cls(a=a, rf=rf, code=code, name=name)

    @classmethod
    def from_ab(
        cls,
        a: float,
        b: float,
        code: Optional[str] = None,
        name: Optional[str] = None
    ) -> "Ellipsoid":
        """Ellipsoid from semi-major and semi-minor axes.

        The inverse flattening is derived as a / (a - b). When the axes are
        equal within tolerance the result is a sphere (rf = None).
        """
        a = _number(a, "a")
        b = _number(b, "b")
        if abs(a - b) > SPHERE_TOLERANCE:
            rf = a / (a - b)
        else:
            rf = None
        return cls(a=a, rf=rf, code=code, name=name)

    @classmethod
    def from_b_rf(
        cls,
        b: float,
        rf: float,
        code: Optional[str] = None,
        name: Optional[str] = None
    ) -> "Ellipsoid":
        """Ellipsoid from semi-minor axis and inverse flattening.

        The semi-major axis is derived as b * rf / (rf - 1).
        """
        b = _number(b, "b")
        rf = _number(rf, "rf")
        if rf == 1.0:
            raise ValidationError("Inverse flattening of 1 gives a degenerate ellipsoid")
        return cls(a=(b * rf) / (rf - 1.0), rf=rf, code=code, name=name)

    # ------------------------------------------------------------------
    # "with" updates
    # ------------------------------------------------------------------

    def with_a(self, a: float) -> "Ellipsoid":
        return replace(self, a=a)

    def with_rf(self, rf: Optional[float]) -> "Ellipsoid":
        return replace(self, rf=rf)

    def with_ab(self, a: float, b: float) -> "Ellipsoid":
        return type(self).from_ab(a, b, self.code, self.name)

    def with_b_rf(self, b: float, rf: float) -> "Ellipsoid":
        return type(self).from_b_rf(b, rf, self.code, self.name)

    # ------------------------------------------------------------------
    # Derived parameters
    # ------------------------------------------------------------------

    @cached_property
    def b(self) -> float:
        """Semi-minor axis in meters."""
        if self.rf is None:
            return self.a
        return (1.0 - 1.0 / self.rf) * self.a

    @cached_property
    def f(self) -> float:
        """Flattening; 0 for a sphere."""
        if self.rf is None:
            return 0.0
        return 1.0 / self.rf

    @cached_property
    def e(self) -> float:
        """Eccentricity."""
        div = self.b / self.a
        return float(np.sqrt(1.0 - div * div))

    @cached_property
    def es(self) -> float:
        """First eccentricity squared."""
        a2 = self.a * self.a
        b2 = self.b * self.b
        return (a2 - b2) / a2

    @cached_property
    def es2(self) -> float:
        """Second eccentricity squared."""
        a2 = self.a * self.a
        b2 = self.b * self.b
        return (a2 - b2) / b2

    def is_sphere(self) -> bool:
        """True if the axes are equal within tolerance."""
        return abs(self.a - self.b) < SPHERE_TOLERANCE

    def matches(self, other: "Ellipsoid", tolerance: float = SPHERE_TOLERANCE) -> bool:
        """Compare the defining parameters (a, rf) within a tolerance.

        Codes and names are ignored.
        """
        if abs(self.a - other.a) >= tolerance:
            return False
        if self.rf is None or other.rf is None:
            return self.rf is None and other.rf is None
        return abs(self.rf - other.rf) < tolerance

    def get_parameters(self) -> Dict[str, Any]:
        return {
            "a": self.a,
            "rf": self.rf,
            "code": self.code,
            "name": self.name,
        }


# The standard reference for this library
WGS84 = Ellipsoid(code="WGS84", name="World Geodetic System (1984)")

ELLIPSOIDS: Dict[str, Ellipsoid] = {
    "WGS84": WGS84,
    "GRS80": Ellipsoid(6378137.0, 298.257222101, "GRS80", "GRS 1980 (IUGG, 1980)"),
    "airy": Ellipsoid.from_ab(6377563.396, 6356256.910, "airy", "Airy 1830"),
    "mod_airy": Ellipsoid.from_ab(6377340.189, 6356034.446, "mod_airy", "Modified Airy"),
    "intl": Ellipsoid(6378388.0, 297.0, "intl", "International 1909 (Hayford)"),
    "clrk66": Ellipsoid.from_ab(6378206.4, 6356583.8, "clrk66", "Clarke 1866"),
    "bessel": Ellipsoid(6377397.155, 299.1528128, "bessel", "Bessel 1841"),
    "sphere": Ellipsoid(6370997.0, None, "sphere", "Normal Sphere (r=6370997)"),
}


def get_ellipsoid(code: str) -> Ellipsoid:
    """Look up a catalogue ellipsoid by code (case-insensitive)."""
    for key, ellipsoid in ELLIPSOIDS.items():
        if key.lower() == str(code).lower():
            return ellipsoid
    raise ValidationError(
        f"Unknown ellipsoid code {code!r}. Known codes: {sorted(ELLIPSOIDS)}"
    )
