"""
Map Projections with Datum Awareness.

This module implements the projection engine: a common `Projection`
contract and three conformal projections, Transverse Mercator, Universal
Transverse Mercator and Lambert Conformal Conic. Every projection owns a
datum and always computes in that datum's frame; points in any other datum
are shifted on the way in, and results are shifted back on the way out
when the caller asks for a different datum.

Scientific Context
------------------
Domain: Cartography, mathematical geodesy
Model: Conformal projections of the rotational ellipsoid (and the sphere)

Implementation
--------------
The projection math is native (Snyder's series and closed forms, see
`geospatial.projection_math`) and works in radians. `pyproj` is used to
describe each projection as a CRS (`to_pyproj_crs`) so results can be
checked against PROJ.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray
from pyproj import CRS

from common.constants import GeodeticConstants
from common.logging_config import get_logger
from common.types import PointKind
from geospatial.config import ProjectionConfig
from geospatial.datum import Datum
from geospatial.datum_shift import shift_datum
from geospatial.ellipsoid import WGS84
from geospatial.exceptions import ConvergenceError, ProjectionDomainError, ValidationError
from geospatial.projection_math import (
    EPSLN,
    HALF_PI,
    adjust_lon,
    asinz,
    e0fn,
    e1fn,
    e2fn,
    e3fn,
    mlfn,
    msfnz,
    phi2z,
    sign,
    tsfnz,
)
from geospatial.points import Cartesian, Geodetic, Utm, validate_zone

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProjectedXY:
    """Result of a forward projection: x/y in meters plus context."""
    x: float
    y: float
    context: Mapping[str, Any] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class LatLong:
    """Result of an inverse projection: latitude/longitude in radians."""
    lat: float
    lon: float


def _default(value: Optional[float], fallback: float) -> float:
    return fallback if value is None else value


class Projection(ABC):
    """Abstract base class for map projections.

    Parameters
    ----------
    config : ProjectionConfig, optional
        Validated parameters.
    **options
        Named options (see `ProjectionConfig.from_options`), applied over
        `config` when both are given.

    Notes
    -----
    Subclasses implement `_forward` and `_inverse` in radians on the
    projection datum. The public `forward`/`inverse` wrap them with the
    datum handling.
    """

    adjust_lon = staticmethod(adjust_lon)
    sign = staticmethod(sign)
    msfnz = staticmethod(msfnz)
    tsfnz = staticmethod(tsfnz)
    phi2z = staticmethod(phi2z)
    asinz = staticmethod(asinz)

    def __init__(self, config: Optional[ProjectionConfig] = None, **options: Any):
        if config is None:
            config = ProjectionConfig.from_options(options)
        elif options:
            config = config.with_options(options)

        self.config = config
        self.title = config.title
        self.datum = config.resolve_datum()

        self.a = self.datum.a
        self.b = self.datum.b
        self.e = self.datum.e
        self.es = self.datum.es
        self.ep2 = self.datum.es2
        self.sphere = self.datum.is_sphere()

    # ------------------------------------------------------------------
    # Description
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the projection."""
        pass

    @property
    @abstractmethod
    def proj4_string(self) -> str:
        """PROJ.4 definition string."""
        pass

    def _proj4_datum(self) -> str:
        ellipsoid = self.datum.ellipsoid
        params = self.datum.get_shift_parameters()
        if not params and ellipsoid.matches(WGS84):
            return "+datum=WGS84"
        if ellipsoid.rf is None:
            text = f"+R={ellipsoid.a}"
        else:
            text = f"+a={ellipsoid.a} +rf={ellipsoid.rf}"
        if params:
            text += " +towgs84=" + ",".join(str(p) for p in params)
        return text

    def to_pyproj_crs(self) -> CRS:
        """Describe this projection as a pyproj CRS."""
        return CRS.from_proj4(self.proj4_string)

    def with_datum(self, datum: Datum) -> "Projection":
        """The same projection bound to another datum."""
        return type(self)(self.config.with_datum(datum))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"

    # ------------------------------------------------------------------
    # Projection contract
    # ------------------------------------------------------------------

    @abstractmethod
    def _forward(self, lat: float, lon: float) -> Tuple[float, float, Dict[str, Any]]:
        """(lat, lon) in radians on the projection datum -> (x, y, context)."""
        pass

    @abstractmethod
    def _inverse(self, x: float, y: float, context: Mapping[str, Any]) -> Tuple[float, float]:
        """(x, y) -> (lat, lon) in radians on the projection datum."""
        pass

    def forward(self, lat: float, lon: float, datum: Optional[Datum] = None) -> ProjectedXY:
        """Project geodetic coordinates.

        Parameters
        ----------
        lat, lon : float
            Geodetic coordinates in radians.
        datum : Datum, optional
            Datum of the input; shifted to the projection datum if it
            differs. Default: the projection datum.

        Returns
        -------
        ProjectedXY
            x/y in meters and the projection context.
        """
        if datum is not None and not datum.is_same(self.datum):
            shifted = shift_datum(Geodetic.from_radians(lat, lon, 0.0, datum), self.datum)
            lat, lon = shifted.lat_rad, shifted.lon_rad

        x, y, context = self._forward(lat, lon)
        return ProjectedXY(float(x), float(y), MappingProxyType(context))

    def inverse(
        self,
        x: float,
        y: float,
        datum: Optional[Datum] = None,
        context: Optional[Mapping[str, Any]] = None
    ) -> LatLong:
        """Unproject to geodetic coordinates.

        Parameters
        ----------
        x, y : float
            Projected coordinates in meters.
        datum : Datum, optional
            Datum of the result; the result is shifted from the projection
            datum if it differs. Default: the projection datum.
        context : mapping, optional
            Projection context produced by `forward` (e.g. UTM zone).

        Returns
        -------
        LatLong
            Latitude/longitude in radians.
        """
        lat, lon = self._inverse(float(x), float(y), dict(context or {}))

        if datum is not None and not datum.is_same(self.datum):
            shifted = shift_datum(Geodetic.from_radians(lat, lon, 0.0, self.datum), datum)
            lat, lon = shifted.lat_rad, shifted.lon_rad

        return LatLong(float(lat), float(lon))

    def project(self, point: Geodetic) -> Union[Cartesian, Utm]:
        """Project a geodetic point, shifting it to the projection datum first."""
        if not point.datum.is_same(self.datum):
            point = shift_datum(point, self.datum)
        result = self.forward(point.lat_rad, point.lon_rad)
        return Cartesian(result.x, result.y, result.context, self)

    def unproject(self, point: Union[Cartesian, Utm], datum: Optional[Datum] = None) -> Geodetic:
        """Inverse-project a projected point into `datum` (default: the projection datum)."""
        if point.kind == PointKind.UTM:
            point = point.to_cartesian()
        if point.kind != PointKind.CARTESIAN:
            raise ValidationError(f"Cannot unproject a {point.kind.value} point")

        result = self.inverse(point.x, point.y, datum, point.context)
        return Geodetic.from_radians(
            result.lat, result.lon, 0.0, datum if datum is not None else self.datum
        )


class TransverseMercator(Projection):
    """Transverse Mercator projection.

    A conformal (angle-preserving) projection suitable for regions
    that extend primarily north-south. This is the basis for UTM.

    Options
    -------
    lat_0, lon_0 : origin in degrees (default 0)
    k_0 : scale factor on the central meridian (default 1)
    x_0, y_0 : false easting/northing in meters (default 0)

    Notes
    -----
    The ellipsoidal forward uses Snyder's series (eqs. 8-9, 8-10) truncated
    in powers of al = cos(lat) * dlon; accuracy degrades beyond a few
    degrees from the central meridian. The inverse solves the footpoint
    latitude with a capped fixed-point recursion (Snyder 3-26, 7-19).
    On a sphere the exact closed forms are used.
    """

    default_k0 = 1.0
    default_x0 = 0.0

    def __init__(self, config: Optional[ProjectionConfig] = None, **options: Any):
        super().__init__(config, **options)
        cfg = self.config

        self.lat0 = self._latitude_of_origin()
        self.lon0 = _default(cfg.lon_0, 0.0)
        self.k0 = _default(cfg.k_0, self.default_k0)
        self.x0 = _default(cfg.x_0, self.default_x0)
        self.y0 = _default(cfg.y_0, 0.0)

        self.e0 = e0fn(self.es)
        self.e1 = e1fn(self.es)
        self.e2 = e2fn(self.es)
        self.e3 = e3fn(self.es)
        self.ml0 = self.a * mlfn(self.e0, self.e1, self.e2, self.e3, self.lat0)

        logger.debug(
            f"{type(self).__name__}: a={self.a} es={self.es:.12f} k0={self.k0} "
            f"ml0={self.ml0:.4f} sphere={self.sphere}"
        )

    def _latitude_of_origin(self) -> float:
        return _default(self.config.lat_0, 0.0)

    @property
    def name(self) -> str:
        return f"Transverse Mercator (CM={np.degrees(self.lon0):g}°)"

    @property
    def proj4_string(self) -> str:
        return (
            f"+proj=tmerc +lat_0={float(np.degrees(self.lat0))} "
            f"+lon_0={float(np.degrees(self.lon0))} +k_0={self.k0} "
            f"+x_0={self.x0} +y_0={self.y0} {self._proj4_datum()} +units=m +no_defs"
        )

    def _forward(self, lat: float, lon: float) -> Tuple[float, float, Dict[str, Any]]:
        x, y = self._tm_forward(lat, lon, self.lon0, self.x0, self.y0)
        return x, y, {}

    def _inverse(self, x: float, y: float, context: Mapping[str, Any]) -> Tuple[float, float]:
        return self._tm_inverse(x, y, self.lon0, self.x0, self.y0)

    def _tm_forward(
        self,
        lat: float,
        lon: float,
        lon0: float,
        x0: float,
        y0: float
    ) -> Tuple[float, float]:
        a, k0, es, ep2 = self.a, self.k0, self.es, self.ep2
        delta_lon = adjust_lon(lon - lon0)
        sin_phi = np.sin(lat)
        cos_phi = np.cos(lat)

        if self.sphere:
            b = cos_phi * np.sin(delta_lon)
            if abs(abs(b) - 1.0) < EPSLN:
                raise ProjectionDomainError("Point projects into infinity")
            x = 0.5 * a * k0 * np.log((1.0 + b) / (1.0 - b))
            con = np.arccos(np.clip(cos_phi * np.cos(delta_lon) / np.sqrt(1.0 - b * b), -1.0, 1.0))
            if lat < 0:
                con = -con
            y = a * k0 * (con - self.lat0)
            return float(x + x0), float(y + y0)

        al = cos_phi * delta_lon
        als = al * al
        c = ep2 * cos_phi * cos_phi
        tq = np.tan(lat)
        t = tq * tq
        con = 1.0 - es * sin_phi * sin_phi
        n = a / np.sqrt(con)
        ml = a * mlfn(self.e0, self.e1, self.e2, self.e3, lat)

        x = k0 * n * al * (
            1.0 + als / 6.0 * (
                1.0 - t + c + als / 20.0 * (5.0 - 18.0 * t + t * t + 72.0 * c - 58.0 * ep2)
            )
        ) + x0
        y = k0 * (
            ml - self.ml0 + n * tq * (
                als * (0.5 + als / 24.0 * (
                    5.0 - t + 9.0 * c + 4.0 * c * c + als / 30.0 * (
                        61.0 - 58.0 * t + t * t + 600.0 * c - 330.0 * ep2
                    )
                ))
            )
        ) + y0
        return float(x), float(y)

    def _tm_inverse(
        self,
        x: float,
        y: float,
        lon0: float,
        x0: float,
        y0: float
    ) -> Tuple[float, float]:
        a, k0, es, ep2 = self.a, self.k0, self.es, self.ep2
        x = x - x0
        y = y - y0

        if self.sphere:
            f = np.exp(x / (a * k0))
            g = 0.5 * (f - 1.0 / f)
            temp = self.lat0 + y / (a * k0)
            h = np.cos(temp)
            con = np.sqrt((1.0 - h * h) / (1.0 + g * g))
            lat = asinz(con)
            if temp < 0:
                lat = -lat
            if g == 0 and h == 0:
                lon = lon0
            else:
                lon = adjust_lon(np.arctan2(g, h) + lon0)
            return float(lat), float(lon)

        con = (self.ml0 + y / k0) / a
        phi = self._footpoint_latitude(con)

        if abs(phi) < HALF_PI:
            sin_phi = np.sin(phi)
            cos_phi = np.cos(phi)
            tan_phi = np.tan(phi)
            c = ep2 * cos_phi * cos_phi
            cs = c * c
            t = tan_phi * tan_phi
            ts = t * t
            con = 1.0 - es * sin_phi * sin_phi
            n = a / np.sqrt(con)
            r = n * (1.0 - es) / con
            d = x / (n * k0)
            ds = d * d

            lat = phi - (n * tan_phi * ds / r) * (
                0.5 - ds / 24.0 * (
                    5.0 + 3.0 * t + 10.0 * c - 4.0 * cs - 9.0 * ep2 - ds / 30.0 * (
                        61.0 + 90.0 * t + 298.0 * c + 45.0 * ts - 252.0 * ep2 - 3.0 * cs
                    )
                )
            )
            lon = adjust_lon(
                lon0 + (d * (
                    1.0 - ds / 6.0 * (
                        1.0 + 2.0 * t + c - ds / 20.0 * (
                            5.0 - 2.0 * c + 28.0 * t - 3.0 * cs + 8.0 * ep2 + 24.0 * ts
                        )
                    )
                ) / cos_phi)
            )
        else:
            lat = HALF_PI * sign(y)
            lon = lon0

        return float(lat), float(lon)

    def _footpoint_latitude(self, con: float) -> float:
        """Latitude whose meridian distance is `con * a` (rectifying inverse)."""
        max_iterations = GeodeticConstants.TMERC_MAX_ITER
        phi = con
        for _ in range(max_iterations):
            delta_phi = (
                con
                + self.e1 * np.sin(2.0 * phi)
                - self.e2 * np.sin(4.0 * phi)
                + self.e3 * np.sin(6.0 * phi)
            ) / self.e0 - phi
            phi += delta_phi
            if abs(delta_phi) <= EPSLN:
                return float(phi)
        raise ConvergenceError("tmerc footpoint latitude", max_iterations, float(phi))


def utm_zone(lon_deg: float) -> int:
    """UTM zone (1..60) containing a longitude in degrees."""
    width = GeodeticConstants.UTM_ZONE_WIDTH_DEG
    return int(np.floor((lon_deg + 180.0) / width)) % GeodeticConstants.UTM_ZONE_COUNT + 1


class UTM(TransverseMercator):
    """Universal Transverse Mercator.

    Transverse Mercator with k_0 = 0.9996 and x_0 = 500000 m. The central
    meridian comes from `lon_0` if given, else from `zone`, else from the
    zone containing each projected point. The hemisphere is decided per
    point: points south of the equator get a false northing of 10000000 m
    and carry ``south=True`` in their context, so one instance serves
    both hemispheres.

    Options
    -------
    zone : UTM zone 1..60
    south : hemisphere assumed by `inverse` when the context has none
    lon_0, k_0, x_0, y_0 : as for TransverseMercator
    """

    default_k0 = GeodeticConstants.UTM_SCALE_FACTOR.value
    default_x0 = GeodeticConstants.UTM_FALSE_EASTING.value

    def _latitude_of_origin(self) -> float:
        return 0.0

    @property
    def zone(self) -> Optional[int]:
        """Fixed zone, or None when the zone follows each point."""
        if self.config.zone is not None:
            return self.config.zone
        if self.config.lon_0 is not None:
            return utm_zone(float(np.degrees(self.config.lon_0)))
        return None

    @property
    def name(self) -> str:
        zone = self.zone
        if zone is None:
            return "Universal Transverse Mercator (zone per point)"
        return f"Universal Transverse Mercator (zone {zone})"

    @property
    def proj4_string(self) -> str:
        if self.config.lon_0 is not None:
            return super().proj4_string
        if self.zone is None:
            raise ValidationError(
                "UTM zone follows each point; set zone or lon_0 to describe a single CRS"
            )
        south = " +south" if self.config.south else ""
        return f"+proj=utm +zone={self.zone}{south} {self._proj4_datum()} +units=m +no_defs"

    def _forward(self, lat: float, lon: float) -> Tuple[float, float, Dict[str, Any]]:
        cfg = self.config
        if cfg.lon_0 is not None:
            lon0 = cfg.lon_0
            zone = self.zone
        elif cfg.zone is not None:
            zone = cfg.zone
            lon0 = GeodeticConstants.utm_zone_central_meridian(zone)
        else:
            zone = utm_zone(float(np.degrees(lon)))
            lon0 = GeodeticConstants.utm_zone_central_meridian(zone)
            logger.debug(f"UTM zone {zone} detected for longitude {np.degrees(lon):.6f}")

        south = lat < 0
        y0 = GeodeticConstants.UTM_SOUTH_FALSE_NORTHING.value if south else self.y0
        x, y = self._tm_forward(lat, lon, lon0, self.x0, y0)
        return x, y, {"zone": zone, "south": south}

    def _inverse(self, x: float, y: float, context: Mapping[str, Any]) -> Tuple[float, float]:
        cfg = self.config
        zone = context.get("zone", cfg.zone)
        south = context.get("south")
        if south is None:
            south = bool(cfg.south)

        if cfg.lon_0 is not None:
            lon0 = cfg.lon_0
        elif zone is not None:
            lon0 = GeodeticConstants.utm_zone_central_meridian(validate_zone(zone))
        else:
            raise ValidationError("UTM inverse needs lon_0 or a zone, in the options or the point context")

        y0 = GeodeticConstants.UTM_SOUTH_FALSE_NORTHING.value if south else self.y0
        return self._tm_inverse(x, y, lon0, self.x0, y0)

    def project(self, point: Geodetic) -> Utm:
        """Project a geodetic point to a UTM point."""
        projected = super().project(point)
        return Utm(
            projected.x,
            projected.y,
            projected.context["zone"],
            projected.context["south"],
            self,
        )


class LambertConformalConic(Projection):
    """Lambert Conformal Conic projection (one or two standard parallels).

    A conformal (angle-preserving) projection suitable for mid-latitude
    regions that extend primarily east-west.

    Options
    -------
    lat_1, lat_2 : standard parallels in degrees (default lat_0)
    lat_0, lon_0 : origin in degrees (default 0)
    k_0 : scale factor (default 1)
    x_0, y_0 : false easting/northing in meters (default 0)

    Raises
    ------
    ProjectionDomainError
        If the standard parallels are symmetric about the equator, which
        leaves the cone undefined.

    Notes
    -----
    Distortion is minimal between the standard parallels and increases
    away from them (Snyder eqs. 15-1 to 15-11).
    """

    def __init__(self, config: Optional[ProjectionConfig] = None, **options: Any):
        super().__init__(config, **options)
        cfg = self.config

        self.lat0 = _default(cfg.lat_0, 0.0)
        self.lon0 = _default(cfg.lon_0, 0.0)
        self.lat1 = _default(cfg.lat_1, self.lat0)
        self.lat2 = _default(cfg.lat_2, self.lat0)
        self.k0 = _default(cfg.k_0, 1.0)
        self.x0 = _default(cfg.x_0, 0.0)
        self.y0 = _default(cfg.y_0, 0.0)

        if abs(self.lat1 + self.lat2) < EPSLN:
            raise ProjectionDomainError(
                "Standard parallels are symmetric about the equator; the cone is undefined"
            )

        e = self.e
        sin1 = np.sin(self.lat1)
        ms1 = msfnz(e, sin1, np.cos(self.lat1))
        ts1 = tsfnz(e, self.lat1, sin1)

        sin2 = np.sin(self.lat2)
        ms2 = msfnz(e, sin2, np.cos(self.lat2))
        ts2 = tsfnz(e, self.lat2, sin2)

        ts0 = tsfnz(e, self.lat0, np.sin(self.lat0))

        if abs(self.lat1 - self.lat2) > EPSLN:
            self.ns = float(np.log(ms1 / ms2) / np.log(ts1 / ts2))
        else:
            self.ns = float(sin1)

        self.f0 = float(ms1 / (self.ns * ts1 ** self.ns))
        self.rh = float(self.a * self.f0 * ts0 ** self.ns)

        logger.debug(
            f"LambertConformalConic: ns={self.ns:.12f} f0={self.f0:.12f} rh={self.rh:.4f}"
        )

    @property
    def name(self) -> str:
        return (
            f"Lambert Conformal Conic ({np.degrees(self.lat1):g}°, "
            f"{np.degrees(self.lat2):g}°)"
        )

    @property
    def proj4_string(self) -> str:
        return (
            f"+proj=lcc +lat_1={float(np.degrees(self.lat1))} "
            f"+lat_2={float(np.degrees(self.lat2))} "
            f"+lat_0={float(np.degrees(self.lat0))} +lon_0={float(np.degrees(self.lon0))} "
            f"+k_0={self.k0} +x_0={self.x0} +y_0={self.y0} "
            f"{self._proj4_datum()} +units=m +no_defs"
        )

    def _forward(self, lat: float, lon: float) -> Tuple[float, float, Dict[str, Any]]:
        con = abs(abs(lat) - HALF_PI)
        if con > EPSLN:
            ts = tsfnz(self.e, lat, np.sin(lat))
            rh1 = self.a * self.f0 * ts ** self.ns
        else:
            if lat * self.ns <= 0:
                raise ProjectionDomainError("No projection: point lies outside the cone")
            rh1 = 0.0

        theta = self.ns * adjust_lon(lon - self.lon0)
        x = self.k0 * (rh1 * np.sin(theta)) + self.x0
        y = self.k0 * (self.rh - rh1 * np.cos(theta)) + self.y0
        return float(x), float(y), {}

    def _inverse(self, x: float, y: float, context: Mapping[str, Any]) -> Tuple[float, float]:
        x = (x - self.x0) / self.k0
        y = self.rh - (y - self.y0) / self.k0

        if self.ns > 0:
            rh1 = np.sqrt(x * x + y * y)
            con = 1.0
        else:
            rh1 = -np.sqrt(x * x + y * y)
            con = -1.0

        theta = 0.0
        if rh1 != 0:
            theta = np.arctan2(con * x, con * y)

        if rh1 != 0 or self.ns > 0:
            ts = (rh1 / (self.a * self.f0)) ** (1.0 / self.ns)
            lat = phi2z(self.e, ts)
        else:
            lat = -HALF_PI

        lon = adjust_lon(theta / self.ns + self.lon0)
        return float(lat), float(lon)


def batch_project(
    projection: Projection,
    lats_rad: NDArray[np.float64],
    lons_rad: NDArray[np.float64],
    datum: Optional[Datum] = None
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Project arrays of coordinates.

    Parameters
    ----------
    projection : Projection
        Projection to use.
    lats_rad, lons_rad : ndarray
        Coordinates in radians, of equal shape.
    datum : Datum, optional
        Datum of the input coordinates.

    Returns
    -------
    Tuple[ndarray, ndarray]
        (x, y) projected coordinates in meters.
    """
    lats = np.asarray(lats_rad, dtype=np.float64)
    lons = np.asarray(lons_rad, dtype=np.float64)
    if lats.shape != lons.shape:
        raise ValidationError(
            f"Latitude and longitude arrays differ in shape: {lats.shape} vs {lons.shape}"
        )

    x = np.empty_like(lats)
    y = np.empty_like(lats)
    for index in np.ndindex(lats.shape):
        result = projection.forward(float(lats[index]), float(lons[index]), datum)
        x[index] = result.x
        y[index] = result.y

    return x, y
