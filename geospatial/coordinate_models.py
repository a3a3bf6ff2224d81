"""
Coordinate Models for Ellipsoidal Earth Geometry.

This module implements the conversions between geodetic coordinates
(latitude, longitude, height) and geocentric Earth-Centered Earth-Fixed
(ECEF) coordinates on an arbitrary reference ellipsoid. All angles are in
radians and all distances in meters; degree handling belongs to the point
types.

Scientific Context
------------------
Domain: Geodesy, datum transformation
Model: Rotational ellipsoid (sphere allowed as the degenerate case)

Methods
-------
1. Geodetic -> ECEF: closed form, exact.
2. ECEF -> geodetic, iterative: Institut fuer Erdmessung, University of
   Hannover (1988). Iterates sin/cos of latitude to 1e-12, at most 30
   iterations. This is the reference method.
3. ECEF -> geodetic, closed form: Toms (1996), a single Bowring step with
   a region-dependent height formula. Cheaper, with a different error
   profile; callers choose it explicitly.

References
----------
- Torge, W. (2001). Geodesy (3rd ed.). de Gruyter.
- Toms, R. (1996). An Improved Algorithm for Geocentric to Geodetic
  Coordinate Conversion.
- Bowring, B.R. (1976). Transformation from spatial to geographical
  coordinates. Survey Review, 23(181), 323-327.
"""

import warnings
from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from common.constants import GeodeticConstants
from common.logging_config import get_logger
from common.types import GeocentricMethod
from geospatial.ellipsoid import WGS84, Ellipsoid
from geospatial.exceptions import ConvergenceError, ConvergenceWarning, ValidationError

logger = get_logger(__name__)

HALF_PI = np.pi / 2
GENAU = GeodeticConstants.GEOCENTRIC_GENAU.value


def radius_of_curvature_meridian(
    latitude_rad: float,
    ellipsoid: Ellipsoid = WGS84
) -> float:
    """Compute the radius of curvature in the meridian plane.

    Parameters
    ----------
    latitude_rad : float
        Geodetic latitude in radians.
    ellipsoid : Ellipsoid
        Reference ellipsoid (default: WGS84).

    Returns
    -------
    float
        Radius of curvature M in meters.

    Notes
    -----
    M = a(1 - e^2) / (1 - e^2 sin^2(phi))^(3/2)
    """
    sin_lat = np.sin(latitude_rad)
    denominator = (1 - ellipsoid.es * sin_lat**2) ** 1.5
    return ellipsoid.a * (1 - ellipsoid.es) / denominator


def radius_of_curvature_prime_vertical(
    latitude_rad: float,
    ellipsoid: Ellipsoid = WGS84
) -> float:
    """Compute the radius of curvature in the prime vertical.

    Parameters
    ----------
    latitude_rad : float
        Geodetic latitude in radians.
    ellipsoid : Ellipsoid
        Reference ellipsoid (default: WGS84).

    Returns
    -------
    float
        Radius of curvature N (Rn) in meters.

    Notes
    -----
    N = a / (1 - e^2 sin^2(phi))^(1/2)
    """
    sin_lat = np.sin(latitude_rad)
    denominator = np.sqrt(1 - ellipsoid.es * sin_lat**2)
    return ellipsoid.a / denominator


def geodetic_to_ecef(
    latitude_rad: float,
    longitude_rad: float,
    height_m: float = 0.0,
    ellipsoid: Ellipsoid = WGS84
) -> Tuple[float, float, float]:
    """Convert geodetic coordinates to Earth-Centered Earth-Fixed (ECEF).

    Parameters
    ----------
    latitude_rad : float
        Geodetic latitude in radians, within [-pi/2, pi/2].
    longitude_rad : float
        Geodetic longitude in radians.
    height_m : float
        Height above the ellipsoid in meters.
    ellipsoid : Ellipsoid
        Reference ellipsoid (default: WGS84).

    Returns
    -------
    Tuple[float, float, float]
        (X, Y, Z) coordinates in meters in the ECEF frame.

    Raises
    ------
    ValidationError
        If the latitude is outside [-pi/2, pi/2] beyond rounding slack.

    Notes
    -----
    Latitudes just past a pole (within 0.1%) are clamped to the pole, since
    they arise from rounding in degree/radian conversion.
    """
    if -1.001 * HALF_PI < latitude_rad < -HALF_PI:
        latitude_rad = -HALF_PI
    elif HALF_PI < latitude_rad < 1.001 * HALF_PI:
        latitude_rad = HALF_PI
    elif not -HALF_PI <= latitude_rad <= HALF_PI:
        raise ValidationError(f"Latitude {latitude_rad} rad out of range [-pi/2, pi/2]")

    sin_lat = np.sin(latitude_rad)
    cos_lat = np.cos(latitude_rad)
    sin_lon = np.sin(longitude_rad)
    cos_lon = np.cos(longitude_rad)

    N = radius_of_curvature_prime_vertical(latitude_rad, ellipsoid)

    X = (N + height_m) * cos_lat * cos_lon
    Y = (N + height_m) * cos_lat * sin_lon
    Z = (N * (1 - ellipsoid.es) + height_m) * sin_lat

    return float(X), float(Y), float(Z)


def _polar_or_centre(
    X: float,
    Y: float,
    Z: float,
    ellipsoid: Ellipsoid
) -> Tuple[bool, bool]:
    """Detect the Z-axis and Earth-centre singularities.

    Returns (on_axis, at_centre), both relative to GENAU * a.
    """
    P = np.sqrt(X * X + Y * Y)
    RR = np.sqrt(X * X + Y * Y + Z * Z)
    on_axis = P / ellipsoid.a < GENAU
    at_centre = on_axis and RR / ellipsoid.a < GENAU
    return bool(on_axis), bool(at_centre)


def ecef_to_geodetic(
    X: float,
    Y: float,
    Z: float,
    ellipsoid: Ellipsoid = WGS84,
    max_iterations: int = GeodeticConstants.GEOCENTRIC_MAX_ITER,
    tolerance: float = GENAU,
    strict: bool = False
) -> Tuple[float, float, float]:
    """Convert ECEF coordinates to geodetic (latitude, longitude, height).

    Uses the iterative method of the Institut fuer Erdmessung, Hannover.

    Parameters
    ----------
    X, Y, Z : float
        ECEF coordinates in meters.
    ellipsoid : Ellipsoid
        Reference ellipsoid (default: WGS84).
    max_iterations : int
        Hard cap on the number of iterations.
    tolerance : float
        End criterion on the change of sin(latitude).
    strict : bool
        If True, raise ConvergenceError when the cap is reached; otherwise
        emit a ConvergenceWarning and return the last estimate.

    Returns
    -------
    Tuple[float, float, float]
        (latitude_rad, longitude_rad, height_m)

    Notes
    -----
    On the Z axis the longitude is 0. At the Earth's centre the result is
    latitude pi/2 and height -b, without iterating.
    """
    a = ellipsoid.a
    es = ellipsoid.es

    P = np.sqrt(X * X + Y * Y)
    RR = np.sqrt(X * X + Y * Y + Z * Z)

    on_axis, at_centre = _polar_or_centre(X, Y, Z, ellipsoid)
    if on_axis:
        longitude = 0.0
        if at_centre:
            return HALF_PI, 0.0, -ellipsoid.b
    else:
        # interval: -pi < longitude <= +pi
        longitude = float(np.arctan2(Y, X))

    CT = Z / RR
    ST = P / RR
    RX = 1.0 / np.sqrt(1.0 - es * (2.0 - es) * ST * ST)
    CPHI0 = ST * (1.0 - es) * RX
    SPHI0 = CT * RX

    tolerance2 = tolerance * tolerance
    iteration = 0
    while True:
        iteration += 1
        RN = a / np.sqrt(1.0 - es * SPHI0 * SPHI0)

        height = P * CPHI0 + Z * SPHI0 - RN * (1.0 - es * SPHI0 * SPHI0)

        RK = es * RN / (RN + height)
        RX = 1.0 / np.sqrt(1.0 - RK * (2.0 - RK) * ST * ST)
        CPHI = ST * (1.0 - RK) * RX
        SPHI = CT * RX
        SDPHI = SPHI * CPHI0 - CPHI * SPHI0
        CPHI0 = CPHI
        SPHI0 = SPHI

        if SDPHI * SDPHI <= tolerance2:
            break
        if iteration >= max_iterations:
            latitude = float(np.arctan2(SPHI, abs(CPHI)))
            if strict:
                raise ConvergenceError(
                    "ecef_to_geodetic",
                    iteration,
                    (latitude, longitude, float(height))
                )
            logger.warning(
                f"ecef_to_geodetic: no convergence after {iteration} iterations "
                f"(residual {abs(SDPHI):.3e}); returning last estimate"
            )
            warnings.warn(
                f"Geocentric to geodetic conversion did not converge within "
                f"{iteration} iterations",
                ConvergenceWarning,
                stacklevel=2
            )
            return latitude, longitude, float(height)

    latitude = float(np.arctan2(SPHI, abs(CPHI)))
    return latitude, longitude, float(height)


def ecef_to_geodetic_closed_form(
    X: float,
    Y: float,
    Z: float,
    ellipsoid: Ellipsoid = WGS84
) -> Tuple[float, float, float]:
    """Convert ECEF coordinates to geodetic without iterating.

    Parameters
    ----------
    X, Y, Z : float
        ECEF coordinates in meters.
    ellipsoid : Ellipsoid
        Reference ellipsoid (default: WGS84).

    Returns
    -------
    Tuple[float, float, float]
        (latitude_rad, longitude_rad, height_m)

    Notes
    -----
    One Bowring step from the auxiliary estimate T0 = Z * AD_C. The height
    is W / cos(phi1) - Rn while |cos(phi1)| >= cos(67.5 deg), and
    Z / sin(phi1) + Rn (es - 1) closer to the poles. Axis and centre cases
    use the same thresholds as `ecef_to_geodetic`.
    """
    a = ellipsoid.a
    b = ellipsoid.b
    es = ellipsoid.es
    ep2 = ellipsoid.es2
    cos_67p5 = GeodeticConstants.COS_67P5.value

    on_axis, at_centre = _polar_or_centre(X, Y, Z, ellipsoid)
    if on_axis:
        longitude = 0.0
        if at_centre:
            return HALF_PI, 0.0, -b
    else:
        longitude = float(np.arctan2(Y, X))

    W2 = X * X + Y * Y
    W = np.sqrt(W2)
    T0 = Z * GeodeticConstants.AD_C.value
    S0 = np.sqrt(T0 * T0 + W2)
    sin_B0 = T0 / S0
    cos_B0 = W / S0
    sin3_B0 = sin_B0 ** 3
    T1 = Z + b * ep2 * sin3_B0
    total = W - a * es * cos_B0 ** 3
    S1 = np.sqrt(T1 * T1 + total * total)
    sin_p1 = T1 / S1
    cos_p1 = total / S1
    Rn = a / np.sqrt(1.0 - es * sin_p1 * sin_p1)

    if cos_p1 >= cos_67p5:
        height = W / cos_p1 - Rn
    elif cos_p1 <= -cos_67p5:
        height = W / -cos_p1 - Rn
    else:
        height = Z / sin_p1 + Rn * (es - 1.0)

    if on_axis:
        latitude = HALF_PI if Z > 0 else -HALF_PI
    else:
        latitude = float(np.arctan2(sin_p1, cos_p1))

    return float(latitude), longitude, float(height)


def convert_ecef_to_geodetic(
    X: float,
    Y: float,
    Z: float,
    ellipsoid: Ellipsoid = WGS84,
    method: GeocentricMethod = GeocentricMethod.ITERATIVE,
    strict: bool = False
) -> Tuple[float, float, float]:
    """Dispatch an ECEF to geodetic conversion to the chosen method."""
    if method == GeocentricMethod.ITERATIVE:
        return ecef_to_geodetic(X, Y, Z, ellipsoid, strict=strict)
    if method == GeocentricMethod.CLOSED_FORM:
        return ecef_to_geodetic_closed_form(X, Y, Z, ellipsoid)
    raise ValidationError(f"Unknown geocentric conversion method {method!r}")


# Vectorized version for batch processing
def geodetic_to_ecef_batch(
    latitudes_rad: NDArray[np.float64],
    longitudes_rad: NDArray[np.float64],
    heights_m: NDArray[np.float64],
    ellipsoid: Ellipsoid = WGS84
) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """Vectorized geodetic to ECEF conversion.

    Parameters
    ----------
    latitudes_rad : ndarray
        Array of latitudes in radians.
    longitudes_rad : ndarray
        Array of longitudes in radians.
    heights_m : ndarray
        Array of heights in meters.
    ellipsoid : Ellipsoid
        Reference ellipsoid.

    Returns
    -------
    Tuple[ndarray, ndarray, ndarray]
        (X, Y, Z) arrays in meters.
    """
    sin_lat = np.sin(latitudes_rad)
    cos_lat = np.cos(latitudes_rad)
    sin_lon = np.sin(longitudes_rad)
    cos_lon = np.cos(longitudes_rad)

    N = ellipsoid.a / np.sqrt(1 - ellipsoid.es * sin_lat**2)

    X = (N + heights_m) * cos_lat * cos_lon
    Y = (N + heights_m) * cos_lat * sin_lon
    Z = (N * (1 - ellipsoid.es) + heights_m) * sin_lat

    return X, Y, Z
