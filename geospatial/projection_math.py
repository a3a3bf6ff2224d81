"""
Trigonometric primitives shared by the projection formulas.

Names follow Snyder (1987) and the GCTP library so the projection code can
be read against the published equations.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof.
  Paper 1395, eqs. 3-21, 7-9, 14-15, 15-9.
"""

import numpy as np

from common.constants import GeodeticConstants
from geospatial.exceptions import ConvergenceError

HALF_PI = np.pi / 2
TWO_PI = 2 * np.pi
EPSLN = GeodeticConstants.EPSLN.value


def sign(x: float) -> float:
    """-1 for negative values, +1 otherwise (including zero)."""
    return -1.0 if x < 0 else 1.0


def adjust_lon(lon: float) -> float:
    """Wrap a longitude in radians into (-pi, pi]."""
    if abs(lon) < np.pi:
        return lon
    return lon - sign(lon) * TWO_PI


def asinz(con: float) -> float:
    """arcsin with its argument clamped to [-1, 1]."""
    if abs(con) > 1.0:
        con = sign(con)
    return float(np.arcsin(con))


def msfnz(eccent: float, sinphi: float, cosphi: float) -> float:
    """Ratio of the parallel radius to the semi-major axis (Snyder 14-15)."""
    con = eccent * sinphi
    return cosphi / np.sqrt(1.0 - con * con)


def tsfnz(eccent: float, phi: float, sinphi: float) -> float:
    """Isometric colatitude function t (Snyder 15-9)."""
    con = eccent * sinphi
    com = 0.5 * eccent
    con = ((1.0 - con) / (1.0 + con)) ** com
    return np.tan(0.5 * (HALF_PI - phi)) / con


def phi2z(
    eccent: float,
    ts: float,
    max_iterations: int = GeodeticConstants.PHI2Z_MAX_ITER
) -> float:
    """Latitude from the isometric colatitude t (Snyder 7-9).

    Raises
    ------
    ConvergenceError
        If the iteration does not settle within `max_iterations`.
    """
    eccnth = 0.5 * eccent
    phi = HALF_PI - 2 * np.arctan(ts)
    for _ in range(max_iterations):
        con = eccent * np.sin(phi)
        dphi = HALF_PI - 2 * np.arctan(ts * ((1.0 - con) / (1.0 + con)) ** eccnth) - phi
        phi += dphi
        if abs(dphi) <= EPSLN:
            return float(phi)
    raise ConvergenceError("phi2z", max_iterations, float(phi))


# Meridian distance series (Snyder 3-21)

def e0fn(x: float) -> float:
    return 1.0 - 0.25 * x * (1.0 + x / 16.0 * (3.0 + 1.25 * x))


def e1fn(x: float) -> float:
    return 0.375 * x * (1.0 + 0.25 * x * (1.0 + 0.46875 * x))


def e2fn(x: float) -> float:
    return 0.05859375 * x * x * (1.0 + 0.75 * x)


def e3fn(x: float) -> float:
    return x * x * x * (35.0 / 3072.0)


def mlfn(e0: float, e1: float, e2: float, e3: float, phi: float) -> float:
    """Meridian distance from the equator, divided by a."""
    return (
        e0 * phi
        - e1 * np.sin(2.0 * phi)
        + e2 * np.sin(4.0 * phi)
        - e3 * np.sin(6.0 * phi)
    )
