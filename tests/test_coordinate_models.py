import warnings

import numpy as np
import pytest

from common.types import GeocentricMethod
from geospatial import (
    WGS84,
    ConvergenceError,
    ConvergenceWarning,
    ValidationError,
    convert_ecef_to_geodetic,
    ecef_to_geodetic,
    ecef_to_geodetic_closed_form,
    geodetic_to_ecef,
    geodetic_to_ecef_batch,
    get_ellipsoid,
    radius_of_curvature_meridian,
    radius_of_curvature_prime_vertical,
)

POINTS = [
    (0.0, 0.0, 0.0),
    (55.953251, -3.188267, 70.0),
    (-33.9249, 18.4241, 25.0),
    (45.0, 179.5, 1000.0),
    (-89.5, -120.0, 3000.0),
    (12.5, 100.25, -50.0),
    (70.0, 30.0, 8848.0),
]


def test_radii_at_equator():
    assert radius_of_curvature_prime_vertical(0.0) == pytest.approx(WGS84.a)
    assert radius_of_curvature_meridian(0.0) == pytest.approx(WGS84.a * (1 - WGS84.es))


def test_origin_maps_to_semi_major_axis():
    x, y, z = geodetic_to_ecef(0.0, 0.0, 0.0)
    assert x == pytest.approx(WGS84.a)
    assert y == pytest.approx(0.0, abs=1e-9)
    assert z == pytest.approx(0.0, abs=1e-9)


def test_latitude_out_of_range():
    with pytest.raises(ValidationError):
        geodetic_to_ecef(2.0, 0.0, 0.0)


@pytest.mark.parametrize("ellipsoid_code", ["WGS84", "airy", "intl", "sphere"])
@pytest.mark.parametrize("lat_deg, lon_deg, height", POINTS)
def test_round_trip(ellipsoid_code, lat_deg, lon_deg, height):
    ellipsoid = get_ellipsoid(ellipsoid_code)
    x, y, z = geodetic_to_ecef(np.radians(lat_deg), np.radians(lon_deg), height, ellipsoid)
    lat, lon, h = ecef_to_geodetic(x, y, z, ellipsoid, strict=True)

    assert np.degrees(lat) == pytest.approx(lat_deg, abs=1e-9)
    assert np.degrees(lon) == pytest.approx(lon_deg, abs=1e-9)
    assert h == pytest.approx(height, abs=1e-6)


@pytest.mark.parametrize("sign", [1.0, -1.0])
def test_pole_is_exact(sign):
    lat, lon, h = ecef_to_geodetic(0.0, 0.0, sign * (WGS84.b + 100.0))
    assert lat == sign * np.pi / 2
    assert lon == 0.0
    assert h == pytest.approx(100.0, abs=1e-6)


def test_earth_centre():
    lat, lon, h = ecef_to_geodetic(0.0, 0.0, 0.0)
    assert lat == np.pi / 2
    assert lon == 0.0
    assert h == -WGS84.b

    assert ecef_to_geodetic_closed_form(0.0, 0.0, 0.0) == (np.pi / 2, 0.0, -WGS84.b)


@pytest.mark.parametrize("lat_deg, lon_deg, height", POINTS)
def test_closed_form_agrees_with_iteration(lat_deg, lon_deg, height):
    x, y, z = geodetic_to_ecef(np.radians(lat_deg), np.radians(lon_deg), height)
    reference = ecef_to_geodetic(x, y, z)
    closed = ecef_to_geodetic_closed_form(x, y, z)

    assert closed[0] == pytest.approx(reference[0], abs=1e-8)
    assert closed[1] == pytest.approx(reference[1], abs=1e-12)
    assert closed[2] == pytest.approx(reference[2], abs=0.05)


def test_closed_form_at_pole():
    lat, lon, h = ecef_to_geodetic_closed_form(0.0, 0.0, -(WGS84.b + 100.0))
    assert lat == -np.pi / 2
    assert lon == 0.0
    assert h == pytest.approx(100.0, abs=1e-6)


def test_dispatcher_selects_method():
    x, y, z = geodetic_to_ecef(0.9, 0.1, 250.0)
    assert convert_ecef_to_geodetic(x, y, z) == ecef_to_geodetic(x, y, z)
    assert convert_ecef_to_geodetic(
        x, y, z, method=GeocentricMethod.CLOSED_FORM
    ) == ecef_to_geodetic_closed_form(x, y, z)
    with pytest.raises(ValidationError):
        convert_ecef_to_geodetic(x, y, z, method="newton")


def _high_orbit_point():
    return geodetic_to_ecef(np.radians(40.0), np.radians(10.0), 1.0e6)


def test_strict_iteration_cap_raises():
    x, y, z = _high_orbit_point()
    with pytest.raises(ConvergenceError) as excinfo:
        ecef_to_geodetic(x, y, z, max_iterations=1, tolerance=0.0, strict=True)
    assert excinfo.value.iterations == 1
    assert len(excinfo.value.last_estimate) == 3


def test_iteration_cap_warns_and_returns_estimate():
    x, y, z = _high_orbit_point()
    with pytest.warns(ConvergenceWarning):
        lat, lon, h = ecef_to_geodetic(x, y, z, max_iterations=1, tolerance=0.0)
    assert np.degrees(lat) == pytest.approx(40.0, abs=0.1)
    assert np.degrees(lon) == pytest.approx(10.0)


def test_default_iteration_converges_silently():
    x, y, z = _high_orbit_point()
    with warnings.catch_warnings():
        warnings.simplefilter("error", ConvergenceWarning)
        lat, _, h = ecef_to_geodetic(x, y, z)
    assert np.degrees(lat) == pytest.approx(40.0, abs=1e-9)
    assert h == pytest.approx(1.0e6, abs=1e-5)


def test_batch_matches_scalar():
    lats = np.radians(np.array([p[0] for p in POINTS]))
    lons = np.radians(np.array([p[1] for p in POINTS]))
    heights = np.array([p[2] for p in POINTS])

    xs, ys, zs = geodetic_to_ecef_batch(lats, lons, heights)
    for i in range(len(POINTS)):
        expected = geodetic_to_ecef(lats[i], lons[i], heights[i])
        np.testing.assert_allclose((xs[i], ys[i], zs[i]), expected, rtol=0, atol=1e-6)
