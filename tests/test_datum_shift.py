import pytest

from common.types import Direction, GeocentricMethod
from geospatial import (
    UTM,
    WGS84_DATUM,
    Cartesian,
    Datum,
    Geocentric,
    Geodetic,
    TransverseMercator,
    Utm,
    ValidationError,
    coords_from_wgs84,
    coords_to_wgs84,
    helmert_transform,
    shift_datum,
)

EDINBURGH = Geodetic(55.953251, -3.188267, 70.0)


def test_helmert_without_parameters_is_identity():
    assert helmert_transform((1.0, 2.0, 3.0), WGS84_DATUM) == (1.0, 2.0, 3.0)


def test_helmert_three_parameters(ed50):
    assert helmert_transform((0.0, 0.0, 0.0), ed50) == (-87.0, -98.0, -121.0)
    assert coords_from_wgs84((0.0, 0.0, 0.0), ed50) == (87.0, 98.0, 121.0)
    assert coords_to_wgs84((10.0, 20.0, 30.0), ed50) == (-77.0, -78.0, -91.0)


def test_helmert_scale_only():
    datum = Datum(None, "0,0,0,0,0,0,1")
    x, y, z = helmert_transform((1.0e6, 0.0, -2.0e6), datum, Direction.FORWARD)
    assert x == pytest.approx(1.0e6 + 1.0)
    assert y == 0.0
    assert z == pytest.approx(-2.0e6 - 2.0)

    x, _, _ = helmert_transform((1.0e6, 0.0, 0.0), datum, Direction.INVERSE)
    assert x == pytest.approx(1.0e6 - 1.0)


def test_helmert_rotation_about_z():
    # 60 rotation units is one degree in the small-angle form
    datum = Datum(None, "0,0,0,0,0,60,0")
    x, y, z = helmert_transform((1000.0, 0.0, 0.0), datum)
    assert x == pytest.approx(1000.0)
    assert y == pytest.approx(1000.0 * 0.017453292519943295)
    assert z == 0.0


def test_edinburgh_to_osgb36(osgb36_like):
    shifted = shift_datum(EDINBURGH, osgb36_like)
    assert isinstance(shifted, Geodetic)
    assert shifted.datum is osgb36_like
    assert shifted.lat == pytest.approx(55.957471, abs=1e-4)
    assert shifted.lon == pytest.approx(-3.197363, abs=1e-4)
    assert shifted.height == pytest.approx(241.966, abs=1e-3)


def test_edinburgh_closed_form_agrees(osgb36_like):
    iterative = shift_datum(EDINBURGH, osgb36_like)
    closed = shift_datum(EDINBURGH, osgb36_like, GeocentricMethod.CLOSED_FORM)
    assert closed.lat == pytest.approx(iterative.lat, abs=1e-6)
    assert closed.lon == pytest.approx(iterative.lon, abs=1e-9)
    assert closed.height == pytest.approx(iterative.height, abs=0.02)


def test_seven_parameter_round_trip(osgb36_like):
    there = shift_datum(EDINBURGH, osgb36_like)
    back = shift_datum(there, WGS84_DATUM)
    assert back.datum is WGS84_DATUM
    # The linearised transform is not exactly invertible
    assert back.lat == pytest.approx(EDINBURGH.lat, abs=1e-5)
    assert back.lon == pytest.approx(EDINBURGH.lon, abs=1e-5)
    assert back.height == pytest.approx(EDINBURGH.height, abs=0.5)


def test_three_parameter_round_trip_is_tight(ed50):
    point = Geodetic(48.8566, 2.3522, 35.0)
    back = shift_datum(shift_datum(point, ed50), WGS84_DATUM)
    assert back.lat == pytest.approx(point.lat, abs=1e-9)
    assert back.lon == pytest.approx(point.lon, abs=1e-9)
    assert back.height == pytest.approx(point.height, abs=1e-5)


def test_same_datum_only_retags():
    twin = Datum(None, None, code="twin")
    shifted = shift_datum(EDINBURGH, twin)
    assert shifted.to_ordinates() == EDINBURGH.to_ordinates()
    assert shifted.datum is twin


def test_geocentric_point(ed50):
    shifted = shift_datum(Geocentric(1.0, 2.0, 3.0, ed50), WGS84_DATUM)
    assert isinstance(shifted, Geocentric)
    assert shifted.to_ordinates() == (-86.0, -96.0, -118.0)
    assert shifted.datum is WGS84_DATUM


def test_cartesian_point_is_reprojected(osgb36_like):
    projection = TransverseMercator(lon_0=-2, k_0=0.9996012717, x_0=400000, y_0=-100000)
    point = projection.project(EDINBURGH)
    assert isinstance(point, Cartesian)

    shifted = shift_datum(point, osgb36_like)
    assert isinstance(shifted, Cartesian)
    assert shifted.datum.is_same(osgb36_like)

    # Projected points carry no height, so the shift starts from height 0
    on_ellipsoid = projection.unproject(point)
    assert on_ellipsoid.height == 0.0
    expected = projection.with_datum(osgb36_like).project(shift_datum(on_ellipsoid, osgb36_like))
    assert shifted.x == pytest.approx(expected.x, abs=1e-6)
    assert shifted.y == pytest.approx(expected.y, abs=1e-6)
    assert abs(shifted.x - point.x) > 10.0


def test_utm_point_stays_utm(ed50):
    point = UTM().project(EDINBURGH)
    assert isinstance(point, Utm)

    shifted = shift_datum(point, ed50)
    assert isinstance(shifted, Utm)
    assert shifted.zone == 30
    assert shifted.datum.is_same(ed50)
    assert shifted.easting != pytest.approx(point.easting, abs=1.0)


def test_invalid_target():
    with pytest.raises(ValidationError):
        shift_datum(EDINBURGH, "OSGB36")


def test_projectionless_points_retag_to_wgs84(ed50):
    point = Cartesian(1.0, 2.0)
    assert shift_datum(point, WGS84_DATUM) is point

    utm_point = Utm(500000.0, 0.0, 31)
    assert shift_datum(utm_point, WGS84_DATUM) is utm_point

    with pytest.raises(ValidationError):
        shift_datum(point, ed50)
