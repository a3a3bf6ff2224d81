import math

import pytest

from common.types import GeocentricMethod, PointKind
from geospatial import (
    UTM,
    WGS84_DATUM,
    Cartesian,
    Geocentric,
    Geodetic,
    Utm,
    ValidationError,
)


@pytest.mark.parametrize("lat", [90.0001, -91.0, math.nan])
def test_latitude_out_of_range(lat):
    with pytest.raises(ValidationError):
        Geodetic(lat, 0.0)


@pytest.mark.parametrize(
    "lon, expected",
    [
        (0.0, 0.0),
        (180.0, 180.0),
        (-180.0, 180.0),
        (190.0, -170.0),
        (-190.0, 170.0),
        (540.0, 180.0),
        (359.5, -0.5),
    ],
)
def test_longitude_is_normalised(lon, expected):
    assert Geodetic(10.0, lon).lon == pytest.approx(expected)


@pytest.mark.parametrize("value", [None, True, "north", object()])
def test_non_numeric_ordinates(value):
    with pytest.raises(ValidationError):
        Geodetic(value, 0.0)
    with pytest.raises(ValidationError):
        Geocentric(1.0, value, 0.0)
    with pytest.raises(ValidationError):
        Cartesian(value, 0.0)


def test_kind_tags():
    assert Geodetic(0, 0).kind == PointKind.GEODETIC
    assert Geocentric(0, 0, 0).kind == PointKind.GEOCENTRIC
    assert Cartesian(0, 0).kind == PointKind.CARTESIAN
    assert Utm(0, 0, 31).kind == PointKind.UTM


def test_ordinates_and_radians():
    point = Geodetic(45.0, -90.0, 12.0)
    assert point.to_ordinates() == (45.0, -90.0, 12.0)
    assert point.to_radians() == pytest.approx((math.pi / 4, -math.pi / 2, 12.0))

    again = Geodetic.from_radians(*point.to_radians())
    assert again.lat == pytest.approx(45.0)
    assert again.lon == pytest.approx(-90.0)
    assert again.datum is WGS84_DATUM


def test_with_datum_only_retags(osgb36_like):
    point = Geodetic(55.0, -3.0, 10.0)
    retagged = point.with_datum(osgb36_like)
    assert retagged.to_ordinates() == point.to_ordinates()
    assert retagged.datum is osgb36_like
    assert point.datum is WGS84_DATUM


def test_geocentric_round_trip_through_points(osgb36_like):
    point = Geodetic(55.953251, -3.188267, 70.0, osgb36_like)
    geocentric = point.to_geocentric()
    assert geocentric.datum is osgb36_like

    for method in GeocentricMethod:
        back = geocentric.to_geodetic(method)
        assert back.lat == pytest.approx(point.lat, abs=1e-6)
        assert back.lon == pytest.approx(point.lon, abs=1e-9)
        assert back.height == pytest.approx(point.height, abs=0.02)
        assert back.datum is osgb36_like


def test_points_are_immutable():
    point = Geodetic(1.0, 2.0)
    with pytest.raises(AttributeError):
        point.lat = 3.0


def test_cartesian_context_is_read_only():
    point = Cartesian(1.0, 2.0, {"zone": 30})
    assert point.get_context_item("zone") == 30
    assert point.get_context_item("south", False) is False
    with pytest.raises(TypeError):
        point.context["zone"] = 31


def test_cartesian_without_projection():
    point = Cartesian(1.0, 2.0)
    assert point.datum is WGS84_DATUM
    with pytest.raises(ValidationError):
        point.to_geodetic()
    with pytest.raises(ValidationError):
        point.to_utm()
    assert point.with_datum(WGS84_DATUM) is point


@pytest.mark.parametrize("zone", [0, 61, -5, 30.5, None, "x"])
def test_invalid_utm_zone(zone):
    with pytest.raises(ValidationError):
        Utm(500000.0, 0.0, zone)


def test_utm_and_cartesian_views():
    projection = UTM()
    utm = Utm(448251.8, 6200000.0, 30, False, projection)
    cartesian = utm.to_cartesian()
    assert cartesian.to_ordinates() == (448251.8, 6200000.0)
    assert dict(cartesian.context) == {"zone": 30, "south": False}
    assert cartesian.datum is projection.datum
    assert cartesian.to_utm() == utm
