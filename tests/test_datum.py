import numpy as np
import pytest

from common.types import ARCSECONDS, MULTIPLIER, PPM, RADIANS, Direction, ShiftParameterCount
from geospatial import (
    WGS84,
    WGS84_DATUM,
    Datum,
    Ellipsoid,
    ValidationError,
    get_datum,
    parse_shift_parameters,
)


def test_default_datum_is_wgs84_without_shift():
    datum = Datum()
    assert datum.ellipsoid == WGS84
    assert datum.get_shift_parameter_count() == ShiftParameterCount.NONE
    assert datum.get_shift_parameters() == []
    assert datum.is_same(Datum(Ellipsoid()))
    assert datum.is_same(WGS84_DATUM)


@pytest.mark.parametrize(
    "params, expected",
    [
        (None, []),
        ("", []),
        ("1,2,3", [1.0, 2.0, 3.0]),
        ("1 2  3", [1.0, 2.0, 3.0]),
        (" 1, 2 ,3 ", [1.0, 2.0, 3.0]),
        ([1, "2", 3.5], [1.0, 2.0, 3.5]),
        ("1,2,3,4,5,6,7", [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0]),
    ],
)
def test_parse_shift_parameters(params, expected):
    assert parse_shift_parameters(params) == expected


@pytest.mark.parametrize("params", ["1,2", [1, 2, 3, 4], "1,2,3,4,5,6", "a,b,c", [1, None, 3]])
def test_invalid_shift_parameters(params):
    with pytest.raises(ValidationError):
        Datum(None, params)


def test_shift_parameter_count_is_derived_from_values():
    assert Datum(None, "0,0,0").get_shift_parameter_count() == ShiftParameterCount.NONE
    assert Datum(None, "0 0 0 0 0 0 0").get_shift_parameter_count() == ShiftParameterCount.NONE
    assert Datum(None, "1,2,3").get_shift_parameter_count() == ShiftParameterCount.THREE
    assert Datum(None, "1,2,3,0,0,0,0").get_shift_parameter_count() == ShiftParameterCount.THREE
    assert Datum(None, "0,0,0,0,0,0,1").get_shift_parameter_count() == ShiftParameterCount.SEVEN


def test_osgb36_parameters(osgb36_like):
    assert osgb36_like.get_shift_parameter_count() == ShiftParameterCount.SEVEN
    assert osgb36_like.get_displacement_parameters() == [446.448, -125.157, 542.060]
    assert osgb36_like.get_rotational_parameters(ARCSECONDS) == [0.1502, 0.2470, 0.8421]
    assert osgb36_like.get_scalar_parameter(PPM) == -20.4894
    assert osgb36_like.a == 6377340.189
    assert osgb36_like.b == pytest.approx(6356034.446, abs=1e-6)
    assert osgb36_like.rf == pytest.approx(299.32493736548241, rel=1e-12)


def test_direction_negates_parameters(osgb36_like):
    inverse = Direction.INVERSE
    assert osgb36_like.get_displacement_parameters(inverse) == [-446.448, 125.157, -542.060]
    assert osgb36_like.get_rotational_parameters(ARCSECONDS, inverse) == [-0.1502, -0.2470, -0.8421]
    assert osgb36_like.get_scalar_parameter(PPM, inverse) == 20.4894
    assert osgb36_like.get_scalar_parameter(MULTIPLIER) == pytest.approx(1 - 20.4894e-6)
    assert osgb36_like.get_scalar_parameter(MULTIPLIER, inverse) == pytest.approx(1 + 20.4894e-6)


def test_rotation_in_radians_uses_sixtieths_of_a_degree():
    datum = Datum(None, "0,0,0,60,-30,0,0")
    rx, ry, rz = datum.get_rotational_parameters(RADIANS)
    assert rx == pytest.approx(np.radians(1.0))
    assert ry == pytest.approx(np.radians(-0.5))
    assert rz == 0.0


def test_unknown_units_raise(osgb36_like):
    with pytest.raises(ValidationError):
        osgb36_like.get_rotational_parameters("gradians")
    with pytest.raises(ValidationError):
        osgb36_like.get_scalar_parameter("percent")


def test_is_same_compares_counts_parameters_and_ellipsoid(osgb36_like):
    assert not Datum(None, "1,2,3").is_same(Datum(None, "1,2,3,0,0,0,1"))
    assert not Datum(None, "1,2,3").is_same(Datum(None, "1,2,4"))
    assert Datum(None, "1,2,3", code="A").is_same(Datum(None, [1, 2, 3], code="B"))

    nudged = WGS84.with_a(WGS84.a + 5e-7)
    assert Datum(nudged).is_same(WGS84_DATUM)
    assert not Datum(WGS84.with_a(WGS84.a + 1e-3)).is_same(WGS84_DATUM)
    assert not osgb36_like.is_same(osgb36_like.with_ellipsoid(WGS84))


def test_with_updates_keep_the_other_half(osgb36_like):
    rebased = osgb36_like.with_ellipsoid(WGS84)
    assert rebased.ellipsoid == WGS84
    assert rebased.get_shift_parameters() == osgb36_like.get_shift_parameters()

    shifted = osgb36_like.with_shift_parameters("1,2,3")
    assert shifted.ellipsoid == osgb36_like.ellipsoid
    assert shifted.get_shift_parameter_count() == ShiftParameterCount.THREE


def test_catalogue_lookup():
    assert get_datum("osgb36").get_shift_parameter_count() == ShiftParameterCount.SEVEN
    assert get_datum("ED50").get_shift_parameters() == [-87.0, -98.0, -121.0]
    assert get_datum("wgs84") is WGS84_DATUM
    with pytest.raises(ValidationError):
        get_datum("nowhere")


def test_non_ellipsoid_is_rejected():
    with pytest.raises(ValidationError):
        Datum("WGS84")
