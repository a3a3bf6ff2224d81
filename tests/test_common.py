import logging

import numpy as np
import pint
import pytest

from common.constants import GeodeticConstants
from common.logging_config import get_logger, set_level
from common.types import MULTIPLIER, RADIANS
from common.units import Q_, ppm_to_multiplier, rotation_to_radians, to_magnitude
from geospatial import Datum


def test_to_magnitude_accepts_numbers_and_quantities():
    assert to_magnitude(180, "degree", "radian") == pytest.approx(np.pi)
    assert to_magnitude(Q_(np.pi, "radian"), "degree", "radian") == pytest.approx(np.pi)
    with pytest.raises(pint.DimensionalityError):
        to_magnitude(Q_(1, "meter"), "degree", "radian")


def test_rotation_helper_follows_datum_convention():
    # One degree is 60 stored rotation units
    assert rotation_to_radians(60) == pytest.approx(np.radians(1.0))
    assert rotation_to_radians(3600) == pytest.approx(np.radians(60.0))

    datum = Datum(None, [0, 0, 0, 3600, 0, 0, 0])
    assert datum.get_rotational_parameters(RADIANS)[0] == rotation_to_radians(3600)


def test_ppm_helper_follows_datum_scale():
    assert ppm_to_multiplier(0) == 1.0
    assert ppm_to_multiplier(-20.4894) == pytest.approx(1 - 20.4894e-6)

    datum = Datum(None, [0, 0, 0, 0, 0, 0, -20.4894])
    assert datum.get_scalar_parameter(MULTIPLIER) == ppm_to_multiplier(-20.4894)


def test_utm_central_meridian():
    assert GeodeticConstants.utm_zone_central_meridian(30) == pytest.approx(np.radians(-3))
    assert GeodeticConstants.utm_zone_central_meridian(-34) == pytest.approx(np.radians(21))
    assert GeodeticConstants.WGS84_SEMI_MAJOR_AXIS.value == 6378137.0


def test_logger_has_single_handler():
    logger = get_logger("geospatial.test_logger")
    again = get_logger("geospatial.test_logger")
    assert logger is again
    assert len(logger.handlers) == 1


def test_set_level_targets_library_loggers():
    library = get_logger("geospatial.test_levels")
    other = logging.getLogger("unrelated.test_levels")
    other.setLevel(logging.WARNING)

    set_level(logging.DEBUG)
    assert library.level == logging.DEBUG
    assert other.level == logging.WARNING

    set_level(logging.INFO)
    assert library.level == logging.INFO
