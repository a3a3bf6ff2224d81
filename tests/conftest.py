"""Shared fixtures for the conversion library tests."""

import pytest

from geospatial import Datum, Ellipsoid, get_datum


@pytest.fixture
def osgb36_like() -> Datum:
    """OSGB36-like datum on the modified Airy ellipsoid with 7 parameters."""
    return Datum(
        Ellipsoid.from_ab(6377340.189, 6356034.446),
        "446.448,-125.157,542.060,0.1502,0.2470,0.8421,-20.4894",
    )


@pytest.fixture
def ed50() -> Datum:
    return get_datum("ED50")
