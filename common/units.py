"""
Unit Registry and Unit Conversion for Geodetic Calculations.

This module provides a centralized unit system using the `pint` library.
Angles cross the library boundary in several units: degrees on point
types, radians in the numerical core, sixtieths of a degree for datum
rotations and parts-per-million for datum scale. Every conversion between them goes
through this module.

Example Usage
-------------
>>> from common.units import Q_, to_magnitude
>>> to_magnitude(Q_(30, 'degree'), 'degree', 'radian')
0.5235987755982988
>>> to_magnitude(30, 'degree', 'radian')
0.5235987755982988
"""

from typing import Union

import pint
from pint import UnitRegistry

from common.constants import GeodeticConstants

# Create the global unit registry
ureg = UnitRegistry()

# Convenience alias for creating quantities
Q_ = ureg.Quantity


def to_magnitude(
    value: Union[float, pint.Quantity],
    default_unit: str,
    target_unit: str
) -> float:
    """Convert a bare number or a quantity to a float in the target unit.

    Parameters
    ----------
    value : float or pint.Quantity
        A quantity, or a bare number interpreted in `default_unit`.
    default_unit : str
        Unit applied to bare numbers.
    target_unit : str
        Unit of the returned magnitude.

    Returns
    -------
    float
        The magnitude of `value` expressed in `target_unit`.

    Raises
    ------
    pint.DimensionalityError
        If a quantity cannot be converted to `target_unit`.
    """
    if isinstance(value, pint.Quantity):
        return float(value.to(target_unit).magnitude)
    return float(ureg.Quantity(float(value), default_unit).to(target_unit).magnitude)


def rotation_to_radians(value: float) -> float:
    """Stored datum rotation to radians.

    Rotations are held in units of 1/ROTATION_UNITS_PER_DEGREE of a degree.
    """
    per_degree = GeodeticConstants.ROTATION_UNITS_PER_DEGREE
    return to_magnitude(value / per_degree, "degree", "radian")


def ppm_to_multiplier(value: float) -> float:
    """Scale change in parts-per-million to a multiplier (0 ppm -> 1.0)."""
    return 1.0 + to_magnitude(value, "ppm", "dimensionless")
