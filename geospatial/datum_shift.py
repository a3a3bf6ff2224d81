"""
Helmert Datum Shift Engine.

Moves points between datums through the WGS84 geocentric frame:

    source point -> geocentric (source ellipsoid)
                 -> Helmert FORWARD with the source parameters (to WGS84)
                 -> Helmert INVERSE with the target parameters (from WGS84)
                 -> original representation, tagged with the target datum

Helmert (Bursa-Wolf) transform, rotations in radians, M = 1 +/- ppm/1e6:

    X' = M (X - Rz Y + Ry Z) + Dx
    Y' = M (Rz X + Y - Rx Z) + Dy
    Z' = M (-Ry X + Rx Y + Z) + Dz

The INVERSE direction negates every parameter. This is the linearised
small-angle form, so FORWARD followed by INVERSE is not bit-exact; the
residual grows with the square of the rotation angles.

References
----------
- Bursa, M. (1962). The theory for the determination of the non-parallelism
  of the minor axis of the reference ellipsoid.
- Proj.4 `pj_datum_transform` / `pj_geocentric_to_wgs84`.
"""

from typing import Sequence

from common.logging_config import get_logger
from common.types import (
    MULTIPLIER,
    RADIANS,
    XYZ,
    Direction,
    GeocentricMethod,
    PointKind,
    ShiftParameterCount,
)
from geospatial.datum import Datum
from geospatial.exceptions import ValidationError
from geospatial.points import Geocentric, PointLike

logger = get_logger(__name__)


def helmert_transform(
    coords: Sequence[float],
    datum: Datum,
    direction: Direction = Direction.FORWARD
) -> XYZ:
    """Apply a datum's Helmert parameters to geocentric coordinates.

    Parameters
    ----------
    coords : sequence of float
        Geocentric (X, Y, Z) in meters.
    datum : Datum
        Datum whose shift parameters are applied.
    direction : Direction
        FORWARD moves into the WGS84 frame, INVERSE out of it.

    Returns
    -------
    Tuple[float, float, float]
        The transformed (X, Y, Z).
    """
    x, y, z = (float(c) for c in coords)
    count = datum.get_shift_parameter_count()

    if count == ShiftParameterCount.NONE:
        return x, y, z

    dx, dy, dz = datum.get_displacement_parameters(direction)

    if count == ShiftParameterCount.THREE:
        return x + dx, y + dy, z + dz

    rx, ry, rz = datum.get_rotational_parameters(RADIANS, direction)
    m = datum.get_scalar_parameter(MULTIPLIER, direction)

    x_out = m * (x - rz * y + ry * z) + dx
    y_out = m * (rz * x + y - rx * z) + dy
    z_out = m * (-ry * x + rx * y + z) + dz

    return x_out, y_out, z_out


def coords_to_wgs84(coords: Sequence[float], datum: Datum) -> XYZ:
    """Geocentric coordinates in `datum` to the WGS84 frame."""
    return helmert_transform(coords, datum, Direction.FORWARD)


def coords_from_wgs84(coords: Sequence[float], datum: Datum) -> XYZ:
    """Geocentric coordinates in the WGS84 frame to `datum`."""
    return helmert_transform(coords, datum, Direction.INVERSE)


def _shift_geocentric(point: Geocentric, target: Datum) -> Geocentric:
    wgs84 = coords_to_wgs84(point.to_ordinates(), point.datum)
    return Geocentric(*coords_from_wgs84(wgs84, target), target)


def shift_datum(
    point: PointLike,
    target_datum: Datum,
    method: GeocentricMethod = GeocentricMethod.ITERATIVE
) -> PointLike:
    """Move a point into another datum.

    Parameters
    ----------
    point : Geodetic, Geocentric, Cartesian or Utm
        The point to shift.
    target_datum : Datum
        Datum of the result.
    method : GeocentricMethod
        Geocentric to geodetic method for the return leg.

    Returns
    -------
    PointLike
        A point of the same kind, in `target_datum`. If both datums are the
        same the point is only re-tagged.

    Notes
    -----
    Projected points are inverse-projected, shifted as geodetic points and
    projected again with the projection bound to the target datum. The
    projected round trip loses the height.
    """
    if not isinstance(target_datum, Datum):
        raise ValidationError(f"Expected a target Datum; got {type(target_datum).__name__}")

    if point.datum.is_same(target_datum):
        return point.with_datum(target_datum)

    logger.debug(
        f"Shifting {point.kind.value} point: "
        f"{point.datum.code or 'datum'} ({int(point.datum.get_shift_parameter_count())} params) -> "
        f"{target_datum.code or 'datum'} ({int(target_datum.get_shift_parameter_count())} params)"
    )

    if point.kind == PointKind.GEOCENTRIC:
        return _shift_geocentric(point, target_datum)

    if point.kind == PointKind.GEODETIC:
        shifted = _shift_geocentric(point.to_geocentric(), target_datum)
        return shifted.to_geodetic(method)

    if point.kind in (PointKind.CARTESIAN, PointKind.UTM):
        geodetic = point.to_geodetic()
        shifted = shift_datum(geodetic, target_datum, method)
        projected = point.projection.with_datum(target_datum).project(shifted)
        if point.kind == PointKind.CARTESIAN and projected.kind == PointKind.UTM:
            return projected.to_cartesian()
        return projected

    raise ValidationError(f"Unsupported point kind {point.kind!r}")
