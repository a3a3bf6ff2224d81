"""
Geospatial Module for Datum, Ellipsoid and Projection Conversion.

All Earth-surface conversions originate from this module:
- Reference ellipsoids and geodetic datums
- Immutable point representations (geodetic, geocentric, projected, UTM)
- Geodetic <-> geocentric conversion
- Helmert (Bursa-Wolf) datum shifts through WGS84
- Map projections (Transverse Mercator, UTM, Lambert Conformal Conic)
"""

from geospatial.exceptions import (
    GeodesyError,
    ValidationError,
    ProjectionDomainError,
    ConvergenceError,
    ConvergenceWarning,
)

from geospatial.ellipsoid import (
    Ellipsoid,
    WGS84,
    ELLIPSOIDS,
    get_ellipsoid,
)

from geospatial.datum import (
    Datum,
    WGS84_DATUM,
    DATUMS,
    get_datum,
    parse_shift_parameters,
)

from geospatial.coordinate_models import (
    geodetic_to_ecef,
    ecef_to_geodetic,
    ecef_to_geodetic_closed_form,
    convert_ecef_to_geodetic,
    geodetic_to_ecef_batch,
    radius_of_curvature_meridian,
    radius_of_curvature_prime_vertical,
)

from geospatial.points import (
    PointLike,
    Geodetic,
    Geocentric,
    Cartesian,
    Utm,
)

from geospatial.datum_shift import (
    helmert_transform,
    coords_to_wgs84,
    coords_from_wgs84,
    shift_datum,
)

from geospatial.config import ProjectionConfig

from geospatial.projections import (
    Projection,
    ProjectedXY,
    LatLong,
    TransverseMercator,
    UTM,
    LambertConformalConic,
    batch_project,
    utm_zone,
)

__all__ = [
    # Errors
    "GeodesyError",
    "ValidationError",
    "ProjectionDomainError",
    "ConvergenceError",
    "ConvergenceWarning",
    # Ellipsoids and datums
    "Ellipsoid",
    "WGS84",
    "ELLIPSOIDS",
    "get_ellipsoid",
    "Datum",
    "WGS84_DATUM",
    "DATUMS",
    "get_datum",
    "parse_shift_parameters",
    # Coordinate models
    "geodetic_to_ecef",
    "ecef_to_geodetic",
    "ecef_to_geodetic_closed_form",
    "convert_ecef_to_geodetic",
    "geodetic_to_ecef_batch",
    "radius_of_curvature_meridian",
    "radius_of_curvature_prime_vertical",
    # Points
    "PointLike",
    "Geodetic",
    "Geocentric",
    "Cartesian",
    "Utm",
    # Datum shift
    "helmert_transform",
    "coords_to_wgs84",
    "coords_from_wgs84",
    "shift_datum",
    # Projections
    "ProjectionConfig",
    "Projection",
    "ProjectedXY",
    "LatLong",
    "TransverseMercator",
    "UTM",
    "LambertConformalConic",
    "batch_project",
    "utm_zone",
]
