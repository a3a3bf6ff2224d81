"""
Exceptions raised by the geospatial package.

Three failure classes propagate to the caller unchanged:

1. ValidationError - malformed constructor input.
2. ProjectionDomainError - a point or configuration the projection
   formulas cannot represent (infinity, outside the cone).
3. ConvergenceError - an iterative solver reached its iteration cap.

ConvergenceWarning is the non-fatal counterpart of ConvergenceError, used
by the geocentric to geodetic iteration when it returns its last estimate.
"""

from typing import Any, Optional


class GeodesyError(Exception):
    """Base class for all errors raised by this library."""


class ValidationError(GeodesyError, ValueError):
    """Invalid input supplied to a constructor or conversion."""


class ProjectionDomainError(GeodesyError):
    """The requested point or projection setup is outside the valid domain."""


class ConvergenceError(GeodesyError):
    """An iterative solver failed to converge within its iteration cap.

    Attributes
    ----------
    solver : str
        Name of the solver that failed.
    iterations : int
        Number of iterations performed.
    last_estimate : Any
        The final (non-converged) estimate, for diagnostics only.
    """

    def __init__(
        self,
        solver: str,
        iterations: int,
        last_estimate: Optional[Any] = None
    ):
        self.solver = solver
        self.iterations = iterations
        self.last_estimate = last_estimate
        super().__init__(
            f"{solver}: failed to converge; exceeded {iterations} iterations"
        )


class ConvergenceWarning(UserWarning):
    """An iterative solver returned a non-converged estimate."""
