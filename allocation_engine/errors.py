"""Exception types raised at the service boundary.

The numerical core never raises for a singular matrix; it returns a
`Result` carrying a `SingularMatrix` instead (see `linalg`). The service
converts that into a `ComputationError` so callers handle every failure
kind the same way.
"""
from typing import Any, Optional


class OptimizerError(Exception):
    """Base class for every error the engine reports to callers."""


class ValidationError(OptimizerError, ValueError):
    """Input is missing, malformed or has mismatched shapes."""


class NotFoundError(OptimizerError, LookupError):
    """A referenced covariance id does not match the stored slot."""


class ComputationError(OptimizerError, RuntimeError):
    """The numerical routine could not produce weights."""

    def __init__(self, message: str = "Optimization failed", cause: Optional[Any] = None):
        super().__init__(message)
        # kept for logging; never shown to the client
        self.cause = cause
