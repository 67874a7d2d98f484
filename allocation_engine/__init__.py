from .errors import ComputationError, NotFoundError, OptimizerError, ValidationError
from .linalg import Result, SingularMatrix, invert
from .projection import apply_limits, normalize_to_one, project_non_negative
from .service import AllocationResult, OptimizationRequest, OptimizationService
from .store import CovarianceMatrix, CovarianceStore

# `api_server` and `plots` pull in fastapi and matplotlib; import them
# explicitly when needed.
__all__ = [
    "ComputationError",
    "NotFoundError",
    "OptimizerError",
    "ValidationError",
    "Result",
    "SingularMatrix",
    "invert",
    "apply_limits",
    "normalize_to_one",
    "project_non_negative",
    "AllocationResult",
    "OptimizationRequest",
    "OptimizationService",
    "CovarianceMatrix",
    "CovarianceStore",
]
