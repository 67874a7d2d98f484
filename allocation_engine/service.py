"""Optimization service: validation, input resolution, dispatch and stats.

The service owns no global state. It is handed a `CovarianceStore` and
`Settings`, validates every request before any arithmetic runs, and turns
numerical failures into `ComputationError` so that callers see one error
taxonomy (see `errors`).
"""
import logging
import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
import numpy as np

from .config import Settings
from .errors import ComputationError, NotFoundError, ValidationError
from .metrics import compute_all_metrics
from .optimizer import get_optimizer
from .projection import apply_limits
from .store import CovarianceMatrix, CovarianceStore

logger = logging.getLogger(__name__)

DEFAULT_RISK_AVERSION = 1.0


# ---- Expected returns -------------------------------------------------------


@dataclass(frozen=True)
class PerSymbolArray:
    """Returns aligned positionally with the covariance symbols."""

    values: Tuple[float, ...]

    def resolve(self, symbols: Sequence[str]) -> np.ndarray:
        if len(self.values) != len(symbols):
            raise ValidationError(
                f"expectedReturns length must match symbols (got {len(self.values)}, expected {len(symbols)})"
            )
        return np.array(self.values, dtype=float)


@dataclass(frozen=True)
class PerSymbolMap:
    """Returns keyed by uppercase symbol; missing symbols resolve to 0."""

    values: Mapping[str, float]

    def resolve(self, symbols: Sequence[str]) -> np.ndarray:
        return np.array([self.values.get(s, 0.0) for s in symbols], dtype=float)


@dataclass(frozen=True)
class DefaultReturns:
    """No estimates supplied: every asset gets the same flat return."""

    value: float

    def resolve(self, symbols: Sequence[str]) -> np.ndarray:
        return np.full(len(symbols), float(self.value))


ExpectedReturns = Union[PerSymbolArray, PerSymbolMap, DefaultReturns]


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _finite_float(value: Any, label: str) -> float:
    if _is_number(value):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            raise ValidationError(f"{label} must be a number, got {value!r}")
    else:
        raise ValidationError(f"{label} must be a number, got {value!r}")
    if not math.isfinite(number):
        raise ValidationError(f"{label} must be finite")
    return number


def parse_expected_returns(raw: Any, default: float) -> ExpectedReturns:
    """Classify a raw `expectedReturns` payload into one of the three cases."""
    if raw is None:
        return DefaultReturns(default)
    if isinstance(raw, Mapping):
        values: Dict[str, float] = {}
        for key, value in raw.items():
            symbol = str(key).strip().upper()
            # an exact uppercase key wins over a differently cased duplicate
            if symbol in values and key != symbol:
                continue
            values[symbol] = 0.0 if value is None else _finite_float(value, f"expectedReturns[{key!r}]")
        return PerSymbolMap(values)
    if isinstance(raw, (list, tuple, np.ndarray)):
        return PerSymbolArray(tuple(_finite_float(v, f"expectedReturns[{i}]") for i, v in enumerate(raw)))
    raise ValidationError("expectedReturns must be an array, an object keyed by symbol, or omitted")


# ---- Covariance validation --------------------------------------------------


def validate_covariance(symbols: Any, matrix: Any) -> Tuple[Tuple[str, ...], np.ndarray]:
    """Check the shape invariants and return normalized symbols and a float matrix.

    symbols: non-empty sequence of non-empty strings, unique once uppercased
    matrix: n x n sequence of finite numbers, n == len(symbols)
    """
    if not isinstance(symbols, (list, tuple)) or not isinstance(matrix, (list, tuple, np.ndarray)):
        raise ValidationError("symbols (string[]) and matrix (number[][]) required")
    if len(symbols) == 0:
        raise ValidationError("symbols must not be empty")
    if not all(isinstance(s, str) and s.strip() for s in symbols):
        raise ValidationError("symbols must be non-empty strings")
    normalized = tuple(s.strip().upper() for s in symbols)
    if len(set(normalized)) != len(normalized):
        raise ValidationError("symbols must be unique")

    n = len(normalized)
    if len(matrix) != n:
        raise ValidationError(f"matrix must be square and match symbols length (got {len(matrix)} rows, expected {n})")
    for i, row in enumerate(matrix):
        if not isinstance(row, (list, tuple, np.ndarray)) or len(row) != n:
            raise ValidationError(f"matrix must be square and match symbols length (row {i} does not have {n} entries)")
        for j, cell in enumerate(row):
            if not (_is_number(cell) and math.isfinite(cell)):
                raise ValidationError(f"matrix[{i}][{j}] must be a finite number")
    return normalized, np.array(matrix, dtype=float)


def _coerce_risk_aversion(raw: Any) -> float:
    # missing, zero and unparseable values all mean the default
    if raw is None or isinstance(raw, bool):
        return DEFAULT_RISK_AVERSION
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return DEFAULT_RISK_AVERSION
    if not math.isfinite(value) or value == 0:
        return DEFAULT_RISK_AVERSION
    return value


# ---- Requests and results ---------------------------------------------------


@dataclass
class OptimizationRequest:
    method: Optional[str] = None
    expected_returns: Any = None
    covariance_id: Optional[str] = None
    symbols: Optional[Sequence[str]] = None
    matrix: Optional[Sequence[Sequence[float]]] = None
    risk_aversion: Any = None
    max_weight: Optional[float] = None


@dataclass
class AllocationResult:
    method: str
    risk_aversion: float
    symbols: Tuple[str, ...]
    weights: np.ndarray
    stats: Dict[str, float] = field(default_factory=dict)

    @property
    def allocations(self) -> List[Tuple[str, float]]:
        return [(s, float(w)) for s, w in zip(self.symbols, self.weights)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "success",
            "method": self.method,
            "riskAversion": self.risk_aversion,
            "symbols": list(self.symbols),
            "allocations": [{"symbol": s, "weight": w} for s, w in self.allocations],
            "stats": dict(self.stats),
        }


# ---- Service ----------------------------------------------------------------


class OptimizationService:
    def __init__(self, store: Optional[CovarianceStore] = None, settings: Optional[Settings] = None):
        self.store = store if store is not None else CovarianceStore()
        self.settings = settings if settings is not None else Settings()

    def _check_size(self, n: int) -> None:
        limit = self.settings.max_assets
        if limit is not None and n > limit:
            raise ValidationError(f"too many assets: {n} exceeds the limit of {limit}")

    def upload(self, symbols: Any, matrix: Any) -> CovarianceMatrix:
        """Validate and store a covariance matrix, replacing the previous one."""
        normalized, cov = validate_covariance(symbols, matrix)
        self._check_size(len(normalized))
        record = self.store.upload(normalized, cov)
        logger.info("Stored covariance %s (%d assets)", record.id, record.size)
        return record

    def last_upload(self) -> Optional[CovarianceMatrix]:
        return self.store.get_last()

    def _resolve_covariance(self, request: OptimizationRequest) -> Tuple[Tuple[str, ...], np.ndarray]:
        symbols, matrix = request.symbols, request.matrix
        if (symbols is None or matrix is None) and request.covariance_id:
            record = self.store.get(request.covariance_id)
            if record is None:
                raise NotFoundError(f"covariance {request.covariance_id!r} not found")
            symbols, matrix = record.symbols, record.matrix
        return validate_covariance(symbols, matrix)

    def optimize(self, request: OptimizationRequest) -> AllocationResult:
        symbols, cov = self._resolve_covariance(request)
        self._check_size(len(symbols))
        mu = parse_expected_returns(request.expected_returns, self.settings.default_expected_return).resolve(symbols)

        method, optimizer_cls = get_optimizer(request.method)
        risk_aversion = _coerce_risk_aversion(request.risk_aversion)
        outcome = optimizer_cls(mu=mu, cov=cov, ridge=self.settings.ridge).optimize(risk_aversion=risk_aversion)
        if not outcome.ok:
            logger.warning("%s allocation over %d assets failed: %s", method, len(symbols), outcome.error)
            raise ComputationError(cause=outcome.error)

        weights = outcome.value
        if request.max_weight is not None:
            weights = apply_limits(weights, request.max_weight)

        logger.debug("%s allocation over %d assets: %s", method, len(symbols), weights)
        return AllocationResult(
            method=method,
            risk_aversion=risk_aversion,
            symbols=symbols,
            weights=weights,
            stats=compute_all_metrics(weights, mu, cov),
        )
