"""Allocation strategies: functional implementations and class wrappers.

Each strategy maps expected returns `mu` and a covariance matrix `cov` to
long-only weights summing to one. Kelly and Markowitz go through the ridge
regularized inverse in `linalg`; risk parity only reads the diagonal. The
functions return a `Result`, so a singular covariance is reported, not
raised. Inputs are assumed to be validated upstream (square, finite,
aligned lengths).
"""
from typing import Dict, Optional, Sequence, Tuple, Type
import numpy as np

from .linalg import DEFAULT_RIDGE, Result, invert, mat_vec
from .projection import normalize_to_one, project_non_negative

MIN_RISK_AVERSION = 1e-8
MIN_VARIANCE = 1e-12


def kelly_weights(mu: Sequence[float], cov: np.ndarray, ridge: float = DEFAULT_RIDGE) -> Result[np.ndarray]:
    """Growth-optimal weights proportional to cov⁻¹·mu, projected long-only."""
    inverse = invert(cov, ridge=ridge)
    return inverse.map(lambda inv: project_non_negative(mat_vec(inv, mu)))


def markowitz_weights(mu: Sequence[float], cov: np.ndarray, risk_aversion: float = 1.0,
                      ridge: float = DEFAULT_RIDGE) -> Result[np.ndarray]:
    """Mean-variance weights cov⁻¹·mu / risk_aversion, projected long-only.

    `risk_aversion` is floored at 1e-8. The positive scale cancels out in the
    projection, so the final weights do not depend on it.
    """
    scaled = np.asarray(mu, dtype=float) / max(float(risk_aversion), MIN_RISK_AVERSION)
    inverse = invert(cov, ridge=ridge)
    # second normalization absorbs rounding left by the clip
    return inverse.map(lambda inv: normalize_to_one(project_non_negative(mat_vec(inv, scaled))))


def risk_parity_weights(cov: np.ndarray) -> Result[np.ndarray]:
    """Inverse-variance weights, an approximation of equal risk contribution.

    Off-diagonal covariances are ignored.
    """
    variances = np.maximum(np.diag(np.asarray(cov, dtype=float)), MIN_VARIANCE)
    return Result(value=normalize_to_one(1.0 / variances))


class OptimizerBase:
    name = ""

    def __init__(self, mu: Optional[Sequence[float]] = None, cov: Optional[np.ndarray] = None,
                 ridge: float = DEFAULT_RIDGE):
        self.mu = None if mu is None else np.asarray(mu, dtype=float)
        self.cov = None if cov is None else np.asarray(cov, dtype=float)
        self.ridge = ridge

    def optimize(self, **kwargs) -> Result[np.ndarray]:
        raise NotImplementedError()


class KellyOptimizer(OptimizerBase):
    name = "kelly"

    def optimize(self, **kwargs):
        if self.mu is None or self.cov is None:
            raise ValueError("Expected returns and covariance required for Kelly allocation")
        return kelly_weights(self.mu, self.cov, ridge=self.ridge)


class MarkowitzOptimizer(OptimizerBase):
    name = "markowitz"

    def optimize(self, risk_aversion: float = 1.0, **kwargs):
        if self.mu is None or self.cov is None:
            raise ValueError("Expected returns and covariance required for mean-variance allocation")
        return markowitz_weights(self.mu, self.cov, risk_aversion=risk_aversion, ridge=self.ridge)


class RiskParityOptimizer(OptimizerBase):
    name = "risk-parity"

    def optimize(self, **kwargs):
        if self.cov is None:
            raise ValueError("Covariance matrix required for risk parity")
        return risk_parity_weights(self.cov)


OPTIMIZERS: Dict[str, Type[OptimizerBase]] = {
    "kelly": KellyOptimizer,
    "markowitz": MarkowitzOptimizer,
    "risk-parity": RiskParityOptimizer,
    "risk_parity": RiskParityOptimizer,
}


def get_optimizer(method: Optional[str]) -> Tuple[str, Type[OptimizerBase]]:
    """Resolve a method name (case-insensitive) to its canonical name and class.

    Unknown or missing names fall through to Markowitz on purpose; this is
    not a place to catch typos.
    """
    key = str(method or "markowitz").strip().lower()
    cls = OPTIMIZERS.get(key, MarkowitzOptimizer)
    return cls.name, cls


__all__ = [
    "KellyOptimizer",
    "MarkowitzOptimizer",
    "RiskParityOptimizer",
    "OPTIMIZERS",
    "get_optimizer",
    "kelly_weights",
    "markowitz_weights",
    "risk_parity_weights",
]
