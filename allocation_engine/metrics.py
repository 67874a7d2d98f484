"""Portfolio statistics computed from the final weights.

Values are per period of the input estimates; nothing is annualized.
"""
from typing import Dict, Sequence
import numpy as np

from .linalg import dot, quad_form


def expected_return(weights: Sequence[float], mu: Sequence[float]) -> float:
    return dot(weights, mu)


def variance(weights: Sequence[float], cov: np.ndarray) -> float:
    return quad_form(weights, cov)


def volatility(weights: Sequence[float], cov: np.ndarray) -> float:
    return float(np.sqrt(max(variance(weights, cov), 0.0)))


def compute_all_metrics(weights: Sequence[float], mu: Sequence[float], cov: np.ndarray) -> Dict[str, float]:
    """Return the stats block of an allocation result (camelCase keys)."""
    return {
        "expectedReturn": expected_return(weights, mu),
        "variance": variance(weights, cov),
        "volatility": volatility(weights, cov),
    }
