"""Simplex projection and the per-asset weight cap.

Degenerate inputs (a vector summing to ~0, or fully negative) fall back to
uniform weights instead of failing.
"""
from typing import Optional, Sequence
import numpy as np

SUM_TOLERANCE = 1e-12
MIN_CAP = 0.01
MAX_CAP = 1.0


def _uniform(n: int) -> np.ndarray:
    return np.full(n, 1.0 / n)


def project_non_negative(weights: Sequence[float]) -> np.ndarray:
    """Clip negatives to zero and rescale so the weights sum to one.

    Returns uniform weights when nothing positive survives the clipping, or
    when the positive entries overflow to an infinite sum.
    """
    clipped = np.maximum(np.asarray(weights, dtype=float), 0.0)
    total = float(np.sum(clipped))
    if not np.isfinite(total) or total <= 0:
        return _uniform(clipped.size)
    return clipped / total


def normalize_to_one(weights: Sequence[float]) -> np.ndarray:
    w = np.asarray(weights, dtype=float)
    total = float(np.sum(w))
    if not np.isfinite(total) or abs(total) < SUM_TOLERANCE:
        return _uniform(w.size)
    return w / total


def apply_limits(weights: Sequence[float], max_weight: Optional[float] = None) -> np.ndarray:
    """Clamp every weight to `max_weight`, then renormalize.

    `max_weight` is ignored unless finite and positive, and is clamped into
    [0.01, 1]. The renormalization runs once, so entries can end up above
    the cap again (a soft cap): [0.6, 0.4] with a 0.3 cap becomes
    [0.3, 0.3] and then [0.5, 0.5].
    """
    w = np.array(weights, dtype=float)
    if max_weight is not None and np.isfinite(max_weight) and max_weight > 0:
        cap = min(MAX_CAP, max(MIN_CAP, float(max_weight)))
        w = np.minimum(w, cap)
    return normalize_to_one(w)
