"""Dense linear algebra used by the allocation strategies.

`invert` is a Gauss-Jordan elimination with partial pivoting and a ridge
added to the diagonal, so covariance matrices of strongly correlated
assets stay invertible. It reports a singular matrix through the returned
`Result` rather than by raising.
"""
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar
import numpy as np

DEFAULT_RIDGE = 1e-8
PIVOT_TOLERANCE = 1e-15

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class SingularMatrix:
    """No usable pivot was found in `column` (largest candidate was `pivot`)."""

    column: int
    pivot: float

    def __str__(self) -> str:
        return f"matrix is singular: pivot {self.pivot:.3e} in column {self.column}"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or a `SingularMatrix` error, never both."""

    value: Optional[T] = None
    error: Optional[SingularMatrix] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        if self.error is not None:
            return Result(error=self.error)
        return Result(value=fn(self.value))


def invert(matrix, ridge: float = DEFAULT_RIDGE) -> Result[np.ndarray]:
    """Invert a square matrix.

    matrix: n x n array-like of finite floats (not modified)
    ridge: constant added to every diagonal entry before elimination
    """
    a = np.array(matrix, dtype=float)
    n = a.shape[0]
    a[np.diag_indices(n)] += ridge
    aug = np.hstack([a, np.eye(n)])

    for col in range(n):
        # np.argmax returns the first maximum, so ties keep the upper row
        pivot = col + int(np.argmax(np.abs(aug[col:, col])))
        pivot_value = float(aug[pivot, col])
        if abs(pivot_value) < PIVOT_TOLERANCE:
            return Result(error=SingularMatrix(column=col, pivot=pivot_value))
        if pivot != col:
            aug[[col, pivot]] = aug[[pivot, col]]
        aug[col] = aug[col] / aug[col, col]
        factors = aug[:, col].copy()
        factors[col] = 0.0
        aug -= np.outer(factors, aug[col])

    return Result(value=aug[:, n:].copy())


def mat_vec(matrix, vector: Sequence[float]) -> np.ndarray:
    return np.asarray(matrix, dtype=float).dot(np.asarray(vector, dtype=float))


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    return float(np.asarray(a, dtype=float).dot(np.asarray(b, dtype=float)))


def quad_form(weights: Sequence[float], matrix) -> float:
    """Return wᵀ·M·w."""
    w = np.asarray(weights, dtype=float)
    return float(w.dot(np.asarray(matrix, dtype=float)).dot(w))
