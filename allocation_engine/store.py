"""Single-slot in-memory store for the most recently uploaded covariance."""
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple
import numpy as np


@dataclass(frozen=True)
class CovarianceMatrix:
    id: str
    symbols: Tuple[str, ...]
    matrix: np.ndarray
    uploaded_at: datetime

    @property
    def size(self) -> int:
        return len(self.symbols)

    def copy(self) -> "CovarianceMatrix":
        return replace(self, matrix=self.matrix.copy())


def _new_id() -> str:
    return f"cov_{uuid.uuid4().hex}"


class CovarianceStore:
    """Holds at most one `CovarianceMatrix`; each upload replaces it whole.

    The slot is swapped with a single attribute assignment, so a concurrent
    reader sees either the old record or the new one. Readers always get a
    copy. Shape validation is the service's job; the store only normalizes
    symbols to uppercase.
    """

    def __init__(self):
        self._last: Optional[CovarianceMatrix] = None

    def upload(self, symbols: Sequence[str], matrix) -> CovarianceMatrix:
        record = CovarianceMatrix(
            id=_new_id(),
            symbols=tuple(str(s).strip().upper() for s in symbols),
            matrix=np.array(matrix, dtype=float),
            uploaded_at=datetime.now(timezone.utc),
        )
        self._last = record
        return record.copy()

    def get(self, covariance_id: str) -> Optional[CovarianceMatrix]:
        last = self._last
        if last is None or last.id != covariance_id:
            return None
        return last.copy()

    def get_last(self) -> Optional[CovarianceMatrix]:
        last = self._last
        return None if last is None else last.copy()
