import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from allocation_engine.config import Settings
from allocation_engine.service import OptimizationService
from allocation_engine.store import CovarianceStore


@pytest.fixture
def two_asset_cov():
    return [[0.04, 0.01], [0.01, 0.09]]


@pytest.fixture
def random_cov():
    """Well-conditioned covariance of size n, deterministic per n."""
    def make(n, seed=42):
        rng = np.random.default_rng(seed + n)
        A = rng.normal(scale=0.1, size=(n, n))
        return np.dot(A, A.T) * 0.05 + np.eye(n) * 0.01
    return make


@pytest.fixture
def service():
    return OptimizationService(store=CovarianceStore(), settings=Settings())
