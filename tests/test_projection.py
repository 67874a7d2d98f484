import numpy as np
import pytest

from allocation_engine.projection import apply_limits, normalize_to_one, project_non_negative


def test_project_non_negative_clips_and_rescales():
    assert np.allclose(project_non_negative([2.0, -1.0, 2.0]), [0.5, 0.0, 0.5])


def test_project_non_negative_degenerate_is_uniform():
    assert np.allclose(project_non_negative([-1.0, -2.0, 0.0, -3.0]), [0.25] * 4)
    assert np.allclose(project_non_negative([0.0, 0.0]), [0.5, 0.5])


def test_normalize_to_one():
    assert np.allclose(normalize_to_one([1.0, 3.0]), [0.25, 0.75])
    assert np.allclose(normalize_to_one([1e-13, 0.0]), [0.5, 0.5])
    assert np.allclose(normalize_to_one([1.0, -1.0]), [0.5, 0.5])


def test_normalize_non_finite_sum_is_uniform():
    assert np.allclose(normalize_to_one([np.inf, 1.0]), [0.5, 0.5])
    with np.errstate(invalid="ignore"):
        assert np.allclose(normalize_to_one([np.inf, -np.inf]), [0.5, 0.5])


@pytest.mark.parametrize("fn", [project_non_negative, normalize_to_one])
def test_idempotent_on_normalized_vector(fn):
    w = np.array([0.2, 0.3, 0.5])
    assert np.allclose(fn(fn(w)), w)


def test_cap_is_soft_after_renormalization():
    # [0.6, 0.4] -> [0.3, 0.3] -> [0.5, 0.5]: both end above the 0.3 cap
    w = apply_limits([0.6, 0.4], max_weight=0.3)
    assert np.allclose(w, [0.5, 0.5])
    assert np.all(w > 0.3)


def test_cap_is_clamped_into_range():
    # 0.001 is raised to the 0.01 floor
    w = apply_limits([0.7, 0.2, 0.1], max_weight=0.001)
    assert np.allclose(w, [1 / 3] * 3)
    # above 1 behaves like no cap
    assert np.allclose(apply_limits([0.7, 0.3], max_weight=5.0), [0.7, 0.3])


@pytest.mark.parametrize("max_weight", [None, 0.0, -0.5, float("nan"), float("inf")])
def test_invalid_cap_only_normalizes(max_weight):
    assert np.allclose(apply_limits([0.6, 0.2], max_weight=max_weight), [0.75, 0.25])


def test_cap_binding_on_one_asset():
    w = apply_limits([0.5, 0.3, 0.2], max_weight=0.4)
    assert np.allclose(w, np.array([0.4, 0.3, 0.2]) / 0.9)


def test_overflowing_sum_is_uniform():
    with np.errstate(over="ignore"):
        w = project_non_negative([1e308, 1e308])
    assert np.allclose(w, [0.5, 0.5])
