import numpy as np
import pytest

from allocation_engine.linalg import DEFAULT_RIDGE, SingularMatrix, dot, invert, mat_vec, quad_form


@pytest.mark.parametrize("n", range(2, 9))
def test_inverse_times_matrix_is_identity(n, random_cov):
    A = random_cov(n)
    result = invert(A)
    assert result.ok
    assert np.allclose(A.dot(result.value), np.eye(n), atol=1e-6)


def test_non_symmetric_matrix_needs_pivoting():
    # zero in the first pivot position forces a row swap
    A = np.array([[0.0, 2.0, 1.0], [1.0, 1.0, 0.0], [3.0, 0.0, 1.0]])
    result = invert(A, ridge=0.0)
    assert result.ok
    assert np.allclose(result.value, np.linalg.inv(A), atol=1e-9)


def test_zero_matrix_inverts_to_scaled_identity():
    result = invert(np.zeros((3, 3)))
    assert result.ok
    assert np.allclose(result.value, np.eye(3) / DEFAULT_RIDGE, rtol=1e-9)


def test_input_is_not_modified():
    A = np.array([[0.04, 0.01], [0.01, 0.09]])
    before = A.copy()
    invert(A)
    assert np.array_equal(A, before)


def test_singular_without_ridge_returns_error():
    result = invert([[1.0, 1.0], [1.0, 1.0]], ridge=0.0)
    assert not result.ok
    assert result.value is None
    assert isinstance(result.error, SingularMatrix)
    assert result.error.column == 1


def test_ridge_cancelled_by_diagonal_is_singular():
    result = invert([[-1e-8, 0.0], [0.0, 0.04]])
    assert not result.ok
    assert result.error.column == 0
    assert "singular" in str(result.error)


def test_result_map_propagates_error():
    failed = invert([[0.0]], ridge=0.0)
    assert failed.map(lambda inv: inv * 2).error == failed.error
    ok = invert([[2.0]], ridge=0.0)
    assert np.allclose(ok.map(lambda inv: inv * 2).value, [[1.0]])


def test_vector_helpers():
    M = [[1.0, 2.0], [3.0, 4.0]]
    assert np.allclose(mat_vec(M, [1.0, 1.0]), [3.0, 7.0])
    assert dot([1.0, 2.0], [3.0, 4.0]) == pytest.approx(11.0)
    assert quad_form([1.0, 1.0], M) == pytest.approx(10.0)
