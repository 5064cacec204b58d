"""
Tests for Cholesky factorization and triangular solves.
"""

import logging

import numpy as np
import pytest

from bo_engine.exceptions import NumericInstabilityError
from bo_engine.linalg import (
    add_jitter,
    cholesky,
    condition_estimate,
    is_symmetric,
    robust_cholesky,
    solve_cholesky,
    solve_lower_triangular,
    solve_upper_triangular,
)


@pytest.fixture
def spd_matrix() -> np.ndarray:
    """Random symmetric positive-definite 6x6 matrix."""
    rng = np.random.default_rng(0)
    B = rng.normal(size=(6, 6))
    return B @ B.T + 6 * np.eye(6)


class TestCholesky:
    """Tests for cholesky."""

    def test_round_trip(self, spd_matrix):
        """Test L @ L.T reproduces A."""
        L = cholesky(spd_matrix)

        np.testing.assert_allclose(L @ L.T, spd_matrix, rtol=1e-8)
        assert np.allclose(L, np.tril(L))

    def test_round_trip_with_jitter(self):
        """Test a jittered RBF Gram matrix round-trips."""
        x = np.linspace(0, 1, 8)
        A = add_jitter(np.exp(-0.5 * (x[:, None] - x[None, :]) ** 2 / 0.3**2), 1e-6)

        L = cholesky(A)
        np.testing.assert_allclose(L @ L.T, A, rtol=1e-8, atol=1e-12)

    def test_not_positive_definite(self):
        """Test an indefinite matrix raises NumericInstabilityError."""
        with pytest.raises(NumericInstabilityError):
            cholesky(np.array([[1.0, 2.0], [2.0, 1.0]]))

    def test_non_square(self):
        """Test a non-square matrix raises ValueError."""
        with pytest.raises(ValueError, match="square"):
            cholesky(np.ones((2, 3)))


class TestRobustCholesky:
    """Tests for robust_cholesky."""

    def test_clean_matrix_needs_no_jitter(self, spd_matrix):
        """Test a well-conditioned matrix factors as given."""
        L, added = robust_cholesky(spd_matrix, jitter=1e-6)

        assert added == 0.0
        np.testing.assert_allclose(L @ L.T, spd_matrix, rtol=1e-8)

    def test_singular_matrix_gets_jitter(self, caplog):
        """Test a rank-deficient matrix is rescued with a warning."""
        A = np.ones((3, 3))

        with caplog.at_level(logging.WARNING, logger="bo_engine.linalg"):
            L, added = robust_cholesky(A, jitter=1e-6)

        assert added > 0
        np.testing.assert_allclose(L @ L.T, add_jitter(A, added), rtol=1e-8)
        assert "extra jitter" in caplog.text

    def test_irrecoverable(self):
        """Test a strongly indefinite matrix raises after all retries."""
        A = -np.eye(3)

        with pytest.raises(NumericInstabilityError, match="singular"):
            robust_cholesky(A, jitter=1e-6, max_tries=3)


class TestSolves:
    """Tests for triangular and Cholesky solves."""

    def test_lower(self, spd_matrix):
        """Test forward substitution."""
        L = cholesky(spd_matrix)
        b = np.arange(6, dtype=float)

        np.testing.assert_allclose(L @ solve_lower_triangular(L, b), b, atol=1e-10)

    def test_upper(self, spd_matrix):
        """Test back substitution against L.T."""
        L = cholesky(spd_matrix)
        b = np.arange(6, dtype=float)

        np.testing.assert_allclose(L.T @ solve_upper_triangular(L, b), b, atol=1e-10)

    def test_solve_cholesky(self, spd_matrix):
        """Test (L @ L.T) x = b."""
        L = cholesky(spd_matrix)
        b = np.linspace(-1, 1, 6)

        x = solve_cholesky(L, b)
        np.testing.assert_allclose(spd_matrix @ x, b, atol=1e-10)

    def test_solve_matrix_rhs(self, spd_matrix):
        """Test several right-hand sides at once."""
        L = cholesky(spd_matrix)
        B = np.eye(6)

        X = solve_cholesky(L, B)
        np.testing.assert_allclose(spd_matrix @ X, B, atol=1e-10)


class TestHelpers:
    """Tests for matrix helpers."""

    def test_add_jitter_copies(self):
        """Test add_jitter leaves its input alone."""
        A = np.zeros((2, 2))
        B = add_jitter(A, 0.5)

        assert np.all(A == 0)
        np.testing.assert_array_equal(B, 0.5 * np.eye(2))

    def test_is_symmetric(self, spd_matrix):
        """Test symmetry detection."""
        assert is_symmetric(spd_matrix)
        assert not is_symmetric(np.array([[1.0, 2.0], [0.0, 1.0]]))
        assert not is_symmetric(np.ones((2, 3)))

    def test_condition_estimate(self):
        """Test the diagonal-ratio estimate."""
        L = np.diag([4.0, 2.0, 1.0])
        assert condition_estimate(L) == 16.0

    def test_condition_estimate_empty(self):
        """Test an empty factor has no estimate."""
        assert condition_estimate(np.zeros((0, 0))) is None
