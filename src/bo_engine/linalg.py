"""
bo-engine Linear Algebra

Cholesky factorization and triangular solves underpinning GP fit and
inference.
"""

from typing import Tuple
import logging

import numpy as np
from scipy.linalg import solve_triangular

from bo_engine.exceptions import NumericInstabilityError

logger = logging.getLogger(__name__)


def add_jitter(A: np.ndarray, jitter: float) -> np.ndarray:
    """Return a copy of A with ``jitter`` added to the diagonal."""
    A = np.array(A, dtype=float, copy=True)
    A[np.diag_indices_from(A)] += jitter
    return A


def is_symmetric(A: np.ndarray, tol: float = 1e-10) -> bool:
    """Check symmetry up to a relative tolerance."""
    A = np.asarray(A, dtype=float)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        return False
    scale = max(1.0, float(np.max(np.abs(A)))) if A.size else 1.0
    return bool(np.all(np.abs(A - A.T) <= tol * scale))


def cholesky(A: np.ndarray) -> np.ndarray:
    """
    Cholesky decomposition A = L @ L.T.

    Args:
        A: Symmetric positive-definite matrix of shape (n, n)

    Returns:
        Lower-triangular factor L

    Raises:
        NumericInstabilityError: If A is not positive definite
    """
    A = np.asarray(A, dtype=float)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {A.shape}")
    try:
        return np.linalg.cholesky(A)
    except np.linalg.LinAlgError as e:
        raise NumericInstabilityError(f"Cholesky factorization failed: {e}") from e


def robust_cholesky(
    A: np.ndarray,
    jitter: float,
    max_tries: int = 5,
) -> Tuple[np.ndarray, float]:
    """
    Cholesky with escalating diagonal jitter.

    The first attempt factors A as given. Each retry adds
    ``jitter * 10**k`` to the diagonal.

    Args:
        A: Symmetric matrix of shape (n, n)
        jitter: Base jitter for retries
        max_tries: Number of retries after the first attempt

    Returns:
        Tuple of (L, added_jitter) where added_jitter is 0.0 when A
        factored cleanly

    Raises:
        NumericInstabilityError: If every attempt fails
    """
    A = 0.5 * (np.asarray(A, dtype=float) + np.asarray(A, dtype=float).T)
    try:
        return cholesky(A), 0.0
    except NumericInstabilityError:
        pass

    added = max(float(jitter), 1e-12)
    for attempt in range(max_tries):
        try:
            L = cholesky(add_jitter(A, added))
            logger.warning(
                f"Covariance needed extra jitter {added:.1e} to factor "
                f"(attempt {attempt + 1})"
            )
            return L, added
        except NumericInstabilityError:
            added *= 10.0

    raise NumericInstabilityError(
        f"Covariance matrix of size {A.shape[0]} is singular after "
        f"{max_tries} jitter escalations",
        jitter=added / 10.0,
    )


def solve_lower_triangular(L: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Solve L @ x = b for lower-triangular L."""
    return solve_triangular(L, np.asarray(b, dtype=float), lower=True, check_finite=False)


def solve_upper_triangular(L: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Solve L.T @ x = b for lower-triangular L."""
    return solve_triangular(
        L, np.asarray(b, dtype=float), lower=True, trans="T", check_finite=False
    )


def solve_cholesky(L: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Solve (L @ L.T) @ x = b by forward then back substitution."""
    return solve_upper_triangular(L, solve_lower_triangular(L, b))


def condition_estimate(L: np.ndarray) -> float | None:
    """
    Coarse condition-number proxy from a Cholesky factor.

    Returns (max |L_ii| / min |L_ii|) ** 2, or None for an empty factor.
    """
    diag = np.abs(np.diag(np.asarray(L, dtype=float)))
    diag = diag[diag > 0]
    if diag.size == 0:
        return None
    return float((diag.max() / diag.min()) ** 2)
