"""
bo-engine Initial Design

Space-filling designs drawn from the shared SeededRNG. Points are
returned as an array of shape (n, d) in domain units; categorical
columns hold level indices.

Categorical columns always map a fraction u in [0, 1) to
``floor(u * n_levels)``.
"""

from typing import Callable, Dict
import math

import numpy as np

from bo_engine.spec.models import (
    CategoricalDimension,
    ContinuousDimension,
    DesignMethod,
    Domain,
    IntegerDimension,
)
from bo_engine.utils.rng import SeededRNG


def _map_unit(u: float, dim) -> float:
    """Map u in [0, 1) into a dimension's range."""
    if isinstance(dim, ContinuousDimension):
        lo, hi = dim.bounds
        return lo + u * (hi - lo)
    if isinstance(dim, IntegerDimension):
        lo, hi = dim.bounds
        return float(round(lo + u * (hi - lo)))
    n_levels = len(dim.levels)
    return float(min(math.floor(u * n_levels), n_levels - 1))


def _empty(domain: Domain) -> np.ndarray:
    return np.zeros((0, domain.n_dims))


def latin_hypercube_sample(domain: Domain, n: int, rng: SeededRNG) -> np.ndarray:
    """
    Latin Hypercube sample.

    Each dimension gets its own random permutation of the n strata, so no
    two samples share a stratum in any dimension.

    Args:
        domain: Search space
        n: Number of samples
        rng: Shared generator

    Returns:
        Array of shape (n, d)
    """
    if n <= 0:
        return _empty(domain)

    permutations = [rng.permutation(n) for _ in domain.dimensions]

    samples = np.zeros((n, domain.n_dims))
    for i in range(n):
        for j, dim in enumerate(domain.dimensions):
            u = (permutations[j][i] + rng.next()) / n
            samples[i, j] = _map_unit(u, dim)
    return samples


def sobol_sample(domain: Domain, n: int, rng: SeededRNG) -> np.ndarray:
    """
    Simplified Sobol stand-in.

    Continuous and integer columns are stratified along the sample index
    (sample i falls in stratum i); categorical columns are uniform. This is
    not a low-discrepancy sequence.
    """
    if n <= 0:
        return _empty(domain)

    samples = np.zeros((n, domain.n_dims))
    for i in range(n):
        for j, dim in enumerate(domain.dimensions):
            if isinstance(dim, CategoricalDimension):
                u = rng.next()
            else:
                u = (i + rng.next()) / n
            samples[i, j] = _map_unit(u, dim)
    return samples


def random_sample(domain: Domain, n: int, rng: SeededRNG) -> np.ndarray:
    """Uniform random sample; integers are uniform over the closed range."""
    if n <= 0:
        return _empty(domain)

    samples = np.zeros((n, domain.n_dims))
    for i in range(n):
        for j, dim in enumerate(domain.dimensions):
            samples[i, j] = random_value(dim, rng)
    return samples


def random_value(dim, rng: SeededRNG) -> float:
    """Draw one uniform value for a dimension."""
    u = rng.next()
    if isinstance(dim, ContinuousDimension):
        lo, hi = dim.bounds
        return lo + u * (hi - lo)
    if isinstance(dim, IntegerDimension):
        lo, hi = dim.bounds
        return float(min(math.floor(lo + u * (hi - lo + 1)), hi))
    return float(math.floor(u * len(dim.levels)))


def stratum_indices(samples: np.ndarray, domain: Domain) -> np.ndarray:
    """
    Recover the stratum index of every sample in every continuous dimension.

    Args:
        samples: Array of shape (n, d) from a stratified design
        domain: Domain the samples were drawn from

    Returns:
        Integer array of shape (n, d); non-continuous columns are -1
    """
    samples = np.atleast_2d(np.asarray(samples, dtype=float))
    n = samples.shape[0]
    strata = np.full(samples.shape, -1, dtype=int)
    for j, dim in enumerate(domain.dimensions):
        if isinstance(dim, ContinuousDimension):
            lo, hi = dim.bounds
            u = (samples[:, j] - lo) / (hi - lo)
            strata[:, j] = np.clip(np.floor(u * n), 0, n - 1).astype(int)
    return strata


_DESIGNS: Dict[DesignMethod, Callable[[Domain, int, SeededRNG], np.ndarray]] = {
    DesignMethod.LHS: latin_hypercube_sample,
    DesignMethod.SOBOL: sobol_sample,
    DesignMethod.RANDOM: random_sample,
}


def generate_initial_design(
    method: DesignMethod | str,
    domain: Domain,
    n: int,
    rng: SeededRNG,
) -> np.ndarray:
    """
    Generate an initial design.

    Args:
        method: One of "lhs", "sobol", "random"
        domain: Search space
        n: Number of points
        rng: Shared generator

    Returns:
        Array of shape (n, d)
    """
    try:
        method = DesignMethod(method)
    except ValueError as e:
        valid = [m.value for m in DesignMethod]
        raise ValueError(f"Unknown initial design method '{method}'. Valid: {valid}") from e

    return _DESIGNS[method](domain, n, rng)
