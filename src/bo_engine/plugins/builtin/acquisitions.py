"""
bo-engine Built-in Acquisition Functions

Analytic acquisition functions for minimization: improvement is
measured below the best observed value.
"""

from typing import Any, Dict, Optional

import numpy as np
from scipy.special import ndtr

from bo_engine.gp.base import Posterior
from bo_engine.plugins.base import AcquisitionPlugin, PluginMeta
from bo_engine.types import RunContext

# Below this predictive std a candidate is treated as already known
MIN_SIGMA = 1e-10

_INV_SQRT_2PI = 1.0 / np.sqrt(2.0 * np.pi)


def normal_pdf(z: np.ndarray) -> np.ndarray:
    """Standard normal density."""
    return _INV_SQRT_2PI * np.exp(-0.5 * np.asarray(z, dtype=float) ** 2)


def normal_cdf(z: np.ndarray) -> np.ndarray:
    """Standard normal distribution function."""
    return ndtr(np.asarray(z, dtype=float))


def _predict(posterior: Posterior, candidates: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    candidates = np.atleast_2d(np.asarray(candidates, dtype=float))
    mu = np.asarray(posterior.mean(candidates), dtype=float)
    sigma = np.sqrt(np.maximum(np.asarray(posterior.variance(candidates), dtype=float), 0.0))
    return mu, sigma


class ExpectedImprovement(AcquisitionPlugin):
    """
    Expected Improvement.

    EI(x) = sigma * (z * Phi(z) + phi(z)), z = (f* - mu - xi) / sigma,
    and 0 where sigma < 1e-10.
    """

    @classmethod
    def get_meta(cls) -> PluginMeta:
        return PluginMeta(
            name="expected_improvement",
            kind="acquisition",
            description="Expected Improvement over the best observation",
            tags=["improvement", "analytic"],
        )

    @classmethod
    def get_default_params(cls) -> Dict[str, Any]:
        return {
            "xi": 0.01,
        }

    def score(
        self,
        candidates: np.ndarray,
        posterior: Posterior,
        context: RunContext,
        params: Optional[Dict[str, Any]] = None,
    ) -> np.ndarray:
        params = self.validate_params(params)
        mu, sigma = _predict(posterior, candidates)
        best = posterior.best_observation()

        scores = np.zeros_like(mu)
        ok = sigma >= MIN_SIGMA
        if not np.isfinite(best):
            # Nothing observed yet: every uncertain point is equally promising
            scores[ok] = sigma[ok]
            return scores

        z = (best - mu[ok] - params["xi"]) / sigma[ok]
        scores[ok] = sigma[ok] * (z * normal_cdf(z) + normal_pdf(z))
        return scores


class ProbabilityOfImprovement(AcquisitionPlugin):
    """Probability of Improvement: Phi((f* - mu - xi) / sigma)."""

    @classmethod
    def get_meta(cls) -> PluginMeta:
        return PluginMeta(
            name="probability_of_improvement",
            kind="acquisition",
            description="Probability of improving on the best observation",
            tags=["improvement", "analytic"],
        )

    @classmethod
    def get_default_params(cls) -> Dict[str, Any]:
        return {
            "xi": 0.01,
        }

    def score(
        self,
        candidates: np.ndarray,
        posterior: Posterior,
        context: RunContext,
        params: Optional[Dict[str, Any]] = None,
    ) -> np.ndarray:
        params = self.validate_params(params)
        mu, sigma = _predict(posterior, candidates)
        best = posterior.best_observation()

        scores = np.zeros_like(mu)
        ok = sigma >= MIN_SIGMA
        if not np.isfinite(best):
            scores[ok] = 1.0
            return scores

        scores[ok] = normal_cdf((best - mu[ok] - params["xi"]) / sigma[ok])
        return scores


class LowerConfidenceBound(AcquisitionPlugin):
    """Negated lower confidence bound: -(mu - sqrt(beta) * sigma)."""

    @classmethod
    def get_meta(cls) -> PluginMeta:
        return PluginMeta(
            name="lower_confidence_bound",
            kind="acquisition",
            description="Optimistic bound for minimization",
            tags=["confidence_bound", "analytic"],
        )

    @classmethod
    def get_default_params(cls) -> Dict[str, Any]:
        return {
            "beta": 2.0,
        }

    def score(
        self,
        candidates: np.ndarray,
        posterior: Posterior,
        context: RunContext,
        params: Optional[Dict[str, Any]] = None,
    ) -> np.ndarray:
        params = self.validate_params(params)
        mu, sigma = _predict(posterior, candidates)
        return -(mu - np.sqrt(params["beta"]) * sigma)
