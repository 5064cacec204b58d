"""
bo-engine Built-in Acquisition Optimizers

Derivative-free searches over the domain that maximize an acquisition
scorer.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging

import numpy as np

from bo_engine.plugins.base import AcquisitionScorer, OptimizerPlugin, PluginMeta
from bo_engine.sampling import random_value
from bo_engine.spec.models import ContinuousDimension, Domain
from bo_engine.types import Dataset, Observation, RunContext

logger = logging.getLogger(__name__)


def _random_point(domain: Domain, context: RunContext) -> np.ndarray:
    return np.array([random_value(dim, context.rng) for dim in domain.dimensions])


def _top_k(found: List[Tuple[np.ndarray, float]], k: int) -> np.ndarray:
    """Best k points by score; sorted() is stable so earlier finds win ties."""
    ranked = sorted(found, key=lambda item: -item[1])
    return np.vstack([x for x, _ in ranked[:k]])


class MultiStartLocalSearch(OptimizerPlugin):
    """
    Multi-start coordinate search.

    From each random start, repeatedly tries +step and -step along every
    dimension and keeps any move that raises the score. Moves are clamped
    to bounds; integer and categorical dimensions move by whole units.
    The step size is fixed.
    """

    @classmethod
    def get_meta(cls) -> PluginMeta:
        return PluginMeta(
            name="multi_start",
            kind="optimizer",
            description="Multi-start local coordinate search",
            tags=["local_search", "derivative_free"],
        )

    @classmethod
    def get_default_params(cls) -> Dict[str, Any]:
        return {
            "restarts": 10,
            "max_iterations": 50,
            "step_size": 0.1,
        }

    def ask(
        self,
        k: int,
        scorer: AcquisitionScorer,
        domain: Domain,
        context: RunContext,
        params: Optional[Dict[str, Any]],
        state: Any,
    ) -> np.ndarray:
        params = self.validate_params(params)

        starts = [_random_point(domain, context) for _ in range(int(params["restarts"]))]

        found: List[Tuple[np.ndarray, float]] = []
        for start in starts:
            optimum = self._local_search(start, scorer, domain, params)
            found.append((optimum, float(scorer(optimum.reshape(1, -1))[0])))

        if not found or k <= 0:
            return np.zeros((0, domain.n_dims))
        return _top_k(found, k)

    def _local_search(
        self,
        start: np.ndarray,
        scorer: AcquisitionScorer,
        domain: Domain,
        params: Dict[str, Any],
    ) -> np.ndarray:
        current = start.copy()
        current_score = float(scorer(current.reshape(1, -1))[0])
        bounds = domain.bounds()

        for _ in range(int(params["max_iterations"])):
            improved = False

            for d, dim in enumerate(domain.dimensions):
                lo, hi = bounds[d]
                discrete = not isinstance(dim, ContinuousDimension)
                step = max(params["step_size"], 1.0) if discrete else params["step_size"]

                for direction in (1.0, -1.0):
                    candidate = current.copy()
                    value = current[d] + direction * step
                    if discrete:
                        value = round(value)
                    candidate[d] = min(max(value, lo), hi)
                    if candidate[d] == current[d]:
                        continue

                    score = float(scorer(candidate.reshape(1, -1))[0])
                    if score > current_score:
                        current, current_score = candidate, score
                        improved = True
                        break

            if not improved:
                break

        return current


class RandomSearchOptimizer(OptimizerPlugin):
    """
    Random search baseline.

    Scores a batch of uniform candidates and keeps the best k. Its state
    counts observations and tracks the best value told so far.
    """

    @classmethod
    def get_meta(cls) -> PluginMeta:
        return PluginMeta(
            name="random_search",
            kind="optimizer",
            description="Best of uniformly sampled candidates",
            tags=["baseline", "random"],
        )

    @classmethod
    def get_default_params(cls) -> Dict[str, Any]:
        return {
            "n_candidates": 256,
        }

    def initialize(
        self,
        dataset: Dataset,
        domain: Domain,
        context: RunContext,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        return {
            "n_observed": len(dataset),
            "best_y": min(dataset.y) if len(dataset) else float("inf"),
        }

    def ask(
        self,
        k: int,
        scorer: AcquisitionScorer,
        domain: Domain,
        context: RunContext,
        params: Optional[Dict[str, Any]],
        state: Any,
    ) -> np.ndarray:
        params = self.validate_params(params)
        n = int(params["n_candidates"])
        if n <= 0 or k <= 0:
            return np.zeros((0, domain.n_dims))

        candidates = np.vstack([_random_point(domain, context) for _ in range(n)])
        scores = np.asarray(scorer(candidates), dtype=float)
        return _top_k(list(zip(candidates, scores)), k)

    def tell(self, observation: Observation, state: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "n_observed": state["n_observed"] + 1,
            "best_y": min(state["best_y"], observation.y),
        }
