"""
bo-engine Gaussian Process

Exact GP regression with supplied (not learned) kernel hyperparameters.
Every fit re-factors the full covariance matrix.
"""

from dataclasses import dataclass
from numbers import Real
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union
import logging

import numpy as np

from bo_engine.exceptions import PluginContractViolation
from bo_engine.gp.base import Posterior, PosteriorInfo
from bo_engine.linalg import (
    condition_estimate,
    robust_cholesky,
    solve_cholesky,
    solve_lower_triangular,
)
from bo_engine.spec.models import Domain
from bo_engine.types import Dataset

if TYPE_CHECKING:
    from bo_engine.plugins.base import KernelPlugin

logger = logging.getLogger(__name__)


@dataclass
class GPConfig:
    """GP configuration."""

    kernel: "KernelPlugin"
    hyperparameters: Dict[str, Any]
    noise: float
    jitter: float
    domain: Domain
    max_jitter_tries: int = 5
    max_condition: float = 1e12


class GaussianProcess(Posterior):
    """
    Gaussian Process posterior.

    Fits immediately on construction. With no observations the model
    stays at the prior: zero mean, variance equal to the kernel diagonal.

    Example:
        gp = GaussianProcess(dataset, GPConfig(
            kernel=RBFKernel(),
            hyperparameters={"lengthscale": 1.0, "variance": 1.0},
            noise=0.0,
            jitter=1e-6,
            domain=domain,
        ))
        mu, var = gp.mean(Xs), gp.variance(Xs)
    """

    def __init__(self, dataset: Dataset, config: GPConfig):
        """
        Initialize and fit.

        Args:
            dataset: Observations; copied, never mutated
            config: Kernel, hyperparameters and numerics
        """
        self.dataset = dataset.copy()
        self.config = config

        self._X: np.ndarray = np.zeros((0, config.domain.n_dims))
        self._y: np.ndarray = np.zeros(0)
        self.L: Optional[np.ndarray] = None
        self.alpha: Optional[np.ndarray] = None
        self.added_jitter = 0.0

        self.fit()

    # -------------------------------------------------------------------------
    # Fitting
    # -------------------------------------------------------------------------

    def fit(self) -> None:
        """Factor K(X, X) + noise^2 I + jitter I and solve for alpha."""
        self._X, self._y = self.dataset.as_arrays(self.config.domain.n_dims)
        n = len(self._y)

        if n == 0:
            self.L = None
            self.alpha = None
            self.added_jitter = 0.0
            return

        K = self._cov(self._X, self._X)
        noise_var = self.dataset.noise_std(self.config.noise) ** 2
        K[np.diag_indices(n)] += noise_var + self.config.jitter

        self.L, self.added_jitter = robust_cholesky(
            K,
            jitter=max(self.config.jitter, 1e-12),
            max_tries=self.config.max_jitter_tries,
        )
        self.alpha = solve_cholesky(self.L, self._y)

        conditioning = condition_estimate(self.L)
        if conditioning is not None and conditioning > self.config.max_condition:
            logger.warning(
                f"GP covariance is ill-conditioned (estimate {conditioning:.3e} "
                f"> {self.config.max_condition:.1e}) with {n} observations"
            )
        logger.debug(f"Fitted GP on {n} observations, conditioning={conditioning}")

    def update(self, x: np.ndarray, y: float, noise: Optional[float] = None) -> None:
        """Append an observation and re-fit."""
        self.dataset.append(x, y, noise)
        self.fit()

    @property
    def is_fitted(self) -> bool:
        """Check if the model holds a factor."""
        return self.L is not None

    # -------------------------------------------------------------------------
    # Prediction
    # -------------------------------------------------------------------------

    def mean(self, Xs: np.ndarray) -> np.ndarray:
        Xs = self._as_points(Xs)
        if self.alpha is None:
            return np.zeros(Xs.shape[0])
        Ks = self._cov(Xs, self._X)
        return Ks @ self.alpha

    def variance(self, Xs: np.ndarray) -> np.ndarray:
        Xs = self._as_points(Xs)
        prior = self._diag(Xs)
        if self.L is None:
            return prior
        V = solve_lower_triangular(self.L, self._cov(Xs, self._X).T)
        return np.maximum(prior - np.sum(V * V, axis=0), 0.0)

    def covariance(self, Xs: np.ndarray, Xs2: Optional[np.ndarray] = None) -> np.ndarray:
        Xs = self._as_points(Xs)
        Xs2 = Xs if Xs2 is None else self._as_points(Xs2)
        prior = self._cov(Xs, Xs2)
        if self.L is None:
            return prior
        V1 = solve_lower_triangular(self.L, self._cov(Xs, self._X).T)
        V2 = solve_lower_triangular(self.L, self._cov(Xs2, self._X).T)
        return prior - V1.T @ V2

    def best_observation(self) -> float:
        if len(self._y) == 0:
            return float("inf")
        return float(np.min(self._y))

    def noise(self) -> Union[float, np.ndarray]:
        if self.dataset.has_noise:
            return self.dataset.noise_std(self.config.noise)
        return self.config.noise

    def domain(self) -> Domain:
        return self.config.domain

    def info(self) -> PosteriorInfo:
        lengthscale = self.config.hyperparameters.get("lengthscale")
        lengthscales: Optional[List[float]] = None
        if isinstance(lengthscale, Real):
            lengthscales = [float(lengthscale)]
        elif isinstance(lengthscale, (list, tuple, np.ndarray)):
            lengthscales = [float(v) for v in lengthscale]

        conditioning = condition_estimate(self.L) if self.L is not None else None

        return PosteriorInfo(
            lengthscales=lengthscales,
            noise=self.config.noise,
            conditioning=conditioning,
            diagnostics={
                "n_observations": len(self._y),
                "added_jitter": self.added_jitter,
                "ill_conditioned": bool(
                    conditioning is not None
                    and conditioning > self.config.max_condition
                ),
            },
        )

    # -------------------------------------------------------------------------
    # Kernel calls with shape checks
    # -------------------------------------------------------------------------

    def _as_points(self, Xs: np.ndarray) -> np.ndarray:
        Xs = np.asarray(Xs, dtype=float)
        if Xs.ndim == 1:
            Xs = Xs.reshape(1, -1)
        if Xs.shape[1] != self.config.domain.n_dims:
            raise ValueError(
                f"Expected points with {self.config.domain.n_dims} columns, "
                f"got shape {Xs.shape}"
            )
        return Xs

    def _cov(self, X: np.ndarray, X2: np.ndarray) -> np.ndarray:
        K = np.asarray(
            self.config.kernel.cov(X, X2, self.config.hyperparameters), dtype=float
        )
        expected = (X.shape[0], X2.shape[0])
        if K.shape != expected:
            raise PluginContractViolation(
                self.config.kernel.name,
                f"cov returned shape {K.shape}, expected {expected}",
            )
        return K

    def _diag(self, X: np.ndarray) -> np.ndarray:
        d = np.asarray(
            self.config.kernel.diag(X, self.config.hyperparameters), dtype=float
        ).ravel()
        if d.shape != (X.shape[0],):
            raise PluginContractViolation(
                self.config.kernel.name,
                f"diag returned shape {d.shape}, expected ({X.shape[0]},)",
            )
        return d
