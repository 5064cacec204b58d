"""
bo-engine Built-in Kernels

Stationary covariance functions over the raw (unscaled) domain.
"""

from typing import Any, Dict

import numpy as np

from bo_engine.plugins.base import KernelPlugin, PluginMeta


def _scaled_sq_dist(X: np.ndarray, X2: np.ndarray, lengthscale) -> np.ndarray:
    """Pairwise squared distances after dividing by the lengthscale(s)."""
    ls = np.asarray(lengthscale, dtype=float)
    A = np.atleast_2d(np.asarray(X, dtype=float)) / ls
    B = np.atleast_2d(np.asarray(X2, dtype=float)) / ls
    diff = A[:, None, :] - B[None, :, :]
    return np.sum(diff * diff, axis=-1)


class RBFKernel(KernelPlugin):
    """Squared exponential kernel: variance * exp(-0.5 * |x - x'|^2 / l^2)."""

    @classmethod
    def get_meta(cls) -> PluginMeta:
        return PluginMeta(
            name="rbf",
            kind="kernel",
            description="Radial basis function (squared exponential) kernel",
            tags=["stationary", "smooth"],
        )

    @classmethod
    def get_default_params(cls) -> Dict[str, Any]:
        return {
            "lengthscale": 1.0,
            "variance": 1.0,
        }

    def cov(
        self,
        X: np.ndarray,
        X2: np.ndarray,
        hyperparameters: Dict[str, Any],
    ) -> np.ndarray:
        params = self.validate_params(hyperparameters)
        r2 = _scaled_sq_dist(X, X2, params["lengthscale"])
        return params["variance"] * np.exp(-0.5 * r2)

    def diag(self, X: np.ndarray, hyperparameters: Dict[str, Any]) -> np.ndarray:
        params = self.validate_params(hyperparameters)
        return np.full(np.atleast_2d(X).shape[0], float(params["variance"]))


class Matern52Kernel(KernelPlugin):
    """Matern 5/2 kernel."""

    @classmethod
    def get_meta(cls) -> PluginMeta:
        return PluginMeta(
            name="matern52",
            kind="kernel",
            description="Matern kernel with nu = 5/2",
            tags=["stationary", "matern"],
        )

    @classmethod
    def get_default_params(cls) -> Dict[str, Any]:
        return {
            "lengthscale": 1.0,
            "variance": 1.0,
        }

    def cov(
        self,
        X: np.ndarray,
        X2: np.ndarray,
        hyperparameters: Dict[str, Any],
    ) -> np.ndarray:
        params = self.validate_params(hyperparameters)
        r = np.sqrt(np.maximum(_scaled_sq_dist(X, X2, params["lengthscale"]), 0.0))
        s5r = np.sqrt(5.0) * r
        return params["variance"] * (1.0 + s5r + 5.0 / 3.0 * r * r) * np.exp(-s5r)

    def diag(self, X: np.ndarray, hyperparameters: Dict[str, Any]) -> np.ndarray:
        params = self.validate_params(hyperparameters)
        return np.full(np.atleast_2d(X).shape[0], float(params["variance"]))
