"""
bo-engine Posterior Interface
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import numpy as np

from bo_engine.spec.models import Domain


@dataclass
class PosteriorInfo:
    """Surrogate diagnostics."""

    noise: float
    lengthscales: Optional[List[float]] = None
    conditioning: Optional[float] = None
    diagnostics: Dict[str, Any] = field(default_factory=dict)


class Posterior(ABC):
    """Surrogate model the acquisition functions score against."""

    @abstractmethod
    def mean(self, Xs: np.ndarray) -> np.ndarray:
        """Posterior mean at points of shape (m, d)."""
        ...

    @abstractmethod
    def variance(self, Xs: np.ndarray) -> np.ndarray:
        """Posterior marginal variance at points of shape (m, d)."""
        ...

    def covariance(self, Xs: np.ndarray, Xs2: Optional[np.ndarray] = None) -> np.ndarray:
        """Full posterior covariance between two sets of points."""
        raise NotImplementedError(f"{type(self).__name__} does not provide covariance")

    @abstractmethod
    def best_observation(self) -> float:
        """Lowest observed value, or +inf without observations."""
        ...

    @abstractmethod
    def noise(self) -> Union[float, np.ndarray]:
        """Observation noise std (scalar or per point)."""
        ...

    @abstractmethod
    def domain(self) -> Domain:
        """Domain the posterior is defined over."""
        ...

    @abstractmethod
    def info(self) -> PosteriorInfo:
        """Diagnostics."""
        ...
