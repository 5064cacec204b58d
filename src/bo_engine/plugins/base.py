"""
bo-engine Plugin Base Classes

Abstract base classes for the four strategy roles the runner composes:
kernels, acquisition functions, acquisition optimizers and oracles.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Union,
)

import numpy as np

from bo_engine.spec.models import Domain
from bo_engine.types import Dataset, Observation, OracleResult, RunContext
from bo_engine.utils.rng import SeededRNG

if TYPE_CHECKING:
    from bo_engine.gp.base import Posterior


# Closure over the current posterior: (m, d) candidates -> (m,) scores
AcquisitionScorer = Callable[[np.ndarray], np.ndarray]


@dataclass
class PluginMeta:
    """Plugin metadata."""

    name: str
    kind: str
    description: str = ""
    version: str = "1.0.0"
    author: str = ""
    tags: List[str] = field(default_factory=list)
    deterministic: bool = True


class Plugin(ABC):
    """Base class for all plugins."""

    kind: str = ""

    @classmethod
    @abstractmethod
    def get_meta(cls) -> PluginMeta:
        """Return plugin metadata."""
        ...

    @classmethod
    def get_default_params(cls) -> Dict[str, Any]:
        """Return default parameters."""
        return {}

    @classmethod
    def validate_params(cls, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Validate and normalize parameters."""
        defaults = cls.get_default_params()
        return {**defaults, **(params or {})}

    @property
    def name(self) -> str:
        return self.get_meta().name


# =============================================================================
# Kernel Plugin
# =============================================================================


class KernelPlugin(Plugin):
    """
    Base class for covariance functions.

    ``cov(X, X)`` must be symmetric positive semi-definite for any X.
    """

    kind = "kernel"

    @abstractmethod
    def cov(
        self,
        X: np.ndarray,
        X2: np.ndarray,
        hyperparameters: Dict[str, Any],
    ) -> np.ndarray:
        """
        Covariance matrix.

        Args:
            X: Inputs of shape (n, d)
            X2: Inputs of shape (m, d)
            hyperparameters: Kernel hyperparameters

        Returns:
            Matrix of shape (n, m)
        """
        ...

    @abstractmethod
    def diag(
        self,
        X: np.ndarray,
        hyperparameters: Dict[str, Any],
    ) -> np.ndarray:
        """
        Prior variance at each input.

        Args:
            X: Inputs of shape (n, d)
            hyperparameters: Kernel hyperparameters

        Returns:
            Vector of shape (n,)
        """
        ...


# =============================================================================
# Acquisition Plugin
# =============================================================================


class AcquisitionPlugin(Plugin):
    """
    Base class for acquisition functions.

    Scores candidate points against a posterior; higher is more
    promising to evaluate next.
    """

    kind = "acquisition"

    @abstractmethod
    def score(
        self,
        candidates: np.ndarray,
        posterior: "Posterior",
        context: RunContext,
        params: Optional[Dict[str, Any]] = None,
    ) -> np.ndarray:
        """
        Score candidates.

        Args:
            candidates: Points of shape (m, d)
            posterior: Fitted surrogate
            context: Current run context
            params: Acquisition parameters

        Returns:
            Scores of shape (m,)
        """
        ...


# =============================================================================
# Optimizer Plugin
# =============================================================================


class OptimizerPlugin(Plugin):
    """
    Base class for acquisition optimizers.

    The state returned by ``initialize`` is opaque to the runner; it is
    threaded back through ``ask`` and ``tell`` unchanged.
    """

    kind = "optimizer"

    def initialize(
        self,
        dataset: Dataset,
        domain: Domain,
        context: RunContext,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Create optimizer state. Stateless optimizers return an empty dict."""
        return {}

    @abstractmethod
    def ask(
        self,
        k: int,
        scorer: AcquisitionScorer,
        domain: Domain,
        context: RunContext,
        params: Optional[Dict[str, Any]],
        state: Any,
    ) -> np.ndarray:
        """
        Propose candidates.

        Args:
            k: Maximum number of candidates
            scorer: Acquisition closure over the current posterior
            domain: Search space
            context: Current run context
            params: Optimizer parameters
            state: Opaque optimizer state

        Returns:
            Array of shape (<= k, d); zero rows ends the run
        """
        ...

    def tell(self, observation: Observation, state: Any) -> Any:
        """Update state with an evaluated candidate."""
        return state


# =============================================================================
# Oracle Plugin
# =============================================================================


OracleOutput = Union[List[OracleResult], Awaitable[List[OracleResult]]]


class OraclePlugin(Plugin):
    """
    Base class for black-box objectives.

    ``evaluate`` may return its results directly or as an awaitable; the
    runner waits for completion either way.
    """

    kind = "oracle"

    @abstractmethod
    def evaluate(self, points: np.ndarray) -> OracleOutput:
        """
        Evaluate points.

        Args:
            points: Array of shape (n, d)

        Returns:
            One OracleResult per point
        """
        ...

    @abstractmethod
    def get_domain(self) -> Domain:
        """Return the oracle's search space."""
        ...

    def bind_rng(self, rng: SeededRNG) -> None:
        """
        Receive the run's generator before each evaluation.

        Stochastic oracles should draw from it so the run seed alone fixes
        the run. Deterministic oracles ignore it.
        """
        pass
