"""
bo-engine Data Types

Data passed between the runner and plugins.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from bo_engine.spec.models import Domain
from bo_engine.utils.rng import RNGContext


@dataclass
class Observation:
    """A single evaluated point."""

    x: np.ndarray
    y: float
    noise: Optional[float] = None
    step: Optional[int] = None


@dataclass
class OracleResult:
    """Oracle output for one point."""

    y: float
    noise_std: Optional[float] = None
    info: Dict[str, Any] = field(default_factory=dict)


@dataclass(eq=False)
class Dataset:
    """
    Observations in evaluation order.

    ``X``, ``y`` and ``noise`` are parallel lists. A ``None`` noise entry
    means the observation carries no per-point noise std and the model's
    configured noise applies.
    """

    X: List[np.ndarray] = field(default_factory=list)
    y: List[float] = field(default_factory=list)
    noise: List[Optional[float]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.y)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dataset):
            return NotImplemented
        return (
            self.y == other.y
            and self.noise == other.noise
            and len(self.X) == len(other.X)
            and all(np.array_equal(a, b) for a, b in zip(self.X, other.X))
        )

    def append(self, x: Sequence[float], y: float, noise: Optional[float] = None) -> None:
        """Append one observation."""
        self.X.append(np.asarray(x, dtype=float).copy())
        self.y.append(float(y))
        self.noise.append(None if noise is None else float(noise))

    def as_arrays(self, n_dims: Optional[int] = None) -> tuple[np.ndarray, np.ndarray]:
        """Return (X, y) with X of shape (n, d)."""
        if not self.X:
            d = n_dims if n_dims is not None else 0
            return np.zeros((0, d)), np.zeros(0)
        return np.vstack(self.X), np.asarray(self.y, dtype=float)

    def noise_std(self, default: float) -> np.ndarray:
        """Per-point noise std, filling missing entries with ``default``."""
        noise = list(self.noise) + [None] * (len(self.y) - len(self.noise))
        return np.array([default if n is None else n for n in noise], dtype=float)

    def copy(self) -> "Dataset":
        """Deep copy."""
        return Dataset(
            X=[x.copy() for x in self.X],
            y=list(self.y),
            noise=list(self.noise),
        )

    @property
    def has_noise(self) -> bool:
        """Check if any observation carries its own noise std."""
        return any(n is not None for n in self.noise)


@dataclass(frozen=True)
class NumericsContext:
    """Numeric tolerances shared with plugins."""

    jitter: float
    tolerance: float
    max_condition: float


@dataclass(frozen=True)
class RunContext:
    """Per-step context passed by value into every plugin call."""

    step: int
    budget: int
    domain: Domain
    rng: RNGContext
    numerics: NumericsContext
