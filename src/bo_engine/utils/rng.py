"""
bo-engine Seeded RNG

Linear congruential generator (Numerical Recipes constants). Every
stochastic step of a run draws from one instance so that a single seed
reproduces the whole run.
"""

from dataclasses import dataclass
from typing import Callable, List, MutableSequence, TypeVar

T = TypeVar("T")

_MULTIPLIER = 1664525
_INCREMENT = 1013904223
_MODULUS = 2**32


@dataclass(frozen=True)
class RNGContext:
    """RNG handle passed to plugins."""

    seed: int
    next: Callable[[], float]


class SeededRNG:
    """
    Deterministic pseudo-random source.

    Example:
        rng = SeededRNG(42)
        u = rng.next()            # in [0, 1)
        k = rng.next_int(0, 9)    # inclusive
    """

    def __init__(self, seed: int):
        self.seed = int(seed)
        self._state = self.seed % _MODULUS

    @property
    def state(self) -> int:
        """Current generator state."""
        return self._state

    def next(self) -> float:
        """Uniform float in [0, 1)."""
        self._state = (self._state * _MULTIPLIER + _INCREMENT) % _MODULUS
        return self._state / _MODULUS

    def next_int(self, min_value: int, max_value: int) -> int:
        """Uniform integer in [min_value, max_value]."""
        return int(self.next() * (max_value - min_value + 1)) + min_value

    def next_float(self, min_value: float, max_value: float) -> float:
        """Uniform float in [min_value, max_value)."""
        return self.next() * (max_value - min_value) + min_value

    def shuffle(self, items: MutableSequence[T]) -> MutableSequence[T]:
        """Fisher-Yates shuffle in place."""
        for i in range(len(items) - 1, 0, -1):
            j = int(self.next() * (i + 1))
            items[i], items[j] = items[j], items[i]
        return items

    def permutation(self, n: int) -> List[int]:
        """Random permutation of range(n)."""
        return list(self.shuffle(list(range(n))))

    def as_context(self) -> RNGContext:
        """Plugin-facing handle sharing this generator's stream."""
        return RNGContext(seed=self.seed, next=self.next)
