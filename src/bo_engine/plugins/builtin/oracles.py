"""
bo-engine Built-in Oracles

Black-box objectives: the Branin benchmark and a wrapper for plain
Python callables (sync or async).
"""

from typing import Any, Callable, Dict, List, Optional, Union
import inspect
import math

import numpy as np

from bo_engine.plugins.base import OracleOutput, OraclePlugin, PluginMeta
from bo_engine.spec.models import ContinuousDimension, Domain
from bo_engine.types import OracleResult
from bo_engine.utils.rng import SeededRNG

BRANIN_MINIMUM = 0.397887
BRANIN_MINIMIZERS = [(-math.pi, 12.275), (math.pi, 2.275), (9.42478, 2.475)]


def branin(x1: float, x2: float) -> float:
    """Branin-Hoo function."""
    a = 1.0
    b = 5.1 / (4.0 * math.pi**2)
    c = 5.0 / math.pi
    r = 6.0
    s = 10.0
    t = 1.0 / (8.0 * math.pi)
    return a * (x2 - b * x1**2 + c * x1 - r) ** 2 + s * (1.0 - t) * math.cos(x1) + s


class BraninOracle(OraclePlugin):
    """
    Branin function on [-5, 10] x [0, 15].

    Three global minima with f = 0.397887. With ``with_noise`` the value
    is perturbed uniformly by up to ``noise_scale`` times its magnitude.
    Noise is drawn from the run's generator unless a ``seed`` or ``rng``
    is given, in which case the oracle keeps its own.
    """

    def __init__(
        self,
        with_noise: bool = False,
        noise_scale: float = 0.1,
        seed: Optional[int] = None,
        rng: Optional[SeededRNG] = None,
    ):
        self.with_noise = with_noise
        self.noise_scale = noise_scale
        self.seed = seed
        self._owns_rng = rng is not None or seed is not None
        if rng is None and seed is not None:
            rng = SeededRNG(seed)
        self.rng = rng

    @classmethod
    def get_meta(cls) -> PluginMeta:
        return PluginMeta(
            name="branin",
            kind="oracle",
            description="Branin-Hoo 2D benchmark (three global minima)",
            tags=["benchmark", "2d"],
        )

    @classmethod
    def get_default_params(cls) -> Dict[str, Any]:
        return {
            "with_noise": False,
            "noise_scale": 0.1,
            "seed": None,
        }

    def get_domain(self) -> Domain:
        return Domain(
            dimensions=[
                ContinuousDimension(bounds=(-5.0, 10.0), name="x1"),
                ContinuousDimension(bounds=(0.0, 15.0), name="x2"),
            ]
        )

    def bind_rng(self, rng: SeededRNG) -> None:
        if not self._owns_rng:
            self.rng = rng

    def evaluate(self, points: np.ndarray) -> List[OracleResult]:
        points = np.atleast_2d(np.asarray(points, dtype=float))
        if points.shape[1] < 2:
            raise ValueError("Branin function requires 2D input")

        results = []
        for point in points:
            value = branin(point[0], point[1])
            if not self.with_noise:
                results.append(OracleResult(y=value, info={"true_value": value}))
                continue

            if self.rng is None:
                # Used outside a runner with no seed
                self.rng = SeededRNG(0)
            noise_std = self.noise_scale * abs(value)
            noisy = value + (self.rng.next() - 0.5) * 2.0 * noise_std
            results.append(
                OracleResult(y=noisy, noise_std=noise_std, info={"true_value": value})
            )
        return results

    @staticmethod
    def true_optimum() -> Dict[str, Any]:
        """One of the three global minimizers and the minimum value."""
        return {"x": list(BRANIN_MINIMIZERS[0]), "y": BRANIN_MINIMUM}


ObjectiveValue = Union[float, OracleResult]


class FunctionOracle(OraclePlugin):
    """
    Wrap a Python callable as an oracle.

    ``fn`` takes one point (1-D array) and returns a float or an
    OracleResult. If ``fn`` is a coroutine function, ``evaluate`` returns
    an awaitable and points are evaluated one after another.
    """

    def __init__(self, fn: Callable[[np.ndarray], Any], domain: Domain, name: str = "function"):
        self.fn = fn
        self.domain = domain
        self._name = name

    @classmethod
    def get_meta(cls) -> PluginMeta:
        return PluginMeta(
            name="function",
            kind="oracle",
            description="Python callable objective",
            tags=["callable"],
            deterministic=False,
        )

    @property
    def name(self) -> str:
        return self._name

    def get_domain(self) -> Domain:
        return self.domain

    def evaluate(self, points: np.ndarray) -> OracleOutput:
        points = np.atleast_2d(np.asarray(points, dtype=float))
        if inspect.iscoroutinefunction(self.fn):
            return self._evaluate_async(points)
        return [self._to_result(self.fn(point)) for point in points]

    async def _evaluate_async(self, points: np.ndarray) -> List[OracleResult]:
        results = []
        for point in points:
            results.append(self._to_result(await self.fn(point)))
        return results

    @staticmethod
    def _to_result(value: ObjectiveValue) -> OracleResult:
        if isinstance(value, OracleResult):
            return value
        return OracleResult(y=float(value))
