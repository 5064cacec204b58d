"""
Shared fixtures for bo-engine tests.
"""

import numpy as np
import pytest

from bo_engine.core.runner import InitialDesign, RunConfig
from bo_engine.plugins.builtin import (
    BraninOracle,
    ExpectedImprovement,
    FunctionOracle,
    MultiStartLocalSearch,
    RBFKernel,
)
from bo_engine.spec.models import (
    CategoricalDimension,
    ContinuousDimension,
    Domain,
    IntegerDimension,
)
from bo_engine.types import Dataset


@pytest.fixture
def branin_domain() -> Domain:
    """The Branin search space."""
    return Domain(
        dimensions=[
            ContinuousDimension(bounds=(-5.0, 10.0), name="x1"),
            ContinuousDimension(bounds=(0.0, 15.0), name="x2"),
        ]
    )


@pytest.fixture
def unit_square() -> Domain:
    """[0, 1] x [0, 1]."""
    return Domain.continuous([(0.0, 1.0), (0.0, 1.0)])


@pytest.fixture
def mixed_domain() -> Domain:
    """One continuous, one integer and one categorical dimension."""
    return Domain(
        dimensions=[
            ContinuousDimension(bounds=(0.0, 1.0), name="temperature"),
            IntegerDimension(bounds=(1, 5), name="passes"),
            CategoricalDimension(levels=["water", "ethanol", "toluene"], name="solvent"),
        ]
    )


@pytest.fixture
def small_dataset() -> Dataset:
    """Three noiseless observations on the unit square."""
    dataset = Dataset()
    dataset.append([0.1, 0.2], 1.0)
    dataset.append([0.5, 0.5], -0.5)
    dataset.append([0.9, 0.7], 0.25)
    return dataset


@pytest.fixture
def quadratic_oracle(unit_square) -> FunctionOracle:
    """Bowl with its minimum 0 at (0.3, 0.7)."""
    target = np.array([0.3, 0.7])
    return FunctionOracle(lambda x: float(np.sum((x - target) ** 2)), unit_square, name="bowl")


@pytest.fixture
def make_config(branin_domain):
    """Factory for small Branin run configs; keyword arguments override fields."""
    def _make(**overrides) -> RunConfig:
        fields = {
            "domain": branin_domain,
            "kernel": RBFKernel(),
            "kernel_params": {"lengthscale": 1.0, "variance": 1.0},
            "acquisition": ExpectedImprovement(),
            "acquisition_params": {"xi": 0.01},
            "optimizer": MultiStartLocalSearch(),
            "optimizer_params": {"restarts": 3, "max_iterations": 10},
            "oracle": BraninOracle(),
            "initial_design": InitialDesign(method="lhs", n=5),
            "budget": 8,
            "noise": 0.0,
            "jitter": 1e-6,
            "seed": 42,
        }
        fields.update(overrides)
        return RunConfig(**fields)

    return _make
