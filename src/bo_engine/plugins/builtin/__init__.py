"""
bo-engine Built-in Plugins
"""

from bo_engine.plugins.builtin.acquisitions import (
    ExpectedImprovement,
    LowerConfidenceBound,
    ProbabilityOfImprovement,
)
from bo_engine.plugins.builtin.kernels import Matern52Kernel, RBFKernel
from bo_engine.plugins.builtin.optimizers import (
    MultiStartLocalSearch,
    RandomSearchOptimizer,
)
from bo_engine.plugins.builtin.oracles import BraninOracle, FunctionOracle

__all__ = [
    "RBFKernel",
    "Matern52Kernel",
    "ExpectedImprovement",
    "ProbabilityOfImprovement",
    "LowerConfidenceBound",
    "MultiStartLocalSearch",
    "RandomSearchOptimizer",
    "BraninOracle",
    "FunctionOracle",
]
