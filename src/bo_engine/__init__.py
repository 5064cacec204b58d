"""
bo-engine - Bayesian Optimization Engine

Sequential minimization of expensive black-box functions over mixed
continuous/integer/categorical domains with a Gaussian Process
surrogate, pluggable kernels, acquisition functions, acquisition
optimizers and oracles, and a step-wise, seeded runner.
"""

__version__ = "1.0.0"

from bo_engine.core import (
    BORunner,
    DoneReason,
    EventType,
    InitialDesign,
    RunConfig,
    RunPhase,
    RunState,
)
from bo_engine.exceptions import (
    BOEngineError,
    NumericInstabilityError,
    PluginContractViolation,
    PluginNotFoundError,
    ScenarioLoadError,
    ValidationError,
)
from bo_engine.gp import GaussianProcess, GPConfig
from bo_engine.spec import Domain, ScenarioSpec, validate_domain, validate_point
from bo_engine.types import Dataset, Observation, OracleResult, RunContext
from bo_engine.utils import SeededRNG

__all__ = [
    "__version__",
    # Runner
    "BORunner",
    "RunConfig",
    "RunState",
    "RunPhase",
    "InitialDesign",
    "DoneReason",
    "EventType",
    # Model
    "GaussianProcess",
    "GPConfig",
    # Data
    "Domain",
    "ScenarioSpec",
    "Dataset",
    "Observation",
    "OracleResult",
    "RunContext",
    "SeededRNG",
    "validate_domain",
    "validate_point",
    # Errors
    "BOEngineError",
    "ValidationError",
    "NumericInstabilityError",
    "PluginContractViolation",
    "PluginNotFoundError",
    "ScenarioLoadError",
]
