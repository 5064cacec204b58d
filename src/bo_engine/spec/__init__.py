"""
bo-engine Domain and Scenario Models

Pydantic models for search spaces and run scenarios:
- Continuous, integer and categorical dimensions
- Domain and point validation
- YAML scenario loading
"""

from bo_engine.spec.models import (
    CategoricalDimension,
    ContinuousDimension,
    DesignMethod,
    Dimension,
    DimensionType,
    Domain,
    InitialDesignSpec,
    IntegerDimension,
    PluginRef,
    ScenarioSpec,
)
from bo_engine.spec.validators import (
    domain_errors,
    point_errors,
    validate_domain,
    validate_point,
)
from bo_engine.spec.loader import (
    BRANIN_SCENARIO,
    build_run_config,
    dump_scenario,
    load_scenario,
    load_scenario_from_file,
)

__all__ = [
    # Models
    "Domain",
    "Dimension",
    "ContinuousDimension",
    "IntegerDimension",
    "CategoricalDimension",
    "ScenarioSpec",
    "PluginRef",
    "InitialDesignSpec",
    # Enums
    "DimensionType",
    "DesignMethod",
    # Validators
    "domain_errors",
    "point_errors",
    "validate_domain",
    "validate_point",
    # Loader
    "load_scenario",
    "load_scenario_from_file",
    "dump_scenario",
    "build_run_config",
    "BRANIN_SCENARIO",
]
