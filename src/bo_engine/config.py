"""
bo-engine Settings
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class EngineSettings(BaseSettings):
    """Numeric and logging defaults, overridable from the environment."""

    # Numerics
    jitter: float = Field(
        default=1e-6,
        gt=0,
        description="Diagonal stabilizer added to every covariance matrix",
    )
    solve_tolerance: float = Field(
        default=1e-6,
        gt=0,
        description="Tolerance reported to plugins through the run context",
    )
    max_condition: float = Field(
        default=1e12,
        gt=1,
        description="Condition estimate above which a fit is flagged ill-conditioned",
    )
    max_jitter_tries: int = Field(
        default=5,
        ge=0,
        description="Extra factorization attempts with escalated jitter",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level for the CLI")

    model_config = {"env_prefix": "BO_ENGINE_"}


def get_settings() -> EngineSettings:
    """Read settings from the environment."""
    return EngineSettings()
