"""
bo-engine Surrogate Models
"""

from bo_engine.gp.base import Posterior, PosteriorInfo
from bo_engine.gp.gaussian_process import GaussianProcess, GPConfig

__all__ = [
    "Posterior",
    "PosteriorInfo",
    "GaussianProcess",
    "GPConfig",
]
