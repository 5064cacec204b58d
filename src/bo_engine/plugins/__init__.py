"""
bo-engine Plugin System

Strategy contracts for kernels, acquisition functions, acquisition
optimizers and oracles, plus a registry to look them up by name.
"""

from bo_engine.plugins.base import (
    AcquisitionPlugin,
    AcquisitionScorer,
    KernelPlugin,
    OptimizerPlugin,
    OraclePlugin,
    Plugin,
    PluginMeta,
)
from bo_engine.plugins.registry import (
    PluginRegistry,
    get_registry,
)

__all__ = [
    # Base classes
    "Plugin",
    "PluginMeta",
    "KernelPlugin",
    "AcquisitionPlugin",
    "AcquisitionScorer",
    "OptimizerPlugin",
    "OraclePlugin",
    # Registry
    "PluginRegistry",
    "get_registry",
]
