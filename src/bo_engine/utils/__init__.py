"""
bo-engine Utilities
"""

from bo_engine.utils.rng import RNGContext, SeededRNG

__all__ = [
    "RNGContext",
    "SeededRNG",
]
