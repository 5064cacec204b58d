"""
bo-engine Exceptions

Normal terminal conditions of a run (budget exhausted, no candidate
proposed) are not exceptions; see ``BORunner.step``.
"""

from typing import List, Sequence, Union


class BOEngineError(Exception):
    """Base exception for bo-engine."""
    pass


class ValidationError(BOEngineError, ValueError):
    """Malformed domain or out-of-domain point."""

    def __init__(self, errors: Union[str, Sequence[str]]):
        if isinstance(errors, str):
            errors = [errors]
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors))


class NumericInstabilityError(BOEngineError, ArithmeticError):
    """Covariance matrix could not be factored, even with extra jitter."""

    def __init__(self, message: str, jitter: float | None = None):
        self.jitter = jitter
        super().__init__(message)


class PluginContractViolation(BOEngineError, TypeError):
    """A plugin returned malformed output or carries incomplete metadata."""

    def __init__(self, plugin: str, message: str):
        self.plugin = plugin
        super().__init__(f"{plugin}: {message}")


class PluginNotFoundError(BOEngineError, KeyError):
    """Plugin not registered."""

    def __init__(self, kind: str, name: str, available: Sequence[str] = ()):
        self.kind = kind
        self.name = name
        self.available = list(available)
        super().__init__(
            f"{kind} plugin '{name}' not found. Available: {self.available}"
        )

    def __str__(self) -> str:
        # KeyError quotes its argument otherwise
        return str(self.args[0])


class ScenarioLoadError(BOEngineError):
    """Error loading a scenario file."""
    pass
