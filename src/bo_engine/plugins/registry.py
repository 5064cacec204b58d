"""
bo-engine Plugin Registry

Type-safe registry for discovering and creating plugins by name.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
import importlib.metadata
import logging

from bo_engine.exceptions import PluginContractViolation, PluginNotFoundError
from bo_engine.plugins.base import (
    AcquisitionPlugin,
    KernelPlugin,
    OptimizerPlugin,
    OraclePlugin,
    Plugin,
    PluginMeta,
)


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Plugin)


def check_meta(plugin_class: Type[Plugin], kind: str) -> PluginMeta:
    """
    Check a plugin's metadata is complete and matches the expected kind.

    Args:
        plugin_class: Plugin class
        kind: Expected plugin kind

    Returns:
        The plugin's metadata

    Raises:
        PluginContractViolation: If a required field is missing or wrong
    """
    label = getattr(plugin_class, "__name__", repr(plugin_class))
    meta = plugin_class.get_meta()
    if not isinstance(meta, PluginMeta):
        raise PluginContractViolation(label, "get_meta() must return a PluginMeta")

    for field_name in ("name", "kind", "version"):
        value = getattr(meta, field_name)
        if not isinstance(value, str) or not value.strip():
            raise PluginContractViolation(label, f"metadata field '{field_name}' is required")

    if meta.kind != kind:
        raise PluginContractViolation(
            label, f"declares kind '{meta.kind}', expected '{kind}'"
        )
    return meta


class PluginTypeRegistry(Generic[T]):
    """Registry for a specific plugin type."""

    def __init__(self, plugin_type: Type[T], entry_point_group: str):
        """
        Initialize registry.

        Args:
            plugin_type: Base class for this plugin type
            entry_point_group: Entry point group name for discovery
        """
        self.plugin_type = plugin_type
        self.entry_point_group = entry_point_group
        self._plugins: Dict[str, Type[T]] = {}
        self._discovered = False

    @property
    def kind(self) -> str:
        return self.plugin_type.kind

    def register(self, name: str, plugin_class: Type[T]) -> None:
        """
        Register a plugin.

        Args:
            name: Plugin name
            plugin_class: Plugin class

        Raises:
            PluginContractViolation: If the class is not a plugin of this
                kind or its metadata is incomplete
        """
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, self.plugin_type):
            raise PluginContractViolation(
                str(plugin_class),
                f"must be a subclass of {self.plugin_type.__name__}",
            )
        check_meta(plugin_class, self.kind)
        self._plugins[name] = plugin_class
        logger.debug(f"Registered {self.plugin_type.__name__}: {name}")

    def get(self, name: str) -> Type[T]:
        """
        Get plugin by name.

        Args:
            name: Plugin name

        Returns:
            Plugin class

        Raises:
            PluginNotFoundError: If plugin not found
        """
        if not self._discovered:
            self.discover()

        if name not in self._plugins:
            raise PluginNotFoundError(self.kind, name, sorted(self._plugins))

        return self._plugins[name]

    def list(self) -> List[str]:
        """List all registered plugins."""
        if not self._discovered:
            self.discover()
        return list(self._plugins.keys())

    def all(self) -> Dict[str, Type[T]]:
        """Get all registered plugins."""
        if not self._discovered:
            self.discover()
        return dict(self._plugins)

    def discover(self) -> None:
        """Discover plugins from entry points."""
        if self._discovered:
            return

        eps = importlib.metadata.entry_points(group=self.entry_point_group)
        for ep in eps:
            try:
                plugin_class = ep.load()
                self.register(ep.name, plugin_class)
            except (ImportError, AttributeError, PluginContractViolation) as e:
                logger.warning(
                    f"Failed to load plugin {ep.name} from {ep.value}: {e}"
                )

        self._discovered = True

    def __contains__(self, name: str) -> bool:
        """Check if plugin is registered."""
        if not self._discovered:
            self.discover()
        return name in self._plugins


class PluginRegistry:
    """
    Central registry for all plugin types.

    Manages kernels, acquisition functions, acquisition optimizers
    and oracles.
    """

    def __init__(self):
        """Initialize registry with all plugin types."""
        self.kernels = PluginTypeRegistry[KernelPlugin](
            KernelPlugin, "bo_engine.kernels"
        )
        self.acquisitions = PluginTypeRegistry[AcquisitionPlugin](
            AcquisitionPlugin, "bo_engine.acquisitions"
        )
        self.optimizers = PluginTypeRegistry[OptimizerPlugin](
            OptimizerPlugin, "bo_engine.optimizers"
        )
        self.oracles = PluginTypeRegistry[OraclePlugin](
            OraclePlugin, "bo_engine.oracles"
        )

    def _by_kind(self, kind: str) -> PluginTypeRegistry:
        for registry in self.registries():
            if registry.kind == kind:
                return registry
        raise PluginNotFoundError("kind", kind, [r.kind for r in self.registries()])

    def registries(self) -> List[PluginTypeRegistry]:
        """All per-kind registries."""
        return [self.kernels, self.acquisitions, self.optimizers, self.oracles]

    def register_kernel(self, name: str, plugin: Type[KernelPlugin]) -> None:
        """Register a kernel plugin."""
        self.kernels.register(name, plugin)

    def register_acquisition(self, name: str, plugin: Type[AcquisitionPlugin]) -> None:
        """Register an acquisition plugin."""
        self.acquisitions.register(name, plugin)

    def register_optimizer(self, name: str, plugin: Type[OptimizerPlugin]) -> None:
        """Register an optimizer plugin."""
        self.optimizers.register(name, plugin)

    def register_oracle(self, name: str, plugin: Type[OraclePlugin]) -> None:
        """Register an oracle plugin."""
        self.oracles.register(name, plugin)

    def get_kernel(self, name: str) -> Type[KernelPlugin]:
        """Get kernel by name."""
        return self.kernels.get(name)

    def get_acquisition(self, name: str) -> Type[AcquisitionPlugin]:
        """Get acquisition by name."""
        return self.acquisitions.get(name)

    def get_optimizer(self, name: str) -> Type[OptimizerPlugin]:
        """Get optimizer by name."""
        return self.optimizers.get(name)

    def get_oracle(self, name: str) -> Type[OraclePlugin]:
        """Get oracle by name."""
        return self.oracles.get(name)

    def create(self, kind: str, name: str, **kwargs: Any) -> Plugin:
        """
        Instantiate a plugin.

        Args:
            kind: One of "kernel", "acquisition", "optimizer", "oracle"
            name: Registered plugin name
            **kwargs: Constructor arguments

        Returns:
            Plugin instance
        """
        return self._by_kind(kind).get(name)(**kwargs)

    def describe(self) -> List[PluginMeta]:
        """Metadata for every registered plugin, grouped by kind."""
        return [
            plugin_class.get_meta()
            for registry in self.registries()
            for plugin_class in registry.all().values()
        ]

    def discover_all(self) -> None:
        """Discover all plugins from entry points."""
        for registry in self.registries():
            registry.discover()

    def register_builtins(self) -> None:
        """Register built-in plugins."""
        # Import here to avoid circular imports
        from bo_engine.plugins.builtin.kernels import Matern52Kernel, RBFKernel
        from bo_engine.plugins.builtin.acquisitions import (
            ExpectedImprovement,
            LowerConfidenceBound,
            ProbabilityOfImprovement,
        )
        from bo_engine.plugins.builtin.optimizers import (
            MultiStartLocalSearch,
            RandomSearchOptimizer,
        )
        from bo_engine.plugins.builtin.oracles import BraninOracle

        # Kernels
        self.register_kernel("rbf", RBFKernel)
        self.register_kernel("matern52", Matern52Kernel)

        # Acquisitions
        self.register_acquisition("expected_improvement", ExpectedImprovement)
        self.register_acquisition("ei", ExpectedImprovement)
        self.register_acquisition("probability_of_improvement", ProbabilityOfImprovement)
        self.register_acquisition("lower_confidence_bound", LowerConfidenceBound)

        # Optimizers
        self.register_optimizer("multi_start", MultiStartLocalSearch)
        self.register_optimizer("random_search", RandomSearchOptimizer)

        # Oracles
        self.register_oracle("branin", BraninOracle)


# Global registry singleton
_registry: Optional[PluginRegistry] = None


def get_registry() -> PluginRegistry:
    """
    Get the global plugin registry.

    Initializes with built-in plugins on first call.
    """
    global _registry

    if _registry is None:
        _registry = PluginRegistry()
        _registry.register_builtins()
        _registry.discover_all()

    return _registry
