"""Plugin lifecycle controller shared by the server and UI plugin managers."""

import inspect
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Generic, Optional, Sequence, TypeVar

from deploystack.core.logging import get_logger, plugin_scope
from deploystack.plugin_system.base import BasePlugin
from deploystack.plugin_system.capabilities import CapabilityBridge
from deploystack.plugin_system.discovery import PluginDiscoverer
from deploystack.plugin_system.errors import (
    PluginInitializeError,
    PluginLoadError,
    PluginStateError,
)
from deploystack.plugin_system.registry import PluginRegistry
from deploystack.plugin_system.types import PluginConfiguration, PluginMeta, PluginOptions

logger = get_logger(__name__)

P = TypeVar("P", bound=BasePlugin)


class LifecycleState(str, Enum):
    """Controller states, in the only order they may be entered."""

    CREATED = "created"
    DISCOVERING = "discovering"
    REGISTERED = "registered"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


_STATE_ORDER = list(LifecycleState)


async def maybe_await(value: Any) -> Any:
    """Await value if it is awaitable, otherwise return it."""
    if inspect.isawaitable(value):
        return await value
    return value


class BasePluginManager(ABC, Generic[P]):
    """Drives discovery, registration, initialization and shutdown.

    Plugins are initialized and cleaned up one at a time in registration
    order. Initialization is fail-fast; cleanup is best-effort.
    """

    plugin_class: type[BasePlugin] = BasePlugin

    def __init__(self, capabilities: CapabilityBridge, config: Optional[PluginConfiguration] = None) -> None:
        """Initialize plugin manager.

        Args:
            capabilities: Bridge holding host-provided handles
            config: Plugin paths, factories and per-plugin options
        """
        config = config or PluginConfiguration()
        self.capabilities = capabilities
        self.registry: PluginRegistry[P] = PluginRegistry()
        self._plugin_paths: list[Path] = list(config.paths)
        self._plugin_factories: list[Any] = list(config.factories)
        self._plugin_options: dict[str, PluginOptions] = dict(config.plugins)
        self._initialized_ids: list[str] = []
        self._state = LifecycleState.CREATED

    @property
    def state(self) -> LifecycleState:
        """Current lifecycle state."""
        return self._state

    @property
    def initialized(self) -> bool:
        """Whether initialize_plugins completed."""
        return self._state == LifecycleState.INITIALIZED

    def _advance(self, target: LifecycleState) -> None:
        if _STATE_ORDER.index(target) < _STATE_ORDER.index(self._state):
            raise PluginStateError(
                f"Cannot move plugin lifecycle from '{self._state.value}' to '{target.value}'",
                details={"from": self._state.value, "to": target.value},
            )
        self._state = target

    # Configuration

    def add_plugin_path(self, plugin_path: Path) -> None:
        """Add a location to search for plugins."""
        plugin_path = Path(plugin_path)
        if plugin_path not in self._plugin_paths:
            self._plugin_paths.append(plugin_path)

    @property
    def plugin_paths(self) -> list[Path]:
        """Configured plugin locations."""
        return list(self._plugin_paths)

    def is_plugin_enabled(self, plugin_id: str) -> bool:
        """Check if a plugin is enabled (absent options mean enabled)."""
        options = self._plugin_options.get(plugin_id)
        return options is None or options.enabled

    def get_plugin_config(self, plugin_id: str) -> Optional[dict[str, Any]]:
        """Get a plugin's configuration mapping, if any options were given."""
        options = self._plugin_options.get(plugin_id)
        return options.config if options is not None else None

    # Discovery and registration

    async def discover_plugins(self) -> list[P]:
        """Discover plugins from configured paths and factories.

        Returns:
            Discovered plugin instances (not yet registered)
        """
        self._advance(LifecycleState.DISCOVERING)
        discoverer = PluginDiscoverer(
            self.plugin_class,
            paths=self._plugin_paths,
            factories=self._plugin_factories,
        )
        return discoverer.discover()  # type: ignore[return-value]

    def register_plugin(self, plugin: P) -> None:
        """Register a plugin directly.

        Raises:
            PluginDuplicateError: If the identifier is already registered
            PluginStateError: If plugins were already initialized
        """
        if _STATE_ORDER.index(self._state) > _STATE_ORDER.index(LifecycleState.REGISTERED):
            raise PluginStateError(
                f"Cannot register plugins in state '{self._state.value}'",
                details={"state": self._state.value},
            )
        self.registry.register(plugin)
        self._advance(LifecycleState.REGISTERED)
        logger.info(
            "plugin_registered",
            plugin=plugin.meta.id,
            version=plugin.meta.version,
        )

    async def load_plugins(self, plugins: Sequence[P]) -> None:
        """Validate and register a batch of plugins.

        The batch stops at the first failure.

        Raises:
            PluginLoadError: Wrapping the original cause
        """
        for plugin in plugins:
            try:
                self._validate_plugin(plugin)
                self.register_plugin(plugin)
            except PluginStateError:
                raise
            except Exception as e:
                plugin_id = self._describe_id(plugin)
                logger.error("plugin_load_failed", plugin=plugin_id, error=str(e))
                raise PluginLoadError(plugin_id, e) from e

        logger.info("plugins_loaded", count=len(self.registry))

    def _validate_plugin(self, plugin: Any) -> None:
        if not isinstance(plugin, self.plugin_class):
            raise TypeError(f"{plugin!r} is not a {self.plugin_class.__name__}")
        if not isinstance(plugin.meta, PluginMeta):
            raise TypeError(f"{type(plugin).__name__}.meta must be a PluginMeta")

    @staticmethod
    def _describe_id(plugin: Any) -> str:
        try:
            return str(plugin.meta.id)
        except Exception:
            return type(plugin).__name__

    # Queries

    def get_plugin(self, plugin_id: str) -> Optional[P]:
        """Get plugin by identifier, or None."""
        return self.registry.get(plugin_id)

    def require_plugin(self, plugin_id: str) -> P:
        """Get plugin by identifier.

        Raises:
            PluginNotFoundError: If no such plugin is registered
        """
        return self.registry.require(plugin_id)

    def get_all_plugins(self) -> list[P]:
        """All registered plugins in registration order."""
        return self.registry.get_all()

    def is_plugin_initialized(self, plugin_id: str) -> bool:
        """Whether the plugin's initialize hook completed."""
        return plugin_id in self._initialized_ids

    # Lifecycle

    async def initialize_plugins(self) -> None:
        """Initialize all enabled plugins in registration order.

        Calling it again after success does nothing.

        Raises:
            CapabilityError: If a required capability is not set
            PluginInitializeError: On the first failing plugin
            PluginStateError: After a failed attempt or after shutdown
        """
        if self._state == LifecycleState.INITIALIZED:
            return

        if _STATE_ORDER.index(self._state) > _STATE_ORDER.index(LifecycleState.REGISTERED):
            raise PluginStateError(
                f"Cannot initialize plugins in state '{self._state.value}'",
                details={"state": self._state.value},
            )

        self.capabilities.validate()
        self._advance(LifecycleState.INITIALIZING)

        for plugin in self.registry.get_all():
            plugin_id = plugin.meta.id
            if not self.is_plugin_enabled(plugin_id):
                logger.info("plugin_disabled_skipped", plugin=plugin_id)
                continue

            try:
                with plugin_scope(plugin_id, "initialize"):
                    await self._initialize_plugin(plugin)
            except Exception as e:
                logger.error("plugin_initialize_failed", plugin=plugin_id, error=str(e), exc_info=True)
                raise PluginInitializeError(plugin_id, e) from e

            self._initialized_ids.append(plugin_id)
            logger.info("plugin_initialized", plugin=plugin_id)

        self._advance(LifecycleState.INITIALIZED)
        logger.info("plugins_initialized", count=len(self._initialized_ids))

    async def _initialize_plugin(self, plugin: P) -> None:
        await maybe_await(plugin.initialize(self._build_context(plugin)))

    @abstractmethod
    def _build_context(self, plugin: P) -> Any:
        """Context object handed to the plugin's initialize hook."""

    async def shutdown_plugins(self) -> None:
        """Clean up every registered plugin.

        A failing cleanup is logged and the remaining plugins still run.
        """
        if self._state == LifecycleState.STOPPED:
            return

        self._advance(LifecycleState.SHUTTING_DOWN)
        logger.info("plugins_shutting_down", count=len(self.registry))

        for plugin in self.registry.get_all():
            plugin_id = plugin.meta.id
            try:
                with plugin_scope(plugin_id, "cleanup"):
                    await maybe_await(plugin.cleanup())
            except Exception as e:
                logger.error("plugin_cleanup_failed", plugin=plugin_id, error=str(e), exc_info=True)
            self._after_cleanup(plugin)

        self._advance(LifecycleState.STOPPED)
        logger.info("plugins_stopped")

    def _after_cleanup(self, plugin: P) -> None:
        """Hook run after each plugin's cleanup, whether it failed or not."""
        return None
