"""Server plugin manager."""

from typing import TYPE_CHECKING, Any, Optional

from fastapi import FastAPI

from deploystack.core.logging import get_logger, plugin_scope
from deploystack.plugin_system.base import Plugin
from deploystack.plugin_system.capabilities import CapabilityBridge
from deploystack.plugin_system.errors import (
    CapabilityError,
    PluginInitializeError,
    PluginStateError,
)
from deploystack.plugin_system.lifecycle import BasePluginManager, LifecycleState, maybe_await
from deploystack.plugin_system.route_manager import PluginRouteManager
from deploystack.plugin_system.types import PluginConfiguration

if TYPE_CHECKING:
    from deploystack.global_settings.service import GlobalSettingsService
    from deploystack.storage.database.base import Database

logger = get_logger(__name__)


class PluginContext:
    """Capabilities handed to one server plugin.

    ``app``, ``db`` and ``settings`` are looked up on every access, so a
    database set after startup is visible here.
    """

    def __init__(
        self,
        plugin_id: str,
        capabilities: CapabilityBridge,
        routes: PluginRouteManager,
        config: Optional[dict[str, Any]] = None,
    ) -> None:
        self.plugin_id = plugin_id
        self.routes = routes
        self.config: dict[str, Any] = dict(config or {})
        self._capabilities = capabilities

    @property
    def app(self) -> FastAPI:
        """FastAPI application."""
        return self._capabilities.get("app")

    @property
    def db(self) -> Optional["Database"]:
        """Database handle, None until a database is configured."""
        return self._capabilities.get("database")

    @property
    def settings(self) -> "GlobalSettingsService":
        """Global settings service."""
        return self._capabilities.get("settings")


class PluginManager(BasePluginManager[Plugin]):
    """Loads and manages server plugins."""

    plugin_class = Plugin

    def __init__(self, config: Optional[PluginConfiguration] = None) -> None:
        """Initialize plugin manager.

        Args:
            config: Plugin paths, factories and per-plugin options
        """
        super().__init__(
            CapabilityBridge(
                required={"app": "FastAPI app", "settings": "settings service"},
                optional={"database": "database"},
            ),
            config,
        )
        self._contexts: dict[str, PluginContext] = {}

    def set_app(self, app: FastAPI) -> None:
        """Set the FastAPI app plugins are initialized with."""
        self.capabilities.set("app", app)

    def set_database(self, db: Optional["Database"]) -> None:
        """Set (or clear) the database handle plugins see."""
        self.capabilities.set("database", db)

    def set_settings(self, settings: "GlobalSettingsService") -> None:
        """Set the global settings service plugins see."""
        self.capabilities.set("settings", settings)

    def get_database_extensions(self) -> list[Plugin]:
        """Enabled plugins that contribute database tables."""
        return [
            p for p in self.get_all_plugins() if self.is_plugin_enabled(p.id) and p.features.database is not None
        ]

    def get_settings_extensions(self) -> list[Plugin]:
        """Enabled plugins that contribute global settings."""
        return [
            p
            for p in self.get_all_plugins()
            if self.is_plugin_enabled(p.id) and p.features.global_settings is not None
        ]

    def list_plugins(self) -> list[dict[str, Any]]:
        """Describe all registered plugins.

        Returns:
            List of plugin info dictionaries
        """
        listing = []
        for plugin in self.get_all_plugins():
            info = plugin.describe()
            info["enabled"] = self.is_plugin_enabled(plugin.id)
            info["initialized"] = self.is_plugin_initialized(plugin.id)
            listing.append(info)
        return listing

    def _build_context(self, plugin: Plugin) -> PluginContext:
        context = self._contexts.get(plugin.id)
        if context is None:
            context = PluginContext(
                plugin.id,
                self.capabilities,
                PluginRouteManager(self.capabilities.get("app"), plugin.id),
                self.get_plugin_config(plugin.id),
            )
            self._contexts[plugin.id] = context
        return context

    async def _initialize_plugin(self, plugin: Plugin) -> None:
        context = self._build_context(plugin)
        await maybe_await(plugin.initialize(context))

        routes_hook = plugin.features.routes
        if routes_hook is not None:
            await maybe_await(routes_hook(context.routes, context.db))

    async def reinitialize_plugins_with_database(self) -> None:
        """Hand a database that became available after startup to plugins.

        Calls each initialized plugin's ``reinitialize`` hook in
        registration order; ``initialize`` is not replayed.

        Raises:
            CapabilityError: If no database is set
            PluginStateError: If plugins were not initialized
            PluginInitializeError: On the first failing plugin
        """
        if self.capabilities.get("database") is None:
            raise CapabilityError("database", "database")

        if self.state != LifecycleState.INITIALIZED:
            raise PluginStateError(
                f"Cannot reinitialize plugins in state '{self.state.value}'",
                details={"state": self.state.value},
            )

        for plugin in self.get_all_plugins():
            if not self.is_plugin_initialized(plugin.id):
                continue
            try:
                with plugin_scope(plugin.id, "reinitialize"):
                    await maybe_await(plugin.reinitialize(self._build_context(plugin)))
            except Exception as e:
                logger.error("plugin_reinitialize_failed", plugin=plugin.id, error=str(e), exc_info=True)
                raise PluginInitializeError(plugin.id, e) from e
            logger.info("plugin_reinitialized", plugin=plugin.id)
