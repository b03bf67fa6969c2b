"""UI plugin manager and the capabilities UI plugins receive."""

from abc import abstractmethod
from typing import Any, Awaitable, Optional, Union

from fastapi import APIRouter, FastAPI

from deploystack.core.logging import get_logger
from deploystack.plugin_system.base import BasePlugin
from deploystack.plugin_system.capabilities import CapabilityBridge
from deploystack.plugin_system.lifecycle import BasePluginManager
from deploystack.plugin_system.types import PluginConfiguration
from deploystack.ui.extension_points import ExtensionContribution, ExtensionPointStore
from deploystack.ui.store import UIStore

logger = get_logger(__name__)


class UIPluginContext:
    """Capabilities handed to one UI plugin."""

    def __init__(
        self,
        plugin_id: str,
        capabilities: CapabilityBridge,
        extension_points: ExtensionPointStore,
        config: Optional[dict[str, Any]] = None,
    ) -> None:
        self.plugin_id = plugin_id
        self.extension_points = extension_points
        self.config: dict[str, Any] = dict(config or {})
        self._capabilities = capabilities

    @property
    def app(self) -> FastAPI:
        """FastAPI application."""
        return self._capabilities.get("app")

    @property
    def router(self) -> APIRouter:
        """Web UI router (pages under ``/ui``)."""
        return self._capabilities.get("router")

    @property
    def store(self) -> UIStore:
        """Shared UI state store."""
        return self._capabilities.get("store")

    def register_extension_point(
        self,
        point: str,
        component: Any,
        *,
        props: Optional[dict[str, Any]] = None,
        order: int = 0,
    ) -> ExtensionContribution:
        """Contribute a component on behalf of this plugin."""
        return self.extension_points.register(point, component, self.plugin_id, props=props, order=order)


class UIPlugin(BasePlugin):
    """Base class for UI plugins."""

    @abstractmethod
    def initialize(self, context: UIPluginContext) -> Union[Awaitable[None], None]:
        """Initialize plugin, typically by registering extension points.

        Args:
            context: UI capability context
        """
        pass


class UIPluginManager(BasePluginManager[UIPlugin]):
    """Loads and manages UI plugins.

    Each plugin's extension point contributions are removed right after
    its cleanup, whether or not the plugin was enabled.
    """

    plugin_class = UIPlugin

    def __init__(
        self,
        config: Optional[PluginConfiguration] = None,
        extension_points: Optional[ExtensionPointStore] = None,
    ) -> None:
        """Initialize UI plugin manager.

        Args:
            config: Plugin factories and per-plugin options
            extension_points: Store to contribute into (a new one by default)
        """
        super().__init__(
            CapabilityBridge(
                required={"app": "FastAPI app", "router": "Router", "store": "Store"},
            ),
            config,
        )
        self.extension_points = extension_points or ExtensionPointStore()

    def set_app(self, app: FastAPI) -> None:
        """Set the FastAPI app."""
        self.capabilities.set("app", app)

    def set_router(self, router: APIRouter) -> None:
        """Set the web UI router."""
        self.capabilities.set("router", router)

    def set_store(self, store: UIStore) -> None:
        """Set the UI state store."""
        self.capabilities.set("store", store)

    def _build_context(self, plugin: UIPlugin) -> UIPluginContext:
        return UIPluginContext(
            plugin.id,
            self.capabilities,
            self.extension_points,
            self.get_plugin_config(plugin.id),
        )

    async def cleanup_plugins(self) -> None:
        """Clean up all plugins and purge their contributions."""
        await self.shutdown_plugins()

    def _after_cleanup(self, plugin: UIPlugin) -> None:
        self.extension_points.remove_by_plugin(plugin.id)
        store: Optional[UIStore] = self.capabilities.get("store")
        if store is not None:
            store.remove(plugin.id)
