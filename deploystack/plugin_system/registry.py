"""Identifier-keyed storage of plugin instances."""

from typing import Generic, Optional, TypeVar

from deploystack.plugin_system.base import BasePlugin
from deploystack.plugin_system.errors import PluginDuplicateError, PluginNotFoundError

P = TypeVar("P", bound=BasePlugin)


class PluginRegistry(Generic[P]):
    """Holds registered plugins in registration order."""

    def __init__(self) -> None:
        self._plugins: dict[str, P] = {}

    def register(self, plugin: P) -> None:
        """Register plugin.

        Args:
            plugin: Plugin instance

        Raises:
            PluginDuplicateError: If the identifier is already registered
        """
        plugin_id = plugin.meta.id
        if plugin_id in self._plugins:
            raise PluginDuplicateError(plugin_id)
        self._plugins[plugin_id] = plugin

    def get(self, plugin_id: str) -> Optional[P]:
        """Get plugin by identifier, or None."""
        return self._plugins.get(plugin_id)

    def require(self, plugin_id: str) -> P:
        """Get plugin by identifier.

        Raises:
            PluginNotFoundError: If no such plugin is registered
        """
        plugin = self._plugins.get(plugin_id)
        if plugin is None:
            raise PluginNotFoundError(plugin_id)
        return plugin

    def unregister(self, plugin_id: str) -> P:
        """Remove plugin and return it.

        Raises:
            PluginNotFoundError: If no such plugin is registered
        """
        if plugin_id not in self._plugins:
            raise PluginNotFoundError(plugin_id)
        return self._plugins.pop(plugin_id)

    def get_all(self) -> list[P]:
        """Snapshot of all plugins in registration order."""
        return list(self._plugins.values())

    def __contains__(self, plugin_id: object) -> bool:
        return plugin_id in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)
