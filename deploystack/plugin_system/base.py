"""Base classes for plugins."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Awaitable, Optional, Union

from deploystack.plugin_system.types import PluginFeatures, PluginMeta

if TYPE_CHECKING:
    from deploystack.plugin_system.manager import PluginContext


class BasePlugin(ABC):
    """Common contract of backend and UI plugins.

    ``initialize`` and ``cleanup`` may be plain functions or coroutines; the
    lifecycle controller awaits whatever they return.
    """

    @property
    @abstractmethod
    def meta(self) -> PluginMeta:
        """Plugin descriptor."""
        pass

    @property
    def id(self) -> str:
        """Plugin identifier."""
        return self.meta.id

    @abstractmethod
    def initialize(self, context: Any) -> Union[Awaitable[None], None]:
        """Initialize plugin with the host capabilities.

        Args:
            context: Capability context built by the plugin manager
        """
        pass

    def cleanup(self) -> Union[Awaitable[None], None]:
        """Release plugin resources on shutdown."""
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id='{self.meta.id}', version='{self.meta.version}')>"


class Plugin(BasePlugin):
    """Base class for server plugins."""

    @property
    def features(self) -> PluginFeatures:
        """Optional capabilities (routes, tables, settings) of this plugin."""
        return PluginFeatures()

    @abstractmethod
    async def initialize(self, context: "PluginContext") -> None:
        """Initialize plugin (async).

        The database handle in ``context.db`` is ``None`` when the host
        booted without a configured database.

        Args:
            context: Backend capability context
        """
        pass

    async def reinitialize(self, context: "PluginContext") -> None:
        """Take over a database that became available after startup.

        Args:
            context: Backend capability context, ``context.db`` is set
        """
        return None

    def describe(self) -> dict[str, Any]:
        """Describe plugin for listings.

        Returns:
            Plugin info dictionary
        """
        features = self.features
        info: dict[str, Optional[Any]] = self.meta.model_dump()
        info["features"] = {
            "routes": features.routes is not None,
            "database": features.database is not None,
            "global_settings": features.global_settings is not None,
        }
        return info
