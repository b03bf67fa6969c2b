"""Plugin system: discovery, registration and lifecycle of server plugins."""

from deploystack.plugin_system.base import BasePlugin, Plugin
from deploystack.plugin_system.capabilities import CapabilityBridge
from deploystack.plugin_system.errors import (
    CapabilityError,
    PluginDuplicateError,
    PluginError,
    PluginInitializeError,
    PluginLoadError,
    PluginNotFoundError,
    PluginStateError,
)
from deploystack.plugin_system.lifecycle import BasePluginManager, LifecycleState
from deploystack.plugin_system.manager import PluginContext, PluginManager
from deploystack.plugin_system.registry import PluginRegistry
from deploystack.plugin_system.route_manager import PluginRouteManager
from deploystack.plugin_system.types import (
    DatabaseExtension,
    GlobalSettingsExtension,
    PluginConfiguration,
    PluginFeatures,
    PluginMeta,
    PluginOptions,
)

__all__ = [
    "BasePlugin",
    "BasePluginManager",
    "CapabilityBridge",
    "CapabilityError",
    "DatabaseExtension",
    "GlobalSettingsExtension",
    "LifecycleState",
    "Plugin",
    "PluginConfiguration",
    "PluginContext",
    "PluginDuplicateError",
    "PluginError",
    "PluginFeatures",
    "PluginInitializeError",
    "PluginLoadError",
    "PluginManager",
    "PluginMeta",
    "PluginNotFoundError",
    "PluginOptions",
    "PluginRegistry",
    "PluginRouteManager",
    "PluginStateError",
]
