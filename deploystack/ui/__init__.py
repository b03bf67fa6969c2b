"""UI plugin system: extension points rendered into the web UI."""

from deploystack.ui.extension_points import (
    ExtensionContribution,
    ExtensionPointStore,
    ExtensionPointView,
)
from deploystack.ui.manager import UIPlugin, UIPluginContext, UIPluginManager
from deploystack.ui.store import UIStore

__all__ = [
    "ExtensionContribution",
    "ExtensionPointStore",
    "ExtensionPointView",
    "UIPlugin",
    "UIPluginContext",
    "UIPluginManager",
    "UIStore",
]
