"""Example UI plugin: hello world banner."""

from deploystack.core.logging import get_logger
from deploystack.plugin_system.types import PluginMeta
from deploystack.ui.manager import UIPlugin, UIPluginContext

logger = get_logger(__name__)


class HelloWorldPlugin(UIPlugin):
    """Shows a greeting in the main content area."""

    @property
    def meta(self) -> PluginMeta:
        """Plugin descriptor."""
        return PluginMeta(
            id="hello-world",
            name="Hello World Plugin",
            version="1.0.0",
            description="A simple hello world plugin with red text",
            author="DeployStack Team",
        )

    def initialize(self, context: UIPluginContext) -> None:
        """Register the greeting at the ``main-content`` extension point."""
        state = context.store.define(self.id, {"message": context.config.get("message", "Hello World!")})
        context.register_extension_point(
            "main-content",
            "plugins/hello_world.html",
            props={"message": state["message"], "color": context.config.get("color", "red")},
        )
        logger.info("hello_world_initialized")

    def cleanup(self) -> None:
        """Contributions and store state are purged by the manager after cleanup."""
        logger.info("hello_world_cleanup")
