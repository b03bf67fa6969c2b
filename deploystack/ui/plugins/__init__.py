"""Built-in UI plugins."""

from deploystack.ui.manager import UIPlugin
from deploystack.ui.plugins.hello_world import HelloWorldPlugin


def load_ui_plugins() -> list[UIPlugin]:
    """UI plugins shipped with the application, in initialization order."""
    return [
        HelloWorldPlugin(),
    ]
