"""Plugin system error taxonomy."""

from typing import Optional

from deploystack.core.exceptions import DeployStackException


class PluginError(DeployStackException):
    """Base exception for plugin-related errors."""

    pass


class PluginLoadError(PluginError):
    """A plugin failed to be constructed or registered during a load batch."""

    def __init__(self, plugin_id: str, cause: BaseException) -> None:
        """Initialize load error.

        Args:
            plugin_id: Identifier of the failing plugin
            cause: Underlying error
        """
        super().__init__(
            f"Failed to load plugin '{plugin_id}': {cause}",
            details={"plugin_id": plugin_id, "cause": repr(cause)},
        )
        self.plugin_id = plugin_id
        self.cause = cause


class PluginInitializeError(PluginError):
    """A plugin's initialize (or reinitialize) hook raised."""

    def __init__(self, plugin_id: str, cause: BaseException) -> None:
        """Initialize initialization error.

        Args:
            plugin_id: Identifier of the failing plugin
            cause: Underlying error
        """
        super().__init__(
            f"Failed to initialize plugin '{plugin_id}': {cause}",
            details={"plugin_id": plugin_id, "cause": repr(cause)},
        )
        self.plugin_id = plugin_id
        self.cause = cause


class PluginDuplicateError(PluginError):
    """A plugin with the same identifier is already registered."""

    def __init__(self, plugin_id: str) -> None:
        """Initialize with the duplicated identifier."""
        super().__init__(
            f"Plugin with ID '{plugin_id}' is already loaded",
            details={"plugin_id": plugin_id},
        )
        self.plugin_id = plugin_id


class PluginNotFoundError(PluginError):
    """No plugin is registered under the requested identifier."""

    def __init__(self, plugin_id: str) -> None:
        """Initialize with the missing identifier."""
        super().__init__(
            f"Plugin with ID '{plugin_id}' not found",
            details={"plugin_id": plugin_id},
        )
        self.plugin_id = plugin_id


class PluginStateError(PluginError):
    """A lifecycle operation was requested in a state that does not allow it."""

    pass


class CapabilityError(PluginError):
    """A required host capability was not provided before initialization."""

    def __init__(self, capability: str, host: Optional[str] = None) -> None:
        """Initialize with the missing capability name.

        Args:
            capability: Name of the missing capability
            host: Host label used in the message (e.g. "FastAPI app")
        """
        label = host or capability
        super().__init__(
            f"Cannot initialize plugins: {label} not set",
            details={"capability": capability},
        )
        self.capability = capability
