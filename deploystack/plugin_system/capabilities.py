"""Host-provided capabilities handed to plugins."""

from typing import Any, Optional

from deploystack.plugin_system.errors import CapabilityError


class CapabilityBridge:
    """Single holder of host handles (app, database, router, ...).

    Required capabilities must be set before plugins are initialized;
    optional ones may stay ``None``. Plugins read values through the bridge,
    so a value set later is seen by the next lookup.
    """

    def __init__(self, required: dict[str, str], optional: Optional[dict[str, str]] = None) -> None:
        """Initialize bridge.

        Args:
            required: Capability name -> human label
            optional: Capability name -> human label
        """
        self._required = dict(required)
        self._labels = {**(optional or {}), **self._required}
        self._values: dict[str, Any] = {name: None for name in self._labels}

    def set(self, name: str, value: Any) -> None:
        """Set capability value."""
        if name not in self._values:
            raise KeyError(f"Unknown capability: {name}")
        self._values[name] = value

    def get(self, name: str) -> Any:
        """Get current capability value (None when unset)."""
        if name not in self._values:
            raise KeyError(f"Unknown capability: {name}")
        return self._values[name]

    def missing(self) -> list[str]:
        """Required capabilities that are still unset."""
        return [name for name in self._required if self._values[name] is None]

    def validate(self) -> None:
        """Fail on the first missing required capability.

        Raises:
            CapabilityError: Naming the missing capability
        """
        for name in self.missing():
            raise CapabilityError(name, self._labels[name])

    def snapshot(self) -> dict[str, Any]:
        """Copy of all current values."""
        return dict(self._values)
