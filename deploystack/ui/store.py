"""Namespaced UI state shared between UI plugins and page templates."""

from typing import Any, Optional


class UIStore:
    """Holds one mutable state mapping per namespace."""

    def __init__(self) -> None:
        self._state: dict[str, dict[str, Any]] = {}

    def define(self, namespace: str, initial: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Create a namespace (keeping existing state) and return its state."""
        return self._state.setdefault(namespace, dict(initial or {}))

    def state(self, namespace: str) -> dict[str, Any]:
        """State of a namespace.

        Raises:
            KeyError: If the namespace was never defined
        """
        return self._state[namespace]

    def remove(self, namespace: str) -> None:
        """Drop a namespace and its state."""
        self._state.pop(namespace, None)

    def namespaces(self) -> list[str]:
        """Defined namespaces."""
        return list(self._state)

    def __contains__(self, namespace: object) -> bool:
        return namespace in self._state
