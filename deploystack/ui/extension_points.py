"""Named UI slots that plugins contribute fragments to."""

import itertools
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union, overload

from deploystack.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExtensionContribution:
    """A fragment a plugin contributed to one extension point.

    ``component`` is a template name rendered with ``props``, or a callable
    taking ``props`` as keyword arguments and returning HTML.
    """

    id: str
    plugin_id: str
    component: Any
    props: dict[str, Any] = field(default_factory=dict)
    order: int = 0


class ExtensionPointView(Sequence):
    """Live read-only view of one extension point.

    Always reflects the store's current contributions for the point.
    """

    def __init__(self, store: "ExtensionPointStore", point: str) -> None:
        self._store = store
        self.point = point

    def _items(self) -> list[ExtensionContribution]:
        return self._store._points.get(self.point, [])

    @overload
    def __getitem__(self, index: int) -> ExtensionContribution: ...

    @overload
    def __getitem__(self, index: slice) -> list[ExtensionContribution]: ...

    def __getitem__(self, index: Union[int, slice]) -> Union[ExtensionContribution, list[ExtensionContribution]]:
        return self._items()[index]

    def __len__(self) -> int:
        return len(self._items())

    def __iter__(self) -> Iterator[ExtensionContribution]:
        return iter(list(self._items()))

    def __repr__(self) -> str:
        return f"<ExtensionPointView(point='{self.point}', size={len(self)})>"


class ExtensionPointStore:
    """Mapping from extension point name to ordered contributions."""

    def __init__(self) -> None:
        self._points: dict[str, list[ExtensionContribution]] = {}
        self._counter = itertools.count(1)

    def register(
        self,
        point: str,
        component: Any,
        plugin_id: str,
        *,
        props: Optional[dict[str, Any]] = None,
        order: int = 0,
    ) -> ExtensionContribution:
        """Contribute a component to an extension point.

        Contributions are kept sorted by ``order``; equal orders keep
        registration order.

        Returns:
            The stored contribution
        """
        contribution = ExtensionContribution(
            id=f"{plugin_id}-{next(self._counter)}",
            plugin_id=plugin_id,
            component=component,
            props=dict(props or {}),
            order=order,
        )
        contributions = self._points.setdefault(point, [])
        contributions.append(contribution)
        # list.sort is stable
        contributions.sort(key=lambda c: c.order)

        logger.debug("extension_registered", point=point, plugin=plugin_id, order=order)
        return contribution

    def get(self, point: str) -> ExtensionPointView:
        """Live view of a point's contributions (empty for unknown points)."""
        return ExtensionPointView(self, point)

    def remove_by_plugin(self, plugin_id: str) -> int:
        """Remove every contribution of a plugin from all points.

        Returns:
            Number of removed contributions
        """
        removed = 0
        for point, contributions in self._points.items():
            kept = [c for c in contributions if c.plugin_id != plugin_id]
            removed += len(contributions) - len(kept)
            self._points[point] = kept

        if removed:
            logger.info("plugin_extensions_removed", plugin=plugin_id, count=removed)
        return removed

    def points(self) -> list[str]:
        """Names of points that currently have contributions."""
        return [point for point, contributions in self._points.items() if contributions]

    def clear(self) -> None:
        """Remove all contributions."""
        self._points.clear()
