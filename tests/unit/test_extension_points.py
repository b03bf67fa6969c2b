"""Tests for the extension point store."""

from deploystack.ui.extension_points import ExtensionPointStore


def test_contributions_sorted_by_order() -> None:
    """Test contributions come back in ascending order."""
    store = ExtensionPointStore()
    for order in [5, 1, 3]:
        store.register("main-content", f"component-{order}", "p1", order=order)

    assert [c.order for c in store.get("main-content")] == [1, 3, 5]


def test_equal_orders_keep_registration_order() -> None:
    """Test ties are broken by registration order."""
    store = ExtensionPointStore()
    store.register("sidebar", "first", "p1")
    store.register("sidebar", "second", "p2")
    store.register("sidebar", "early", "p3", order=-1)

    assert [c.component for c in store.get("sidebar")] == ["early", "first", "second"]


def test_contribution_fields() -> None:
    """Test contributions record owner, props and a unique id."""
    store = ExtensionPointStore()

    first = store.register("main-content", "plugins/a.html", "p1", props={"color": "red"})
    second = store.register("main-content", "plugins/b.html", "p1")

    assert first.plugin_id == "p1"
    assert first.props == {"color": "red"}
    assert first.id != second.id
    assert first.id.startswith("p1-")


def test_view_is_live() -> None:
    """Test a view obtained earlier reflects later changes."""
    store = ExtensionPointStore()
    view = store.get("main-content")
    assert len(view) == 0

    store.register("main-content", "component", "p1")
    assert len(view) == 1
    assert view[0].component == "component"

    store.remove_by_plugin("p1")
    assert list(view) == []


def test_unknown_point_is_empty() -> None:
    """Test an unknown point yields an empty view."""
    assert list(ExtensionPointStore().get("nowhere")) == []


def test_remove_by_plugin() -> None:
    """Test a plugin's contributions are removed from every point."""
    store = ExtensionPointStore()
    store.register("main-content", "a", "p1")
    store.register("sidebar", "b", "p1")
    store.register("sidebar", "c", "p2")

    removed = store.remove_by_plugin("p1")

    assert removed == 2
    assert list(store.get("main-content")) == []
    assert [c.plugin_id for c in store.get("sidebar")] == ["p2"]
    assert store.points() == ["sidebar"]
    assert store.remove_by_plugin("p1") == 0


def test_clear() -> None:
    """Test clear removes all contributions."""
    store = ExtensionPointStore()
    store.register("main-content", "a", "p1")

    store.clear()

    assert store.points() == []


def test_remove_by_plugin_keeps_relative_order() -> None:
    """Test remaining contributions keep their relative order."""
    store = ExtensionPointStore()
    for component, plugin_id, order in [("a", "p2", 2), ("b", "p1", 1), ("c", "p2", 1), ("d", "p1", 0), ("e", "p3", 2)]:
        store.register("main-content", component, plugin_id, order=order)

    store.remove_by_plugin("p1")

    assert [c.component for c in store.get("main-content")] == ["c", "a", "e"]
