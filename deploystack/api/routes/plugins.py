"""Plugin listing routes."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from deploystack.api.dependencies import get_plugin_manager, get_ui_plugin_manager
from deploystack.plugin_system.errors import PluginNotFoundError
from deploystack.plugin_system.manager import PluginManager
from deploystack.ui.manager import UIPluginManager

router = APIRouter(prefix="/plugins", tags=["plugins"])


@router.get("", response_model=list[dict])
async def list_plugins(
    manager: PluginManager = Depends(get_plugin_manager),
) -> Any:
    """List all loaded server plugins."""
    return manager.list_plugins()


@router.get("/ui", response_model=dict)
async def list_ui_plugins(
    manager: UIPluginManager = Depends(get_ui_plugin_manager),
) -> Any:
    """List UI plugins and the current extension point contributions."""
    store = manager.extension_points
    return {
        "plugins": [
            {
                **plugin.meta.model_dump(),
                "enabled": manager.is_plugin_enabled(plugin.id),
                "initialized": manager.is_plugin_initialized(plugin.id),
            }
            for plugin in manager.get_all_plugins()
        ],
        "extension_points": {
            point: [
                {"id": c.id, "plugin_id": c.plugin_id, "order": c.order}
                for c in store.get(point)
            ]
            for point in store.points()
        },
    }


@router.get("/{plugin_id}", response_model=dict)
async def get_plugin(
    plugin_id: str,
    manager: PluginManager = Depends(get_plugin_manager),
) -> Any:
    """Get plugin details."""
    try:
        plugin = manager.require_plugin(plugin_id)
    except PluginNotFoundError:
        raise HTTPException(status_code=404, detail="Plugin not found")

    info = plugin.describe()
    info["enabled"] = manager.is_plugin_enabled(plugin_id)
    info["initialized"] = manager.is_plugin_initialized(plugin_id)
    return info
