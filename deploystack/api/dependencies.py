"""Dependencies for FastAPI routes."""

from fastapi import Request

from deploystack.api.bootstrap import AppServices
from deploystack.plugin_system.manager import PluginManager
from deploystack.ui.manager import UIPluginManager


def get_services(request: Request) -> AppServices:
    """Get the services owned by the running app."""
    return request.app.state.services


def get_plugin_manager(request: Request) -> PluginManager:
    """Get the server plugin manager."""
    return request.app.state.plugin_manager


def get_ui_plugin_manager(request: Request) -> UIPluginManager:
    """Get the UI plugin manager."""
    return request.app.state.ui_plugin_manager
