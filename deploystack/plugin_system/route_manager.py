"""Namespaced route registration for plugins."""

from typing import Any, Callable

from fastapi import FastAPI

from deploystack.core.logging import get_logger

logger = get_logger(__name__)

PLUGIN_API_PREFIX = "/api/plugin"


class PluginRouteManager:
    """Registers a plugin's routes under ``/api/plugin/<plugin_id>/``.

    Keeps plugins from shadowing core routes or each other's routes.
    """

    def __init__(self, app: FastAPI, plugin_id: str) -> None:
        """Initialize route manager.

        Args:
            app: FastAPI application
            plugin_id: Owning plugin identifier
        """
        self.app = app
        self.plugin_id = plugin_id
        self.registered: list[tuple[str, str]] = []

    @property
    def namespace(self) -> str:
        """Base path of this plugin's routes."""
        return f"{PLUGIN_API_PREFIX}/{self.plugin_id}"

    def namespaced(self, route: str) -> str:
        """Convert a plugin route to its namespaced path.

        Args:
            route: Plugin route, e.g. "/users" or "users"

        Returns:
            Namespaced path, e.g. "/api/plugin/my-plugin/users"
        """
        return f"{self.namespace}/{route.lstrip('/')}"

    def add_route(self, route: str, endpoint: Callable[..., Any], methods: list[str], **kwargs: Any) -> None:
        """Register endpoint for the given HTTP methods.

        Args:
            route: Plugin route path
            endpoint: Route handler
            methods: HTTP methods
            **kwargs: Passed to ``FastAPI.add_api_route``
        """
        path = self.namespaced(route)
        kwargs.setdefault("tags", [f"plugin:{self.plugin_id}"])
        self.app.add_api_route(path, endpoint, methods=methods, **kwargs)
        for method in methods:
            self.registered.append((method.upper(), path))
        logger.debug("plugin_route_registered", plugin=self.plugin_id, path=path, methods=methods)

    def _decorator(self, method: str, route: str, **kwargs: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def decorator(endpoint: Callable[..., Any]) -> Callable[..., Any]:
            self.add_route(route, endpoint, [method], **kwargs)
            return endpoint

        return decorator

    def get(self, route: str, **kwargs: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a GET route."""
        return self._decorator("GET", route, **kwargs)

    def post(self, route: str, **kwargs: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a POST route."""
        return self._decorator("POST", route, **kwargs)

    def put(self, route: str, **kwargs: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a PUT route."""
        return self._decorator("PUT", route, **kwargs)

    def delete(self, route: str, **kwargs: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a DELETE route."""
        return self._decorator("DELETE", route, **kwargs)

    def patch(self, route: str, **kwargs: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a PATCH route."""
        return self._decorator("PATCH", route, **kwargs)

    def head(self, route: str, **kwargs: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a HEAD route."""
        return self._decorator("HEAD", route, **kwargs)

    def options(self, route: str, **kwargs: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register an OPTIONS route."""
        return self._decorator("OPTIONS", route, **kwargs)

    def has_route(self, method: str, route: str) -> bool:
        """Check if this plugin already registered a route."""
        return (method.upper(), self.namespaced(route)) in self.registered
