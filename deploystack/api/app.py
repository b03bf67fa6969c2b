"""FastAPI application."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from deploystack import __version__
from deploystack.api.bootstrap import build_services, start_services, stop_services
from deploystack.api.routes import db, plugins
from deploystack.core.config import Settings, get_settings
from deploystack.core.logging import get_logger
from deploystack.ui.manager import UIPlugin

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    ui_plugins: Optional[Sequence[UIPlugin]] = None,
) -> FastAPI:
    """Create the application.

    Args:
        settings: Settings to use (environment settings by default)
        ui_plugins: UI plugins to load instead of the built-in ones

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    services = build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """Application lifespan manager."""
        logger.info("application_starting", version=__version__)
        try:
            await start_services(app, services, ui_plugins)
        except Exception:
            # Plugins that did start still get their cleanup
            await stop_services(services)
            raise
        yield
        logger.info("application_shutting_down")
        await stop_services(services)

    app = FastAPI(
        title="DeployStack API",
        description="DeployStack backend with plugin support",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.state.services = services
    app.state.database = None
    app.state.plugin_manager = services.plugin_manager
    app.state.ui_plugin_manager = services.ui_plugin_manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(plugins.router, prefix="/api")
    app.include_router(db.router, prefix="/api")

    @app.get("/")
    async def root() -> dict:
        """Root endpoint."""
        return {
            "name": "DeployStack API",
            "version": __version__,
            "status": "running",
            "docs": "/api/docs",
            "web_ui": "/ui/",
        }

    @app.get("/health")
    async def health() -> dict:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "database": services.database is not None,
        }

    return app
