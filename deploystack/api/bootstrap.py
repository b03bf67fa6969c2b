"""Startup and shutdown sequence of the application services."""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from fastapi import FastAPI

from deploystack.core.config import Settings
from deploystack.core.logging import get_logger
from deploystack.global_settings.encryption import SettingsCipher
from deploystack.global_settings.registry import GlobalSettingsRegistry
from deploystack.global_settings.service import GlobalSettingsService
from deploystack.plugin_system.manager import PluginManager
from deploystack.plugin_system.types import PluginConfiguration, PluginOptions
from deploystack.storage.database.base import Database
from deploystack.storage.database.config import initialize_database
from deploystack.storage.database.plugin_tables import PluginTableRegistry, setup_plugin_database
from deploystack.ui.manager import UIPlugin, UIPluginManager
from deploystack.ui.plugins import load_ui_plugins
from deploystack.ui.routes import create_ui_router
from deploystack.ui.store import UIStore

logger = get_logger(__name__)


@dataclass
class AppServices:
    """Process-wide services created at startup and owned by the app."""

    settings: Settings
    plugin_manager: PluginManager
    ui_plugin_manager: UIPluginManager
    settings_registry: GlobalSettingsRegistry = field(default_factory=GlobalSettingsRegistry)
    settings_service: GlobalSettingsService = field(default_factory=GlobalSettingsService)
    plugin_tables: PluginTableRegistry = field(default_factory=PluginTableRegistry)
    database: Optional[Database] = None


def _plugin_options(options: dict[str, dict]) -> dict[str, PluginOptions]:
    return {plugin_id: PluginOptions.model_validate(value) for plugin_id, value in options.items()}


def build_services(settings: Settings) -> AppServices:
    """Create the plugin managers and settings services from configuration."""
    plugin_manager = PluginManager(
        PluginConfiguration(
            paths=settings.plugins_path,
            factories=settings.plugin_factories,
            plugins=_plugin_options(settings.plugin_options),
        )
    )
    ui_plugin_manager = UIPluginManager(
        PluginConfiguration(plugins=_plugin_options(settings.ui_plugin_options)),
    )
    if settings.encryption_secret == Settings.model_fields["encryption_secret"].default:
        logger.warning("encryption_secret_not_configured", hint="set DEPLOYSTACK_ENCRYPTION_SECRET")

    return AppServices(
        settings=settings,
        plugin_manager=plugin_manager,
        ui_plugin_manager=ui_plugin_manager,
        settings_service=GlobalSettingsService(cipher=SettingsCipher(settings.encryption_secret)),
    )


async def bring_database_online(app: FastAPI, services: AppServices, database: Database) -> None:
    """Wire a freshly initialized database into the app, settings and plugins."""
    services.database = database
    app.state.database = database
    services.settings_service.bind(database)
    services.plugin_manager.set_database(database)

    await setup_plugin_database(
        database,
        services.plugin_tables,
        services.plugin_manager.get_database_extensions(),
    )
    await services.settings_service.initialize_settings(services.settings_registry)
    logger.info("database_online", dialect=database.dialect)


async def start_services(
    app: FastAPI,
    services: AppServices,
    ui_plugins: Optional[Sequence[UIPlugin]] = None,
) -> None:
    """Run the startup sequence.

    Plugin load and initialization errors propagate and abort startup.
    """
    manager = services.plugin_manager
    manager.set_app(app)
    manager.set_settings(services.settings_service)

    discovered = await manager.discover_plugins()
    await manager.load_plugins(discovered)

    services.settings_registry.register_plugin_settings(manager.get_settings_extensions())
    services.plugin_tables.register_plugin_tables(manager.get_database_extensions())

    database = await initialize_database(services.settings, services.plugin_tables)
    if database is not None:
        await bring_database_online(app, services, database)
    else:
        manager.set_database(None)
        logger.warning("running_without_database", hint="use POST /api/db/setup")

    await manager.initialize_plugins()

    ui_manager = services.ui_plugin_manager
    router = create_ui_router()
    ui_manager.set_app(app)
    ui_manager.set_router(router)
    ui_manager.set_store(UIStore())
    await ui_manager.load_plugins(load_ui_plugins() if ui_plugins is None else list(ui_plugins))
    await ui_manager.initialize_plugins()
    app.include_router(router)

    logger.info(
        "services_started",
        plugins=len(manager.get_all_plugins()),
        ui_plugins=len(ui_manager.get_all_plugins()),
        database=database is not None,
    )


async def stop_services(services: AppServices) -> None:
    """Run the shutdown sequence; always completes."""
    await services.ui_plugin_manager.cleanup_plugins()
    await services.plugin_manager.shutdown_plugins()

    if services.database is not None:
        await services.database.dispose()
        logger.info("database_closed")
