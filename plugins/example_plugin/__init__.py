"""Example plugin: a table, a settings group and namespaced routes.

This plugin demonstrates every optional feature a server plugin can declare.
"""

from sqlalchemy import func, insert, select

from deploystack.core.logging import get_logger
from deploystack.global_settings.types import GlobalSettingDefinition, GlobalSettingGroup
from deploystack.plugin_system import (
    DatabaseExtension,
    GlobalSettingsExtension,
    Plugin,
    PluginContext,
    PluginFeatures,
    PluginMeta,
)
from deploystack.storage.database.base import Database

from .routes import register_routes
from .schema import example_entities_columns

logger = get_logger(__name__)


class ExamplePlugin(Plugin):
    """Example plugin for DeployStack."""

    @property
    def meta(self) -> PluginMeta:
        """Plugin descriptor."""
        return PluginMeta(
            id="example-plugin",
            name="Example Plugin",
            version="1.0.0",
            description="An example plugin for DeployStack",
            author="DeployStack Team",
        )

    @property
    def features(self) -> PluginFeatures:
        """Routes, the example_entities table and a settings group."""
        return PluginFeatures(
            routes=register_routes,
            database=DatabaseExtension(
                table_definitions={"example_entities": example_entities_columns},
                on_database_init=self.seed_database,
            ),
            global_settings=GlobalSettingsExtension(
                groups=[
                    GlobalSettingGroup(
                        id="example_plugin_settings",
                        name="Example Plugin Settings",
                        description="Configuration for the Example Plugin.",
                        icon="puzzle",
                        sort_order=100,
                    )
                ],
                settings=[
                    GlobalSettingDefinition(
                        key="examplePlugin.config.featureEnabled",
                        default_value="false",
                        description="Enable or disable a specific feature in the example plugin.",
                        group_id="example_plugin_settings",
                    ),
                    GlobalSettingDefinition(
                        key="examplePlugin.secret.apiKey",
                        description="API Key for an external service used by the example plugin.",
                        encrypted=True,
                        group_id="example_plugin_settings",
                    ),
                    GlobalSettingDefinition(
                        key="examplePlugin.general.logLevel",
                        default_value="info",
                        description="Logging level for the example plugin.",
                    ),
                ],
            ),
        )

    async def seed_database(self, db: Database) -> None:
        """Insert a first entity into an empty table."""
        table = db.get_table(self.id, "example_entities")
        async with db.session() as session:
            count = (await session.execute(select(func.count()).select_from(table))).scalar_one()
            if count == 0:
                await session.execute(
                    insert(table).values(
                        id="example1",
                        name="Example Entity",
                        description="This is an example entity created by the plugin",
                    )
                )
                logger.info("example_plugin_seeded")

    async def initialize(self, context: PluginContext) -> None:
        """Initialize plugin."""
        if context.db is None:
            logger.warning("example_plugin_no_database")
        logger.info("example_plugin_initialized")

    async def reinitialize(self, context: PluginContext) -> None:
        """Register the database-backed routes once a database exists."""
        await register_routes(context.routes, context.db)

    async def cleanup(self) -> None:
        """Cleanup plugin resources."""
        logger.info("example_plugin_shutdown")
