"""Tables contributed by plugins."""

from typing import TYPE_CHECKING, Iterable

from sqlalchemy import MetaData, Table

from deploystack.core.logging import get_logger, plugin_scope
from deploystack.plugin_system.errors import PluginInitializeError
from deploystack.plugin_system.lifecycle import maybe_await

if TYPE_CHECKING:
    from deploystack.plugin_system.base import Plugin
    from deploystack.storage.database.base import Database

logger = get_logger(__name__)


class PluginTableRegistry:
    """Materializes plugin table definitions as ``<plugin_id>_<name>`` tables.

    Plugin tables live in their own MetaData so they never mix with the
    core declarative models.
    """

    def __init__(self) -> None:
        self.metadata = MetaData()
        self._tables: dict[str, Table] = {}

    def register_plugin_tables(self, plugins: Iterable["Plugin"]) -> list[str]:
        """Register table definitions of all plugins with a database extension.

        Returns:
            Names of newly registered tables
        """
        added = []
        for plugin in plugins:
            extension = plugin.features.database
            if extension is None:
                continue

            for name, columns in extension.table_definitions.items():
                full_name = f"{plugin.id}_{name}"
                if full_name in self._tables:
                    continue
                self._tables[full_name] = Table(full_name, self.metadata, *columns())
                added.append(full_name)

        if added:
            logger.info("plugin_tables_registered", tables=added)
        return added

    def get_table(self, plugin_id: str, name: str) -> Table:
        """Get a registered plugin table.

        Raises:
            KeyError: If not registered
        """
        return self._tables[f"{plugin_id}_{name}"]

    @property
    def table_names(self) -> list[str]:
        """Names of all registered plugin tables."""
        return list(self._tables)

    async def create_plugin_tables(self, db: "Database") -> None:
        """Create registered plugin tables that do not exist yet."""
        async with db.engine.begin() as conn:
            await conn.run_sync(self.metadata.create_all)
        logger.info("plugin_tables_created", count=len(self._tables))

    async def initialize_plugin_databases(self, db: "Database", plugins: Iterable["Plugin"]) -> None:
        """Run each plugin's ``on_database_init`` hook.

        Raises:
            PluginInitializeError: If a hook fails
        """
        for plugin in plugins:
            extension = plugin.features.database
            if extension is None or extension.on_database_init is None:
                continue

            logger.info("plugin_database_initializing", plugin=plugin.id)
            try:
                with plugin_scope(plugin.id, "database_init"):
                    await maybe_await(extension.on_database_init(db))
            except Exception as e:
                logger.error("plugin_database_init_failed", plugin=plugin.id, error=str(e), exc_info=True)
                raise PluginInitializeError(plugin.id, e) from e


async def setup_plugin_database(
    db: "Database",
    registry: PluginTableRegistry,
    plugins: Iterable["Plugin"],
) -> None:
    """Register, create and initialize plugin tables on a database."""
    plugins = list(plugins)
    registry.register_plugin_tables(plugins)
    db.plugin_tables = registry
    await registry.create_plugin_tables(db)
    await registry.initialize_plugin_databases(db, plugins)
