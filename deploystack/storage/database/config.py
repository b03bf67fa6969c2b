"""Persisted database selection and database bring-up."""

import json
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

from deploystack.core.config import Settings
from deploystack.core.exceptions import ConfigurationException
from deploystack.core.logging import get_logger
from deploystack.storage.database.base import Database
from deploystack.storage.database.plugin_tables import PluginTableRegistry

logger = get_logger(__name__)


class DatabaseType(str, Enum):
    """Supported database types for the setup API."""

    SQLITE = "sqlite"


class DbConfig(BaseModel):
    """Database selection stored in ``db.selection.json``."""

    type: DatabaseType
    db_path: str


def get_db_config(settings: Settings) -> Optional[DbConfig]:
    """Read the persisted database selection.

    Returns:
        Selection, or None if the database was never set up
    """
    path = settings.db_selection_file
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as e:
        logger.error("db_config_read_failed", path=str(path), error=str(e))
        return None

    try:
        return DbConfig.model_validate(data)
    except ValidationError as e:
        logger.error("db_config_invalid", path=str(path), error=str(e))
        return None


def save_db_config(settings: Settings, config: DbConfig) -> None:
    """Persist the database selection."""
    path = settings.db_selection_file
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
    logger.info("db_config_saved", path=str(path))


def delete_db_config(settings: Settings) -> None:
    """Remove the persisted database selection, if any."""
    path = settings.db_selection_file
    try:
        path.unlink()
    except FileNotFoundError:
        logger.info("db_config_not_found", path=str(path))
        return
    logger.info("db_config_deleted", path=str(path))


def resolve_database_url(settings: Settings) -> Optional[str]:
    """Database URL from ``DATABASE_URL`` or the persisted selection."""
    if settings.database_url:
        return settings.database_url

    config = get_db_config(settings)
    if config is None:
        return None

    if config.type == DatabaseType.SQLITE:
        db_path = Path(config.db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite+aiosqlite:///{db_path}"

    raise ConfigurationException(f"Unsupported database type: {config.type}")


async def initialize_database(
    settings: Settings,
    plugin_tables: Optional[PluginTableRegistry] = None,
) -> Optional[Database]:
    """Bring up the configured database and create its tables.

    Returns:
        Database handle, or None if no database is configured or it could
        not be initialized (the app then runs in setup mode)
    """
    url = resolve_database_url(settings)
    if url is None:
        logger.warning("database_not_configured")
        return None

    database = Database(url, echo=settings.debug, plugin_tables=plugin_tables)
    try:
        await database.create_all()
    except Exception as e:
        logger.error("database_initialize_failed", dialect=database.dialect, error=str(e), exc_info=True)
        await database.dispose()
        return None

    logger.info("database_initialized", dialect=database.dialect)
    return database
