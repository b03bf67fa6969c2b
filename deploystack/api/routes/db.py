"""Database setup routes."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from deploystack.api.bootstrap import AppServices, bring_database_online
from deploystack.api.dependencies import get_services
from deploystack.core.logging import get_logger
from deploystack.plugin_system.errors import PluginError
from deploystack.storage.database.config import (
    DatabaseType,
    DbConfig,
    delete_db_config,
    get_db_config,
    initialize_database,
    save_db_config,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/db", tags=["database"])


class DbSetupRequest(BaseModel):
    """Database setup request."""

    type: DatabaseType = DatabaseType.SQLITE


@router.get("/status", response_model=dict)
async def database_status(services: AppServices = Depends(get_services)) -> Any:
    """Report whether a database is configured and initialized."""
    config = get_db_config(services.settings)
    database = services.database
    return {
        "configured": config is not None or services.settings.database_url is not None,
        "initialized": database is not None,
        "dialect": database.dialect if database is not None else None,
    }


@router.post("/setup", response_model=dict)
async def setup_database(
    request: Request,
    setup: DbSetupRequest,
    services: AppServices = Depends(get_services),
) -> Any:
    """Select and initialize the database, then hand it to the plugins."""
    if services.database is not None or get_db_config(services.settings) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Database has already been configured",
        )

    settings = services.settings
    save_db_config(settings, DbConfig(type=setup.type, db_path=str(settings.sqlite_db_path)))

    database = await initialize_database(settings, services.plugin_tables)
    if database is None:
        delete_db_config(settings)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database initialization failed",
        )

    try:
        await bring_database_online(request.app, services, database)
        await services.plugin_manager.reinitialize_plugins_with_database()
    except PluginError as e:
        # The database stays attached; a restart retries plugin setup
        logger.error("db_setup_plugins_failed", error=e.message, details=e.details)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        )

    logger.info("db_setup_completed", type=setup.type.value, dialect=database.dialect)
    return {"message": "Database setup successful", "dialect": database.dialect}
