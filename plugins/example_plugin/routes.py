"""HTTP routes of the example plugin.

Registered under ``/api/plugin/example-plugin/``.
"""

from typing import Any, Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from deploystack.core.logging import get_logger
from deploystack.plugin_system.route_manager import PluginRouteManager
from deploystack.storage.database.base import Database, get_db

logger = get_logger(__name__)


async def register_routes(routes: PluginRouteManager, db: Optional[Database]) -> None:
    """Register the example entity routes.

    Args:
        routes: The plugin's namespaced route manager
        db: Database handle, None when not configured yet
    """
    if db is None:
        logger.warning("example_plugin_routes_skipped", plugin=routes.plugin_id, reason="no database")
        return

    if routes.has_route("GET", "/examples"):
        return

    table = db.get_table(routes.plugin_id, "example_entities")

    @routes.get("/examples")
    async def list_examples(session: AsyncSession = Depends(get_db)) -> list[dict[str, Any]]:
        """List example entities."""
        result = await session.execute(select(table).order_by(table.c.id))
        return [dict(row._mapping) for row in result]

    @routes.get("/examples/{example_id}")
    async def get_example(example_id: str, session: AsyncSession = Depends(get_db)) -> dict[str, Any]:
        """Get one example entity."""
        result = await session.execute(select(table).where(table.c.id == example_id))
        row = result.first()

        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Example entity not found")
        return dict(row._mapping)

    logger.info("example_plugin_routes_registered", namespace=routes.namespace)
