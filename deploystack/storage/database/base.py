"""Base database models and session management."""

import datetime
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator, Optional

from fastapi import HTTPException, Request, status
from sqlalchemy import DateTime, Table, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

if TYPE_CHECKING:
    from deploystack.storage.database.plugin_tables import PluginTableRegistry


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class TimestampMixin:
    """Mixin for adding timestamp fields."""

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class Database:
    """Async engine and session factory for one configured database."""

    def __init__(
        self,
        url: str,
        echo: bool = False,
        plugin_tables: Optional["PluginTableRegistry"] = None,
    ) -> None:
        """Initialize database handle.

        Args:
            url: SQLAlchemy async URL
            echo: Log SQL statements
            plugin_tables: Tables contributed by plugins
        """
        self.url = url
        self.plugin_tables = plugin_tables

        engine_kwargs: dict = {"echo": echo}
        if not url.startswith("sqlite"):
            engine_kwargs.update(pool_pre_ping=True, pool_size=20, max_overflow=10)

        self.engine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @property
    def dialect(self) -> str:
        """Dialect name, e.g. "sqlite" or "postgresql"."""
        return self.engine.dialect.name

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Transactional session: commits on success, rolls back on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def get_table(self, plugin_id: str, name: str) -> Table:
        """Get a plugin table by its unprefixed name.

        Raises:
            KeyError: If the plugin did not register such a table
        """
        if self.plugin_tables is None:
            raise KeyError(f"{plugin_id}_{name}")
        return self.plugin_tables.get_table(plugin_id, name)

    async def create_all(self) -> None:
        """Create core tables (and plugin tables, if any are registered)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            if self.plugin_tables is not None:
                await conn.run_sync(self.plugin_tables.metadata.create_all)

    async def dispose(self) -> None:
        """Close database connections."""
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """Dependency returning the configured database.

    Raises:
        HTTPException: 503 if no database is configured yet
    """
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not configured. Please use the setup API.",
        )
    return database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database session.

    Yields:
        AsyncSession: Database session
    """
    async with get_database(request).session() as session:
        yield session
