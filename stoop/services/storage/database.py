"""
Async SQLAlchemy engine, session factory, and DB lifecycle helpers.

A ``Database`` is built once per process from ``Settings.database_url`` and
handed to every component that needs it. All access goes through
``Database.session()`` which yields an ``AsyncSession`` that auto-commits on
clean exit and rolls back on error.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns one async engine and its session factory.

    Args:
        url: Async SQLAlchemy URL. Ignored when *engine* is given.
        engine: Pre-built engine (tests inject an in-memory SQLite engine).
    """

    def __init__(self, url: str | None = None, engine: AsyncEngine | None = None) -> None:
        if engine is None:
            if not url:
                raise ValueError("Database needs either a URL or an engine")
            engine = create_async_engine(url, echo=False)
            if engine.dialect.name == "sqlite":
                event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.engine = engine
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield an ``AsyncSession`` that commits on success, rolls back on error."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def init(self) -> None:
        """Create all tables (idempotent)."""
        url = self.engine.url
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Dispose the engine's connection pool."""
        await self.engine.dispose()
