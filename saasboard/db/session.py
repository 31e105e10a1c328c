"""Async database client and FastAPI session dependency.

Supports both PostgreSQL (production) and SQLite (local dev and tests).
The :class:`Database` is constructed explicitly and handed to the app
factory; the FastAPI lifespan owns ``connect()`` / ``disconnect()``.
"""

import logging
from collections.abc import AsyncGenerator
from pathlib import Path

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from saasboard.models import Base

logger = logging.getLogger(__name__)


def normalize_url(database_url: str) -> str:
    """Swap plain sqlite URLs to the aiosqlite driver."""
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return database_url


class Database:
    """Owns the async engine and session factory for one database URL."""

    def __init__(self, database_url: str, echo: bool = False):
        self.url = normalize_url(database_url)
        self.echo = echo
        self.engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_connected(self) -> bool:
        return self.engine is not None

    async def connect(self) -> None:
        """Create the engine and session factory. Safe to call twice."""
        if self.engine is not None:
            return

        if self.is_sqlite:
            db_path = self.url.split("///")[-1]
            if db_path == ":memory:" or not db_path:
                # One shared connection, otherwise every session sees an empty database
                self.engine = create_async_engine(
                    self.url,
                    echo=self.echo,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                )
            else:
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
                self.engine = create_async_engine(
                    self.url, echo=self.echo, connect_args={"check_same_thread": False}
                )
        else:
            self.engine = create_async_engine(self.url, echo=self.echo, pool_pre_ping=True)

        self._session_factory = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)
        logger.info("Database engine created (%s)", self.engine.url.render_as_string(hide_password=True))

    async def disconnect(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self._session_factory = None
        logger.info("Database connection closed")

    async def create_all(self) -> None:
        """Create all tables. Dev/test only; PostgreSQL uses Alembic."""
        if self.engine is None:
            raise RuntimeError("Database is not connected")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def session(self) -> AsyncSession:
        """Return a new session; use as ``async with db.session() as session``."""
        if self._session_factory is None:
            raise RuntimeError("Database is not connected")
        return self._session_factory()

    async def health_check(self) -> bool:
        """Run ``SELECT 1``; False when the database is unreachable."""
        if self.engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("Database health check failed: %s", e)
            return False


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async session from the app's Database."""
    database: Database = request.app.state.db
    async with database.session() as session:
        try:
            yield session
        finally:
            await session.close()
