"""Async database engine and session management."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by all labelhub models."""


class Database:
    """Owns the async engine and hands out sessions.

    Each service call runs inside one session; ``session.commit()`` is the
    atomicity boundary for everything the call staged.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url

        engine_kwargs: dict = {"echo": echo}
        if ":memory:" in database_url:
            # One shared connection, otherwise every checkout sees an empty database
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}

        self.engine: AsyncEngine = create_async_engine(database_url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_tables(self) -> None:
        """Create all tables that do not exist yet."""
        # Register every model on Base.metadata
        from .. import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        """Drop all tables."""
        from .. import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session that is closed when the block exits."""
        async with self.session_factory() as session:
            yield session

    async def close(self) -> None:
        """Dispose of the engine and its connection pool."""
        await self.engine.dispose()


# Global database instance
_db: Optional[Database] = None


def init_db(database_url: str, echo: bool = False) -> Database:
    """Initialize the global database.

    Args:
        database_url: SQLAlchemy async database URL
        echo: Log emitted SQL statements

    Returns:
        Database instance
    """
    global _db
    _db = Database(database_url, echo=echo)
    logger.debug(f"Database initialized: {database_url}")
    return _db


def get_db() -> Database:
    """Get the global database instance.

    Raises:
        RuntimeError: If the database has not been initialized
    """
    if _db is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _db
