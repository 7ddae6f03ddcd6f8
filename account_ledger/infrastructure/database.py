"""Database Session Manager: explicitly owned async engine with schema setup and health checks.

Invariants:
    - One engine per manager; the manager is created at startup and closed at shutdown
    - close() disposes the engine and is idempotent
    - Sessions come only from session_factory; AccountStore owns their error mapping
    - No module-level handle: callers pass the manager (or its session_factory) explicitly

Design Decisions:
    - SQLite URLs skip pool sizing: aiosqlite picks its own pool class per URL
    - create_schema() is create_all, idempotent table creation only
"""

import logging

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

import account_ledger.models  # noqa: F401
from account_ledger.core.errors import StorageError
from account_ledger.db.base import Base
from account_ledger.db.session import create_session_factory

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Owns the async engine and the session factory handed to AccountStore."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        echo: bool = False,
    ):
        url = make_url(database_url)
        engine_kwargs: dict = {"echo": echo, "pool_pre_ping": True}
        if url.get_backend_name() != "sqlite":
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(url, **engine_kwargs)
        self._session_factory = create_session_factory(self.engine)
        self._closed = False
        logger.info("DB@%s: [%s]", url.get_backend_name(), url.database)

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._closed:
            raise RuntimeError("Database manager is closed")
        return self._session_factory

    @property
    def closed(self) -> bool:
        return self._closed

    async def create_schema(self) -> None:
        """Create the `users` table if it does not exist."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            logger.error(f"Schema creation failed: {e}")
            raise StorageError("Schema creation failed", "create_schema") from e

    async def health_check(self) -> bool:
        """Round-trip SELECT 1 on a pooled connection; False when unreachable or closed."""
        if self._closed:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def close(self) -> None:
        """Dispose the engine and its pooled connections."""
        if self._closed:
            return
        self._closed = True
        await self.engine.dispose()
        logger.info("DB connections closed")

    async def __aenter__(self) -> "DatabaseSessionManager":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
