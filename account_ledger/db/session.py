"""Async Session Factory: builds the shared storage handle handed to AccountStore.

Invariants:
    - expire_on_commit=False: rows stay readable after commit without a refresh
    - One factory per engine; sessions are short-lived, one per store operation
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker,
)


def create_session_factory(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine."""
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
