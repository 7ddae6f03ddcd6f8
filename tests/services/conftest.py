"""Service test fixtures: async SQLite database + AccountStore.

Invariants:
    - Every test gets a fresh SQLite file under tmp_path
    - Schema created from Base.metadata, same as DatabaseSessionManager.create_schema

Design Decisions:
    - File database instead of :memory:: each session needs its own connection
      for the concurrency tests, and aiosqlite shares one connection for :memory:
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

import account_ledger.models  # noqa: F401
from account_ledger.core.domain_types import AccountStatus
from account_ledger.db.base import Base
from account_ledger.db.session import create_session_factory
from account_ledger.services.account_store import AccountStore


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
def store(test_session_factory):
    return AccountStore(test_session_factory)


@pytest.fixture
async def alice(store):
    """Account ("alice", "tok-1", normal) with count 0."""
    return await store.create("alice", "tok-1", AccountStatus.NORMAL)
