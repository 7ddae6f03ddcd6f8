"""DatabaseSessionManager: schema creation, health checks and explicit close."""

import logging

import pytest
from sqlalchemy import inspect

from account_ledger.core.domain_types import AccountStatus
from account_ledger.core.errors import StorageError
from account_ledger.infrastructure.database import DatabaseSessionManager
from account_ledger.services.account_store import AccountStore


@pytest.fixture
async def manager(tmp_path):
    mgr = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}")
    yield mgr
    await mgr.close()


async def test_create_schema_builds_users_table(manager):
    await manager.create_schema()
    async with manager.engine.connect() as conn:
        columns = await conn.run_sync(
            lambda sync_conn: {c["name"] for c in inspect(sync_conn).get_columns("users")},
        )
    assert columns == {
        "id", "username", "token", "count", "status", "create_time", "update_time",
    }


async def test_create_schema_is_idempotent(manager):
    await manager.create_schema()
    store = AccountStore(manager.session_factory)
    await store.create("alice", "tok-1", AccountStatus.ADMIN)

    await manager.create_schema()
    assert (await store.find_by_username("alice")).status is AccountStatus.ADMIN


async def test_health_check_true_when_open(manager):
    assert await manager.health_check() is True


async def test_close_is_idempotent_and_fails_health_check(manager):
    await manager.close()
    await manager.close()
    assert manager.closed
    assert await manager.health_check() is False
    with pytest.raises(RuntimeError):
        manager.session_factory


async def test_health_check_false_when_database_unreachable(tmp_path, caplog):
    mgr = DatabaseSessionManager(
        f"sqlite+aiosqlite:///{tmp_path / 'no-such-dir' / 'chat.db'}",
    )
    try:
        with caplog.at_level(logging.ERROR, logger="account_ledger.infrastructure.database"):
            assert await mgr.health_check() is False
        assert any("health check failed" in r.getMessage() for r in caplog.records)
    finally:
        await mgr.close()


async def test_create_schema_failure_raises_storage_error(tmp_path):
    mgr = DatabaseSessionManager(
        f"sqlite+aiosqlite:///{tmp_path / 'no-such-dir' / 'chat.db'}",
    )
    try:
        with pytest.raises(StorageError) as exc_info:
            await mgr.create_schema()
        assert exc_info.value.operation == "create_schema"
    finally:
        await mgr.close()


async def test_context_manager_closes_engine(tmp_path):
    async with DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'x.db'}") as mgr:
        assert await mgr.health_check()
    assert mgr.closed


def test_logs_backend_and_database(tmp_path, caplog):
    path = tmp_path / "logged.db"
    with caplog.at_level(logging.INFO, logger="account_ledger.infrastructure.database"):
        DatabaseSessionManager(f"sqlite+aiosqlite:///{path}")
    assert any(
        "DB@sqlite" in r.getMessage() and str(path) in r.getMessage()
        for r in caplog.records
    )
