"""open_ledger: end-to-end wiring of settings, logging, schema and store."""

import logging

import pytest

from account_ledger.bootstrap import open_ledger
from account_ledger.config import Settings
from account_ledger.core.domain_types import AccountStatus
from account_ledger.services.account_store import AccountStore


@pytest.fixture
def settings(tmp_path):
    return Settings(_env_file=None, db_root=tmp_path, log_format="text")


@pytest.fixture(autouse=True)
def _restore_root_logger():
    handlers = list(logging.root.handlers)
    level = logging.root.level
    yield
    logging.root.handlers[:] = handlers
    logging.root.setLevel(level)


async def test_open_ledger_yields_working_store(settings, tmp_path):
    async with open_ledger(settings) as store:
        assert isinstance(store, AccountStore)
        await store.create("alice", "tok-1", AccountStatus.NORMAL)
        await store.increment_count("tok-1", 5)
    assert (tmp_path / "chat.db").exists()


async def test_data_survives_reopen(settings):
    async with open_ledger(settings) as store:
        await store.create("alice", "tok-1")
        await store.increment_count("tok-1", 2)
    async with open_ledger(settings) as store:
        record = await store.find_by_username("alice")
    assert record.count == 2


async def test_open_ledger_closes_on_error(settings):
    with pytest.raises(RuntimeError):
        async with open_ledger(settings) as store:
            await store.create("alice", "tok-1")
            raise RuntimeError("caller failed")
    async with open_ledger(settings) as store:
        assert (await store.find_by_token("tok-1")).username == "alice"
