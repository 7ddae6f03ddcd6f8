"""Root conftest: shared test configuration."""

import os

import pytest

from account_ledger.config import get_settings

# Ensure tests never resolve the SQLite file against a developer's DB_ROOT
os.environ.pop("DB_ROOT", None)
os.environ.pop("DATABASE_URL", None)
os.environ.setdefault("LOG_FORMAT", "text")


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
