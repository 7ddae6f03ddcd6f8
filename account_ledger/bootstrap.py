"""Ledger Bootstrap: wires settings, logging and the database into a ready AccountStore.

Invariants:
    - The database manager is always closed on exit, including on error or cancellation
    - Schema creation runs before the store is handed out
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from account_ledger.config import Settings, get_settings
from account_ledger.infrastructure.database import DatabaseSessionManager
from account_ledger.infrastructure.observability import setup_logging
from account_ledger.services.account_store import AccountStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def open_ledger(
    settings: Settings | None = None,
) -> AsyncGenerator[AccountStore, None]:
    """Startup/shutdown lifecycle for processes that embed the ledger."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = DatabaseSessionManager(
        settings.resolved_database_url(),
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=settings.database_echo,
    )
    try:
        await manager.create_schema()
        logger.info("Account ledger started")
        yield AccountStore(manager.session_factory)
    finally:
        await manager.close()
        logger.info("Account ledger shut down")
