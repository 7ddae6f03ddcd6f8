"""OCC Retry: caller-side read-modify-write loop for CAS mutations.

Invariants:
    - Only ConcurrentUpdateError is retried; every other error propagates immediately
    - Each attempt calls `operation()` afresh, so the store re-reads its snapshot
    - After max_attempts the last ConcurrentUpdateError propagates unchanged
    - CancelledError passes through (never caught)

Design Decisions:
    - Exponential backoff with ±25% jitter, capped at max_delay_ms
    - Limits not passed by the caller come from Settings (occ_* fields)
    - Kept out of AccountStore: retry policy is the caller's decision
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, TypeVar

from account_ledger.config import get_settings
from account_ledger.core.errors import ConcurrentUpdateError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_ms(attempt: int, base_delay_ms: int, max_delay_ms: int) -> int:
    """Exponential backoff with ±25% jitter."""
    delay = min(max_delay_ms, (2 ** attempt) * base_delay_ms)
    return int(delay * random.uniform(0.75, 1.25))  # nosec B311


async def retry_on_conflict(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int | None = None,
    base_delay_ms: int | None = None,
    max_delay_ms: int | None = None,
) -> T:
    """Await `operation` until it stops losing CAS races, up to max_attempts.

    Unset limits fall back to the OCC_MAX_ATTEMPTS, OCC_BASE_DELAY_MS and
    OCC_MAX_DELAY_MS settings.
    """
    settings = get_settings()
    if max_attempts is None:
        max_attempts = settings.occ_max_attempts
    if base_delay_ms is None:
        base_delay_ms = settings.occ_base_delay_ms
    if max_delay_ms is None:
        max_delay_ms = settings.occ_max_delay_ms
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    for attempt in range(max_attempts):
        try:
            return await operation()
        except ConcurrentUpdateError as e:
            if attempt + 1 >= max_attempts:
                logger.error(
                    f"Giving up after {max_attempts} conflicting attempts",
                    extra={
                        "attempt": attempt + 1,
                        "error_code": e.code,
                        "operation": e.context.operation,
                        "account_id": e.context.account_id,
                    },
                )
                raise
            delay = backoff_ms(attempt, base_delay_ms, max_delay_ms)
            logger.warning(
                f"Concurrent update, retry after {delay}ms",
                extra={
                    "attempt": attempt + 1,
                    "delay_ms": delay,
                    "operation": e.context.operation,
                    "account_id": e.context.account_id,
                },
            )
            await asyncio.sleep(delay / 1000)

    raise AssertionError("unreachable")  # pragma: no cover
