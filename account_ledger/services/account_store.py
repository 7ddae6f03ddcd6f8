"""Account Store: inserts, point lookups and CAS-guarded mutations on the `users` table.

Invariants:
    - Every operation opens its own session from the shared factory and closes it
    - Reads and inserts use one round-trip, mutations two (snapshot read, conditional UPDATE)
    - A mutation applies only if the row still holds the snapshot value (count or token)
    - Zero affected rows on the conditional UPDATE raises ConcurrentUpdateError; never retried here
    - Every successful mutation sets update_time strictly after the snapshot's update_time
    - Failures are raised as LedgerError subclasses; nothing is logged or swallowed here

Design Decisions:
    - Optimistic concurrency over SELECT ... FOR UPDATE: no lock held across read and write,
      relies only on single-statement atomicity of UPDATE
    - rotate_token guards on the previous token as well as the id, so two racing rotations
      surface as ConcurrentUpdateError instead of last-write-wins
    - IntegrityError is mapped per operation (DuplicateKey on insert, TokenCollision on rotation);
      every other SQLAlchemyError becomes StorageError chained to the driver error
"""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncGenerator

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.expression import ColumnElement

from account_ledger.core.domain_types import (
    AccessToken, AccountStatus, Username, mask_token,
)
from account_ledger.core.errors import (
    AccountNotFoundError,
    ConcurrentUpdateError,
    DuplicateKeyError,
    ErrorContext,
    LedgerError,
    StorageError,
    TokenCollisionError,
)
from account_ledger.models.account import Account, naive_utc, utc_now
from account_ledger.schemas.account import AccountRecord

_RECORD_COLUMNS = (
    Account.id,
    Account.username,
    Account.token,
    Account.count,
    Account.status,
    Account.create_time,
    Account.update_time,
)

_TICK = timedelta(microseconds=1)


def next_update_time(previous: datetime) -> datetime:
    """Current UTC time, bumped past `previous` when the clock has not moved."""
    return max(utc_now(), previous + _TICK)


class AccountStore:
    """Stateless façade over a shared async session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # -- Insert ----------------------------------------------------------------

    async def create(
        self,
        username: Username,
        token: AccessToken,
        status: AccountStatus = AccountStatus.NORMAL,
    ) -> AccountRecord:
        """Insert a new account with count 0. Uniqueness is left to the database.

        The record is built after flush and before commit, so it does not
        depend on the factory's expire_on_commit setting.
        """
        ctx = ErrorContext(
            operation="create", username=username, token_hint=mask_token(token),
        )
        now = naive_utc(utc_now())
        account = Account(
            username=username,
            token=token,
            count=0,
            status=int(status),
            create_time=now,
            update_time=now,
        )
        try:
            async with self._session("create", ctx) as db:
                db.add(account)
                await db.flush()
                record = AccountRecord.model_validate(account)
                await db.commit()
        except IntegrityError as e:
            raise DuplicateKeyError(username, ctx) from e
        return record

    # -- Lookups ---------------------------------------------------------------

    async def find_by_token(self, token: AccessToken) -> AccountRecord:
        ctx = ErrorContext(operation="find_by_token", token_hint=mask_token(token))
        async with self._session("find_by_token", ctx) as db:
            record = await self._select_record(db, Account.token == token)
        if record is None:
            raise AccountNotFoundError("token", mask_token(token), ctx)
        return record

    async def find_by_username(self, username: Username) -> AccountRecord:
        ctx = ErrorContext(operation="find_by_username", username=username)
        async with self._session("find_by_username", ctx) as db:
            record = await self._select_record(db, Account.username == username)
        if record is None:
            raise AccountNotFoundError("username", username, ctx)
        return record

    # -- CAS mutations ---------------------------------------------------------

    async def increment_count(self, token: AccessToken, delta: int) -> AccountRecord:
        """Add `delta` to the usage counter if nobody changed it since our read.

        Returns the snapshot with the written count and update_time. Raises
        ConcurrentUpdateError when the guarded UPDATE matched no row; the
        caller re-reads and retries.
        """
        ctx = ErrorContext(operation="increment_count", token_hint=mask_token(token))
        async with self._session("increment_count", ctx) as db:
            snapshot = await self._select_record(db, Account.token == token)
            if snapshot is None:
                raise AccountNotFoundError("token", mask_token(token), ctx)
            ctx.account_id = snapshot.id
            ctx.username = snapshot.username

            new_count = snapshot.count + delta
            stamp = next_update_time(snapshot.update_time)
            result = await db.execute(
                update(Account)
                .where(Account.id == snapshot.id, Account.count == snapshot.count)
                .values(count=new_count, update_time=naive_utc(stamp))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise ConcurrentUpdateError(
                    f"count of account {snapshot.id} changed after it was read "
                    f"(expected {snapshot.count})",
                    ctx,
                )
            await db.commit()

        return snapshot.model_copy(
            update={"count": new_count, "update_time": stamp},
        )

    async def rotate_token(
        self, username: Username, new_token: AccessToken,
    ) -> AccountRecord:
        """Replace the account's token, guarded on the token value we read.

        Raises TokenCollisionError when `new_token` belongs to another account,
        ConcurrentUpdateError when the row vanished or its token already changed.
        """
        ctx = ErrorContext(
            operation="rotate_token", username=username,
            token_hint=mask_token(new_token),
        )
        async with self._session("rotate_token", ctx) as db:
            snapshot = await self._select_record(db, Account.username == username)
            if snapshot is None:
                raise AccountNotFoundError("username", username, ctx)
            ctx.account_id = snapshot.id

            stamp = next_update_time(snapshot.update_time)
            try:
                result = await db.execute(
                    update(Account)
                    .where(Account.id == snapshot.id, Account.token == snapshot.token)
                    .values(token=new_token, update_time=naive_utc(stamp))
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    raise ConcurrentUpdateError(
                        f"token of account {snapshot.id} changed after it was read",
                        ctx,
                    )
                await db.commit()
            except IntegrityError as e:
                raise TokenCollisionError(username, ctx) from e

        return snapshot.model_copy(
            update={"token": new_token, "update_time": stamp},
        )

    # -- Helpers ---------------------------------------------------------------

    async def _select_record(
        self, db: AsyncSession, criterion: ColumnElement[bool],
    ) -> AccountRecord | None:
        result = await db.execute(select(*_RECORD_COLUMNS).where(criterion))
        row = result.one_or_none()
        if row is None:
            return None
        return AccountRecord.model_validate(row._asdict())

    @asynccontextmanager
    async def _session(
        self, operation: str, ctx: ErrorContext,
    ) -> AsyncGenerator[AsyncSession, None]:
        """Session scoped to one operation; rolls back on any failure.

        IntegrityError passes through untouched so the operation can map it.
        """
        session = self._session_factory()
        try:
            yield session
        except (LedgerError, IntegrityError):
            await session.rollback()
            raise
        except SQLAlchemyError as e:
            await session.rollback()
            raise StorageError(
                f"{type(e).__name__}: {e}", operation, ctx,
            ) from e
        finally:
            await session.close()
