"""Boundary Protocols: contracts between the ledger store and its callers.

Invariants:
    - Callers depend on AccountRepository, never on the SQLAlchemy implementation
    - Every method either returns a record or raises a LedgerError subclass

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: implementations do IO
"""

from typing import Protocol, runtime_checkable

from account_ledger.core.domain_types import (
    AccessToken, AccountId, AccountStatus, Username,
)


class AccountRecordLike(Protocol):
    """Structural contract for the immutable account snapshot."""
    id: AccountId
    username: Username
    token: AccessToken
    count: int
    status: AccountStatus


@runtime_checkable
class AccountRepository(Protocol):
    """Contract for account persistence (services/account_store.py)."""
    async def create(
        self, username: Username, token: AccessToken,
        status: AccountStatus = AccountStatus.NORMAL,
    ) -> AccountRecordLike: ...
    async def find_by_token(self, token: AccessToken) -> AccountRecordLike: ...
    async def find_by_username(self, username: Username) -> AccountRecordLike: ...
    async def increment_count(self, token: AccessToken, delta: int) -> AccountRecordLike: ...
    async def rotate_token(
        self, username: Username, new_token: AccessToken,
    ) -> AccountRecordLike: ...
