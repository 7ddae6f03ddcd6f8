"""Account Schemas: immutable snapshots returned by every store operation.

Invariants:
    - AccountRecord is frozen; callers cannot mutate a lookup result
    - Timestamps are always timezone-aware UTC (SQLite returns naive values)
    - status is coerced to AccountStatus
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_validator

from account_ledger.core.domain_types import (
    AccessToken, AccountId, AccountStatus, Username,
)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AccountRecord(BaseModel):
    """Point-in-time view of one account row."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: AccountId
    username: Username
    token: AccessToken
    count: int
    status: AccountStatus
    create_time: datetime
    update_time: datetime

    @field_validator("create_time", "update_time")
    @classmethod
    def normalize_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def is_disabled(self) -> bool:
        return self.status is AccountStatus.DISABLED

    @property
    def is_admin(self) -> bool:
        return self.status is AccountStatus.ADMIN
