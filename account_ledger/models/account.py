"""Account ORM: the single `users` table behind the ledger.

Invariants:
    - id is an integer primary key, assigned by storage
    - username and token are each NOT NULL and UNIQUE
    - count defaults to 0, status defaults to 1 (normal)
    - create_time / update_time are NOT NULL `timestamp` columns holding naive UTC

Design Decisions:
    - Table name `users` and column names match existing ledger files
    - Timestamps set from Python rather than CURRENT_TIMESTAMP: SQLite's clock has
      one-second resolution and update_time must advance on every mutation
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from account_ledger.core.domain_types import AccountStatus
from account_ledger.db.base import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def naive_utc(value: datetime) -> datetime:
    """Storage form of a timestamp: UTC wall time without tzinfo."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class Account(Base):
    """Account row: identity, credential, usage counter and status."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    token: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )
    status: Mapped[int] = mapped_column(
        Integer, nullable=False,
        default=int(AccountStatus.NORMAL), server_default="1",
    )
    create_time: Mapped[datetime] = mapped_column(
        DateTime(), nullable=False, default=lambda: naive_utc(utc_now()),
    )
    update_time: Mapped[datetime] = mapped_column(
        DateTime(), nullable=False, default=lambda: naive_utc(utc_now()),
    )

    def __repr__(self) -> str:
        return f"<Account id={self.id} username={self.username!r} count={self.count}>"
