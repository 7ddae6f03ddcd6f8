"""Domain Types: rich types that replace bare primitives across the ledger.

Invariants:
    - AccountId wraps the storage-assigned integer key, never reused
    - AccountStatus values match the persisted `status` column (0, 1, 2)
    - Usage deltas are plain ints; the store does not validate their sign

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - IntEnum for status: the column is an integer, so members compare equal to raw values
"""

from enum import IntEnum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

AccountId = NewType("AccountId", int)
Username = NewType("Username", str)
AccessToken = NewType("AccessToken", str)


# ─── Enums ───────────────────────────────────────────────────────

class AccountStatus(IntEnum):
    """Account status, maps to DB `status` column. Changed only outside the store."""
    DISABLED = 0
    NORMAL = 1
    ADMIN = 2


def mask_token(token: str) -> str:
    """Short, log-safe hint of a token (first 4 chars)."""
    if len(token) <= 4:
        return "****"
    return f"{token[:4]}****"
