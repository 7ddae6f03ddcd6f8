"""Error Hierarchy: typed, categorized exceptions for all ledger failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors are recoverable by the caller; StorageError is critical
    - to_dict() never includes a full access token, only a masked hint
    - The store raises these; it never logs or swallows them

Design Decisions:
    - Single hierarchy with LedgerError base: callers catch one type for "any ledger failure"
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from account_ledger.core.domain_types import AccountId


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    account_id: AccountId | None = None
    username: str | None = None
    token_hint: str | None = None
    debug_info: dict[str, Any] | None = None


class LedgerError(Exception):
    """Base exception for all account ledger errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    @property
    def recoverable(self) -> bool:
        return self.severity is not ErrorSeverity.CRITICAL

    def to_dict(self) -> dict:
        """Structured form for collaborators that log or serialize failures."""
        return {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "operation": self.context.operation,
                "account_id": self.context.account_id,
                "username": self.context.username,
                "token_hint": self.context.token_hint,
            },
        }


# ─── Domain Errors (caller-recoverable) ─────────────────────────

class AccountNotFoundError(LedgerError):
    """No account matches the lookup key."""
    def __init__(self, key: str, value: str, context: ErrorContext | None = None):
        super().__init__(
            f"Account with {key} '{value}' not found",
            "ACCOUNT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context,
        )
        self.key = key


class DuplicateKeyError(LedgerError):
    """Insert violated the username or token uniqueness constraint."""
    def __init__(self, username: str, context: ErrorContext | None = None):
        super().__init__(
            f"Account '{username}' conflicts with an existing username or token",
            "DUPLICATE_KEY", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context,
        )


class ConcurrentUpdateError(LedgerError):
    """A compare-and-swap write lost the race; re-read and retry."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENT_UPDATE", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context,
        )


class TokenCollisionError(LedgerError):
    """Rotation target token already belongs to another account."""
    def __init__(self, username: str, context: ErrorContext | None = None):
        super().__init__(
            f"New token for '{username}' is already in use by another account",
            "TOKEN_COLLISION", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context,
        )


# ─── Infrastructure Errors ──────────────────────────────────────

class StorageError(LedgerError):
    """Underlying driver or I/O failure. Chained to the original exception."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = ctx.operation or operation
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.operation = operation
