"""Error Hierarchy: codes, categories, severities and structured output."""

from account_ledger.core.errors import (
    AccountNotFoundError,
    ConcurrentUpdateError,
    DuplicateKeyError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    LedgerError,
    StorageError,
    TokenCollisionError,
)


def test_all_errors_share_base():
    errors = [
        AccountNotFoundError("username", "alice"),
        DuplicateKeyError("alice"),
        ConcurrentUpdateError("lost race"),
        TokenCollisionError("alice"),
        StorageError("boom", "execute"),
    ]
    assert all(isinstance(e, LedgerError) for e in errors)
    assert [e.code for e in errors] == [
        "ACCOUNT_NOT_FOUND",
        "DUPLICATE_KEY",
        "CONCURRENT_UPDATE",
        "TOKEN_COLLISION",
        "STORAGE_ERROR",
    ]


def test_domain_errors_are_recoverable():
    assert AccountNotFoundError("token", "tok-****").recoverable
    assert ConcurrentUpdateError("lost race").recoverable
    assert DuplicateKeyError("alice").category is ErrorCategory.CONFLICT
    assert TokenCollisionError("alice").category is ErrorCategory.CONFLICT


def test_storage_error_is_critical_and_records_operation():
    err = StorageError("disk I/O error", "commit")
    assert err.severity is ErrorSeverity.CRITICAL
    assert not err.recoverable
    assert err.category is ErrorCategory.DATABASE
    assert err.context.operation == "commit"
    assert err.message == "Storage commit failed: disk I/O error"


def test_storage_error_keeps_existing_context_operation():
    ctx = ErrorContext(operation="increment_count")
    err = StorageError("locked", "execute", ctx)
    assert err.context.operation == "increment_count"
    assert err.operation == "execute"


def test_to_dict_carries_context():
    ctx = ErrorContext(
        operation="rotate_token", account_id=7, username="alice", token_hint="tok-****",
    )
    payload = TokenCollisionError("alice", ctx).to_dict()
    assert payload["code"] == "TOKEN_COLLISION"
    assert payload["category"] == "conflict"
    assert payload["severity"] == "warning"
    assert payload["recoverable"] is True
    assert payload["context"] == {
        "operation": "rotate_token",
        "account_id": 7,
        "username": "alice",
        "token_hint": "tok-****",
    }
