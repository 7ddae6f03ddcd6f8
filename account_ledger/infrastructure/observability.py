"""Structured Logging: JSON formatter and setup for collaborators around the store.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (account_id, username, error_code, attempt, operation) surfaced when present
    - JSON format in production, human-readable in development
    - setup_logging is safe to call more than once (one handler installed)

Design Decisions:
    - JSONFormatter over third-party libs: stdlib logging only
    - The store never logs; the session manager, retry helper and bootstrap do
"""

import logging
import json
from datetime import datetime, timezone

_EXTRA_KEYS = (
    "account_id", "username", "error_code", "attempt", "operation", "delay_ms",
)
_HANDLER_NAME = "account_ledger"


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure logging for the process."""
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
