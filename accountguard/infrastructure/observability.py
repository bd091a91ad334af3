"""Structured Logging - JSON log records for account events.

Invariants:
    - Every record carries timestamp, level, logger name and message
    - Account fields passed through `extra=` (account_id, operation, error_code, amount,
      skew_seconds) appear as top-level JSON keys when set
    - setup_logging() installs exactly one AccountGuard handler on the root logger,
      however many times it is called

Design Decisions:
    - JSONFormatter on the stdlib logging module, no extra dependency
    - fmt="text" gives a one-line human format for local runs and tests
"""

import logging
import json
from datetime import datetime, timezone

_EXTRA_FIELDS: tuple[str, ...] = (
    "account_id", "operation", "error_code", "amount", "skew_seconds",
)

_HANDLER_NAME = "accountguard"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or replace) the AccountGuard root handler and return it."""
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(account_id)s] - %(message)s",
            defaults={"account_id": "-"},
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
