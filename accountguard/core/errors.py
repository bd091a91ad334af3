"""Error Hierarchy - typed, categorized exceptions for all AccountGuard failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Core errors are raised only for caller mistakes, never for clock skew
    - to_dict() produces a flat mapping suitable for structured log records

Design Decisions:
    - Single hierarchy with AccountGuardError base: callers catch one type at the shell boundary
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    account_id: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class AccountGuardError(Exception):
    """Base exception for all AccountGuard errors."""

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
        return self.severity in (ErrorSeverity.INFO, ErrorSeverity.WARNING)

    def to_dict(self) -> dict:
        """Flatten to a JSON-safe dict for log records."""
        return {
            "error_code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "account_id": self.context.account_id,
            "operation": self.context.operation,
        }


# ─── Core Errors ────────────────────────────────────────────────

class ConfigurationError(AccountGuardError):
    """Invalid construction parameter (identity, half-life, capacity, limit)."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.ERROR, context,
        )
        self.field = field


class InvalidCreditAmountError(AccountGuardError):
    """Credit amount is negative or not a number."""
    def __init__(self, amount: float, context: ErrorContext | None = None):
        super().__init__(
            f"Credit amount must be a non-negative number, got {amount!r}",
            "INVALID_CREDIT_AMOUNT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.amount = amount


class SnapshotFormatError(AccountGuardError):
    """Snapshot dict is missing a required key or holds a malformed value."""
    def __init__(self, message: str, key: str, context: ErrorContext | None = None):
        super().__init__(
            message, "SNAPSHOT_FORMAT_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.key = key


# ─── Shell Errors ───────────────────────────────────────────────

class AccountNotFoundError(AccountGuardError):
    """Requested account does not exist in cache or repository."""
    def __init__(self, account_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.account_id = account_id
        super().__init__(
            f"Account '{account_id}' not found",
            "ACCOUNT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx,
        )
        self.account_id = account_id


class AccountAlreadyExistsError(AccountGuardError):
    """Account creation attempted for an identity that already exists."""
    def __init__(self, account_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.account_id = account_id
        super().__init__(
            f"Account '{account_id}' already exists",
            "ACCOUNT_ALREADY_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx,
        )
        self.account_id = account_id


class DatabaseError(AccountGuardError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.operation = operation
