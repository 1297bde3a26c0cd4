"""Error Hierarchy — typed, categorized faults for everything that is NOT a business failure.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Business failures (validation, not found, conflict) are Result values, never these
    - Faults propagate through every pipeline stage; stages clean up and re-raise
    - to_response() produces the REST envelope; no internal details in messages

Design Decisions:
    - Single hierarchy with PMFlowError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    CACHE = "cache"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    CANCELLED = "cancelled"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    request_type: str | None = None
    request_id: str | None = None
    cache_key: str | None = None
    debug_info: dict[str, Any] | None = None


class PMFlowError(Exception):
    """Base exception for all pmflow faults."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "request_type": self.context.request_type,
                    "request_id": self.context.request_id,
                },
            }
        }


# ─── Pipeline / Registration Errors ─────────────────────────────

class UnregisteredHandlerError(PMFlowError):
    """No handler registered for the request's exact type."""
    def __init__(self, request_type: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.request_type = request_type
        super().__init__(
            f"No handler registered for request type '{request_type}'",
            "UNREGISTERED_HANDLER", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.request_type = request_type


class DuplicateRegistrationError(PMFlowError):
    """Same request type registered twice while building the registry."""
    def __init__(self, request_type: str, context: ErrorContext | None = None):
        super().__init__(
            f"Request type '{request_type}' is already registered",
            "DUPLICATE_REGISTRATION", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.request_type = request_type


class RequestCancelledError(PMFlowError):
    """Caller cancelled the request via its CancellationToken."""
    def __init__(self, request_type: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.request_type = request_type
        super().__init__(
            f"Request '{request_type}' was cancelled",
            "REQUEST_CANCELLED", ErrorCategory.CANCELLED,
            ErrorSeverity.WARNING, ctx, 499,
        )


# ─── Unit of Work Errors ─────────────────────────────────────────

class TransactionAlreadyActiveError(PMFlowError):
    """begin() called while a transaction scope is already open."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A transaction is already active on this unit of work",
            "TRANSACTION_ALREADY_ACTIVE", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


class NoActiveTransactionError(PMFlowError):
    """commit()/rollback() called with no open transaction scope."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot {operation}: no active transaction",
            "NO_ACTIVE_TRANSACTION", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(PMFlowError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class CacheError(PMFlowError):
    """Cache server unreachable or returned an error."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cache {operation} failed: {message}",
            "CACHE_ERROR", ErrorCategory.CACHE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class CacheInvalidationError(PMFlowError):
    """Post-commit eviction kept failing; cached data may be stale."""
    def __init__(
        self, targets: list[str], attempts: int, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Cache invalidation failed after {attempts} attempt(s) "
            f"for {len(targets)} target(s)",
            "CACHE_INVALIDATION_FAILED", ErrorCategory.CACHE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.targets = targets
        self.attempts = attempts
