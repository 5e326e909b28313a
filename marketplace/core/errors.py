"""Error Hierarchy - typed, categorized exceptions for all marketplace failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages
    - Core never raises these for business rules; it returns a Rejection and the
      shell calls raise_for_rejection()

Design Decisions:
    - Single hierarchy with MarketplaceError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NoReturn
from datetime import datetime, timezone

from marketplace.core.outcomes import Rejection, RejectionKind


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    STORAGE = "storage"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    actor_id: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    debug_info: dict[str, Any] | None = None


class MarketplaceError(Exception):
    """Base exception for all marketplace errors."""

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
                    "resource_type": self.context.resource_type,
                    "resource_id": self.context.resource_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidPayloadError(MarketplaceError):
    """Request body or upload failed boundary validation."""
    def __init__(
        self, message: str, code: str = "INVALID_PAYLOAD",
        context: ErrorContext | None = None, http_status: int = 400,
    ):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, http_status,
        )


class AuthenticationError(MarketplaceError):
    """Caller could not be identified."""
    def __init__(self, message: str = "Authentication required", context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(MarketplaceError):
    """Actor lacks the role or ownership for the action."""
    def __init__(
        self, message: str, code: str = "FORBIDDEN", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(MarketplaceError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str | None = None,
        context: ErrorContext | None = None, message: str | None = None,
        code: str | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_type = resource_type
        ctx.resource_id = resource_id
        label = f"{resource_type} '{resource_id}'" if resource_id else resource_type
        super().__init__(
            message or f"{label} not found",
            code or "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )


class InvalidStateError(MarketplaceError):
    """Action is not legal from the entity's current status."""
    def __init__(
        self, message: str, code: str = "INVALID_STATE", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class ConflictError(MarketplaceError):
    """Uniqueness violation or concurrent modification."""
    def __init__(
        self, message: str, code: str = "CONFLICT", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StoreError(MarketplaceError):
    """Database operation failed. Never retried automatically."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "STORE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class BlobStorageError(MarketplaceError):
    """Submission file could not be written or read."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "BLOB_STORAGE_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, context, 503,
        )


# ─── Rejection mapping ──────────────────────────────────────────

def error_for_rejection(rejection: Rejection) -> MarketplaceError:
    """Map a core Rejection to the exception the API layer renders."""
    kind = rejection.kind
    if kind == RejectionKind.NOT_FOUND:
        return ResourceNotFoundError(
            rejection.resource_type or "Resource", rejection.resource_id,
            message=rejection.message, code=rejection.code,
        )
    if kind == RejectionKind.FORBIDDEN:
        return ForbiddenError(rejection.message, rejection.code)
    if kind == RejectionKind.INVALID_STATE:
        return InvalidStateError(rejection.message, rejection.code)
    if kind == RejectionKind.CONFLICT:
        return ConflictError(rejection.message, rejection.code)
    if kind == RejectionKind.INVALID_PAYLOAD:
        status = 413 if rejection.code == "FILE_TOO_LARGE" else 400
        return InvalidPayloadError(rejection.message, rejection.code, http_status=status)
    raise ValueError(f"Unmapped rejection kind: {kind}")


def raise_for_rejection(rejection: Rejection) -> NoReturn:
    raise error_for_rejection(rejection)
