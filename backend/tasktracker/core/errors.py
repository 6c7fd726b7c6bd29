"""Error Hierarchy — typed, categorized exceptions for all task tracker failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; store errors (500-level) are critical
    - to_response() produces the REST envelope shared by server and client
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with TaskTrackerError base: FastAPI global handler catches all
    - AuthorizationError carries no task or owner identifiers, so a foreign task
      reveals nothing beyond its id being valid
    - from_response() maps wire codes back to classes for the client
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
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class TaskTrackerError(Exception):
    """Base exception for all task tracker errors."""

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
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class TaskValidationError(TaskTrackerError):
    """A task field is missing, empty, or out of range."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["details"] = [
            {"field": self.field, "message": self.message, "type": "value_error"},
        ]
        return response


class AuthenticationError(TaskTrackerError):
    """No credential, or a credential that does not resolve to a user."""
    def __init__(
        self,
        message: str = "Authentication required",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "AUTHENTICATION_REQUIRED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class AuthorizationError(TaskTrackerError):
    """Authenticated caller does not own the resource."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Not authorized", "NOT_AUTHORIZED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ResourceNotFoundError(TaskTrackerError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConcurrencyError(TaskTrackerError):
    """A mutation on the same task is already in flight."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StoreError(TaskTrackerError):
    """Task store operation failed. Message never carries driver detail."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        super().__init__(
            "Task store operation failed",
            "STORE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation


class ServiceUnavailableError(TaskTrackerError):
    """Task API could not be reached (client side)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "SERVICE_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 503,
        )


# ─── Wire decoding (client) ─────────────────────────────────────

def from_response(status_code: int, body: dict | None) -> TaskTrackerError:
    """Rebuild a domain error from an HTTP error envelope."""
    error = (body or {}).get("error")
    if not isinstance(error, dict):
        return TaskTrackerError(
            f"Unexpected response ({status_code})", "INTERNAL_ERROR",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL, http_status=status_code,
        )
    code = error.get("code", "")
    message = error.get("message", "")
    if code == "VALIDATION_ERROR":
        details = error.get("details") or [{}]
        field = details[0].get("field", "")
        detail_message = details[0].get("message") or message
        return TaskValidationError(detail_message, field.split(".")[-1])
    if code == "AUTHENTICATION_REQUIRED":
        return AuthenticationError(message)
    if code == "NOT_AUTHORIZED":
        return AuthorizationError()
    if code == "RESOURCE_NOT_FOUND":
        return ResourceNotFoundError(
            "Task", "?", context=ErrorContext(user_message=message),
        )
    if code == "STORE_ERROR":
        return StoreError("remote")
    return TaskTrackerError(
        message or f"Unexpected response ({status_code})", code or "INTERNAL_ERROR",
        ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL, http_status=status_code,
    )
