"""Error Hierarchy — typed, categorized exceptions for every shop failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client-input errors are 400-level; persistence failures are 500-level
    - ValidationError always carries the complete list of violated rules
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy under ShopError: adapters map the error kind, not the message
    - ErrorContext as dataclass: entity/operation context travels with the error
      without coupling the core to the logging framework
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Where the error happened: entity, id and gateway operation."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity_type: str | None = None
    entity_id: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class ShopError(Exception):
    """Base exception for all shop errors."""

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

    def details(self) -> dict:
        """Extra payload merged into the response envelope."""
        return {}

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        body = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "entity_type": self.context.entity_type,
                "entity_id": self.context.entity_id,
            },
        }
        body.update(self.details())
        return {"error": body}


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(ShopError):
    """Malformed or out-of-policy input. Carries every violation found."""
    def __init__(self, violations: list[str] | str, context: ErrorContext | None = None):
        if isinstance(violations, str):
            violations = [violations]
        super().__init__(
            "Validation failed: " + "; ".join(violations),
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.violations = list(violations)

    def details(self) -> dict:
        return {"violations": self.violations}


class NotFoundError(ShopError):
    """Referenced id does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity_type = ctx.entity_type or resource_type
        ctx.entity_id = ctx.entity_id or str(resource_id)
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.resource_type = resource_type
        self.resource_id = str(resource_id)


class ConflictError(ShopError):
    """A unique business key is already taken."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.field = field


# ─── Infrastructure Errors (500-level) ──────────────────────────

class InternalError(ShopError):
    """Unexpected persistence failure, wrapped with operation and entity id."""
    def __init__(
        self,
        message: str,
        operation: str,
        entity_id: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.operation = operation
        ctx.entity_id = ctx.entity_id or entity_id
        target = f" ({entity_id})" if entity_id else ""
        super().__init__(
            f"Storage {operation}{target} failed: {message}",
            "INTERNAL_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.operation = operation
        self.entity_id = entity_id
