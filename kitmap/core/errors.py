"""Error Hierarchy: typed, categorized exceptions for every kitmap failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - Each named failure kind is its own class, never a generic error with a message switch
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with KitMapError base: one FastAPI global handler catches all
    - Ownership and existence failures share AssignmentNotFoundError so a non-owner
      cannot probe which assignment ids exist
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone

from kitmap.core.domain_types import AssignmentId, LearnerMapId, UserId


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
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: UserId | None = None
    assignment_id: AssignmentId | None = None
    learner_map_id: LearnerMapId | None = None
    debug_info: dict[str, Any] | None = None


class KitMapError(Exception):
    """Base exception for all kitmap errors."""

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
                    "assignment_id": self.context.assignment_id,
                    "learner_map_id": self.context.learner_map_id,
                },
            }
        }


# ─── Not Found (404) ─────────────────────────────────────────────

class ResourceNotFoundError(KitMapError):
    """Requested resource does not exist (or is not visible to the caller)."""
    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        code: str = "RESOURCE_NOT_FOUND",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            code, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_id = resource_id


class AssignmentNotFoundError(ResourceNotFoundError):
    def __init__(self, assignment_id: str, context: ErrorContext | None = None):
        super().__init__(
            "Assignment", assignment_id, "ASSIGNMENT_NOT_FOUND", context,
        )


class GoalMapNotFoundError(ResourceNotFoundError):
    """Also raised when a learner map references a deleted goal map."""
    def __init__(self, goal_map_id: str, context: ErrorContext | None = None):
        super().__init__(
            "Goal map", goal_map_id, "GOAL_MAP_NOT_FOUND", context,
        )


class LearnerMapNotFoundError(ResourceNotFoundError):
    def __init__(self, learner_map_id: str, context: ErrorContext | None = None):
        super().__init__(
            "Learner map", learner_map_id, "LEARNER_MAP_NOT_FOUND", context,
        )


# ─── Business Rules (409 / 404) ──────────────────────────────────

class AlreadySubmittedError(KitMapError):
    """The current attempt of this learner map is already submitted."""
    def __init__(self, learner_map_id: str, context: ErrorContext | None = None):
        super().__init__(
            "You already submitted this attempt.",
            "ALREADY_SUBMITTED", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.learner_map_id = learner_map_id


class PreviousAttemptNotSubmittedError(KitMapError):
    """A new attempt can only start once the current one is submitted."""
    def __init__(self, learner_map_id: str, context: ErrorContext | None = None):
        super().__init__(
            "Previous attempt not submitted.",
            "PREVIOUS_ATTEMPT_NOT_SUBMITTED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 409,
        )
        self.learner_map_id = learner_map_id


class NoPreviousAttemptError(KitMapError):
    """No learner map row exists to start a new attempt from."""
    def __init__(self, assignment_id: str, context: ErrorContext | None = None):
        super().__init__(
            "No previous attempt found.",
            "NO_PREVIOUS_ATTEMPT", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 404,
        )
        self.assignment_id = assignment_id


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(KitMapError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
