"""Error types and classification utilities for handover operations."""

from enum import Enum

from pydantic import BaseModel


class InvalidTransitionError(ValueError):
    """Raised when a handover action is not allowed in the record's current state."""


class DatabaseError(RuntimeError):
    """Raised when a record store read or write fails."""


class RecordNotFoundError(KeyError):
    """Raised when a requested record does not exist."""


class ErrorCategory(Enum):
    """Categories of errors that can occur during handover operations."""

    INVALID_STATE_TRANSITION = "invalid_state_transition"
    TASK_NOT_FOUND = "task_not_found"
    MISSING_COUNTERPART = "missing_counterpart"
    STORE_UNAVAILABLE = "store_unavailable"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_INVALID_STATE_TRANSITION = "ERR_INVALID_STATE_TRANSITION"
    ERR_SELF_HANDOVER = "ERR_SELF_HANDOVER"
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"
    ERR_STORE_UNAVAILABLE = "ERR_STORE_UNAVAILABLE"
    ERR_STORE_QUOTA_EXCEEDED = "ERR_STORE_QUOTA_EXCEEDED"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


_QUOTA_PHRASES = ("quota", "database or disk is full", "disk full", "storage full")


def classify_error(exception: Exception) -> ErrorCategory:
    """Return the broad category for an exception raised by the handover core."""
    if isinstance(exception, InvalidTransitionError):
        return ErrorCategory.INVALID_STATE_TRANSITION
    if isinstance(exception, RecordNotFoundError):
        return ErrorCategory.TASK_NOT_FOUND
    if isinstance(exception, DatabaseError | ConnectionError | TimeoutError):
        return ErrorCategory.STORE_UNAVAILABLE
    return ErrorCategory.UNKNOWN


def classify_error_with_response(exception: Exception) -> ErrorResponse:
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised during execution

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    error_str = str(exception).lower()
    category = classify_error(exception)

    if category == ErrorCategory.INVALID_STATE_TRANSITION:
        if "yourself" in error_str:
            return ErrorResponse(
                code=ErrorCode.ERR_SELF_HANDOVER,
                message="A task cannot be handed over to yourself.",
                suggestion="Pick a different colleague, or complete the task without a recipient.",
                severity=ErrorSeverity.LOW,
            )
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_STATE_TRANSITION,
            message="This action cannot be performed in the current state.",
            suggestion="Refresh your collaboration inbox and try again.",
            severity=ErrorSeverity.LOW,
        )

    if category == ErrorCategory.TASK_NOT_FOUND:
        return ErrorResponse(
            code=ErrorCode.ERR_TASK_NOT_FOUND,
            message="I couldn't find that task.",
            suggestion="It may have been removed. Refresh your task list.",
            severity=ErrorSeverity.LOW,
        )

    if category == ErrorCategory.STORE_UNAVAILABLE:
        if any(phrase in error_str for phrase in _QUOTA_PHRASES):
            return ErrorResponse(
                code=ErrorCode.ERR_STORE_QUOTA_EXCEEDED,
                message="Storage is full, the change was not saved.",
                suggestion="Archive old handovers or free up space, then try again.",
                severity=ErrorSeverity.HIGH,
            )
        return ErrorResponse(
            code=ErrorCode.ERR_STORE_UNAVAILABLE,
            message="The task store is unavailable, the change was not saved.",
            suggestion="Please check your connection and try again.",
            severity=ErrorSeverity.MEDIUM,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
    )
