"""Error taxonomy for scheduling, completion, and dispatch."""

from enum import Enum

from pydantic import BaseModel


class TaskminderError(Exception):
    """Base class for domain errors raised by taskminder."""


class InvalidRecurrenceRuleError(TaskminderError, ValueError):
    """Recurrence configuration is malformed (bad interval, day of month, weekday or type)."""


class StaleTaskStateError(TaskminderError):
    """A conditional update lost a race; the caller should re-fetch and retry."""

    def __init__(self, task_id: str, operation: str) -> None:
        self.task_id = task_id
        self.operation = operation
        super().__init__(f"Stale task state for task {task_id} during {operation}")


class DeliveryFailureError(TaskminderError):
    """Transport failed for a single recipient."""

    def __init__(self, recipient: str, reason: str) -> None:
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"Delivery to {recipient} failed: {reason}")


class StoreUnavailableError(TaskminderError):
    """The task store cannot be read; the current run cannot make progress."""


class TaskNotFoundError(TaskminderError, KeyError):
    """No active task matches the given id or completion token."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Task not found"


class InvalidStateTransitionError(TaskminderError, ValueError):
    """The requested lifecycle transition is not allowed from the task's current status."""


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ErrorCode:
    """Coarse reasons surfaced by the completion link flow."""

    MISSING_TOKEN = "missing_token"
    TASK_NOT_FOUND = "task_not_found"
    CALCULATION_FAILED = "calculation_failed"
    UPDATE_FAILED = "update_failed"
    SERVER_ERROR = "server_error"


class ErrorResponse(BaseModel):
    """Structured error response without internal detail."""

    code: str
    message: str
    severity: ErrorSeverity


def classify_completion_error(exception: Exception) -> ErrorResponse:
    """Map an exception raised while completing a task to a user-safe response.

    Args:
        exception: The exception raised by the completion flow

    Returns:
        ErrorResponse with a coarse code and message
    """
    if isinstance(exception, TaskNotFoundError):
        return ErrorResponse(
            code=ErrorCode.TASK_NOT_FOUND,
            message="That task could not be found.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, InvalidRecurrenceRuleError):
        return ErrorResponse(
            code=ErrorCode.CALCULATION_FAILED,
            message="The next due date could not be calculated.",
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, StaleTaskStateError | StoreUnavailableError):
        return ErrorResponse(
            code=ErrorCode.UPDATE_FAILED,
            message="The task could not be updated. Please try again.",
            severity=ErrorSeverity.MEDIUM,
        )

    return ErrorResponse(
        code=ErrorCode.SERVER_ERROR,
        message="An unexpected error occurred.",
        severity=ErrorSeverity.HIGH,
    )
