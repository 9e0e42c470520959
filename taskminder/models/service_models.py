"""Pydantic models for service layer return types.

These models provide type safety at service boundaries, converting database
dictionaries into typed objects with validation.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taskminder.domain.history import Completion, TaskPause
from taskminder.domain.task import NotifyChannel, Task


class NotificationBatch(BaseModel):
    """All due tasks for one recipient on one channel."""

    channel: NotifyChannel
    address: str
    user_id: str
    tasks: list[Task]


class DispatchSummary(BaseModel):
    """Outcome of one reminder run, serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tasks_processed: int = 0
    notifications_sent: int = 0
    notifications_failed: int = 0
    recipients_notified: int = 0
    tasks_skipped: int = 0
    timestamp: datetime


class CompletionResult(BaseModel):
    """Result of completing a task."""

    task_id: str
    title: str
    completion_id: str
    completed_at: datetime
    next_due_date: date
    schedule_advanced: bool = True


class DashboardView(BaseModel):
    """Active tasks for one profile split by due date relative to today."""

    overdue: list[Task] = Field(default_factory=list)
    due_today: list[Task] = Field(default_factory=list)
    upcoming: list[Task] = Field(default_factory=list)


class TaskHistory(BaseModel):
    """Completions (newest first) and pause records for a task."""

    completions: list[Completion]
    pauses: list[TaskPause]


class CompletionStats(BaseModel):
    """Completion statistics for a task.

    `expected_completions` uses fixed 30-day months and 365-day years, so the
    rate is approximate and can disagree with the calendar-accurate schedule.
    """

    total_completions: int
    expected_completions: int
    completion_rate: float
    missed: int
    approximate: bool = True


class SendMessageResult(BaseModel):
    """Result of handing one message to a transport."""

    success: bool = Field(..., description="Whether the message was accepted by the provider")
    message_id: str | None = Field(None, description="Provider message ID if successful")
    error: str | None = Field(None, description="Error message if failed")
