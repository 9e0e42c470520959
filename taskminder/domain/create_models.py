"""Pydantic models for creating and updating records."""

from datetime import date

from pydantic import BaseModel, Field

from taskminder.core.recurrence import FrequencyType, RecurrenceRule
from taskminder.domain.task import NotifyChannel, TaskCategory


class ProfileCreate(BaseModel):
    """Pydantic model for creating a profile record."""

    email: str | None = Field(default=None, description="Email address for reminders")
    phone: str | None = Field(default=None, description="Phone number in E.164 format")
    full_name: str | None = Field(default=None, description="Display name")
    notify_via: NotifyChannel | None = Field(default=None, description="Default reminder channel")


class TaskCreate(BaseModel):
    """Pydantic model for creating a task record."""

    user_id: str = Field(..., description="Owning profile ID")
    title: str = Field(..., min_length=1, description="Task title")
    description: str | None = Field(default=None, description="Free-text details")
    category: TaskCategory = Field(default=TaskCategory.OTHER, description="Dashboard category")
    frequency_type: FrequencyType = Field(..., description="Recurrence cadence unit")
    frequency_value: int = Field(default=1, description="Every N units")
    day_of_month: int | None = Field(default=None, description="Calendar day for monthly tasks")
    days_of_week: list[int] | None = Field(default=None, description="Weekdays for weekly tasks (0=Sunday)")
    start_date: date = Field(..., description="First due date")
    notify_via: NotifyChannel | None = Field(default=None, description="Task-level channel override")

    def rule(self) -> RecurrenceRule:
        """Build the validated recurrence rule for this payload."""
        return RecurrenceRule.from_fields(
            frequency_type=self.frequency_type,
            frequency_value=self.frequency_value,
            day_of_month=self.day_of_month,
            days_of_week=self.days_of_week,
        )


class TaskUpdate(BaseModel):
    """Partial update payload for editable task fields.

    `start_date` and `next_due_date` are not editable here; the schedule only
    moves on completion.
    """

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    category: TaskCategory | None = None
    frequency_type: FrequencyType | None = None
    frequency_value: int | None = None
    day_of_month: int | None = None
    days_of_week: list[int] | None = None
    notify_via: NotifyChannel | None = None
