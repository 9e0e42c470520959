"""Task domain models and enums."""

import json
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from taskminder.core.recurrence import FrequencyType


class NotifyChannel(StrEnum):
    """Channel(s) a reminder is delivered through."""

    EMAIL = "email"
    SMS = "sms"
    BOTH = "both"
    NONE = "none"


class TaskCategory(StrEnum):
    """Grouping used by the dashboard."""

    HOME = "home"
    VEHICLE = "vehicle"
    FINANCE = "finance"
    HEALTH = "health"
    PET = "pet"
    GARDEN = "garden"
    APPLIANCE = "appliance"
    INSURANCE = "insurance"
    SUBSCRIPTION = "subscription"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class Task(BaseModel):
    """Task data transfer object."""

    id: str = Field(..., description="Unique task ID")
    created: str | None = Field(default=None, description="Creation timestamp (ISO format)")
    updated: str | None = Field(default=None, description="Last update timestamp (ISO format)")
    user_id: str = Field(..., description="Owning profile ID")
    title: str = Field(..., description="Task title (e.g., 'Replace furnace filter')")
    description: str | None = Field(default=None, description="Free-text details")
    category: TaskCategory = Field(default=TaskCategory.OTHER, description="Dashboard category")

    frequency_type: FrequencyType = Field(..., description="Recurrence cadence unit")
    frequency_value: int = Field(default=1, description="Every N units")
    day_of_month: int | None = Field(default=None, description="Calendar day for monthly tasks (1-31)")
    days_of_week: list[int] | None = Field(default=None, description="Weekdays for weekly tasks (0=Sunday)")

    start_date: date = Field(..., description="First due date, immutable after creation")
    next_due_date: date = Field(..., description="Date the task is next due")
    last_completed_at: datetime | None = Field(default=None, description="Most recent completion timestamp")
    last_notified_at: datetime | None = Field(default=None, description="Most recent reminder timestamp")

    notify_via: NotifyChannel | None = Field(default=None, description="Overrides the profile channel when set")
    active: bool = Field(default=True, description="False once soft-deleted")
    paused: bool = Field(default=False, description="Administratively suspended")
    snoozed_until: date | None = Field(default=None, description="Suppress reminders until after this date")
    completion_token: str | None = Field(default=None, description="Single-use token for completion links")

    @field_validator("days_of_week", mode="before")
    @classmethod
    def parse_days_of_week(cls, v: Any) -> Any:
        """Accept the stored JSON string as well as a list."""
        if isinstance(v, str):
            return json.loads(v) if v.strip() else None
        return v
