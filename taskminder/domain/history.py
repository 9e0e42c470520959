"""Completion and pause history models (append-only logs)."""

from datetime import datetime

from pydantic import BaseModel, Field


class Completion(BaseModel):
    """Immutable completion event."""

    id: str = Field(..., description="Unique completion ID")
    task_id: str = Field(..., description="ID of the completed task")
    user_id: str = Field(..., description="ID of the profile that completed it")
    completed_at: datetime = Field(..., description="When the task was done")
    notes: str | None = Field(default=None, description="Optional free-text note")


class TaskPause(BaseModel):
    """Pause/resume pair. Observational only; never read by the scheduler."""

    id: str = Field(..., description="Unique pause record ID")
    task_id: str = Field(..., description="ID of the paused task")
    user_id: str = Field(..., description="ID of the owning profile")
    paused_at: datetime = Field(..., description="When the task was paused")
    resumed_at: datetime | None = Field(default=None, description="When the task was resumed, if it has been")
    reason: str | None = Field(default=None, description="Why the task was paused")
