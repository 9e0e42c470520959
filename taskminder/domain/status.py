"""Task status variant and notification state."""

from datetime import date
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel


class ActiveStatus(BaseModel):
    kind: Literal["active"] = "active"


class PausedStatus(BaseModel):
    kind: Literal["paused"] = "paused"


class SnoozedStatus(BaseModel):
    kind: Literal["snoozed"] = "snoozed"
    until: date


class DeletedStatus(BaseModel):
    kind: Literal["deleted"] = "deleted"


TaskStatus = ActiveStatus | PausedStatus | SnoozedStatus | DeletedStatus


class NotificationState(StrEnum):
    """Where a task sits in the daily reminder cycle."""

    ACTIVE_NOT_DUE = "active_not_due"
    DUE_PENDING = "due_pending"
    DUE_NOTIFIED_TODAY = "due_notified_today"
    PAUSED = "paused"
    SNOOZED = "snoozed"
    DELETED = "deleted"
