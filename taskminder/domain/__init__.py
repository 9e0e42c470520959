"""Domain models and DTOs."""

from taskminder.domain.create_models import ProfileCreate, TaskCreate, TaskUpdate
from taskminder.domain.history import Completion, TaskPause
from taskminder.domain.profile import Profile
from taskminder.domain.status import (
    ActiveStatus,
    DeletedStatus,
    NotificationState,
    PausedStatus,
    SnoozedStatus,
    TaskStatus,
)
from taskminder.domain.task import NotifyChannel, Task, TaskCategory


__all__ = [
    "ActiveStatus",
    "Completion",
    "DeletedStatus",
    "NotificationState",
    "NotifyChannel",
    "PausedStatus",
    "Profile",
    "ProfileCreate",
    "SnoozedStatus",
    "Task",
    "TaskCategory",
    "TaskCreate",
    "TaskPause",
    "TaskStatus",
    "TaskUpdate",
]
