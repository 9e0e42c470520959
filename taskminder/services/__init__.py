from taskminder.services import (
    completion_service,
    due_task_selector,
    history_service,
    notification_service,
    task_service,
    task_store,
)


__all__ = [
    "completion_service",
    "due_task_selector",
    "history_service",
    "notification_service",
    "task_service",
    "task_store",
]
