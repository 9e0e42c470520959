"""Due-task selection: task status, notification state, and today's eligible set."""

import logging
from datetime import date

from taskminder.core.logging import span
from taskminder.domain.status import (
    ActiveStatus,
    DeletedStatus,
    NotificationState,
    PausedStatus,
    SnoozedStatus,
    TaskStatus,
)
from taskminder.domain.task import Task
from taskminder.services import task_store


logger = logging.getLogger(__name__)


def derive_status(task: Task, today: date) -> TaskStatus:
    """Collapse the stored flags into a single status.

    Precedence: deleted, then paused, then snoozed. A snooze whose date has
    passed no longer counts.
    """
    if not task.active:
        return DeletedStatus()
    if task.paused:
        return PausedStatus()
    if task.snoozed_until is not None and task.snoozed_until >= today:
        return SnoozedStatus(until=task.snoozed_until)
    return ActiveStatus()


def notified_today(task: Task, today: date) -> bool:
    return task.last_notified_at is not None and task.last_notified_at.date() >= today


def notification_state(task: Task, today: date) -> NotificationState:
    """Where the task sits in the daily reminder cycle on `today`."""
    match derive_status(task, today):
        case DeletedStatus():
            return NotificationState.DELETED
        case PausedStatus():
            return NotificationState.PAUSED
        case SnoozedStatus():
            return NotificationState.SNOOZED
        case ActiveStatus():
            if task.next_due_date > today:
                return NotificationState.ACTIVE_NOT_DUE
            if notified_today(task, today):
                return NotificationState.DUE_NOTIFIED_TODAY
            return NotificationState.DUE_PENDING


def is_eligible(task: Task, today: date) -> bool:
    """A task needs a reminder today only while it is due and not yet reminded."""
    return notification_state(task, today) == NotificationState.DUE_PENDING


def select_due_tasks(tasks: list[Task], today: date) -> list[Task]:
    """Filter to eligible tasks, ordered by due date then id."""
    eligible = [task for task in tasks if is_eligible(task, today)]
    return sorted(eligible, key=lambda t: (t.next_due_date, t.id))


async def find_due_tasks(*, today: date) -> list[Task]:
    """Read candidates from the store and return the tasks to remind about today.

    Raises:
        StoreUnavailableError: If the store cannot be read
    """
    with span("due_task_selector.find_due_tasks"):
        candidates = await task_store.find_due_candidates(today=today)
        due = select_due_tasks(candidates, today)
        logger.info(
            "Selected due tasks",
            extra={"today": today.isoformat(), "candidates": len(candidates), "due": len(due)},
        )
        return due
