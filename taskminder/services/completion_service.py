"""Completing tasks: advance the schedule and append to the completion log."""

import logging
from datetime import UTC, date, datetime, time

from taskminder.core import db_client
from taskminder.core.errors import StaleTaskStateError, TaskNotFoundError
from taskminder.core.logging import span
from taskminder.core.recurrence import calculate_next_due_date
from taskminder.domain.task import Task
from taskminder.models.service_models import CompletionResult
from taskminder.services import task_store


logger = logging.getLogger(__name__)


async def _resolve_task(*, task_id: str | None, token: str | None) -> Task:
    if task_id:
        task = await task_store.get_task(task_id=task_id)
    elif token:
        task = await task_store.get_task_by_token(token=token)
    else:
        raise TaskNotFoundError("A task id or completion token is required")

    if not task.active:
        raise TaskNotFoundError(f"Task not found: {task.id}")
    return task


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def _moves_forward(task: Task, completed_at: datetime) -> bool:
    if task.last_completed_at is None:
        return True
    return _as_utc(completed_at) >= _as_utc(task.last_completed_at)


async def _complete(task: Task, *, completed_at: datetime, notes: str | None) -> CompletionResult:
    """Shared path for live completions and backfills.

    The schedule update is a compare-and-swap on the task's observed due date and
    last completion; the completion record is only appended once it succeeds.
    """
    if not _moves_forward(task, completed_at):
        logger.info(
            "Completion is older than the last completion; schedule unchanged",
            extra={"task_id": task.id, "completed_at": completed_at.isoformat()},
        )
        completion = await task_store.record_completion(
            task_id=task.id, user_id=task.user_id, completed_at=completed_at, notes=notes
        )
        return CompletionResult(
            task_id=task.id,
            title=task.title,
            completion_id=completion.id,
            completed_at=completed_at,
            next_due_date=task.next_due_date,
            schedule_advanced=False,
        )

    next_due = calculate_next_due_date(
        completed_at,
        task.frequency_type,
        task.frequency_value,
        day_of_month=task.day_of_month,
        days_of_week=task.days_of_week,
    )

    updated = await task_store.update_next_due_date(
        task=task,
        next_due_date=next_due,
        completed_at=completed_at,
        completion_token=task_store.new_completion_token(),
    )
    if not updated:
        raise StaleTaskStateError(task.id, "complete")

    completion = await task_store.record_completion(
        task_id=task.id, user_id=task.user_id, completed_at=completed_at, notes=notes
    )

    logger.info(
        "Task completed",
        extra={"task_id": task.id, "completed_at": completed_at.isoformat(), "next_due_date": next_due.isoformat()},
    )
    return CompletionResult(
        task_id=task.id,
        title=task.title,
        completion_id=completion.id,
        completed_at=completed_at,
        next_due_date=next_due,
    )


async def complete_task(
    *,
    task_id: str | None = None,
    token: str | None = None,
    completed_at: datetime | None = None,
    notes: str | None = None,
) -> CompletionResult:
    """Mark a task complete and compute its next due date from the completion date.

    The task may be referenced by id or by its single-use completion token; the
    token is rotated on every completion, so a link works once. Paused and snoozed
    tasks can still be completed.

    Args:
        task_id: Task ID
        token: Completion token from a reminder link
        completed_at: When the task was done (defaults to now, UTC)
        notes: Optional free-text note

    Returns:
        CompletionResult with the new next due date

    Raises:
        TaskNotFoundError: If the task or token does not match an active task
        InvalidRecurrenceRuleError: If the stored rule is malformed
        StaleTaskStateError: If the task changed concurrently; re-fetch and retry
    """
    with span("completion_service.complete_task"):
        task = await _resolve_task(task_id=task_id, token=token)
        return await _complete(task, completed_at=completed_at or task_store.utc_now(), notes=notes)


async def add_past_completion(
    *,
    task_id: str,
    completed_on: date,
    notes: str | None = None,
) -> CompletionResult:
    """Backfill a completion that happened on an earlier day.

    Goes through the same path as a live completion. A backfill older than the
    task's last completion is recorded without moving the schedule.
    """
    with span("completion_service.add_past_completion"):
        task = await _resolve_task(task_id=task_id, token=None)
        completed_at = datetime.combine(completed_on, time.min, tzinfo=UTC)
        return await _complete(task, completed_at=completed_at, notes=notes)


async def delete_completion(*, completion_id: str) -> None:
    """Delete a completion record.

    next_due_date is left as is; the schedule only changes on new completions.

    Raises:
        db_client.RecordNotFoundError: If the completion does not exist
    """
    with span("completion_service.delete_completion"):
        await db_client.delete_record(collection=task_store.COMPLETIONS, record_id=completion_id)
        logger.info("Deleted completion", extra={"completion_id": completion_id})
