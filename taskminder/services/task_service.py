"""Task service for CRUD operations and lifecycle transitions."""

import logging
from datetime import date
from typing import Any

from taskminder.core import db_client
from taskminder.core.errors import InvalidStateTransitionError
from taskminder.core.logging import span
from taskminder.core.recurrence import RecurrenceRule
from taskminder.domain.create_models import ProfileCreate, TaskCreate, TaskUpdate
from taskminder.domain.profile import Profile
from taskminder.domain.task import Task
from taskminder.models.service_models import DashboardView
from taskminder.services import task_store


logger = logging.getLogger(__name__)


async def create_profile(*, data: ProfileCreate) -> Profile:
    """Create a profile record."""
    with span("task_service.create_profile"):
        record = await db_client.create_record(
            collection=task_store.PROFILES,
            data={"id": task_store.new_record_id(), **data.model_dump(mode="json")},
        )
        return Profile(**record)


async def create_task(*, data: TaskCreate) -> Task:
    """Create a task. It is first due on its start date.

    Raises:
        InvalidRecurrenceRuleError: If the recurrence rule is malformed
        db_client.DatabaseError: If database operation fails
    """
    with span("task_service.create_task"):
        rule = data.rule()

        record = await db_client.create_record(
            collection=task_store.TASKS,
            data={
                "id": task_store.new_record_id(),
                **data.model_dump(mode="json", exclude={"days_of_week"}),
                "days_of_week": list(rule.days_of_week) if rule.days_of_week else None,
                "next_due_date": data.start_date,
                "active": True,
                "paused": False,
                "completion_token": task_store.new_completion_token(),
            },
        )
        logger.info("Created task: %s (user: %s)", data.title, data.user_id)
        return Task(**record)


async def update_task(*, task_id: str, data: TaskUpdate) -> Task:
    """Edit a task's details and recurrence rule.

    The new rule takes effect from the next completion; next_due_date is not recomputed.

    Raises:
        TaskNotFoundError: If the task does not exist
        InvalidRecurrenceRuleError: If the resulting rule is malformed
    """
    with span("task_service.update_task"):
        task = await task_store.get_task(task_id=task_id)
        changes = data.model_dump(mode="json", exclude_unset=True)

        merged = task.model_copy(update=changes)
        rule = RecurrenceRule.from_fields(
            frequency_type=merged.frequency_type,
            frequency_value=merged.frequency_value,
            day_of_month=merged.day_of_month,
            days_of_week=merged.days_of_week,
        )
        if "days_of_week" in changes:
            changes["days_of_week"] = list(rule.days_of_week) if rule.days_of_week else None

        if not changes:
            return task

        record = await db_client.update_record(
            collection=task_store.TASKS,
            record_id=task_id,
            data={**changes, "updated": task_store.utc_now()},
        )
        logger.info("Updated task %s: %s", task_id, sorted(changes))
        return Task(**record)


async def _set_fields(task_id: str, data: dict[str, Any]) -> Task:
    record = await db_client.update_record(
        collection=task_store.TASKS,
        record_id=task_id,
        data={**data, "updated": task_store.utc_now()},
    )
    return Task(**record)


async def delete_task(*, task_id: str) -> Task:
    """Soft-delete a task. Its completions and pauses are kept."""
    with span("task_service.delete_task"):
        await task_store.get_task(task_id=task_id)
        task = await _set_fields(task_id, {"active": False})
        logger.info("Deleted task %s", task_id)
        return task


async def pause_task(*, task_id: str, reason: str | None = None) -> Task:
    """Suspend reminders for a task and open a pause record.

    Raises:
        TaskNotFoundError: If the task does not exist
        InvalidStateTransitionError: If the task is deleted or already paused
    """
    with span("task_service.pause_task"):
        task = await task_store.get_task(task_id=task_id)
        if not task.active:
            raise InvalidStateTransitionError(f"Cannot pause deleted task {task_id}")
        if task.paused:
            raise InvalidStateTransitionError(f"Task {task_id} is already paused")

        updated = await _set_fields(task_id, {"paused": True})

        try:
            await db_client.create_record(
                collection=task_store.PAUSES,
                data={
                    "id": task_store.new_record_id(),
                    "task_id": task_id,
                    "user_id": task.user_id,
                    "paused_at": task_store.utc_now(),
                    "resumed_at": None,
                    "reason": reason,
                },
            )
        except db_client.DatabaseError as e:
            logger.error("Failed to record pause history", extra={"task_id": task_id, "error": str(e)})

        logger.info("Paused task %s", task_id)
        return updated


async def resume_task(*, task_id: str) -> Task:
    """Resume reminders for a paused task and close its latest open pause record.

    next_due_date is unchanged, so a task that fell due while paused is due again at once.

    Raises:
        TaskNotFoundError: If the task does not exist
        InvalidStateTransitionError: If the task is not paused
    """
    with span("task_service.resume_task"):
        task = await task_store.get_task(task_id=task_id)
        if not task.paused:
            raise InvalidStateTransitionError(f"Task {task_id} is not paused")

        updated = await _set_fields(task_id, {"paused": False})

        try:
            open_pauses = await db_client.list_records(
                collection=task_store.PAUSES,
                filter_query=f'task_id = "{db_client.sanitize_param(task_id)}" && resumed_at = "null"',
                sort="-paused_at",
                per_page=1,
            )
            if open_pauses:
                await db_client.update_record(
                    collection=task_store.PAUSES,
                    record_id=open_pauses[0]["id"],
                    data={"resumed_at": task_store.utc_now()},
                )
        except db_client.DatabaseError as e:
            logger.error("Failed to close pause history", extra={"task_id": task_id, "error": str(e)})

        logger.info("Resumed task %s", task_id)
        return updated


async def snooze_task(*, task_id: str, until: date) -> Task:
    """Suppress reminders through `until`; the task is eligible again the day after.

    Raises:
        TaskNotFoundError: If the task does not exist
        InvalidStateTransitionError: If the task is deleted
    """
    with span("task_service.snooze_task"):
        task = await task_store.get_task(task_id=task_id)
        if not task.active:
            raise InvalidStateTransitionError(f"Cannot snooze deleted task {task_id}")

        updated = await _set_fields(task_id, {"snoozed_until": until})
        logger.info("Snoozed task %s until %s", task_id, until.isoformat())
        return updated


async def unsnooze_task(*, task_id: str) -> Task:
    """Clear a snooze."""
    with span("task_service.unsnooze_task"):
        await task_store.get_task(task_id=task_id)
        return await _set_fields(task_id, {"snoozed_until": None})


async def get_task(*, task_id: str) -> Task:
    """Get a task by ID (including soft-deleted ones)."""
    with span("task_service.get_task"):
        return await task_store.get_task(task_id=task_id)


async def list_tasks(*, user_id: str, include_deleted: bool = False) -> list[Task]:
    """List a profile's tasks ordered by next due date."""
    with span("task_service.list_tasks"):
        filter_query = f'user_id = "{db_client.sanitize_param(user_id)}"'
        if not include_deleted:
            filter_query += ' && active = "true"'

        records = await task_store.list_all_records(
            collection=task_store.TASKS,
            filter_query=filter_query,
            sort="+next_due_date,+id",
        )
        return [Task(**record) for record in records]


async def get_dashboard(*, user_id: str, today: date) -> DashboardView:
    """Split a profile's active tasks into overdue, due today and upcoming.

    Due-ness here ignores notification preferences; tasks that never send
    reminders still show up.
    """
    with span("task_service.get_dashboard"):
        view = DashboardView()
        for task in await list_tasks(user_id=user_id):
            if task.next_due_date < today:
                view.overdue.append(task)
            elif task.next_due_date == today:
                view.due_today.append(task)
            else:
                view.upcoming.append(task)
        return view
