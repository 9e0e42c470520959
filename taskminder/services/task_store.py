"""Task store: the record-oriented reads and conditional writes the scheduler relies on."""

import logging
import secrets
import uuid
from datetime import UTC, date, datetime

from taskminder.core import db_client
from taskminder.core.config import constants
from taskminder.core.errors import StoreUnavailableError, TaskNotFoundError
from taskminder.core.logging import span
from taskminder.domain.history import Completion
from taskminder.domain.profile import Profile
from taskminder.domain.task import Task


logger = logging.getLogger(__name__)

TASKS = "tasks"
PROFILES = "profiles"
COMPLETIONS = "task_completions"
PAUSES = "task_pauses"


def new_record_id() -> str:
    return uuid.uuid4().hex


def new_completion_token() -> str:
    return secrets.token_urlsafe(constants.COMPLETION_TOKEN_BYTES)


def utc_now() -> datetime:
    return datetime.now(UTC)


async def list_all_records(*, collection: str, filter_query: str, sort: str) -> list[dict]:
    """Read every matching record, one page at a time."""
    per_page = constants.DEFAULT_PER_PAGE_LIMIT
    records: list[dict] = []
    page = 1
    while True:
        batch = await db_client.list_records(
            collection=collection,
            filter_query=filter_query,
            sort=sort,
            page=page,
            per_page=per_page,
        )
        records.extend(batch)
        if len(batch) < per_page:
            return records
        page += 1


async def find_due_candidates(*, today: date) -> list[Task]:
    """Return active, unpaused tasks due on or before `today`, ordered by due date then id.

    This is a coarse read; snooze and already-notified checks happen in the selector.

    Raises:
        StoreUnavailableError: If the candidate set cannot be read
    """
    with span("task_store.find_due_candidates"):
        filter_query = f'active = "true" && paused = "false" && next_due_date <= "{today.isoformat()}"'

        try:
            records = await list_all_records(collection=TASKS, filter_query=filter_query, sort="+next_due_date,+id")
            tasks = [Task(**record) for record in records]
        except db_client.DatabaseError as e:
            logger.error("Failed to read due candidates", extra={"today": today.isoformat(), "error": str(e)})
            raise StoreUnavailableError(f"Task store unavailable: {e}") from e

        logger.debug("Found %d due candidates for %s", len(tasks), today.isoformat())
        return tasks


async def mark_notified(*, task: Task, timestamp: datetime) -> bool:
    """Claim a task for today's reminder.

    Sets last_notified_at only if it still holds the value observed when the task
    was read. Returns False when another run got there first.
    """
    return await db_client.update_record_if(
        collection=TASKS,
        record_id=task.id,
        data={"last_notified_at": timestamp},
        expected={"last_notified_at": task.last_notified_at},
    )


async def release_notified(*, task: Task, claimed_at: datetime) -> bool:
    """Undo a claim by restoring the previously observed last_notified_at.

    Only applies if the stored value is still our claim timestamp.
    """
    return await db_client.update_record_if(
        collection=TASKS,
        record_id=task.id,
        data={"last_notified_at": task.last_notified_at},
        expected={"last_notified_at": claimed_at},
    )


async def update_next_due_date(
    *,
    task: Task,
    next_due_date: date,
    completed_at: datetime,
    completion_token: str,
) -> bool:
    """Advance the schedule after a completion.

    Keyed on the next_due_date and last_completed_at observed when the task was
    read; returns False if either changed in the meantime.
    """
    return await db_client.update_record_if(
        collection=TASKS,
        record_id=task.id,
        data={
            "next_due_date": next_due_date,
            "last_completed_at": completed_at,
            "completion_token": completion_token,
            "updated": utc_now(),
        },
        expected={
            "next_due_date": task.next_due_date,
            "last_completed_at": task.last_completed_at,
        },
    )


async def record_completion(
    *,
    task_id: str,
    user_id: str,
    completed_at: datetime,
    notes: str | None = None,
) -> Completion:
    """Append an immutable completion event."""
    record = await db_client.create_record(
        collection=COMPLETIONS,
        data={
            "id": new_record_id(),
            "task_id": task_id,
            "user_id": user_id,
            "completed_at": completed_at,
            "notes": notes,
        },
    )
    return Completion(**record)


async def get_task(*, task_id: str) -> Task:
    """Fetch a task by ID (including soft-deleted ones).

    Raises:
        TaskNotFoundError: If no such task exists
    """
    try:
        record = await db_client.get_record(collection=TASKS, record_id=task_id)
    except db_client.RecordNotFoundError as e:
        raise TaskNotFoundError(f"Task not found: {task_id}") from e
    return Task(**record)


async def get_task_by_token(*, token: str) -> Task:
    """Fetch the task whose current completion token matches.

    Raises:
        TaskNotFoundError: If the token is unknown or has already been used
    """
    record = await db_client.get_first_record(
        collection=TASKS,
        filter_query=f'completion_token = "{db_client.sanitize_param(token)}"',
    )
    if record is None:
        raise TaskNotFoundError("No task matches this completion link")
    return Task(**record)


async def get_profile(*, profile_id: str) -> Profile | None:
    """Fetch a profile by ID, or None if it does not exist."""
    try:
        record = await db_client.get_record(collection=PROFILES, record_id=profile_id)
    except db_client.RecordNotFoundError:
        return None
    return Profile(**record)


async def get_profiles(*, profile_ids: set[str]) -> dict[str, Profile]:
    """Fetch several profiles keyed by ID. Missing profiles are left out."""
    profiles: dict[str, Profile] = {}
    for profile_id in sorted(profile_ids):
        profile = await get_profile(profile_id=profile_id)
        if profile is None:
            logger.warning("Profile not found", extra={"profile_id": profile_id})
            continue
        profiles[profile_id] = profile
    return profiles
