"""Daily reminder dispatch: group due tasks per recipient, claim, send, summarise."""

import logging
from datetime import date, datetime

from taskminder.core import db_client
from taskminder.core.config import StampPolicy, settings
from taskminder.core.errors import DeliveryFailureError, StoreUnavailableError
from taskminder.core.logging import span
from taskminder.domain.profile import Profile
from taskminder.domain.task import NotifyChannel, Task
from taskminder.interface import delivery
from taskminder.models.service_models import DispatchSummary, NotificationBatch, SendMessageResult
from taskminder.services import due_task_selector, task_store


logger = logging.getLogger(__name__)


def resolve_channel(task: Task, profile: Profile | None) -> NotifyChannel:
    """Task override, then the profile default, then the configured default."""
    if task.notify_via is not None:
        return task.notify_via
    if profile is not None and profile.notify_via is not None:
        return profile.notify_via
    return NotifyChannel(settings.default_notify_via)


def _delivery_channels(channel: NotifyChannel) -> list[NotifyChannel]:
    match channel:
        case NotifyChannel.BOTH:
            return [NotifyChannel.EMAIL, NotifyChannel.SMS]
        case NotifyChannel.NONE:
            return []
        case _:
            return [channel]


def build_batches(tasks: list[Task], profiles: dict[str, Profile]) -> tuple[list[NotificationBatch], int]:
    """Group tasks into one batch per (channel, address).

    Returns:
        The batches in first-seen order, and the number of tasks left out of
        every batch (channel none, unknown profile or no address)
    """
    grouped: dict[tuple[NotifyChannel, str], NotificationBatch] = {}
    skipped = 0

    for task in tasks:
        profile = profiles.get(task.user_id)
        batched = False

        for channel in _delivery_channels(resolve_channel(task, profile)):
            address = profile.address_for(channel) if profile is not None else None
            if not address:
                logger.warning(
                    "No address for reminder channel, skipping",
                    extra={"task_id": task.id, "user_id": task.user_id, "channel": str(channel)},
                )
                continue

            key = (channel, address)
            if key not in grouped:
                grouped[key] = NotificationBatch(channel=channel, address=address, user_id=task.user_id, tasks=[])
            grouped[key].tasks.append(task)
            batched = True

        if not batched:
            skipped += 1

    return list(grouped.values()), skipped


async def _claim(tasks: list[Task], now: datetime) -> dict[str, Task]:
    """Claim each task once. Tasks whose claim fails are left out."""
    claimed: dict[str, Task] = {}
    for task in tasks:
        try:
            won = await task_store.mark_notified(task=task, timestamp=now)
        except db_client.DatabaseError as e:
            logger.error("Failed to claim task", extra={"task_id": task.id, "error": str(e)})
            continue
        if won:
            claimed[task.id] = task
        else:
            logger.info("Task already claimed by another run, skipping", extra={"task_id": task.id})
    return claimed


async def _send(batch: NotificationBatch) -> SendMessageResult:
    try:
        return await delivery.deliver(batch)
    except Exception as e:
        logger.exception("Delivery raised", extra={"channel": str(batch.channel), "recipient": batch.address})
        return SendMessageResult(success=False, error=str(e))


async def _release(tasks: list[Task], claimed_at: datetime) -> None:
    for task in tasks:
        try:
            released = await task_store.release_notified(task=task, claimed_at=claimed_at)
        except db_client.DatabaseError as e:
            logger.error("Failed to release claim", extra={"task_id": task.id, "error": str(e)})
            continue
        if not released:
            logger.warning("Claim changed before release", extra={"task_id": task.id})


async def run_daily_reminders(*, today: date | None = None, now: datetime | None = None) -> DispatchSummary:
    """Send today's reminders.

    Each eligible task is claimed (compare-and-swap on last_notified_at) before any
    message goes out, so overlapping or retried runs never remind about the same
    task twice on one day. One message is sent per recipient and channel. A failed
    recipient does not stop the others. Under the on_success stamp policy a task's
    claim is released if none of its messages was delivered, keeping it eligible
    for the next run.

    Args:
        today: Calendar day to select for (defaults to the UTC date of `now`)
        now: Timestamp written to last_notified_at (defaults to the current UTC time)

    Returns:
        DispatchSummary for the run

    Raises:
        StoreUnavailableError: If due tasks or their profiles cannot be read
    """
    with span("notification_service.run_daily_reminders"):
        now = now or task_store.utc_now()
        today = today or now.date()

        due = await due_task_selector.find_due_tasks(today=today)
        summary = DispatchSummary(tasks_processed=len(due), timestamp=now)

        if not due:
            logger.info("No tasks due", extra={"today": today.isoformat()})
            return summary

        try:
            profiles = await task_store.get_profiles(profile_ids={task.user_id for task in due})
        except db_client.DatabaseError as e:
            raise StoreUnavailableError(f"Task store unavailable: {e}") from e

        batches, unbatched = build_batches(due, profiles)

        batched_tasks: dict[str, Task] = {}
        for batch in batches:
            for task in batch.tasks:
                batched_tasks.setdefault(task.id, task)

        claimed = await _claim(list(batched_tasks.values()), now)

        delivered: set[str] = set()
        notified_users: set[str] = set()

        for batch in batches:
            tasks = [task for task in batch.tasks if task.id in claimed]
            if not tasks:
                continue

            result = await _send(batch.model_copy(update={"tasks": tasks}))

            if result.success:
                summary.notifications_sent += 1
                delivered.update(task.id for task in tasks)
                notified_users.add(batch.user_id)
                logger.info(
                    "Reminder sent",
                    extra={"channel": str(batch.channel), "recipient": batch.address, "tasks": len(tasks)},
                )
            else:
                summary.notifications_failed += 1
                failure = DeliveryFailureError(batch.address, result.error or "unknown error")
                logger.warning(str(failure), extra={"channel": str(batch.channel), "tasks": len(tasks)})

        if settings.notification_stamp_policy == StampPolicy.ON_SUCCESS:
            undelivered = [task for task_id, task in claimed.items() if task_id not in delivered]
            await _release(undelivered, now)

        summary.recipients_notified = len(notified_users)
        summary.tasks_skipped = unbatched + len(batched_tasks) - len(claimed)

        logger.info("Reminder run summary", extra=summary.model_dump(mode="json"))
        return summary
