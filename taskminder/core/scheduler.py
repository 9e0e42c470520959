"""In-process scheduler for the daily reminder run."""

import logging
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from taskminder.core.config import settings
from taskminder.core.scheduler_tracker import retry_job_with_backoff
from taskminder.services import notification_service


logger = logging.getLogger(__name__)

DAILY_REMINDERS_JOB = "daily_reminders"

# Global scheduler instance
scheduler = AsyncIOScheduler()


async def send_daily_reminders() -> dict[str, Any]:
    """Run the reminder dispatch for today.

    Store failures propagate so the retry wrapper can back off and try again.
    Returns the camelCase run summary for the job tracker.
    """
    logger.info("Running daily reminders job")
    summary = await notification_service.run_daily_reminders()
    logger.info(
        "Completed daily reminders job: %d sent, %d failed, %d tasks",
        summary.notifications_sent,
        summary.notifications_failed,
        summary.tasks_processed,
    )
    return summary.model_dump(mode="json", by_alias=True)


async def daily_reminders_job() -> None:
    """Scheduled entry point: the reminder run wrapped in retry and job tracking."""
    await retry_job_with_backoff(send_daily_reminders, DAILY_REMINDERS_JOB)


def start_scheduler() -> None:
    """Start the scheduler and register the daily reminder job.

    This should be called during FastAPI app startup.
    """
    logger.info("Starting scheduler")

    scheduler.add_job(
        daily_reminders_job,
        trigger=CronTrigger(hour=settings.daily_reminder_hour, minute=0),
        id=DAILY_REMINDERS_JOB,
        name="Send Daily Task Reminders",
        replace_existing=True,
    )
    logger.info("Scheduled daily reminders job: daily at %d:00", settings.daily_reminder_hour)

    scheduler.start()
    logger.info("Scheduler started successfully")


def stop_scheduler() -> None:
    """Stop the scheduler.

    This should be called during FastAPI app shutdown.
    """
    logger.info("Stopping scheduler")
    scheduler.shutdown(wait=True)
    logger.info("Scheduler stopped")
