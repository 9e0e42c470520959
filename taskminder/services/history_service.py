"""Task history and completion statistics.

Statistics use fixed-length months (30 days) and years (365 days) to estimate how
many completions were expected since the start date. This is deliberately an
approximation and can disagree with the calendar-accurate schedule by a day or two
per period.
"""

import logging
import math
from datetime import date

from taskminder.core import db_client
from taskminder.core.config import constants
from taskminder.core.logging import span
from taskminder.core.recurrence import FrequencyType
from taskminder.domain.history import Completion, TaskPause
from taskminder.domain.task import Task
from taskminder.models.service_models import CompletionStats, TaskHistory
from taskminder.services import task_store


logger = logging.getLogger(__name__)


async def list_completions(*, task_id: str) -> list[Completion]:
    """List a task's completions, newest first."""
    with span("history_service.list_completions"):
        records = await task_store.list_all_records(
            collection=task_store.COMPLETIONS,
            filter_query=f'task_id = "{db_client.sanitize_param(task_id)}"',
            sort="-completed_at",
        )
        return [Completion(**record) for record in records]


async def list_pauses(*, task_id: str) -> list[TaskPause]:
    """List a task's pause records, newest first."""
    with span("history_service.list_pauses"):
        records = await task_store.list_all_records(
            collection=task_store.PAUSES,
            filter_query=f'task_id = "{db_client.sanitize_param(task_id)}"',
            sort="-paused_at",
        )
        return [TaskPause(**record) for record in records]


async def get_task_history(*, task_id: str) -> TaskHistory:
    """Get completions and pauses for a task.

    Raises:
        TaskNotFoundError: If the task does not exist
    """
    with span("history_service.get_task_history"):
        await task_store.get_task(task_id=task_id)
        return TaskHistory(
            completions=await list_completions(task_id=task_id),
            pauses=await list_pauses(task_id=task_id),
        )


def _period_days(task: Task) -> int:
    match task.frequency_type:
        case FrequencyType.WEEKLY:
            unit = 7
        case FrequencyType.MONTHLY:
            unit = constants.APPROX_DAYS_PER_MONTH
        case FrequencyType.YEARLY:
            unit = constants.APPROX_DAYS_PER_YEAR
        case _:
            unit = 1
    return unit * max(task.frequency_value, 1)


def compute_completion_stats(task: Task, completions: list[Completion], today: date) -> CompletionStats:
    """Compare actual completions with an approximate expected count since the start date."""
    days_since_start = max((today - task.start_date).days, 0)
    expected = days_since_start // _period_days(task)
    total = len(completions)

    rate = float(math.floor(total / expected * 100 + 0.5)) if expected > 0 else 0.0

    return CompletionStats(
        total_completions=total,
        expected_completions=expected,
        completion_rate=rate,
        missed=max(0, expected - total),
    )


async def get_completion_stats(*, task_id: str, today: date) -> CompletionStats:
    """Load a task and its completions and compute statistics."""
    with span("history_service.get_completion_stats"):
        task = await task_store.get_task(task_id=task_id)
        completions = await list_completions(task_id=task_id)
        return compute_completion_stats(task, completions, today)
