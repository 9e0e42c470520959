"""Unit tests for history_service module."""

from datetime import UTC, date, datetime

import pytest

from taskminder.core.errors import TaskNotFoundError
from taskminder.domain.history import Completion
from taskminder.domain.task import Task
from taskminder.services import history_service, task_service


def make_task(**fields) -> Task:
    data = {
        "id": "task-1",
        "user_id": "user-1",
        "title": "Task",
        "frequency_type": "weekly",
        "frequency_value": 1,
        "start_date": date(2024, 1, 1),
        "next_due_date": date(2024, 1, 1),
        **fields,
    }
    return Task(**data)


def make_completions(count: int) -> list[Completion]:
    return [
        Completion(id=f"c{i}", task_id="task-1", user_id="user-1", completed_at=datetime(2024, 1, 1, tzinfo=UTC))
        for i in range(count)
    ]


@pytest.mark.unit
class TestComputeCompletionStats:
    """Tests for the approximate completion statistics."""

    def test_weekly(self):
        stats = history_service.compute_completion_stats(make_task(), make_completions(3), date(2024, 1, 29))

        assert stats.expected_completions == 4
        assert stats.total_completions == 3
        assert stats.completion_rate == 75.0
        assert stats.missed == 1
        assert stats.approximate is True

    def test_monthly_uses_thirty_day_months(self):
        task = make_task(frequency_type="monthly")

        # 2024-01-01 to 2024-03-01 is 60 days: two 30-day months
        stats = history_service.compute_completion_stats(task, make_completions(2), date(2024, 3, 1))

        assert stats.expected_completions == 2
        assert stats.completion_rate == 100.0
        assert stats.missed == 0

    def test_yearly_uses_365_day_years(self):
        task = make_task(frequency_type="yearly")

        # 2024 is a leap year; 365 days later is still Dec 31
        assert history_service.compute_completion_stats(task, [], date(2024, 12, 30)).expected_completions == 0
        assert history_service.compute_completion_stats(task, [], date(2024, 12, 31)).expected_completions == 1

    def test_interval_multiplies_period(self):
        task = make_task(frequency_type="daily", frequency_value=3)

        stats = history_service.compute_completion_stats(task, make_completions(1), date(2024, 1, 10))

        assert stats.expected_completions == 3
        assert stats.completion_rate == 33.0

    def test_rate_rounds_half_up(self):
        task = make_task(frequency_type="daily")

        # 1 of 8 is 12.5%
        stats = history_service.compute_completion_stats(task, make_completions(1), date(2024, 1, 9))

        assert stats.completion_rate == 13.0

    def test_nothing_expected_yet(self):
        stats = history_service.compute_completion_stats(make_task(), make_completions(1), date(2024, 1, 3))

        assert stats.expected_completions == 0
        assert stats.completion_rate == 0.0
        assert stats.missed == 0

    def test_extra_completions_never_negative_missed(self):
        stats = history_service.compute_completion_stats(make_task(), make_completions(5), date(2024, 1, 15))

        assert stats.missed == 0
        assert stats.completion_rate == 250.0


@pytest.mark.unit
class TestHistoryQueries:
    """Tests for store-backed history reads."""

    async def test_task_history_newest_first(self, patched_db, add_task):
        await add_task()
        for day in (1, 15, 8):
            await patched_db.create_record(
                "task_completions",
                {
                    "id": f"c{day}",
                    "task_id": "task-1",
                    "user_id": "user-1",
                    "completed_at": datetime(2024, 3, day, tzinfo=UTC),
                },
            )
        await task_service.pause_task(task_id="task-1", reason="travel")

        history = await history_service.get_task_history(task_id="task-1")

        assert [c.id for c in history.completions] == ["c15", "c8", "c1"]
        assert len(history.pauses) == 1
        assert history.pauses[0].reason == "travel"

    async def test_history_for_unknown_task(self, patched_db):
        with pytest.raises(TaskNotFoundError):
            await history_service.get_task_history(task_id="missing")

    async def test_get_completion_stats(self, patched_db, add_task):
        await add_task(start_date=date(2024, 1, 1))
        await patched_db.create_record(
            "task_completions",
            {"id": "c1", "task_id": "task-1", "user_id": "user-1", "completed_at": datetime(2024, 1, 8, tzinfo=UTC)},
        )

        stats = await history_service.get_completion_stats(task_id="task-1", today=date(2024, 1, 15))

        assert stats.total_completions == 1
        assert stats.expected_completions == 2
        assert stats.completion_rate == 50.0
