"""Unit tests for completion_service module."""

from datetime import UTC, date, datetime

import pytest

from taskminder.core.errors import InvalidRecurrenceRuleError, StaleTaskStateError, TaskNotFoundError
from taskminder.services import completion_service, task_store


COMPLETED_AT = datetime(2024, 3, 4, 10, 0, tzinfo=UTC)


class TestCompleteTask:
    """Test completing a task by id or token."""

    @pytest.mark.unit
    async def test_complete_by_id_advances_schedule(self, patched_db, add_task):
        await add_task()

        result = await completion_service.complete_task(task_id="task-1", completed_at=COMPLETED_AT, notes="done")

        assert result.next_due_date == date(2024, 3, 11)
        assert result.schedule_advanced is True
        assert result.title == "Task task-1"

        record = await patched_db.get_record("tasks", "task-1")
        assert record["next_due_date"] == "2024-03-11"
        assert record["last_completed_at"] == COMPLETED_AT.isoformat()

        completions = patched_db.all("task_completions")
        assert len(completions) == 1
        assert completions[0]["id"] == result.completion_id
        assert completions[0]["notes"] == "done"
        assert completions[0]["user_id"] == "user-1"

    @pytest.mark.unit
    async def test_next_due_counts_from_completion_not_due_date(self, patched_db, add_task):
        await add_task()

        result = await completion_service.complete_task(
            task_id="task-1", completed_at=datetime(2024, 3, 6, 9, 0, tzinfo=UTC)
        )

        assert result.next_due_date == date(2024, 3, 13)

    @pytest.mark.unit
    async def test_token_is_single_use(self, patched_db, add_task):
        await add_task()

        result = await completion_service.complete_task(token="token-task-1", completed_at=COMPLETED_AT)
        record = await patched_db.get_record("tasks", "task-1")

        assert result.task_id == "task-1"
        assert record["completion_token"] != "token-task-1"
        with pytest.raises(TaskNotFoundError):
            await completion_service.complete_task(token="token-task-1")

    @pytest.mark.unit
    async def test_new_token_completes_again(self, patched_db, add_task):
        await add_task()
        await completion_service.complete_task(task_id="task-1", completed_at=COMPLETED_AT)
        token = (await patched_db.get_record("tasks", "task-1"))["completion_token"]

        result = await completion_service.complete_task(token=token, completed_at=datetime(2024, 3, 11, tzinfo=UTC))

        assert result.next_due_date == date(2024, 3, 18)
        assert len(patched_db.all("task_completions")) == 2

    @pytest.mark.unit
    async def test_requires_id_or_token(self, patched_db):
        with pytest.raises(TaskNotFoundError):
            await completion_service.complete_task()

    @pytest.mark.unit
    async def test_unknown_task(self, patched_db):
        with pytest.raises(TaskNotFoundError):
            await completion_service.complete_task(task_id="missing")

    @pytest.mark.unit
    async def test_deleted_task_is_not_found(self, patched_db, add_task):
        await add_task(active=False)

        with pytest.raises(TaskNotFoundError):
            await completion_service.complete_task(task_id="task-1")

    @pytest.mark.unit
    async def test_paused_task_can_be_completed(self, patched_db, add_task):
        await add_task(paused=True)

        result = await completion_service.complete_task(task_id="task-1", completed_at=COMPLETED_AT)

        assert result.next_due_date == date(2024, 3, 11)

    @pytest.mark.unit
    async def test_lost_race_raises_stale_state(self, monkeypatch, patched_db, add_task):
        await add_task()

        async def lost_race(**kwargs):
            return False

        monkeypatch.setattr(task_store, "update_next_due_date", lost_race)

        with pytest.raises(StaleTaskStateError) as exc_info:
            await completion_service.complete_task(task_id="task-1", completed_at=COMPLETED_AT)

        assert exc_info.value.task_id == "task-1"
        assert patched_db.all("task_completions") == []

    @pytest.mark.unit
    async def test_concurrent_change_is_detected(self, monkeypatch, patched_db, add_task):
        await add_task()
        stale = await task_store.get_task(task_id="task-1")
        await completion_service.complete_task(task_id="task-1", completed_at=COMPLETED_AT)

        async def stale_read(*, task_id):
            return stale

        monkeypatch.setattr(task_store, "get_task", stale_read)

        with pytest.raises(StaleTaskStateError):
            await completion_service.complete_task(task_id="task-1", completed_at=COMPLETED_AT)

        record = await patched_db.get_record("tasks", "task-1")
        assert record["next_due_date"] == "2024-03-11"
        assert len(patched_db.all("task_completions")) == 1

    @pytest.mark.unit
    async def test_malformed_stored_rule(self, patched_db, add_task):
        await add_task(frequency_value=0)

        with pytest.raises(InvalidRecurrenceRuleError):
            await completion_service.complete_task(task_id="task-1", completed_at=COMPLETED_AT)

    @pytest.mark.unit
    async def test_monthly_end_of_month_sequence(self, patched_db, add_task):
        await add_task(
            frequency_type="monthly",
            day_of_month=31,
            start_date=date(2024, 1, 31),
            next_due_date=date(2024, 1, 31),
        )

        first = await completion_service.complete_task(
            task_id="task-1", completed_at=datetime(2024, 1, 31, 12, 0, tzinfo=UTC)
        )
        second = await completion_service.complete_task(
            task_id="task-1", completed_at=datetime(2024, 2, 29, 12, 0, tzinfo=UTC)
        )

        assert first.next_due_date == date(2024, 2, 29)
        assert second.next_due_date == date(2024, 3, 31)


class TestAddPastCompletion:
    """Test backfilled completions."""

    @pytest.mark.unit
    async def test_backfill_newer_than_last_completion_advances(self, patched_db, add_task):
        await add_task()

        result = await completion_service.add_past_completion(task_id="task-1", completed_on=date(2024, 3, 5))

        assert result.schedule_advanced is True
        assert result.next_due_date == date(2024, 3, 12)
        assert result.completed_at == datetime(2024, 3, 5, tzinfo=UTC)

    @pytest.mark.unit
    async def test_backfill_older_than_last_completion_keeps_schedule(self, patched_db, add_task):
        await add_task(
            next_due_date=date(2024, 3, 17),
            last_completed_at=datetime(2024, 3, 10, 9, 0, tzinfo=UTC),
        )

        result = await completion_service.add_past_completion(
            task_id="task-1", completed_on=date(2024, 3, 1), notes="forgot to log"
        )
        record = await patched_db.get_record("tasks", "task-1")

        assert result.schedule_advanced is False
        assert result.next_due_date == date(2024, 3, 17)
        assert record["next_due_date"] == "2024-03-17"
        assert len(patched_db.all("task_completions")) == 1


class TestDeleteCompletion:
    """Test completion deletion."""

    @pytest.mark.unit
    async def test_delete_leaves_schedule_unchanged(self, patched_db, add_task):
        await add_task()
        result = await completion_service.complete_task(task_id="task-1", completed_at=COMPLETED_AT)

        await completion_service.delete_completion(completion_id=result.completion_id)
        record = await patched_db.get_record("tasks", "task-1")

        assert patched_db.all("task_completions") == []
        assert record["next_due_date"] == "2024-03-11"
