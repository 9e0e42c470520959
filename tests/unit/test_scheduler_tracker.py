"""Tests for scheduler job tracking and retry functionality."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest

from taskminder.core import scheduler
from taskminder.core.scheduler_tracker import JobTracker, retry_job_with_backoff
from taskminder.models.service_models import DispatchSummary


@pytest.fixture
def job_tracker() -> JobTracker:
    """Create a fresh job tracker."""
    return JobTracker()

@pytest.fixture(autouse=True)
def mock_asyncio_sleep():
    """Skip backoff delays."""
    with patch("taskminder.core.scheduler_tracker.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep

@pytest.mark.unit
async def test_record_job_start(job_tracker: JobTracker) -> None:
    await job_tracker.record_job_start("test_job")

    status = await job_tracker.get_job_status("test_job")
    assert status["currently_running"] is True
    assert status["current_run_started"] is not None

@pytest.mark.unit
async def test_record_job_success(job_tracker: JobTracker) -> None:
    await job_tracker.record_job_start("test_job")
    await job_tracker.record_job_success("test_job")

    status = await job_tracker.get_job_status("test_job")
    assert status["last_success"] is not None
    assert status["consecutive_failures"] == 0
    assert status["success_count"] == 1
    assert status["currently_running"] is False

@pytest.mark.unit
async def test_consecutive_failures_reset_on_success(job_tracker: JobTracker) -> None:
    await job_tracker.record_job_failure("test_job", "Error 1")
    assert await job_tracker.record_job_failure("test_job", "Error 2") == 2

    await job_tracker.record_job_success("test_job")

    status = await job_tracker.get_job_status("test_job")
    assert status["consecutive_failures"] == 0
    assert status["failure_count"] == 2
    assert status["last_error"] == "Error 2"

@pytest.mark.unit
async def test_long_errors_are_truncated(job_tracker: JobTracker) -> None:
    await job_tracker.record_job_failure("test_job", "x" * 2000)

    status = await job_tracker.get_job_status("test_job")
    assert len(status["last_error"]) == 500

@pytest.mark.unit
async def test_dead_letter_queue_max_size(job_tracker: JobTracker) -> None:
    for i in range(150):
        await job_tracker.add_to_dead_letter_queue(f"job_{i}", f"error_{i}", "context")

    dlq = job_tracker.get_dead_letter_queue()
    assert len(dlq) == 100
    assert dlq[-1] == {"job_name": "job_149", "error": "error_149", "context": "context"}

@pytest.mark.unit
async def test_get_job_status_for_nonexistent_job(job_tracker: JobTracker) -> None:
    status = await job_tracker.get_job_status("nonexistent_job")

    assert status["job_name"] == "nonexistent_job"
    assert status["last_success"] is None
    assert status["consecutive_failures"] == 0

@pytest.mark.unit
async def test_retry_success_after_retry() -> None:
    mock_job = AsyncMock(side_effect=[Exception("Error 1"), None])

    with patch("taskminder.core.scheduler_tracker.job_tracker") as mock_tracker:
        mock_tracker.record_job_start = AsyncMock()
        mock_tracker.record_job_success = AsyncMock()

        await retry_job_with_backoff(mock_job, "test_job", max_retries=3)

        assert mock_job.call_count == 2
        mock_tracker.record_job_success.assert_called_once_with("test_job", result=None)

@pytest.mark.unit
async def test_retry_exhausted_records_failure() -> None:
    mock_job = AsyncMock(side_effect=Exception("Persistent error"))

    with patch("taskminder.core.scheduler_tracker.job_tracker") as mock_tracker:
        mock_tracker.record_job_start = AsyncMock()
        mock_tracker.record_job_failure = AsyncMock(return_value=1)
        mock_tracker.add_to_dead_letter_queue = AsyncMock()

        await retry_job_with_backoff(mock_job, "test_job", max_retries=3)

        assert mock_job.call_count == 3
        mock_tracker.record_job_failure.assert_called_once()
        mock_tracker.add_to_dead_letter_queue.assert_not_called()

@pytest.mark.unit
async def test_retry_adds_to_dlq_after_consecutive_failures() -> None:
    mock_job = AsyncMock(side_effect=Exception("Persistent error"))

    with patch("taskminder.core.scheduler_tracker.job_tracker") as mock_tracker:
        mock_tracker.record_job_start = AsyncMock()
        mock_tracker.record_job_failure = AsyncMock(return_value=3)
        mock_tracker.add_to_dead_letter_queue = AsyncMock()

        await retry_job_with_backoff(mock_job, "test_job", max_retries=2)

        mock_tracker.add_to_dead_letter_queue.assert_called_once()

@pytest.mark.unit
async def test_send_daily_reminders_returns_summary() -> None:
    summary = DispatchSummary(
        tasks_processed=2,
        notifications_sent=1,
        notifications_failed=1,
        recipients_notified=1,
        timestamp=datetime(2024, 3, 4, 8, 0, tzinfo=UTC),
    )
    with patch(
        "taskminder.services.notification_service.run_daily_reminders",
        new_callable=AsyncMock,
        return_value=summary,
    ) as mock_run:
        result = await scheduler.send_daily_reminders()

        mock_run.assert_awaited_once()
        assert result["notificationsSent"] == 1
        assert result["notificationsFailed"] == 1
        assert result["timestamp"] == "2024-03-04T08:00:00Z"

@pytest.mark.unit
async def test_retry_records_run_result(job_tracker: JobTracker) -> None:
    with patch("taskminder.core.scheduler_tracker.job_tracker", job_tracker):
        await retry_job_with_backoff(AsyncMock(return_value={"notificationsSent": 3}), "test_job")

    status = await job_tracker.get_job_status("test_job")
    assert status["last_result"] == {"notificationsSent": 3}
    assert status["success_count"] == 1

@pytest.mark.unit
async def test_daily_reminders_job_wraps_run_in_retry() -> None:
    with patch("taskminder.core.scheduler.retry_job_with_backoff", new_callable=AsyncMock) as mock_retry:
        await scheduler.daily_reminders_job()

        mock_retry.assert_awaited_once_with(scheduler.send_daily_reminders, scheduler.DAILY_REMINDERS_JOB)
