"""Service-level filters embed user input only through sanitize_param."""

from unittest.mock import AsyncMock

import pytest

from taskminder.core import db_client
from taskminder.core.errors import TaskNotFoundError
from taskminder.services import history_service, task_service, task_store


MALICIOUS = 'user1" || active = "false'


@pytest.fixture
def capture_db_queries(monkeypatch):
    """Mocks db_client reads to capture the filters they receive."""
    mock_list = AsyncMock(return_value=[])
    mock_get_first = AsyncMock(return_value=None)

    monkeypatch.setattr("taskminder.core.db_client.list_records", mock_list)
    monkeypatch.setattr("taskminder.core.db_client.get_first_record", mock_get_first)

    return mock_list, mock_get_first


@pytest.mark.unit
class TestFilterInjection:
    async def test_sanitize_param_escapes_quotes(self):
        assert db_client.sanitize_param(MALICIOUS) == r"user1\" || active = \"false"

    async def test_list_tasks_user_id(self, capture_db_queries):
        mock_list, _ = capture_db_queries

        await task_service.list_tasks(user_id=MALICIOUS)

        filter_query = mock_list.call_args.kwargs["filter_query"]
        _, params = db_client.parse_filter(filter_query)
        assert params == [MALICIOUS, 1]

    async def test_completion_token(self, capture_db_queries):
        _, mock_get_first = capture_db_queries

        with pytest.raises(TaskNotFoundError):
            await task_store.get_task_by_token(token=MALICIOUS)

        _, params = db_client.parse_filter(mock_get_first.call_args.kwargs["filter_query"])
        assert params == [MALICIOUS]

    async def test_history_task_id(self, capture_db_queries):
        mock_list, _ = capture_db_queries

        await history_service.list_completions(task_id=MALICIOUS)

        _, params = db_client.parse_filter(mock_list.call_args.kwargs["filter_query"])
        assert params == [MALICIOUS]
