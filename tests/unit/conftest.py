"""Pytest configuration and fixtures for unit tests."""

from collections.abc import Awaitable, Callable
from datetime import date
from typing import Any
from unittest.mock import AsyncMock

import pytest

from taskminder.core.config import StampPolicy, settings
from taskminder.models.service_models import SendMessageResult
from tests.unit.mocks import InMemoryDBClient


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def patched_db(monkeypatch, in_memory_db):
    """Patches taskminder.core.db_client functions to use InMemoryDBClient."""
    for name in (
        "create_record",
        "get_record",
        "update_record",
        "update_record_if",
        "delete_record",
        "list_records",
        "get_first_record",
    ):
        monkeypatch.setattr(f"taskminder.core.db_client.{name}", getattr(in_memory_db, name))

    return in_memory_db


@pytest.fixture(autouse=True)
def default_notification_settings(monkeypatch):
    """Pin settings that change dispatch behavior, independent of any local .env."""
    monkeypatch.setattr(settings, "default_notify_via", "email")
    monkeypatch.setattr(settings, "notification_stamp_policy", StampPolicy.ON_SUCCESS)
    monkeypatch.setattr(settings, "app_url", "https://tasks.example.com")
    monkeypatch.setattr(settings, "cron_secret", "test-cron-secret")


@pytest.fixture
def mock_deliver(monkeypatch):
    """Mock the delivery collaborator; every send succeeds unless reconfigured."""
    mock = AsyncMock(return_value=SendMessageResult(success=True, message_id="msg_123"))
    monkeypatch.setattr("taskminder.interface.delivery.deliver", mock)
    return mock


@pytest.fixture
def add_profile(patched_db) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Factory inserting a profile record."""

    async def _add(profile_id: str = "user-1", **fields: Any) -> dict[str, Any]:
        data = {
            "id": profile_id,
            "email": f"{profile_id}@example.com",
            "phone": "+14155550100",
            "full_name": "Test User",
            "notify_via": "email",
            **fields,
        }
        return await patched_db.create_record("profiles", data)

    return _add


@pytest.fixture
def add_task(patched_db) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Factory inserting a task record due 2024-03-04 by default."""

    async def _add(task_id: str = "task-1", **fields: Any) -> dict[str, Any]:
        data = {
            "id": task_id,
            "user_id": "user-1",
            "title": f"Task {task_id}",
            "description": None,
            "category": "home",
            "frequency_type": "weekly",
            "frequency_value": 1,
            "day_of_month": None,
            "days_of_week": None,
            "start_date": date(2024, 3, 4),
            "next_due_date": date(2024, 3, 4),
            "last_completed_at": None,
            "last_notified_at": None,
            "notify_via": None,
            "active": True,
            "paused": False,
            "snoozed_until": None,
            "completion_token": f"token-{task_id}",
            **fields,
        }
        return await patched_db.create_record("tasks", data)

    return _add
