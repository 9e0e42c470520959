"""Pytest configuration and shared fixtures."""

import pytest

from taskminder.core import db_client
from taskminder.core.config import settings


@pytest.fixture
async def sqlite_db(tmp_path, monkeypatch):
    """Point the app at a fresh SQLite file with the schema applied."""
    db_path = tmp_path / "taskminder-test.db"
    monkeypatch.setattr(settings, "sqlite_db_path", str(db_path))

    await db_client.init_db()
    yield db_path
    await db_client.close_connection()
