"""Tests for startup validation and the application lifespan."""

import logging

import pytest
from fastapi.testclient import TestClient

from taskminder.core.config import settings
from taskminder.main import app, validate_startup_configuration


@pytest.mark.unit
def test_missing_cron_secret_is_warned(monkeypatch, caplog) -> None:
    monkeypatch.setattr(settings, "cron_secret", None)

    with caplog.at_level(logging.WARNING, logger="taskminder.main"):
        validate_startup_configuration()

    assert any(getattr(r, "setting", None) == "cron_secret" for r in caplog.records)


@pytest.mark.unit
def test_configured_transports_are_not_warned(monkeypatch, caplog) -> None:
    monkeypatch.setattr(settings, "resend_api_key", "re_123")

    with caplog.at_level(logging.WARNING, logger="taskminder.main"):
        validate_startup_configuration()

    settings_warned = {getattr(r, "setting", None) for r in caplog.records}
    assert "cron_secret" not in settings_warned
    assert "resend_api_key" not in settings_warned


@pytest.mark.unit
def test_lifespan_creates_schema(monkeypatch, tmp_path) -> None:
    db_path = tmp_path / "lifespan.db"
    monkeypatch.setattr(settings, "sqlite_db_path", str(db_path))
    monkeypatch.setattr(settings, "enable_scheduler", False)

    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert db_path.exists()
