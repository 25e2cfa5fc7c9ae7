"""Tests for the 500 error envelope, its development diagnostics and logger naming."""

import pytest
from fastapi.testclient import TestClient

from expertcheck import errors
from expertcheck.database import get_db
from expertcheck.logging_config import get_logger
from expertcheck.main import app


def broken_db():
    raise RuntimeError("database unavailable")


@pytest.fixture
def failing_client():
    app.dependency_overrides[get_db] = broken_db
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


def test_unexpected_error_uses_envelope(failing_client, user_headers, monkeypatch):
    monkeypatch.setattr(errors, "DIAGNOSTICS_ENABLED", False)

    resp = failing_client.get("/api/test/questions", headers=user_headers)

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Internal server error"}


def test_development_mode_adds_error_detail(failing_client, user_headers, monkeypatch):
    monkeypatch.setattr(errors, "DIAGNOSTICS_ENABLED", True)

    resp = failing_client.get("/api/test/questions", headers=user_headers)

    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Internal server error"
    assert body["error"] == {"type": "RuntimeError", "detail": "database unavailable"}


def test_channel_loggers_are_namespaced():
    assert get_logger("scoring").name == "expertcheck.scoring"
