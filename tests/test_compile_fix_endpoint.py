"""
Compile-Fix Endpoint Tests
==========================
Tests for POST /api/compile-fix, GET /api/status and GET /health.
The repair session is mocked — no real builds or LLM calls.
"""
import os
import pytest
from unittest.mock import patch, AsyncMock
from fastapi.testclient import TestClient

from app.models.repair_record import RepairRecord
from app.models.session_report import SessionReport
from app.services.repair_session import active_sessions


@pytest.fixture
def client():
    from main import app
    return TestClient(app)


def _report():
    return SessionReport(
        success=True,
        fixed_files=[RepairRecord(
            file="./src/components/Create.tsx",
            message="'screen' is defined but never used.",
            backup_path="/tmp/Create.tsx.backup.1",
            strategy="rule",
            rule="unused_import",
        )],
        attempts=2,
        stop_reason="success",
    )


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_missing_directory_returns_400(client, tmp_path):
    resp = client.post("/api/compile-fix", json={"target_dir": str(tmp_path / "nope")})
    assert resp.status_code == 400
    assert "not found" in resp.json()["detail"]


@pytest.mark.parametrize("body", [
    {"max_retries": 0},
    {"timeout_seconds": 0},
    {"timeout_seconds": 999999},
])
def test_invalid_parameters_rejected(client, tmp_path, body):
    resp = client.post("/api/compile-fix", json={"target_dir": str(tmp_path), **body})
    assert resp.status_code == 422


def test_runs_session_and_returns_report(client, tmp_path):
    session = AsyncMock(return_value=_report())
    with patch("app.api.compile_fix.run_repair_session", session):
        resp = client.post("/api/compile-fix", json={
            "target_dir": str(tmp_path),
            "max_retries": 5,
            "build_command": "npm run build",
            "timeout_seconds": 120,
        })

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["attempts"] == 2
    assert body["fixed_files"][0]["rule"] == "unused_import"
    kwargs = session.await_args.kwargs
    assert kwargs["max_retries"] == 5
    assert kwargs["timeout_seconds"] == 120
    assert kwargs["report_path"] is None


def test_write_report_passes_report_path(client, tmp_path):
    session = AsyncMock(return_value=_report())
    with patch("app.api.compile_fix.run_repair_session", session), \
         patch("app.api.compile_fix.config.REPORT_PATH", "out.json"):
        resp = client.post("/api/compile-fix", json={
            "target_dir": str(tmp_path),
            "write_report": True,
        })
    assert resp.status_code == 200
    assert session.await_args.kwargs["report_path"] == "out.json"


def test_busy_directory_returns_409(client, tmp_path):
    key = os.path.abspath(str(tmp_path))
    active_sessions.add(key)
    try:
        resp = client.post("/api/compile-fix", json={"target_dir": str(tmp_path)})
        status = client.get("/api/status").json()
    finally:
        active_sessions.discard(key)

    assert resp.status_code == 409
    assert status == {"running": [key]}


def test_status_empty_when_idle(client):
    assert client.get("/api/status").json() == {"running": []}
