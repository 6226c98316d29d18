"""
tests/test_health.py -- Integration tests for GET /api/v1/health.

Covers:
  - 200 with status, version and components (app, database)
  - No authentication required
  - Database failure reports "degraded" instead of a 500
"""

from __future__ import annotations

from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from api.main import API_VERSION


def test_health_reports_database_ok(api_client):
    """Health endpoint returns 200 with both components healthy."""
    client, _token, _ = api_client
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data == {
        "status": "healthy",
        "version": API_VERSION,
        "components": {"app": "ok", "database": "ok"},
    }


def test_health_no_auth_required(api_client):
    """No cookie or Authorization header is needed."""
    client, _, _ = api_client
    client.cookies.clear()
    resp = client.get("/api/v1/health", headers={})
    assert resp.status_code == 200


def test_health_degraded_when_database_unreachable(api_client):
    """A failing ping is reported in the body, not raised as a 500."""
    client, _, _ = api_client
    store = client.app.state.store
    with patch.object(store, "ping", side_effect=OperationalError("SELECT 1", {}, Exception("db gone"))):
        resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "degraded"
    assert resp.json()["components"]["database"] == "error"
