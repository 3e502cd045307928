"""
tests/test_health.py -- Integration tests for GET /api/v1/health.

Covers:
  - 200 response with status and version
  - No session or store credential required
  - Health never touches the store
  - Unknown routes answer in the standard error envelope
"""

from __future__ import annotations

from api.main import VERSION


def test_health_returns_status_and_version(api):
    client, _store, _identity = api
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": VERSION}


def test_health_no_auth_and_no_store_calls(api):
    client, store, _identity = api
    resp = client.get("/api/v1/health", headers={})
    assert resp.status_code == 200
    assert store.calls == []


def test_unknown_route_uses_error_envelope(api):
    client, _store, _identity = api
    resp = client.get("/api/v1/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "http_404"
