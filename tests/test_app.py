"""
tests/test_app.py -- Application-level routes, headers and error shape.
"""

from __future__ import annotations

from civic_auth.config import Settings


def test_root_reports_status_and_version(client):
    resp = client.get("/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "Civic Backend is Running"
    assert body["version"]
    assert body["timestamp"]


def test_api_index_lists_route_groups(client):
    endpoints = client.get("/api").json()["endpoints"]
    assert endpoints["citizen"] == "/api/citizen/*"
    assert endpoints["auth"].endswith("/*")


def test_health_and_ready(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/ready").json() == {"status": "ready"}


def test_security_headers_present(client):
    resp = client.get("/health")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert "Cache-Control" not in resp.headers


def test_api_responses_are_not_cached(client):
    resp = client.post("/api/citizen/login", json={})
    assert resp.headers["Cache-Control"] == "no-store"
    assert resp.headers["Referrer-Policy"] == "no-referrer"


def test_unknown_route_uses_error_shape(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Not Found"}


def test_malformed_json_is_a_validation_error(client):
    resp = client.post("/api/citizen/login", content="{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_trusted_origins_parsing():
    settings = Settings(trusted_origins=" https://a.example , ,https://b.example")
    assert settings.get_trusted_origins() == ["https://a.example", "https://b.example"]


def test_trusted_origins_default_to_public_url():
    settings = Settings(trusted_origins="", public_base_url="https://civic.example")
    assert settings.get_trusted_origins() == ["https://civic.example", "http://localhost:3000"]
