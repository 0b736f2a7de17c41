# This project was developed with assistance from AI tools.
"""Tests for app wiring: health, Problem Details and error mapping."""

from fastapi.testclient import TestClient

from resident_review.core.config import settings
from resident_review.routes._review import http_error
from resident_review.services.errors import (
    ApplicationAlreadyDecided,
    BackendError,
    BackendUnavailable,
    DecisionFailed,
    InvalidDecision,
    PermissionsNotLoaded,
)


def test_health(client):
    resp = client.get("/health/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_unknown_route_is_problem_details(client):
    resp = client.get("/api/nope", headers={"x-request-id": "req-123"})
    assert resp.status_code == 404
    assert resp.json() == {
        "type": "about:blank",
        "title": "Not Found",
        "status": 404,
        "detail": "Not Found",
        "request_id": "req-123",
        "retryable": False,
    }


def test_validation_error_names_the_field(client):
    resp = client.get("/api/residents/pending", params={"filter": "yesterday"})
    assert resp.status_code == 422
    assert "filter" in resp.json()["detail"]


def test_unhandled_error_is_500_problem_details(app, monkeypatch):
    """Without a backend client the app fails closed with a 500, not a crash."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)
    test_client = TestClient(app, raise_server_exceptions=False)

    resp = test_client.get("/api/residents/pending")

    assert resp.status_code == 500
    assert resp.json()["detail"] == "An unexpected error occurred."


# ---------------------------------------------------------------------------
# Service exception -> HTTP mapping
# ---------------------------------------------------------------------------


def test_backend_statuses_map_to_operator_facing_statuses():
    assert http_error(BackendError(400, "bad")).status_code == 400
    assert http_error(BackendError(404, "gone")).status_code == 404
    assert http_error(BackendError(403, "no")).status_code == 403
    assert http_error(BackendError(401, "expired")).status_code == 403
    assert http_error(BackendError(500, "boom")).status_code == 502
    assert http_error(BackendUnavailable("down")).status_code == 503


def test_decision_failure_maps_through_its_cause():
    exc = http_error(DecisionFailed("101", BackendError(409, "User has already been verified")))
    assert exc.status_code == 409
    assert exc.detail == "User has already been verified"


def test_local_refusals_map_to_conflict_or_unprocessable():
    assert http_error(ApplicationAlreadyDecided("101", "approved")).status_code == 409
    assert http_error(PermissionsNotLoaded("loading")).status_code == 409
    assert http_error(InvalidDecision("bad verdict")).status_code == 422
