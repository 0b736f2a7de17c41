# This project was developed with assistance from AI tools.
"""Shared fixtures.

The app from ``resident_review.main`` is a module singleton, and so is the
workflow registry. Both are reset around every test so one operator's
session never leaks into the next test.
"""

import pytest
from factories import FakeBackend
from fastapi.testclient import TestClient

from resident_review.core.config import settings
from resident_review.main import app as real_app
from resident_review.services.backend import get_backend_client
from resident_review.services.workflow import get_workflow_registry


@pytest.fixture(autouse=True)
def _clean_state():
    """Clear dependency overrides and review sessions after each test."""
    get_workflow_registry().clear()
    yield
    real_app.dependency_overrides.clear()
    get_workflow_registry().clear()


@pytest.fixture
def app():
    """Return the real FastAPI app with all routers mounted."""
    return real_app


@pytest.fixture
def fake_backend() -> FakeBackend:
    backend = FakeBackend()
    backend.add_resident(id="101", first_name="Ana", last_name="Lopez")
    backend.add_resident(
        id="102",
        first_name="Bruno",
        last_name="Diaz",
        phone="+593987654321",
        created_at="2026-01-14T09:30:00",
    )
    backend.add_documents(
        "101",
        national_id="https://cdn.test/101/national_id.jpg",
        ownership_document="https://cdn.test/101/ownership.pdf",
    )
    return backend


@pytest.fixture
def backend_client(fake_backend):
    return fake_backend.client()


@pytest.fixture
def client(app, backend_client, monkeypatch):
    """TestClient running as the dev admin, wired to the fake backend."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)
    app.dependency_overrides[get_backend_client] = lambda: backend_client
    return TestClient(app)
