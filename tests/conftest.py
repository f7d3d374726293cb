"""Shared test fixtures for the GREDA-GBC test suite."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from greda_gbc.app import create_app
from greda_gbc.config import Settings
from greda_gbc.services.activity import ActivityRecorder
from greda_gbc.services.lifecycle import AssessmentService
from greda_gbc.services.users import UserService
from greda_gbc.store import data_store


def _test_settings() -> Settings:
    """Return settings suitable for testing."""
    return Settings(
        environment="development",
        debug=True,
        log_format="console",
        rate_limit_default="1000/minute",
        allowed_origins="http://localhost:3000,http://localhost:5000",
        notification_webhook_url="",
    )


def make_user(role: str, first_name: str, last_name: str = "Tester", status: str = "active") -> dict:
    """Insert a user straight into the data store."""
    user = {
        "id": str(uuid.uuid4()),
        "email": f"{first_name.lower()}.{role}@greda.test",
        "first_name": first_name,
        "last_name": last_name,
        "role": role,
        "status": status,
        "subscription_tier": "free",
        "subscription_status": "inactive",
        "organization_name": None,
        "phone_number": None,
        "invited_by": None,
        "last_login_at": None,
        "created_at": datetime.now(timezone.utc),
        "updated_at": datetime.now(timezone.utc),
    }
    data_store.add_user(user)
    return user


def auth(user: dict) -> dict[str, str]:
    """Identity header for a test user."""
    return {"X-User-Id": user["id"]}


class RecordingPort:
    """Notification port that keeps every pushed payload."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, dict]] = []

    def send(self, user_id: str, payload: dict) -> None:
        self.sent.append((user_id, payload))


class FailingPort:
    """Notification port whose transport is always down."""

    def __init__(self) -> None:
        self.attempts = 0

    def send(self, user_id: str, payload: dict) -> None:
        self.attempts += 1
        raise ConnectionError("relay unavailable")


@pytest.fixture
def settings():
    """Test settings."""
    return _test_settings()


@pytest.fixture
def app(settings):
    """Create a fresh FastAPI app for testing."""
    return create_app(settings)


@pytest.fixture
def client(app):
    """HTTP test client."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_store():
    """Reset the global data store before each test."""
    data_store.reset()
    yield
    data_store.reset()


@pytest.fixture
def admin():
    return make_user("admin", "Ama", "Mensah")


@pytest.fixture
def assessor():
    return make_user("assessor", "Kofi", "Owusu")


@pytest.fixture
def other_assessor():
    return make_user("assessor", "Esi", "Boateng")


@pytest.fixture
def client_user():
    return make_user("client", "Yaw", "Asante")


@pytest.fixture
def port():
    return RecordingPort()


@pytest.fixture
def recorder(port):
    return ActivityRecorder(data_store, port)


@pytest.fixture
def service(recorder, settings):
    return AssessmentService(data_store, recorder, settings)


@pytest.fixture
def user_service(recorder, settings):
    return UserService(data_store, recorder, settings)


@pytest.fixture
def draft(service, assessor, client_user):
    """A fresh draft assessment owned by the assessor."""
    return service.create_assessment(
        assessor,
        client_user["id"],
        {"building_name": "Ridge Towers", "building_location": "Accra"},
    )


@pytest.fixture
def completed(service, assessor, draft):
    """A completed, unlocked assessment with one scored section."""
    service.upsert_section(
        draft["public_id"],
        assessor,
        "energy-efficiency",
        variables={"solarPanels": 6, "renewableEnergy": 4},
        is_completed=True,
    )
    return service.complete_assessment(draft["public_id"], assessor)


@pytest.fixture
def locked(service, admin, completed):
    """A completed assessment locked by an admin."""
    return service.lock(completed["public_id"], admin, reason="Final review")
