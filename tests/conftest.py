import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from meetbook.main import app
from meetbook.core.db import Base, get_db
from meetbook.core import models  # noqa: F401
from meetbook.services.email_service import get_email_service
from meetbook.services.meeting_service import (
    MeetingDetails,
    MeetingProvider,
    MeetingProviderError,
    get_meeting_provider,
)
from meetbook.services.verification import VerificationStore

# Test database
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeEmailService:
    """Records outgoing mail instead of calling SES."""

    def __init__(self, fail=False, raise_error=False):
        self.fail = fail
        self.raise_error = raise_error
        self.codes = []
        self.confirmations = []
        self.notifications = []

    def _result(self):
        if self.raise_error:
            raise RuntimeError("smtp down")
        return not self.fail

    def send_verification_code(self, to_email, code):
        self.codes.append((to_email, code))
        return self._result()

    def send_booking_confirmation(self, booking):
        self.confirmations.append(booking.email)
        return self._result()

    def send_booking_notification(self, booking):
        self.notifications.append(booking.email)
        return self._result()


class FakeMeetingProvider(MeetingProvider):
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def create_meeting(self, topic, start_time, duration_minutes=60):
        self.calls.append((topic, start_time, duration_minutes))
        if self.fail:
            raise MeetingProviderError("provider unavailable")
        return MeetingDetails(join_url="https://zoom.us/j/123456789?pwd=abc", meeting_id="123456789")


def future_weekday(weekday: int = 0, weeks_ahead: int = 1) -> date:
    """A date strictly in the future falling on the given weekday (0 = Monday)."""
    today = date.today()
    days = (weekday - today.weekday()) % 7 or 7
    return today + timedelta(days=days + 7 * (weeks_ahead - 1))


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def meeting_provider():
    return FakeMeetingProvider()


@pytest.fixture
def store(test_db):
    return VerificationStore(test_db)


@pytest.fixture
def verified_email(store):
    """An email holding an active verified record."""
    email = "anna@example.com"
    code = store.request_code(email)
    store.check_code(email, code)
    return email


@pytest.fixture(scope="function")
def client(test_db, email_service, meeting_provider):
    """Create test client with test database and fake gateways"""
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_meeting_provider] = lambda: meeting_provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
