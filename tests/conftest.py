import os
import uuid

# must be set before taskboard.config is imported
os.environ["DATABASE_URL"] = "sqlite:///./test_taskboard.db"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("RESEND_API_KEY", None)

import pytest
from fastapi.testclient import TestClient

from taskboard.database import Base, SessionLocal, engine
from taskboard.main import app
from taskboard.routers.deps import get_email_sender
from taskboard.services import identity

PASSWORD = "SecurePass123"


class RecordingSender:
    """Email sender double that records what would have been sent."""

    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def _record(self, kind, *args):
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append((kind,) + args)
        return True

    def send_welcome(self, email, name=None):
        return self._record("welcome", email, name)

    def send_password_reset(self, email, token):
        return self._record("reset", email, token)

    def send_workspace_invitation(self, email, workspace_name, inviter_name):
        return self._record("invite", email, workspace_name, inviter_name)


# Recreate all tables for each test
@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def failing_sender():
    return RecordingSender(fail=True)


@pytest.fixture
def client(sender):
    app.dependency_overrides[get_email_sender] = lambda: sender
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Register a user and return its id."""
    def _make(prefix="user", password=PASSWORD, name=None):
        email = f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"
        return identity.register(db, email, password, name)["id"]
    return _make
