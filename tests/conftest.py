"""
Test setup: a temporary SQLite database, cheap bcrypt rounds, a known webhook secret
and an outbox that records emails instead of sending them.
"""
import os
import sys
import tempfile
from pathlib import Path

# Settings are read once and cached, so the environment must be in place before app imports
_TMP_DIR = tempfile.mkdtemp(prefix="kickback-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TMP_DIR) / 'test.db'}"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["YOCO_WEBHOOK_SECRET"] = "test-webhook-secret"
os.environ["RESET_CLEANUP_ENABLED"] = "false"
os.environ["APP_ENV"] = "test"
os.environ["MAILGUN_API_KEY"] = ""
os.environ["SENDGRID_API_KEY"] = ""

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine
from app.main import app
from app.models.user import User, UserRole
from app.services import notifications
from app.services.auth import create_access_token

PASSWORD = "sneakers123"


@pytest.fixture(autouse=True)
def db_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Every email the app tries to send, as dicts with to/subject/html/text."""
    sent = []

    def fake_send_email(to_email, subject, html_content, text_content=None):
        sent.append({"to": to_email, "subject": subject, "html": html_content, "text": text_content})
        return True

    monkeypatch.setattr(notifications, "send_email", fake_send_email)
    return sent


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def make_user(db):
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.customer, email: str | None = None, password: str = PASSWORD, **fields) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"{role.value}{counter['n']}@example.com",
            role=role,
            first_name=fields.pop("first_name", "Test"),
            last_name=fields.pop("last_name", role.value.title()),
            phone=fields.pop("phone", "0821234567"),
            **fields,
        )
        user.set_password(password)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def auth_header():
    def _header(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.email, user.role)}"}

    return _header


@pytest.fixture()
def customer(make_user):
    return make_user(UserRole.customer)


@pytest.fixture()
def admin(make_user):
    return make_user(UserRole.admin)


@pytest.fixture()
def technician(make_user):
    return make_user(UserRole.technician)
