"""Pytest fixtures."""

import base64
import os
import tempfile

# Settings are read at import time, so configure before importing the app.
_TMP_DIR = tempfile.mkdtemp(prefix="ncc_portal_tests_")
os.environ["DB_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["FIELD_ENCRYPTION_KEY"] = base64.urlsafe_b64encode(b"k" * 32).decode()
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AUDIT_HMAC_SECRET"] = "test-audit"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from ncc_portal import models  # noqa: E402,F401
from ncc_portal.core.context import AuthContext  # noqa: E402
from ncc_portal.core.crypto import FieldCodec, decode_key  # noqa: E402
from ncc_portal.db.base import Base  # noqa: E402
from ncc_portal.db.session import SessionLocal, engine  # noqa: E402
from ncc_portal.main import app  # noqa: E402
from ncc_portal.models.user import Identity, ROLE_ADMIN, ROLE_STUDENT  # noqa: E402
from ncc_portal.schemas.student import StudentIn  # noqa: E402
from ncc_portal.services.roles import grant_role  # noqa: E402

PASSWORD = "cadet-pass-123"


@pytest.fixture(autouse=True)
def fresh_tables():
    """Empty schema for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def codec() -> FieldCodec:
    return FieldCodec(decode_key(os.environ["FIELD_ENCRYPTION_KEY"]))


def _make_identity(db, email: str, role: str) -> Identity:
    user = Identity(email=email, password_hash="x", is_active=True)
    db.add(user)
    db.flush()
    grant_role(db, user.id, role)
    db.commit()
    return user


@pytest.fixture
def student_ctx(db) -> AuthContext:
    user = _make_identity(db, "asha@example.com", ROLE_STUDENT)
    return AuthContext(user_id=user.id, email=user.email)


@pytest.fixture
def other_ctx(db) -> AuthContext:
    user = _make_identity(db, "ravi@example.com", ROLE_STUDENT)
    return AuthContext(user_id=user.id, email=user.email)


@pytest.fixture
def admin_ctx(db) -> AuthContext:
    user = _make_identity(db, "officer@example.com", ROLE_ADMIN)
    return AuthContext(user_id=user.id, email=user.email, is_admin=True)


@pytest.fixture
def asha_profile() -> StudentIn:
    return StudentIn(
        name="Asha Rao",
        email="asha@example.com",
        branch="CSE",
        year=2,
        address="12 MG Road, Pune",
        phone_number="9876543210",
        parents_phone_number="9123456780",
        aadhaar_number="123456789012",
        pan_number="ABCDE1234F",
        account_number="00011122233",
    )


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def register(client: TestClient, email: str, password: str = PASSWORD):
    resp = client.post("/api/register", data={"email": email, "password": password, "full_name": "Test"})
    assert resp.status_code == 201, resp.text
    return resp.json()["user"]


@pytest.fixture
def student_client(client) -> TestClient:
    """Client signed in as a fresh student identity."""
    register(client, "asha@example.com")
    return client


@pytest.fixture
def admin_client(db) -> TestClient:
    """Separate client signed in as an admin."""
    with TestClient(app) as c:
        user = register(c, "officer@example.com")
        grant_role(db, user["id"], ROLE_ADMIN)
        db.commit()
        yield c
