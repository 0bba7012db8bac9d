"""
Pytest configuration and fixtures for all tests.
"""

import os
import tempfile

# Must be set before config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="bimbel-uploads-"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import create_app
from config import Settings
from core.database import get_db, init_db

API = "/api/v1"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def SessionTest(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(SessionTest):
    """Create a new database session for a test."""
    session = SessionTest()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        jwt_secret="test-secret",
        jwt_exp_hours=1,
        bcrypt_rounds=4,
        upload_dir=tmp_path / "uploads",
        api_prefix=API,
    )


def build_client(settings, SessionTest) -> TestClient:
    app = create_app(settings)

    def override_get_db():
        db = SessionTest()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def client(settings, SessionTest):
    return build_client(settings, SessionTest)


@pytest.fixture
def stored_thumbnails(settings):
    """Return a callable listing the files currently in the thumbnail dir."""

    def _list():
        folder = settings.upload_dir / "thumbnails"
        if not folder.exists():
            return []
        return sorted(p.name for p in folder.iterdir())

    return _list


def register(client, email, role, name="User", password="secret-pass"):
    response = client.post(
        f"{API}/register",
        json={"name": name, "email": email, "password": password, "role": role},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(client):
    data = register(client, "admin@x.com", "admin", name="Admin")
    return {"token": data["token"], "user": data["user"], "headers": auth_header(data["token"])}


@pytest.fixture
def tutor(client):
    data = register(client, "tutor@x.com", "tutor", name="Tutor One")
    return {"token": data["token"], "user": data["user"], "headers": auth_header(data["token"])}


@pytest.fixture
def other_tutor(client):
    data = register(client, "tutor2@x.com", "tutor", name="Tutor Two")
    return {"token": data["token"], "user": data["user"], "headers": auth_header(data["token"])}


@pytest.fixture
def participant(client):
    data = register(client, "peserta@x.com", "participant", name="Peserta")
    return {"token": data["token"], "user": data["user"], "headers": auth_header(data["token"])}


@pytest.fixture
def catalog(client, admin):
    """One active feature with one active subject."""
    feature = client.post(
        f"{API}/features",
        json={"name": "Private Class", "roles": "admin,tutor,participant"},
        headers=admin["headers"],
    ).json()["data"]
    subject = client.post(
        f"{API}/matpels",
        json={"feature_id": feature["id"], "name": "Mathematics"},
        headers=admin["headers"],
    ).json()["data"]
    return {"feature_id": feature["id"], "subject_id": subject["id"]}
