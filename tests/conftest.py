"""
Pytest configuration and fixtures
"""
import os
import tempfile
from pathlib import Path

# Point storage at a throwaway directory before any application module
# reads its configuration
_TMP_DIR = Path(tempfile.mkdtemp(prefix="projects52-tests-"))
os.environ["DATA_DIR"] = str(_TMP_DIR)
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["UPLOAD_DIR"] = str(_TMP_DIR / "uploads")
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_PASSWORD"] = ""
os.environ["GITHUB_LINK_BY_EMAIL"] = "true"

import pytest
from fastapi.testclient import TestClient

from app import app
from core import security
from core.database import SessionLocal, engine
from models.base import Base
from utils.user_manager import UserManager


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(security, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_and_login(client, name: str, email: str, password: str = "secret123"):
    """Register a local user through the API and return (user, headers)."""
    response = client.post(
        "/api/users/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    response = client.post(
        "/api/users/login", json={"email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    payload = response.json()
    return payload["user"], auth_headers(payload["token"])


@pytest.fixture
def alice(client):
    return register_and_login(client, "Alice", "a@x.com")


@pytest.fixture
def bob(client):
    return register_and_login(client, "Bob", "b@x.com")


@pytest.fixture
def admin(client, db_session):
    UserManager(db_session).create_user(
        name="Admin", email="admin@52projects.com", password="admin-pass", role="admin"
    )
    response = client.post(
        "/api/users/login",
        json={"email": "admin@52projects.com", "password": "admin-pass"},
    )
    assert response.status_code == 200, response.text
    payload = response.json()
    return payload["user"], auth_headers(payload["token"])
