"""Pytest configuration and fixtures."""

import asyncio
import os

# settings are read at import time – configure before importing the app
os.environ.setdefault("JWT_SECRET", "test-secret-please-change-0123456789abcdef")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017/tasktracker_test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from tasktracker.main import app  # noqa: E402
from tasktracker.services.database import ensure_indexes, get_db  # noqa: E402
from tests.fake_mongo import FakeDatabase  # noqa: E402

PASSWORD = "longenough1"


class AuthHeaders(dict):
    """Dict subclass that also stores the registered user's id and e-mail."""

    def __init__(self, *args, user_id: str | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


@pytest.fixture
def db():
    """Fresh in-memory database per test, with the production indexes."""
    fake = FakeDatabase()
    asyncio.run(ensure_indexes(fake))
    return fake


@pytest.fixture
def client(db):
    """Test client with the database dependency overridden.

    Not used as a context manager: the lifespan would try to reach MongoDB.
    """
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Factory: register a user and return auth headers for them."""

    def _register(email: str = "test@example.com", name: str = "Test User") -> AuthHeaders:
        response = client.post(
            "/auth/register",
            json={"name": name, "email": email, "password": PASSWORD},
        )
        assert response.status_code == 201, response.text
        data = response.json()
        return AuthHeaders(
            {"Authorization": f"Bearer {data['token']}"},
            user_id=data["user"]["id"],
            email=data["user"]["email"],
        )

    return _register


@pytest.fixture
def auth_headers(register):
    return register()


@pytest.fixture
def other_headers(register):
    return register(email="other@example.com", name="Other User")
