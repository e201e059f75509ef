"""
Shared fixtures: an in-memory MongoDB per test and a TestClient bound to it.
"""
import os
import tempfile

os.environ.pop("DATABASE_URL", None)
os.environ["UPLOAD_PATH"] = tempfile.mkdtemp(prefix="writory-uploads-")
os.environ["EMAIL_SERVICE"] = "console"
os.environ["AUTH_RATE_LIMIT"] = "1000"

import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from main import app
from ratelimit import auth_limiter


@pytest.fixture
def db(monkeypatch):
    """Fresh mongomock database wired in as the app database."""
    mock_db = mongomock.MongoClient()["writory-test"]
    monkeypatch.setattr(database, "db", mock_db)
    database.ensure_indexes()
    auth_limiter.reset()
    return mock_db


@pytest.fixture
def client(db):
    return TestClient(app)


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def signup(client, email="test@example.com", password="password123", name="Test User"):
    response = client.post("/api/auth/signup", json={"email": email, "password": password, "name": name})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def user(client):
    """Signed-up user with tokens."""
    return signup(client)


@pytest.fixture
def other_user(client):
    return signup(client, email="other@example.com", name="Other User")


def create_post(client, token, **fields):
    data = {"title": "Test Post", "body": "This is a test post body.", "is_published": True}
    data.update(fields)
    response = client.post("/api/posts", json=data, headers=auth_headers(token))
    assert response.status_code == 201, response.text
    return response.json()
