"""
Pytest configuration file
Builds the app around an in-memory MongoDB and a patched SMTP sender
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from auth_api.config import Settings
from auth_api.main import create_app
from auth_api.repositories import UserRepository
from auth_api.utils.email_service import EmailService

TEST_SECRET = "test-secret-key-for-pytest-only-do-not-use-in-production"


@pytest.fixture
def settings():
    return Settings(
        JWT_SECRET=TEST_SECRET,
        # Lowest bcrypt cost keeps the suite fast
        BCRYPT_ROUNDS=4,
        EMAIL="sender@example.com",
        EMAIL_PASSWORD="app-password",
        EMAIL_SERVICE="gmail",
        RESET_URL_BASE="http://localhost:5000/reset-password",
        DEBUG=False,
    )


@pytest.fixture
def users_db():
    return AsyncMongoMockClient()["auth_test"]


@pytest.fixture
def user_repository(users_db):
    return UserRepository(users_db.users)


@pytest.fixture
def mailer(settings):
    service = EmailService(settings)
    service._send_smtp_email = MagicMock(return_value=None)
    return service


@pytest.fixture
def app(settings, user_repository, mailer):
    return create_app(settings=settings, users=user_repository, mailer=mailer)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def registered_user(client):
    """A user created through the API"""
    user = {"username": "alice", "email": "alice@example.com", "password": "Secret123!"}
    response = client.post("/api/users/register", json=user)
    assert response.status_code == 201
    return user
