import asyncio
from unittest.mock import AsyncMock, MagicMock

import jwt
import pytest
from fastapi.testclient import TestClient
from pymongo.errors import AutoReconnect

from auth_api.main import create_app


class TestLogin:
    """POST /api/users/login"""

    def test_login_success(self, client, registered_user, user_repository, settings):
        response = client.post("/api/users/login", json={
            "username": registered_user["username"],
            "password": registered_user["password"],
        })

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"

        payload = jwt.decode(body["token"], settings.JWT_SECRET, algorithms=["HS256"])
        stored = asyncio.run(user_repository.find_by_username(registered_user["username"]))
        assert payload["id"] == str(stored["_id"])
        assert payload["exp"] - payload["iat"] == 3600

    def test_token_carries_only_user_id(self, client, registered_user, settings):
        response = client.post("/api/users/login", json={
            "username": registered_user["username"],
            "password": registered_user["password"],
        })
        payload = jwt.decode(response.json()["token"], settings.JWT_SECRET, algorithms=["HS256"])
        assert set(payload) == {"id", "iat", "exp"}

    def test_wrong_password_and_unknown_user_look_identical(self, client, registered_user):
        wrong_password = client.post("/api/users/login", json={
            "username": registered_user["username"],
            "password": "not-the-password",
        })
        unknown_user = client.post("/api/users/login", json={
            "username": "nobody",
            "password": "whatever",
        })

        assert wrong_password.status_code == unknown_user.status_code == 400
        assert wrong_password.json() == unknown_user.json() == {"error": "Invalid username or password"}

    @pytest.mark.parametrize("payload", [
        {"username": "alice"},
        {"password": "pw"},
        {"username": "", "password": "pw"},
        {"username": "alice", "password": ""},
    ])
    def test_login_missing_fields(self, client, payload):
        response = client.post("/api/users/login", json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": "Username and password are required"}

    def test_login_store_failure(self, settings, mailer):
        users = MagicMock()
        users.find_by_username = AsyncMock(side_effect=AutoReconnect("connection reset"))
        app = create_app(settings=settings, users=users, mailer=mailer)

        with TestClient(app) as client:
            response = client.post("/api/users/login", json={"username": "alice", "password": "pw"})

        assert response.status_code == 500
        assert response.json() == {"error": "Error logging in", "details": "connection reset"}

    def test_login_with_non_bcrypt_hash_is_rejected(self, settings, mailer):
        """A corrupt stored hash is a failed match, not a server error"""
        users = MagicMock()
        users.find_by_username = AsyncMock(return_value={
            "_id": "65a000000000000000000001",
            "username": "legacy",
            "password": "plaintext-from-old-import",
        })
        app = create_app(settings=settings, users=users, mailer=mailer)

        with TestClient(app) as client:
            response = client.post("/api/users/login", json={
                "username": "legacy", "password": "plaintext-from-old-import",
            })

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid username or password"}
