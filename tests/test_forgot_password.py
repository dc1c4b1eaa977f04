"""
Tests for reset-link issuance via /api/users/forgot-password
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import jwt
from fastapi.testclient import TestClient

from auth_api.errors import MailDeliveryError
from auth_api.main import create_app

RESET_PREFIX = "http://localhost:5000/reset-password/"


class TestForgotPassword:

    def test_sends_exactly_one_reset_mail(self, client, registered_user, mailer, settings, user_repository):
        response = client.post("/api/users/forgot-password", json={"email": registered_user["email"]})

        assert response.status_code == 200
        assert response.json() == {"message": "Password reset link sent to email"}

        mailer._send_smtp_email.assert_called_once()
        to_email, subject, body = mailer._send_smtp_email.call_args.args
        assert to_email == registered_user["email"]
        assert subject == "Password Reset"
        assert body.startswith("Click the link to reset your password: " + RESET_PREFIX)

        token = body.split(RESET_PREFIX, 1)[1]
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=["HS256"])
        stored = asyncio.run(user_repository.find_by_email(registered_user["email"]))
        assert payload["id"] == str(stored["_id"])
        assert payload["exp"] - payload["iat"] == 3600

    def test_unknown_email(self, client, mailer):
        response = client.post("/api/users/forgot-password", json={"email": "ghost@example.com"})

        assert response.status_code == 400
        assert response.json() == {"error": "Email not found"}
        mailer._send_smtp_email.assert_not_called()

    def test_missing_email(self, client, mailer):
        for payload in ({}, {"email": ""}):
            response = client.post("/api/users/forgot-password", json=payload)
            assert response.status_code == 400
            assert response.json() == {"error": "Email is required"}
        mailer._send_smtp_email.assert_not_called()

    def test_mail_transport_failure(self, client, registered_user, mailer):
        mailer._send_smtp_email.side_effect = MailDeliveryError("535 Authentication failed")

        response = client.post("/api/users/forgot-password", json={"email": registered_user["email"]})

        assert response.status_code == 500
        assert response.json() == {"error": "Error sending email", "details": "535 Authentication failed"}

    def test_store_failure(self, settings, mailer):
        users = MagicMock()
        users.find_by_email = AsyncMock(side_effect=RuntimeError("database unavailable"))
        app = create_app(settings=settings, users=users, mailer=mailer)

        with TestClient(app) as client:
            response = client.post("/api/users/forgot-password", json={"email": "a@example.com"})

        assert response.status_code == 500
        assert response.json() == {"error": "Error sending email", "details": "database unavailable"}

    def test_reset_link_uses_configured_base(self, settings):
        from auth_api.utils.email_service import EmailService

        settings.RESET_URL_BASE = "https://app.example.com/reset-password/"
        service = EmailService(settings)
        assert service.build_reset_link("abc.def.ghi") == "https://app.example.com/reset-password/abc.def.ghi"
