"""
API Client for the auth backend
Thin wrapper used by the forms: one call per endpoint, and a message to show
"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)


class APIResult:
    """Outcome of one form submission"""

    def __init__(self, ok: bool, status_code: int, message: str, data: Optional[Dict[str, Any]] = None):
        self.ok = ok
        self.status_code = status_code
        self.message = message
        self.data = data or {}

    def __repr__(self):
        return f"APIResult(ok={self.ok}, status_code={self.status_code}, message={self.message!r})"


class APIClient:
    """HTTP client for the auth API"""

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip('/')
        self.client = client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
        self.token: Optional[str] = None

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def _post(self, path: str, payload: Dict[str, Any], fallback: str) -> APIResult:
        """POST a form and turn the response into a displayable message.

        Server errors show the ``error`` field when there is one, otherwise the
        form's own fallback text.
        """
        try:
            response = await self.client.post(f"{self.base_url}/api/users{path}", json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"Request to {path} failed: {type(e).__name__}")
            return APIResult(False, 0, fallback)

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.is_success:
            return APIResult(True, response.status_code, data.get("message", ""), data)
        return APIResult(False, response.status_code, data.get("error") or fallback, data)

    async def register(self, username: str, email: str, password: str) -> APIResult:
        return await self._post(
            "/register",
            {"username": username, "email": email, "password": password},
            "Registration failed",
        )

    async def login(self, username: str, password: str) -> APIResult:
        result = await self._post("/login", {"username": username, "password": password}, "Login failed")
        if result.ok:
            self.token = result.data.get("token")
        return result

    async def forgot_password(self, email: str) -> APIResult:
        # Same early check as the form: no request for an empty field
        if not email:
            return APIResult(False, 0, "Email is required")
        return await self._post(
            "/forgot-password", {"email": email}, "Failed to send password recovery email"
        )

    async def reset_password(self, reset_token: str, new_password: str) -> APIResult:
        return await self._post(
            f"/reset-password/{reset_token}", {"newPassword": new_password}, "Failed to reset password"
        )
