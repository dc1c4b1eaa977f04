"""
Error taxonomy for the auth API.

Business-rule failures are reported as 400 with a short ``error`` string;
unexpected failures as 500 with the underlying message in ``details``.
"""

from typing import Optional
from fastapi import status


class AuthAPIError(Exception):
    """Base class for errors that map directly to an HTTP response"""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, error: str, details: Optional[str] = None):
        super().__init__(error)
        self.error = error
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(AuthAPIError):
    """A required field is missing or empty"""


class ConflictError(AuthAPIError):
    """Username or email already taken"""


class AuthError(AuthAPIError):
    """Credentials or account lookup rejected"""


class TokenError(AuthAPIError):
    """Reset token expired, malformed or not bound to an existing user"""

    EXPIRED = "expired"
    INVALID = "invalid"
    UNKNOWN_USER = "unknown_user"

    def __init__(self, error: str, kind: str = INVALID):
        super().__init__(error)
        self.kind = kind


class ServerError(AuthAPIError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, error: str, details: Optional[str] = None):
        super().__init__(error, details if details is not None else "")


class MailDeliveryError(Exception):
    """The mail transport refused or failed to deliver a message"""
