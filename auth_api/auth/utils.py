from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import bcrypt
import jwt
from jwt import PyJWTError

from auth_api.config import Settings
from auth_api.errors import TokenError

logger = logging.getLogger(__name__)

TOKEN_EXPIRED_MESSAGE = "Token has expired. Please request a new password reset link."
TOKEN_INVALID_MESSAGE = "Invalid token. Please check the reset link."

# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 10) -> str:
    """Hash a password with bcrypt at a fixed work factor.

    Passwords longer than 72 bytes are cut to 72 bytes, both here and in
    verify_password, so long passwords hash and verify consistently.
    """
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its bcrypt hash"""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        # Not a bcrypt hash
        return False


def create_token(user_id: str, settings: Settings, issued_at: Optional[datetime] = None) -> str:
    """Create a signed JWT carrying the user id.

    Used for both session tokens (login) and reset tokens (forgot-password);
    the two share one shape and one lifetime.
    """
    issued_at = issued_at or datetime.now(timezone.utc)
    # JWT timestamps are whole seconds
    iat = int(issued_at.timestamp())
    payload = {
        "id": str(user_id),
        "iat": iat,
        "exp": iat + int(timedelta(minutes=settings.TOKEN_EXPIRE_MINUTES).total_seconds()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.ALGORITHM)


def decode_token(token: str, settings: Settings) -> str:
    """Verify signature and expiry and return the user id claim.

    Raises:
        TokenError: kind ``expired`` for a token past its ``exp``, kind
            ``invalid`` for anything malformed, badly signed or missing the
            id claim.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError(TOKEN_EXPIRED_MESSAGE, kind=TokenError.EXPIRED)
    except PyJWTError as e:
        logger.debug(f"Token rejected: {type(e).__name__}")
        raise TokenError(TOKEN_INVALID_MESSAGE, kind=TokenError.INVALID)

    user_id = payload.get("id")
    if not user_id or not isinstance(user_id, str):
        raise TokenError(TOKEN_INVALID_MESSAGE, kind=TokenError.INVALID)
    return user_id
