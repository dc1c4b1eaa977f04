import asyncio
import logging

from fastapi import APIRouter, Depends, Request, status

from auth_api.auth.utils import create_token, decode_token, hash_password, verify_password
from auth_api.config import Settings
from auth_api.errors import (
    AuthAPIError, AuthError, ConflictError, ServerError, TokenError, ValidationError,
)
from auth_api.models import (
    ErrorResponse, ForgotPasswordRequest, LoginRequest, LoginResponse, MessageResponse,
    PasswordResetRequest, RegisterRequest,
)
from auth_api.repositories import USER_EXISTS_MESSAGE, UserRepository
from auth_api.utils.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# Collaborators are attached to app.state by create_app()
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.users


def get_email_service(request: Request) -> EmailService:
    return request.app.state.mailer


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    responses=ERROR_RESPONSES,
)
async def register(
    data: RegisterRequest,
    users: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings),
):
    """Create a user after checking username and email are free"""
    if not data.username or not data.email or not data.password:
        raise ValidationError("Username, email, and password are required")

    try:
        existing_user = await users.find_by_username_or_email(data.username, data.email)
        if existing_user:
            raise ConflictError(USER_EXISTS_MESSAGE)

        hashed_password = await asyncio.to_thread(hash_password, data.password, settings.BCRYPT_ROUNDS)
        user_id = await users.insert(data.username, data.email, hashed_password)
    except AuthAPIError:
        raise
    except Exception as e:
        logger.error(f"Registration error: {type(e).__name__}: {e}")
        raise ServerError("Error registering user", str(e))

    logger.info(f"User registered: {user_id}")
    return {"message": "User registered successfully"}


@router.post("/login", response_model=LoginResponse, responses=ERROR_RESPONSES)
async def login(
    data: LoginRequest,
    users: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings),
):
    """Check credentials and issue a session token"""
    if not data.username or not data.password:
        raise ValidationError("Username and password are required")

    try:
        user = await users.find_by_username(data.username)
        # Same message for unknown user and wrong password
        if not user:
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)

        is_match = await asyncio.to_thread(verify_password, data.password, user["password"])
        if not is_match:
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)

        token = create_token(str(user["_id"]), settings)
    except AuthAPIError:
        raise
    except Exception as e:
        logger.error(f"Login error: {type(e).__name__}: {e}")
        raise ServerError("Error logging in", str(e))

    return {"message": "Login successful", "token": token}


@router.post("/forgot-password", response_model=MessageResponse, responses=ERROR_RESPONSES)
async def forgot_password(
    data: ForgotPasswordRequest,
    users: UserRepository = Depends(get_user_repository),
    mailer: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_settings),
):
    """Email a reset link carrying a signed reset token"""
    if not data.email:
        raise ValidationError("Email is required")

    try:
        user = await users.find_by_email(data.email)
        if not user:
            raise AuthError("Email not found")

        reset_token = create_token(str(user["_id"]), settings)
        await mailer.send_password_reset_email(user["email"], reset_token)
    except AuthAPIError:
        raise
    except Exception as e:
        logger.error(f"Forgot password error: {type(e).__name__}: {e}")
        raise ServerError("Error sending email", str(e))

    return {"message": "Password reset link sent to email"}


@router.post("/reset-password/{reset_token}", response_model=MessageResponse, responses=ERROR_RESPONSES)
async def reset_password(
    reset_token: str,
    data: PasswordResetRequest,
    users: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings),
):
    """Overwrite the password of the user named by a valid reset token.

    The token is not invalidated afterwards; it keeps working until it expires.
    """
    if not data.new_password:
        raise ValidationError("New password is required")

    try:
        user_id = decode_token(reset_token, settings)

        user = await users.find_by_id(user_id)
        if not user:
            raise TokenError("Invalid or expired token", kind=TokenError.UNKNOWN_USER)

        hashed_password = await asyncio.to_thread(hash_password, data.new_password, settings.BCRYPT_ROUNDS)
        await users.update_password(user["_id"], hashed_password)
    except TokenError as e:
        logger.warning(f"Reset password rejected: {e.kind}")
        raise
    except AuthAPIError:
        raise
    except Exception as e:
        logger.error(f"Reset password error: {type(e).__name__}: {e}")
        raise ServerError("Error resetting password", str(e))

    logger.info(f"Password reset for user {user_id}")
    return {"message": "Password has been successfully reset"}
