from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# Fields are optional at the schema level; the handlers decide which are
# required so a missing field gets the endpoint's own 400 message.

class RegisterRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None


class PasswordResetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_password: Optional[str] = Field(default=None, alias="newPassword")


class MessageResponse(BaseModel):
    message: str


class LoginResponse(BaseModel):
    message: str
    token: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
