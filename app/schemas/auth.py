# File: app/schemas/auth.py
from pydantic import BaseModel, EmailStr, validator
from typing import Optional
from app.core.config import settings


def _check_length(v: str) -> str:
    if len(v) < settings.MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters long")
    return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
    principal_id: int
    membership_number: Optional[str] = None
    must_change_password: bool = False


class CreateAccountRequest(BaseModel):
    """Self-service account for a member imported without one"""
    membership_number: str
    email: EmailStr
    password: str
    first_name: str
    last_name: str

    @validator("password")
    def password_length(cls, v):
        return _check_length(v)

    @validator("membership_number", "first_name", "last_name")
    def not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str

    @validator("new_password")
    def password_length(cls, v):
        return _check_length(v)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str

    @validator("new_password")
    def password_length(cls, v, values):
        _check_length(v)
        if values.get("current_password") == v:
            raise ValueError("New password must be different from the current password")
        return v


class TokenCheck(BaseModel):
    valid: bool


class MessageResponse(BaseModel):
    message: str
    email_sent: Optional[bool] = None
