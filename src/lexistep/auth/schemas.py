"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator


class RegisterRequest(BaseModel):
    """Email registration request."""

    name: str = Field(..., min_length=1, max_length=128)
    username: str = Field(..., min_length=1, max_length=64)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    confirm_password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class LoginRequest(BaseModel):
    """Login with email or username."""

    identifier: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class CheckUsernameRequest(BaseModel):
    username: str = Field(..., max_length=128)


class CheckUsernameResponse(BaseModel):
    available: bool
    message: str


class UserResponse(BaseModel):
    """Own profile."""

    id: int
    email: str
    username: str | None = None
    name: str | None = None
    is_pro: bool = False
    avatar: str
    created_at: datetime | None = None


class TokenResponse(BaseModel):
    """Access token issued on register/login."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
