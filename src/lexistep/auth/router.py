"""Authentication router: all /api/v1/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.auth.jwt import create_access_token
from lexistep.auth.password import PasswordStrengthError
from lexistep.auth.schemas import (
    CheckUsernameRequest,
    CheckUsernameResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from lexistep.auth.service import (
    DuplicateAccountError,
    InvalidCredentialsError,
    RegistrationError,
    authenticate_user,
    check_username,
    register_user,
)
from lexistep.config import get_settings
from lexistep.database import get_session
from lexistep.db.models import User
from lexistep.users.avatars import avatar_or_default

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def user_response(user: User) -> UserResponse:
    """Build a UserResponse from a User model."""
    return UserResponse(
        id=user.id,
        email=user.email,
        username=user.username,
        name=user.name,
        is_pro=user.is_pro,
        avatar=avatar_or_default(user.avatar),
        created_at=user.created_at,
    )


def _issue_token(user: User) -> TokenResponse:
    settings = get_settings()
    return TokenResponse(
        access_token=create_access_token(user.id),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=user_response(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Register with name, username, email and password."""
    try:
        user = await register_user(
            db,
            name=body.name,
            username=body.username,
            email=body.email,
            password=body.password,
            confirm_password=body.confirm_password,
        )
    except DuplicateAccountError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except (RegistrationError, PasswordStrengthError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    await db.commit()
    logger.info("user_registered", user_id=user.id)
    return _issue_token(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Login with email or username and password."""
    try:
        user = await authenticate_user(db, body.identifier, body.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    return _issue_token(user)


@router.post("/check-username", response_model=CheckUsernameResponse)
async def check_username_availability(
    body: CheckUsernameRequest,
    db: AsyncSession = Depends(get_session),
) -> CheckUsernameResponse:
    """Check whether a username is free."""
    try:
        available, message = await check_username(db, body.username)
    except RegistrationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return CheckUsernameResponse(available=available, message=message)
