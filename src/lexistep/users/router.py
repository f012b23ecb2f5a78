"""User router: profile, settings and avatar under /api/v1/users/me."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.auth.dependencies import get_current_user
from lexistep.auth.router import user_response
from lexistep.auth.schemas import UserResponse
from lexistep.database import get_session
from lexistep.db.models import User
from lexistep.users.avatars import AVATARS, avatar_or_default
from lexistep.users.schemas import (
    AvatarResponse,
    AvatarUpdateRequest,
    SettingsResponse,
    SettingsUpdateRequest,
)
from lexistep.users.service import (
    AvatarValidationError,
    SettingsValidationError,
    get_user_settings,
    set_avatar,
    update_daily_goal,
)

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserResponse)
async def get_profile(user: User = Depends(get_current_user)) -> UserResponse:
    """Get own profile."""
    return user_response(user)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@router.get("/me/settings", response_model=SettingsResponse)
async def get_my_settings(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SettingsResponse:
    """Get settings, creating them with defaults on first access."""
    settings = await get_user_settings(db, user.id)
    return SettingsResponse(daily_word_goal=settings.daily_word_goal)


@router.post("/me/settings", response_model=SettingsResponse)
async def update_my_settings(
    body: SettingsUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SettingsResponse:
    """Update the daily word goal."""
    try:
        settings = await update_daily_goal(db, user.id, body.daily_word_goal)
    except SettingsValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return SettingsResponse(daily_word_goal=settings.daily_word_goal)


# ---------------------------------------------------------------------------
# Avatar
# ---------------------------------------------------------------------------


@router.get("/me/avatar", response_model=AvatarResponse)
async def get_my_avatar(user: User = Depends(get_current_user)) -> AvatarResponse:
    """Current avatar and the catalog to choose from."""
    return AvatarResponse(avatar=avatar_or_default(user.avatar), available=list(AVATARS))


@router.post("/me/avatar", response_model=AvatarResponse)
async def update_my_avatar(
    body: AvatarUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> AvatarResponse:
    """Select an avatar from the catalog."""
    try:
        await set_avatar(db, user, body.avatar)
    except AvatarValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return AvatarResponse(avatar=user.avatar, available=list(AVATARS))
