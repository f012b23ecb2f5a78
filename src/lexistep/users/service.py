"""User settings and avatar business logic."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from lexistep.config import get_settings
from lexistep.db.models import User, UserSettings
from lexistep.db.upsert import insert_for, insert_ignore
from lexistep.users.avatars import AVATARS, is_known_avatar

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


class SettingsValidationError(ValueError):
    """Raised for an out-of-range daily goal."""


class AvatarValidationError(ValueError):
    """Raised for an avatar id outside the catalog."""


async def get_user_settings(db: AsyncSession, user_id: int) -> UserSettings:
    """Return the user's settings row, creating it with the default goal if absent."""
    created = await insert_ignore(
        db,
        UserSettings,
        ["user_id"],
        user_id=user_id,
        daily_word_goal=get_settings().default_daily_goal,
        updated_at=datetime.now(timezone.utc),
    )
    if created:
        await db.commit()
        logger.info("settings_created", user_id=user_id)
    result = await db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
    return result.scalar_one()


def validate_daily_goal(goal: int) -> int:
    """Return ``goal`` if it is an integer within the configured bounds."""
    settings = get_settings()
    if isinstance(goal, bool) or not isinstance(goal, int):
        msg = "Daily goal must be an integer"
        raise SettingsValidationError(msg)
    if not settings.daily_goal_min <= goal <= settings.daily_goal_max:
        msg = f"Daily goal must be between {settings.daily_goal_min} and {settings.daily_goal_max} words"
        raise SettingsValidationError(msg)
    return goal


async def update_daily_goal(db: AsyncSession, user_id: int, goal: int) -> UserSettings:
    """
    Set the daily word goal, creating the settings row if needed.

    Raises:
        SettingsValidationError: If the goal is outside the allowed range.
    """
    goal = validate_daily_goal(goal)
    now = datetime.now(timezone.utc)
    stmt = insert_for(db, UserSettings).values(user_id=user_id, daily_word_goal=goal, updated_at=now)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id"],
        set_={"daily_word_goal": stmt.excluded.daily_word_goal, "updated_at": stmt.excluded.updated_at},
    )
    await db.execute(stmt)
    await db.commit()
    logger.info("daily_goal_updated", user_id=user_id, goal=goal)

    result = await db.execute(
        select(UserSettings)
        .where(UserSettings.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def set_avatar(db: AsyncSession, user: User, avatar_id: str) -> User:
    """
    Select an avatar from the catalog.

    Raises:
        AvatarValidationError: If ``avatar_id`` is not in the catalog.
    """
    if not is_known_avatar(avatar_id):
        msg = f"Unknown avatar: {avatar_id}. Choose one of: {', '.join(AVATARS)}"
        raise AvatarValidationError(msg)
    user.avatar = avatar_id
    await db.commit()
    logger.info("avatar_updated", user_id=user.id, avatar=avatar_id)
    return user
