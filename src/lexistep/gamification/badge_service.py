"""Badge award service with duplicate prevention."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.db.enums import BadgeCondition
from lexistep.db.models import Badge, UserBadge
from lexistep.db.upsert import insert_ignore
from lexistep.gamification.conditions import EvaluationContext, badge_icon, is_satisfied
from lexistep.gamification.stats_service import get_writing_stats

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "fr"


@dataclass(frozen=True)
class GalleryBadge:
    id: int
    slug: str
    name: str
    description: str
    category: str
    icon: str
    earned: bool


async def award_badge(db: AsyncSession, user_id: int, badge: Badge, now: datetime | None = None) -> bool:
    """Award a badge to a user.

    Returns True if a new award row was written, False if the user already
    held it. Relies on the (user_id, badge_id) unique constraint, so a
    concurrent duplicate is a no-op rather than an error.
    """
    inserted = await insert_ignore(
        db,
        UserBadge,
        ["user_id", "badge_id"],
        user_id=user_id,
        badge_id=badge.id,
        earned_at=now or datetime.now(timezone.utc),
    )
    if inserted:
        logger.info("Badge %s awarded to user %d", badge.slug, user_id)
    return inserted


async def get_unearned_badges(db: AsyncSession, user_id: int) -> list[Badge]:
    """Catalog entries the user does not hold yet."""
    held = exists().where(UserBadge.badge_id == Badge.id, UserBadge.user_id == user_id)
    result = await db.execute(select(Badge).where(~held).order_by(Badge.sort_order, Badge.id))
    return list(result.scalars())


async def award_streak_badges(
    db: AsyncSession,
    user_id: int,
    current_streak: int,
    now: datetime | None = None,
) -> list[Badge]:
    """Award every unearned streak badge whose threshold is within ``current_streak``."""
    result = await db.execute(
        select(Badge)
        .where(
            Badge.condition == BadgeCondition.STREAK.value,
            Badge.condition_value.is_not(None),
            Badge.condition_value <= current_streak,
        )
        .order_by(Badge.condition_value)
    )
    awarded = []
    for badge in result.scalars():
        if await award_badge(db, user_id, badge, now):
            awarded.append(badge)
    return awarded


async def evaluate_badges(
    db: AsyncSession,
    user_id: int,
    session_words: int,
    now: datetime | None = None,
) -> list[Badge]:
    """Award every unearned badge whose condition now holds.

    ``session_words`` is the word count of the submission that triggered the
    evaluation. Stats are read through ``db`` so an entry flushed in the same
    unit of work is already part of the totals.

    Returns the newly awarded badges (possibly empty).
    """
    candidates = await get_unearned_badges(db, user_id)
    if not candidates:
        return []

    ctx = EvaluationContext(
        stats=await get_writing_stats(db, user_id, now),
        session_words=session_words,
    )

    awarded = []
    for badge in candidates:
        if not is_satisfied(badge.condition, badge.condition_value, ctx):
            continue
        if await award_badge(db, user_id, badge, now):
            awarded.append(badge)
    return awarded


def localized(badge: Badge, locale: str = DEFAULT_LOCALE) -> tuple[str, str]:
    """(name, description) in ``locale``, falling back to the badge defaults."""
    translation = next((t for t in badge.translations if t.locale == locale), None)
    name = (translation.name if translation else None) or badge.default_name or "Unnamed badge"
    description = (
        (translation.description if translation else None)
        or badge.default_description
        or "No description available"
    )
    return name, description


async def list_user_badges(db: AsyncSession, user_id: int, locale: str = DEFAULT_LOCALE) -> list[GalleryBadge]:
    """Full catalog annotated with what the user has earned."""
    badges = (await db.execute(select(Badge).order_by(Badge.sort_order, Badge.id))).scalars().all()
    earned_result = await db.execute(select(UserBadge.badge_id).where(UserBadge.user_id == user_id))
    earned_ids = set(earned_result.scalars())

    gallery = []
    for badge in badges:
        name, description = localized(badge, locale)
        gallery.append(GalleryBadge(
            id=badge.id,
            slug=badge.slug,
            name=name,
            description=description,
            category=badge.category or "Other",
            icon=badge_icon(badge.condition, badge.condition_value),
            earned=badge.id in earned_ids,
        ))
    return gallery
