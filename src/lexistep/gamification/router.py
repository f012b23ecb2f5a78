"""Gamification API endpoints: stats, streak, badges and leaderboard."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.auth.dependencies import get_current_user, get_optional_user
from lexistep.config import get_settings
from lexistep.database import get_session
from lexistep.db.models import Badge, User
from lexistep.gamification.badge_service import DEFAULT_LOCALE, list_user_badges, localized
from lexistep.gamification.conditions import badge_icon
from lexistep.gamification.leaderboard_service import get_leaderboard
from lexistep.gamification.schemas import (
    AllBadgesResponse,
    BadgeDefinitionResponse,
    CommunityStatsResponse,
    GalleryBadgeResponse,
    LeaderboardEntryResponse,
    LeaderboardResponse,
    StreakResponse,
    UserBadgesResponse,
    WritingStatsResponse,
)
from lexistep.gamification.stats_service import get_community_stats, get_writing_stats
from lexistep.gamification.streak_service import load_streak

router = APIRouter(prefix="/api/v1", tags=["Gamification"])


# ── Public endpoints ──


@router.get("/badges", response_model=AllBadgesResponse)
async def list_badges(
    locale: str = Query(DEFAULT_LOCALE, max_length=8),
    db: AsyncSession = Depends(get_session),
) -> AllBadgesResponse:
    """Get the badge catalog."""
    result = await db.execute(select(Badge).order_by(Badge.sort_order, Badge.id))
    items = []
    for b in result.scalars():
        name, description = localized(b, locale)
        items.append(BadgeDefinitionResponse(
            slug=b.slug,
            name=name,
            description=description,
            category=b.category or "Other",
            icon=badge_icon(b.condition, b.condition_value),
            condition=b.condition,
            condition_value=b.condition_value,
        ))
    return AllBadgesResponse(badges=items)


@router.get("/stats/community", response_model=CommunityStatsResponse)
async def community_stats(db: AsyncSession = Depends(get_session)) -> CommunityStatsResponse:
    """Site-wide writing activity."""
    stats = await get_community_stats(db)
    return CommunityStatsResponse(**asdict(stats))


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    limit: int | None = Query(None, ge=1, le=200),
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
) -> LeaderboardResponse:
    """Top writers. Authenticated callers also get their own rank."""
    board = await get_leaderboard(
        db,
        limit=limit or get_settings().leaderboard_size,
        user_id=user.id if user else None,
    )
    return LeaderboardResponse(
        entries=[LeaderboardEntryResponse(**asdict(e)) for e in board.entries],
        my_rank=board.my_rank,
        me=LeaderboardEntryResponse(**asdict(board.me)) if board.me else None,
    )


# ── Authenticated endpoints ──


@router.get("/users/me/stats", response_model=WritingStatsResponse)
async def my_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> WritingStatsResponse:
    """Word counts for today, this week, this month and all time."""
    stats = await get_writing_stats(db, user.id)
    return WritingStatsResponse(**stats.as_dict())


@router.get("/users/me/streak", response_model=StreakResponse)
async def my_streak(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> StreakResponse:
    """Current and longest streak."""
    state = await load_streak(db, user.id)
    return StreakResponse(
        current_streak=state.current_streak,
        longest_streak=state.longest_streak,
        last_writing_day=state.last_writing_day,
    )


@router.get("/users/me/badges", response_model=UserBadgesResponse)
async def my_badges(
    locale: str = Query(DEFAULT_LOCALE, max_length=8),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserBadgesResponse:
    """Badge gallery with the caller's earned flags."""
    gallery = await list_user_badges(db, user.id, locale)
    return UserBadgesResponse(
        badges=[GalleryBadgeResponse(**asdict(b)) for b in gallery],
        total_available=len(gallery),
        total_earned=sum(1 for b in gallery if b.earned),
    )
