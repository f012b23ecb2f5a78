"""Writing statistics: per-user word-count windows and community figures."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.config import get_settings
from lexistep.db.models import Streak, UserSettings, WritingEntry
from lexistep.gamification.calendar import stats_windows, utc_now


@dataclass(frozen=True)
class WritingStats:
    today: int
    week: int
    month: int
    total: int
    daily_goal: int
    current_streak: int
    longest_streak: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class CommunityStats:
    words_today: int
    streaking_members: int
    online_writers: int


async def _sum_words(db: AsyncSession, *criteria) -> int:  # noqa: ANN002
    result = await db.execute(
        select(func.coalesce(func.sum(WritingEntry.word_count), 0)).where(*criteria)
    )
    return int(result.scalar_one())


async def get_daily_goal(db: AsyncSession, user_id: int) -> int:
    """Daily word goal from settings, or the default when no settings row exists."""
    result = await db.execute(
        select(UserSettings.daily_word_goal).where(UserSettings.user_id == user_id)
    )
    goal = result.scalar_one_or_none()
    return goal or get_settings().default_daily_goal


async def words_written_today(db: AsyncSession, user_id: int, now: datetime | None = None) -> int:
    windows = stats_windows(now)
    return await _sum_words(
        db,
        WritingEntry.user_id == user_id,
        WritingEntry.created_at >= windows.today_start,
        WritingEntry.created_at <= windows.today_end,
    )


async def get_writing_stats(db: AsyncSession, user_id: int, now: datetime | None = None) -> WritingStats:
    """Aggregate word counts for today, this week, this month and all time.

    Pure read: never creates settings or streak rows. Entries flushed in the
    caller's unit of work are included.
    """
    windows = stats_windows(now)
    owned = WritingEntry.user_id == user_id

    today = await _sum_words(
        db,
        owned,
        WritingEntry.created_at >= windows.today_start,
        WritingEntry.created_at <= windows.today_end,
    )
    not_after_today = WritingEntry.created_at <= windows.today_end
    week = await _sum_words(db, owned, WritingEntry.created_at >= windows.week_start, not_after_today)
    month = await _sum_words(db, owned, WritingEntry.created_at >= windows.month_start, not_after_today)
    total = await _sum_words(db, owned)

    streak_result = await db.execute(
        select(Streak.current_streak, Streak.longest_streak).where(Streak.user_id == user_id)
    )
    streak_row = streak_result.one_or_none()

    return WritingStats(
        today=today,
        week=week,
        month=month,
        total=total,
        daily_goal=await get_daily_goal(db, user_id),
        current_streak=streak_row.current_streak if streak_row else 0,
        longest_streak=streak_row.longest_streak if streak_row else 0,
    )


async def get_community_stats(db: AsyncSession, now: datetime | None = None) -> CommunityStats:
    """Site-wide figures: words today, long-streak members, recently active writers."""
    settings = get_settings()
    if now is None:
        now = utc_now()
    windows = stats_windows(now)

    words_today = await _sum_words(
        db,
        WritingEntry.created_at >= windows.today_start,
        WritingEntry.created_at <= windows.today_end,
    )

    streaking = await db.execute(
        select(func.count())
        .select_from(Streak)
        .where(Streak.current_streak >= settings.streaking_member_threshold)
    )

    online_since = now - timedelta(minutes=settings.online_window_minutes)
    online = await db.execute(
        select(func.count(distinct(WritingEntry.user_id))).where(WritingEntry.created_at >= online_since)
    )

    return CommunityStats(
        words_today=words_today,
        streaking_members=int(streaking.scalar_one()),
        online_writers=int(online.scalar_one()),
    )
