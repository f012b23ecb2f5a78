"""Daily writing streaks.

The streak row is advanced at most once per calendar day. Writes use a
compare-and-set on ``last_writing_day`` so that when two first-of-the-day
submissions race, only the one that commits first advances the streak and
the other observes the day as already counted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.config import get_settings
from lexistep.db.models import Badge, Streak
from lexistep.db.upsert import insert_ignore
from lexistep.gamification.badge_service import award_streak_badges
from lexistep.gamification.calendar import local_date, utc_now
from lexistep.gamification.stats_service import get_daily_goal, words_written_today

logger = logging.getLogger(__name__)

_MAX_CAS_ATTEMPTS = 3


@dataclass(frozen=True)
class StreakState:
    current_streak: int
    longest_streak: int
    last_writing_day: date | None


@dataclass
class StreakUpdate:
    """Outcome of recording a writing day."""

    state: StreakState
    advanced: bool
    new_badges: list[Badge] = field(default_factory=list)


def next_streak(state: StreakState, today: date) -> StreakState | None:
    """Compute the streak after a write on ``today``.

    Returns None when ``today`` is already counted, including a stored day
    that lies after ``today`` (the stored day never moves backwards).
    """
    last = state.last_writing_day
    if last is None:
        return StreakState(1, max(state.longest_streak, 1), today)

    gap = (today - last).days
    if gap <= 0:  # same day, or a stored day ahead of today: already counted
        return None
    if gap == 1:
        current = state.current_streak + 1
        return StreakState(current, max(state.longest_streak, current), today)
    return StreakState(1, max(state.longest_streak, 1), today)


async def get_or_create_streak(db: AsyncSession, user_id: int) -> StreakState:
    """Read the user's streak, creating the zeroed row on first access."""
    await insert_ignore(db, Streak, ["user_id"], user_id=user_id, current_streak=0, longest_streak=0)
    return await load_streak(db, user_id)


async def load_streak(db: AsyncSession, user_id: int) -> StreakState:
    result = await db.execute(
        select(Streak.current_streak, Streak.longest_streak, Streak.last_writing_day)
        .where(Streak.user_id == user_id)
    )
    row = result.one_or_none()
    if row is None:
        return StreakState(0, 0, None)
    return StreakState(row.current_streak, row.longest_streak, row.last_writing_day)


async def compare_and_set_streak(
    db: AsyncSession,
    user_id: int,
    expected: StreakState,
    new: StreakState,
) -> bool:
    """Write ``new`` only if the stored last day still equals ``expected``'s.

    Returns False when another unit of work moved the row first.
    """
    if expected.last_writing_day is None:
        guard = Streak.last_writing_day.is_(None)
    else:
        guard = Streak.last_writing_day == expected.last_writing_day

    result = await db.execute(
        update(Streak)
        .where(Streak.user_id == user_id, guard)
        .values(
            current_streak=new.current_streak,
            longest_streak=new.longest_streak,
            last_writing_day=new.last_writing_day,
            updated_at=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )
    return (result.rowcount or 0) == 1


async def record_writing_day(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> StreakUpdate:
    """Advance the user's streak for a write at ``now``.

    Idempotent within a calendar day. When the streak advances, unearned
    streak badges up to the new current streak are awarded. Only flushes;
    the caller owns the transaction.
    """
    if now is None:
        now = utc_now()
    today = local_date(now)

    state = await get_or_create_streak(db, user_id)

    if get_settings().streak_requires_daily_goal:
        written = await words_written_today(db, user_id, now)
        goal = await get_daily_goal(db, user_id)
        if written < goal:
            logger.debug("Daily goal not reached for user %d (%d/%d)", user_id, written, goal)
            return StreakUpdate(state=state, advanced=False)

    for _ in range(_MAX_CAS_ATTEMPTS):
        new = next_streak(state, today)
        if new is None:
            if state.last_writing_day is not None and state.last_writing_day > today:
                logger.warning(
                    "Streak for user %d has last day %s after today %s; leaving it unchanged",
                    user_id, state.last_writing_day, today,
                )
            return StreakUpdate(state=state, advanced=False)

        if await compare_and_set_streak(db, user_id, state, new):
            badges = await award_streak_badges(db, user_id, new.current_streak, now)
            return StreakUpdate(state=new, advanced=True, new_badges=badges)

        state = await load_streak(db, user_id)

    logger.warning("Streak update for user %d lost %d races; keeping stored state", user_id, _MAX_CAS_ATTEMPTS)
    return StreakUpdate(state=state, advanced=False)
