"""Integration tests for the streak engine against a real database."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.config import get_settings
from lexistep.database import Database
from lexistep.db.enums import ExerciseType
from lexistep.db.models import Streak, UserBadge, WritingEntry
from lexistep.gamification.streak_service import (
    StreakState,
    compare_and_set_streak,
    get_or_create_streak,
    load_streak,
    next_streak,
    record_writing_day,
)

NOW = datetime(2026, 3, 11, 12, 0, tzinfo=timezone.utc)
TODAY = date(2026, 3, 11)


async def _set_streak(db: AsyncSession, user_id: int, current: int, longest: int, last: date | None) -> None:
    await get_or_create_streak(db, user_id)
    await db.execute(
        update(Streak)
        .where(Streak.user_id == user_id)
        .values(current_streak=current, longest_streak=longest, last_writing_day=last)
    )
    await db.commit()


class TestRecordWritingDay:
    """Streak transitions persisted through record_writing_day."""

    @pytest.mark.asyncio
    async def test_first_write_creates_row(self, db_session, user):
        update_ = await record_writing_day(db_session, user.id, NOW)
        await db_session.commit()

        assert update_.advanced is True
        assert update_.state == StreakState(1, 1, TODAY)
        assert await load_streak(db_session, user.id) == StreakState(1, 1, TODAY)

    @pytest.mark.asyncio
    async def test_second_write_same_day_is_noop(self, db_session, user):
        await record_writing_day(db_session, user.id, NOW)
        await db_session.commit()

        again = await record_writing_day(db_session, user.id, NOW + timedelta(hours=3))
        await db_session.commit()

        assert again.advanced is False
        assert again.new_badges == []
        assert await load_streak(db_session, user.id) == StreakState(1, 1, TODAY)

    @pytest.mark.asyncio
    async def test_continuity(self, db_session, user):
        await _set_streak(db_session, user.id, 4, 4, TODAY - timedelta(days=1))

        result = await record_writing_day(db_session, user.id, NOW)
        await db_session.commit()

        assert result.state == StreakState(5, 5, TODAY)

    @pytest.mark.asyncio
    async def test_reset_keeps_longest(self, db_session, user):
        await _set_streak(db_session, user.id, 6, 10, TODAY - timedelta(days=3))

        result = await record_writing_day(db_session, user.id, NOW)
        await db_session.commit()

        assert result.state == StreakState(1, 10, TODAY)

    @pytest.mark.asyncio
    async def test_future_last_day_left_untouched(self, db_session, user):
        tomorrow = TODAY + timedelta(days=1)
        await _set_streak(db_session, user.id, 3, 3, tomorrow)

        result = await record_writing_day(db_session, user.id, NOW)
        await db_session.commit()

        assert result.advanced is False
        assert await load_streak(db_session, user.id) == StreakState(3, 3, tomorrow)

    @pytest.mark.asyncio
    async def test_reaching_three_awards_streak_badge(self, db_session, user):
        await _set_streak(db_session, user.id, 2, 2, TODAY - timedelta(days=1))

        result = await record_writing_day(db_session, user.id, NOW)
        await db_session.commit()

        assert [b.slug for b in result.new_badges] == ["streak_3"]

    @pytest.mark.asyncio
    async def test_daily_goal_gate(self, db_session, user, monkeypatch):
        monkeypatch.setattr(get_settings(), "streak_requires_daily_goal", True)

        db_session.add(WritingEntry(
            user_id=user.id, title="t", content="c", word_count=50,
            exercise_type=ExerciseType.FREE_WRITING, created_at=NOW,
        ))
        await db_session.flush()
        gated = await record_writing_day(db_session, user.id, NOW)
        assert gated.advanced is False

        db_session.add(WritingEntry(
            user_id=user.id, title="t", content="c", word_count=150,
            exercise_type=ExerciseType.FREE_WRITING, created_at=NOW,
        ))
        await db_session.flush()
        passed = await record_writing_day(db_session, user.id, NOW)
        await db_session.commit()
        assert passed.advanced is True
        assert passed.state.current_streak == 1


class TestConcurrentFirstWrites:
    """Two first-of-day submissions: only the one that commits first advances."""

    @pytest.mark.asyncio
    async def test_commit_order_decides(self, database: Database, user):
        async with database.session_factory() as setup:
            await _set_streak(setup, user.id, 4, 4, TODAY - timedelta(days=1))

        async with database.session_factory() as a, database.session_factory() as b:
            # B reads before A writes, so B holds a stale "yesterday" view.
            stale = await load_streak(b, user.id)
            assert stale.last_writing_day == TODAY - timedelta(days=1)

            won = await record_writing_day(a, user.id, NOW)
            await a.commit()
            assert won.state == StreakState(5, 5, TODAY)

            lost = await compare_and_set_streak(b, user.id, stale, next_streak(stale, TODAY))
            assert lost is False
            await b.rollback()

            retry = await record_writing_day(b, user.id, NOW)
            await b.commit()
            assert retry.advanced is False
            assert retry.state == StreakState(5, 5, TODAY)

        async with database.session_factory() as check:
            assert await load_streak(check, user.id) == StreakState(5, 5, TODAY)
            count = await check.scalar(
                select(func.count()).select_from(UserBadge).where(UserBadge.user_id == user.id)
            )
            # streak_3 once, from the winning write only
            assert count == 1
