"""Badge evaluation, award uniqueness and the localized gallery."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from lexistep.db.enums import ExerciseType
from lexistep.db.models import Badge, UserBadge, WritingEntry
from lexistep.gamification.badge_service import (
    award_badge,
    evaluate_badges,
    get_unearned_badges,
    list_user_badges,
)
from lexistep.gamification.seed import BADGE_SEED_DATA, seed_badges

NOW = datetime(2026, 3, 11, 12, 0, tzinfo=timezone.utc)


async def _write(db, user_id: int, words: int, when: datetime = NOW) -> None:
    db.add(WritingEntry(
        user_id=user_id, title="t", content="words", word_count=words,
        exercise_type=ExerciseType.FREE_WRITING, created_at=when,
    ))
    await db.flush()


async def _badge(db, slug: str) -> Badge | None:
    return await db.scalar(select(Badge).where(Badge.slug == slug))


async def _holds(db, user_id: int, badge_id: int) -> bool:
    held = await db.scalar(
        select(UserBadge.id).where(UserBadge.user_id == user_id, UserBadge.badge_id == badge_id)
    )
    return held is not None


async def _award_count(db, user_id: int, slug: str | None = None) -> int:
    stmt = select(func.count()).select_from(UserBadge).where(UserBadge.user_id == user_id)
    if slug is not None:
        stmt = stmt.join(Badge, Badge.id == UserBadge.badge_id).where(Badge.slug == slug)
    return await db.scalar(stmt)


class TestSeed:
    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session):
        await seed_badges(db_session)
        count = await db_session.scalar(select(func.count()).select_from(Badge))
        assert count == len(BADGE_SEED_DATA)

    @pytest.mark.asyncio
    async def test_lookup(self, db_session):
        badge = await _badge(db_session, "words_200")
        assert badge is not None
        assert badge.condition == "total_words"
        assert badge.condition_value == 200
        assert await _badge(db_session, "first_share") is None


class TestAwardBadge:
    @pytest.mark.asyncio
    async def test_second_award_is_a_noop(self, db_session, user):
        badge = await _badge(db_session, "words_200")

        assert await award_badge(db_session, user.id, badge, NOW) is True
        assert await award_badge(db_session, user.id, badge, NOW) is False
        await db_session.commit()

        assert await _holds(db_session, user.id, badge.id) is True
        assert await _award_count(db_session, user.id, "words_200") == 1

    @pytest.mark.asyncio
    async def test_unearned_excludes_held(self, db_session, user):
        badge = await _badge(db_session, "session_500")
        await award_badge(db_session, user.id, badge, NOW)
        unearned = await get_unearned_badges(db_session, user.id)
        assert "session_500" not in {b.slug for b in unearned}
        assert len(unearned) == len(BADGE_SEED_DATA) - 1


class TestEvaluateBadges:
    @pytest.mark.asyncio
    async def test_total_words_crossing(self, db_session, user):
        await _write(db_session, user.id, 250)
        awarded = await evaluate_badges(db_session, user.id, session_words=250, now=NOW)
        await db_session.commit()
        assert [b.slug for b in awarded] == ["words_200"]

    @pytest.mark.asyncio
    async def test_qualifying_twice_awards_once(self, db_session, user):
        await _write(db_session, user.id, 250)
        await evaluate_badges(db_session, user.id, session_words=250, now=NOW)
        await _write(db_session, user.id, 300)
        second = await evaluate_badges(db_session, user.id, session_words=300, now=NOW)
        await db_session.commit()

        assert "words_200" not in {b.slug for b in second}
        assert await _award_count(db_session, user.id, "words_200") == 1

    @pytest.mark.asyncio
    async def test_session_and_weekly(self, db_session, user):
        await _write(db_session, user.id, 1500, NOW.replace(day=9))
        await _write(db_session, user.id, 1000)
        awarded = await evaluate_badges(db_session, user.id, session_words=1000, now=NOW)
        slugs = {b.slug for b in awarded}
        assert {"words_200", "session_500", "session_1000", "weekly_2000"} <= slugs
        assert "weekly_5000" not in slugs

    @pytest.mark.asyncio
    async def test_badges_without_condition_are_skipped(self, db_session, user):
        db_session.add(Badge(slug="manual_award", condition=None, condition_value=None, category="Special"))
        db_session.add(Badge(slug="odd_condition", condition="hashrate", condition_value=1, category="Special"))
        await db_session.commit()

        await _write(db_session, user.id, 5000)
        awarded = await evaluate_badges(db_session, user.id, session_words=5000, now=NOW)
        assert not {"manual_award", "odd_condition"} & {b.slug for b in awarded}


class TestGallery:
    @pytest.mark.asyncio
    async def test_french_by_default(self, db_session, user):
        gallery = await list_user_badges(db_session, user.id)
        by_slug = {b.slug: b for b in gallery}
        assert by_slug["streak_30"].name == "En feu"
        assert by_slug["streak_30"].icon == "\U0001f525"
        assert all(not b.earned for b in gallery)

    @pytest.mark.asyncio
    async def test_missing_locale_falls_back_to_defaults(self, db_session, user):
        gallery = await list_user_badges(db_session, user.id, locale="de")
        assert {b.slug: b.name for b in gallery}["streak_30"] == "On Fire"

    @pytest.mark.asyncio
    async def test_placeholders_and_other_category(self, db_session, user):
        db_session.add(Badge(slug="bare", sort_order=99))
        await db_session.commit()
        gallery = await list_user_badges(db_session, user.id)
        bare = next(b for b in gallery if b.slug == "bare")
        assert bare.name == "Unnamed badge"
        assert bare.description == "No description available"
        assert bare.category == "Other"

    @pytest.mark.asyncio
    async def test_earned_flag(self, db_session, user):
        await award_badge(db_session, user.id, await _badge(db_session, "streak_3"), NOW)
        await db_session.commit()
        gallery = await list_user_badges(db_session, user.id)
        assert [b.slug for b in gallery if b.earned] == ["streak_3"]
