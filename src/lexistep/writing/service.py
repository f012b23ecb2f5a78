"""Writing entry submission and deletion.

Submission is one unit of work: the entry, its exercise detail row, the
streak update and badge evaluation are committed together or not at all.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.db.enums import ExerciseType
from lexistep.db.models import Badge, JournalEntry, User, WritingEntry
from lexistep.gamification.badge_service import evaluate_badges
from lexistep.gamification.calendar import utc_now
from lexistep.gamification.streak_service import StreakState, record_writing_day
from lexistep.writing.exercises import EXERCISES, parse_exercise_type
from lexistep.writing.moods import DEFAULT_MOOD, normalize_mood

logger = structlog.get_logger()


class EntryValidationError(ValueError):
    """Raised when a submission is rejected before any write."""


class EntryNotFoundError(LookupError):
    """Raised when an entry (or its author) does not exist."""


class EntryPermissionError(PermissionError):
    """Raised when a user acts on an entry they do not own."""


@dataclass
class EntrySubmission:
    content: str
    word_count: int
    exercise_type: ExerciseType | str = ExerciseType.FREE_WRITING
    title: str | None = None
    mood: str | None = None
    prompt: str | None = None


@dataclass
class SubmissionResult:
    entry_id: int
    detail_id: int | None
    streak: StreakState
    new_badges: list[Badge] = field(default_factory=list)


def validate_submission(submission: EntrySubmission) -> ExerciseType:
    """Check a submission before any transaction is opened. Returns the exercise type."""
    if not submission.content or not submission.content.strip():
        msg = "Content must not be empty"
        raise EntryValidationError(msg)
    if (
        isinstance(submission.word_count, bool)
        or not isinstance(submission.word_count, int)
        or submission.word_count <= 0
    ):
        msg = "Word count must be a positive integer"
        raise EntryValidationError(msg)
    exercise = parse_exercise_type(submission.exercise_type)
    if exercise is None:
        msg = f"Unknown exercise type: {submission.exercise_type!r}"
        raise EntryValidationError(msg)
    return exercise


def _detail_values(exercise: ExerciseType, submission: EntrySubmission, mood: str | None) -> dict[str, Any]:
    if exercise is ExerciseType.JOURNAL:
        return {"mood": mood}
    if exercise is ExerciseType.PROMPT_WRITING:
        return {"prompt": submission.prompt}
    return {}


async def create_detail_row(
    db: AsyncSession,
    exercise: ExerciseType,
    entry: WritingEntry,
    values: dict[str, Any],
) -> int | None:
    """Insert the exercise-specific row for ``entry``. Returns its id, None if the type has none."""
    model = EXERCISES[exercise].detail_model
    if model is None:
        return None
    detail = model(entry_id=entry.id, created_at=entry.created_at, **values)
    db.add(detail)
    await db.flush()
    return detail.id


async def submit_entry(
    db: AsyncSession,
    user_id: int,
    submission: EntrySubmission,
    now: datetime | None = None,
) -> SubmissionResult:
    """Record a writing entry and apply its gamification effects atomically.

    Raises:
        EntryValidationError: invalid content, word count or exercise type.
        EntryNotFoundError: ``user_id`` does not resolve to a user.
    """
    exercise = validate_submission(submission)
    if await db.get(User, user_id) is None:
        msg = "User not found"
        raise EntryNotFoundError(msg)

    if now is None:
        now = utc_now()
    mood = normalize_mood(submission.mood)

    try:
        entry = WritingEntry(
            user_id=user_id,
            title=(submission.title or "").strip() or EXERCISES[exercise].default_title,
            content=submission.content,
            word_count=submission.word_count,
            exercise_type=exercise,
            user_mood=mood,
            created_at=now,
        )
        db.add(entry)
        await db.flush()

        detail_id = await create_detail_row(db, exercise, entry, _detail_values(exercise, submission, mood))
        streak = await record_writing_day(db, user_id, now)
        badges = await evaluate_badges(db, user_id, submission.word_count, now)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.warning("entry_submission_rolled_back", user_id=user_id, exercise_type=exercise.value)
        raise

    new_badges = streak.new_badges + badges
    logger.info(
        "entry_submitted",
        user_id=user_id,
        entry_id=entry.id,
        exercise_type=exercise.value,
        word_count=submission.word_count,
        streak=streak.state.current_streak,
        new_badges=[b.slug for b in new_badges],
    )
    return SubmissionResult(
        entry_id=entry.id,
        detail_id=detail_id,
        streak=streak.state,
        new_badges=new_badges,
    )


async def delete_entry(db: AsyncSession, user_id: int, entry_id: int) -> None:
    """Delete an entry and its exercise detail row together.

    Raises:
        EntryNotFoundError: the entry does not exist.
        EntryPermissionError: the entry belongs to someone else.
    """
    entry = await db.get(WritingEntry, entry_id)
    if entry is None:
        msg = "Entry not found"
        raise EntryNotFoundError(msg)
    if entry.user_id != user_id:
        msg = "You are not allowed to delete this entry"
        raise EntryPermissionError(msg)

    exercise = entry.exercise_type
    try:
        model = EXERCISES[exercise].detail_model
        if model is not None:
            await db.execute(delete(model).where(model.entry_id == entry_id))
        await db.delete(entry)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info("entry_deleted", user_id=user_id, entry_id=entry_id, exercise_type=exercise.value)


async def list_entries(db: AsyncSession, user_id: int) -> list[WritingEntry]:
    """All of a user's entries, newest first."""
    result = await db.execute(
        select(WritingEntry)
        .where(WritingEntry.user_id == user_id)
        .order_by(WritingEntry.created_at.desc(), WritingEntry.id.desc())
    )
    return list(result.scalars())


async def list_entries_by_type(
    db: AsyncSession,
    user_id: int,
    exercise: ExerciseType,
    limit: int = 10,
) -> list[WritingEntry]:
    """Most recent entries of one exercise type."""
    result = await db.execute(
        select(WritingEntry)
        .where(WritingEntry.user_id == user_id, WritingEntry.exercise_type == exercise)
        .order_by(WritingEntry.created_at.desc(), WritingEntry.id.desc())
        .limit(limit)
    )
    return list(result.scalars())


async def mood_history(db: AsyncSession, user_id: int, limit: int = 20) -> list[dict[str, Any]]:
    """Recent entries carrying a mood, from the entry tag or the journal detail."""
    result = await db.execute(
        select(WritingEntry, JournalEntry.mood)
        .outerjoin(JournalEntry, JournalEntry.entry_id == WritingEntry.id)
        .where(
            WritingEntry.user_id == user_id,
            or_(WritingEntry.user_mood.is_not(None), JournalEntry.id.is_not(None)),
        )
        .order_by(WritingEntry.created_at.desc(), WritingEntry.id.desc())
        .limit(limit)
    )
    return [
        {
            "id": entry.id,
            "date": entry.created_at,
            "mood_value": entry.user_mood or journal_mood or DEFAULT_MOOD,
            "word_count": entry.word_count,
            "exercise_type": entry.exercise_type,
        }
        for entry, journal_mood in result
    ]
