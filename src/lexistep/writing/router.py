"""Writing API endpoints: submission, listing and deletion of entries."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.auth.dependencies import get_current_user
from lexistep.database import get_session
from lexistep.db.enums import ExerciseType
from lexistep.db.models import Badge, User
from lexistep.gamification.badge_service import localized
from lexistep.gamification.conditions import badge_icon
from lexistep.writing.exercises import parse_exercise_type
from lexistep.writing.moods import MOODS
from lexistep.writing.schemas import (
    EntryListResponse,
    EntryResponse,
    EntrySubmitRequest,
    EntrySubmitResponse,
    MoodHistoryItem,
    MoodHistoryResponse,
    MoodResponse,
    NewBadgeResponse,
    StreakResponse,
)
from lexistep.writing.service import (
    EntryNotFoundError,
    EntryPermissionError,
    EntrySubmission,
    EntryValidationError,
    delete_entry,
    list_entries,
    list_entries_by_type,
    mood_history,
    submit_entry,
)

router = APIRouter(prefix="/api/v1", tags=["Writing"])


def _exercise_or_404(exercise: str) -> ExerciseType:
    parsed = parse_exercise_type(exercise)
    if parsed is None:
        raise HTTPException(status_code=404, detail=f"Unknown exercise type: {exercise}")
    return parsed


def _badge_response(badge: Badge) -> NewBadgeResponse:
    name, description = localized(badge)
    return NewBadgeResponse(
        slug=badge.slug,
        name=name,
        description=description,
        category=badge.category or "Other",
        icon=badge_icon(badge.condition, badge.condition_value),
    )


@router.post("/writing/{exercise}", response_model=EntrySubmitResponse, status_code=201)
async def submit_writing(
    exercise: str,
    body: EntrySubmitRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> EntrySubmitResponse:
    """Submit an entry for one exercise type."""
    submission = EntrySubmission(
        content=body.content,
        word_count=body.word_count,
        exercise_type=_exercise_or_404(exercise),
        title=body.title,
        mood=body.mood,
        prompt=body.prompt,
    )
    try:
        result = await submit_entry(db, user.id, submission)
    except EntryValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except EntryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return EntrySubmitResponse(
        entry_id=result.entry_id,
        detail_id=result.detail_id,
        new_badges=[_badge_response(b) for b in result.new_badges],
        streak=StreakResponse(
            current_streak=result.streak.current_streak,
            longest_streak=result.streak.longest_streak,
            last_writing_day=result.streak.last_writing_day,
        ),
    )


@router.get("/writing/{exercise}", response_model=EntryListResponse)
async def list_writing_by_type(
    exercise: str,
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> EntryListResponse:
    """Most recent entries of one exercise type."""
    entries = await list_entries_by_type(db, user.id, _exercise_or_404(exercise), limit=limit)
    return EntryListResponse(
        entries=[EntryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )


@router.get("/writing-entries", response_model=EntryListResponse)
async def list_my_entries(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> EntryListResponse:
    """All of the caller's entries, newest first."""
    entries = await list_entries(db, user.id)
    return EntryListResponse(
        entries=[EntryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )


@router.delete("/writing-entries/{entry_id}", status_code=204)
async def delete_my_entry(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> None:
    """Delete an entry along with its exercise detail row."""
    try:
        await delete_entry(db, user.id, entry_id)
    except EntryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except EntryPermissionError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e


@router.get("/users/me/moods", response_model=MoodHistoryResponse)
async def get_mood_history(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MoodHistoryResponse:
    """Mood catalog plus the caller's recent mood-tagged entries."""
    history = await mood_history(db, user.id)
    return MoodHistoryResponse(
        moods=[
            MoodResponse(value=m.value, emoji=m.emoji, label=m.label, positivity_score=m.positivity_score)
            for m in MOODS
        ],
        history=[MoodHistoryItem(**item) for item in history],
    )
