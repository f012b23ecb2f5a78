"""Request/response schemas for writing endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from lexistep.db.enums import ExerciseType


class EntrySubmitRequest(BaseModel):
    """Body of an entry submission. The exercise type comes from the URL."""

    content: str = Field(..., min_length=1)
    word_count: int = Field(..., gt=0)
    title: str | None = Field(None, max_length=200)
    mood: str | None = Field(None, max_length=64)
    prompt: str | None = None


class NewBadgeResponse(BaseModel):
    slug: str
    name: str
    description: str
    category: str
    icon: str


class StreakResponse(BaseModel):
    current_streak: int
    longest_streak: int
    last_writing_day: date | None = None


class EntrySubmitResponse(BaseModel):
    entry_id: int
    detail_id: int | None = None
    new_badges: list[NewBadgeResponse] = []
    streak: StreakResponse


class EntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    word_count: int
    exercise_type: ExerciseType
    user_mood: str | None = None
    created_at: datetime


class EntryListResponse(BaseModel):
    entries: list[EntryResponse]
    total: int


class MoodResponse(BaseModel):
    value: str
    emoji: str
    label: str
    positivity_score: int


class MoodHistoryItem(BaseModel):
    id: int
    date: datetime
    mood_value: str
    word_count: int
    exercise_type: ExerciseType


class MoodHistoryResponse(BaseModel):
    moods: list[MoodResponse]
    history: list[MoodHistoryItem]
