"""Pydantic response models for gamification endpoints."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel


# --- Stats ---


class WritingStatsResponse(BaseModel):
    today: int
    week: int
    month: int
    total: int
    daily_goal: int
    current_streak: int
    longest_streak: int


class CommunityStatsResponse(BaseModel):
    words_today: int
    streaking_members: int
    online_writers: int


class StreakResponse(BaseModel):
    current_streak: int
    longest_streak: int
    last_writing_day: date | None = None


# --- Badges ---


class GalleryBadgeResponse(BaseModel):
    id: int
    slug: str
    name: str
    description: str
    category: str
    icon: str
    earned: bool


class UserBadgesResponse(BaseModel):
    badges: list[GalleryBadgeResponse]
    total_available: int
    total_earned: int


class BadgeDefinitionResponse(BaseModel):
    slug: str
    name: str
    description: str
    category: str
    icon: str
    condition: str | None = None
    condition_value: int | None = None


class AllBadgesResponse(BaseModel):
    badges: list[BadgeDefinitionResponse]


# --- Leaderboard ---


class LeaderboardEntryResponse(BaseModel):
    rank: int
    user_id: int
    name: str
    avatar: str | None = None
    total_words: int
    current_streak: int
    longest_streak: int
    badge_count: int


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntryResponse]
    my_rank: int = 0
    me: LeaderboardEntryResponse | None = None
