"""Request/response schemas for user settings and avatar endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class SettingsResponse(BaseModel):
    daily_word_goal: int


class SettingsUpdateRequest(BaseModel):
    daily_word_goal: int


class AvatarResponse(BaseModel):
    avatar: str
    available: list[str]


class AvatarUpdateRequest(BaseModel):
    avatar: str
