"""Closed value sets persisted as strings."""

from __future__ import annotations

import enum


class ExerciseType(str, enum.Enum):
    """Category of writing activity; decides which detail table an entry owns."""

    FREE_WRITING = "FREE_WRITING"
    JOURNAL = "JOURNAL"
    PROMPT_WRITING = "PROMPT_WRITING"
    COLLABORATIVE = "COLLABORATIVE"


class BadgeCondition(str, enum.Enum):
    """Stat a badge threshold is compared against."""

    STREAK = "streak"
    TOTAL_WORDS = "total_words"
    SESSION_WORDS = "session_words"
    WEEKLY_GOAL = "weekly_goal"

    @classmethod
    def parse(cls, value: str | None) -> BadgeCondition | None:
        """Map a stored condition string to a member, None when absent or unknown."""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None
