"""Exercise-type registry: detail table and default title per exercise."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from lexistep.db.enums import ExerciseType
from lexistep.db.models import FreeWritingEntry, JournalEntry, PromptWritingEntry


@dataclass(frozen=True)
class ExerciseSpec:
    default_title: str
    detail_model: type[Any] | None
    slug: str


EXERCISES: dict[ExerciseType, ExerciseSpec] = {
    ExerciseType.FREE_WRITING: ExerciseSpec("Free writing", FreeWritingEntry, "free-writing"),
    ExerciseType.JOURNAL: ExerciseSpec("Journal", JournalEntry, "journal"),
    ExerciseType.PROMPT_WRITING: ExerciseSpec("Prompt writing", PromptWritingEntry, "prompt-writing"),
    ExerciseType.COLLABORATIVE: ExerciseSpec("Collaborative writing", None, "collaborative"),
}


def exercise_from_slug(slug: str) -> ExerciseType | None:
    """Resolve a URL slug such as ``free-writing`` to its exercise type."""
    for exercise, spec in EXERCISES.items():
        if spec.slug == slug:
            return exercise
    return None


def parse_exercise_type(value: str | ExerciseType | None) -> ExerciseType | None:
    """Accept an enum member, its value, or its slug."""
    if isinstance(value, ExerciseType):
        return value
    if not value:
        return None
    try:
        return ExerciseType(value)
    except ValueError:
        return exercise_from_slug(value)
