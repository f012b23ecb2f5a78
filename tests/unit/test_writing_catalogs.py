"""Exercise registry, mood normalisation and avatar catalog."""

from __future__ import annotations

import pytest

from lexistep.db.enums import ExerciseType
from lexistep.db.models import FreeWritingEntry, JournalEntry, PromptWritingEntry
from lexistep.users.avatars import AVATARS, DEFAULT_AVATAR, avatar_or_default, is_known_avatar
from lexistep.writing.exercises import EXERCISES, exercise_from_slug, parse_exercise_type
from lexistep.writing.moods import DEFAULT_MOOD, MOODS, get_mood, normalize_mood


class TestExercises:
    def test_every_type_is_registered(self):
        assert set(EXERCISES) == set(ExerciseType)

    def test_detail_tables(self):
        assert EXERCISES[ExerciseType.FREE_WRITING].detail_model is FreeWritingEntry
        assert EXERCISES[ExerciseType.JOURNAL].detail_model is JournalEntry
        assert EXERCISES[ExerciseType.PROMPT_WRITING].detail_model is PromptWritingEntry
        assert EXERCISES[ExerciseType.COLLABORATIVE].detail_model is None

    def test_slug_lookup(self):
        assert exercise_from_slug("prompt-writing") is ExerciseType.PROMPT_WRITING
        assert exercise_from_slug("poetry") is None

    @pytest.mark.parametrize("value", ["JOURNAL", "journal", ExerciseType.JOURNAL])
    def test_parse_accepts_value_slug_or_member(self, value):
        assert parse_exercise_type(value) is ExerciseType.JOURNAL

    @pytest.mark.parametrize("value", [None, "", "SONNET"])
    def test_parse_rejects_unknown(self, value):
        assert parse_exercise_type(value) is None


class TestMoods:
    def test_catalog(self):
        assert len(MOODS) == 8
        assert get_mood("happy").positivity_score == 90

    def test_none_and_blank_stay_none(self):
        assert normalize_mood(None) is None
        assert normalize_mood("   ") is None

    def test_catalog_value_passes_through(self):
        assert normalize_mood("tired") == "tired"

    def test_legacy_label_maps(self):
        assert normalize_mood("Fatigué") == "tired"
        assert normalize_mood("inspiré") == "excited"

    def test_unknown_becomes_default(self):
        assert normalize_mood("grumpy") == DEFAULT_MOOD


class TestAvatars:
    def test_catalog(self):
        assert len(AVATARS) == 10
        assert all(a.startswith("brain-") for a in AVATARS)

    def test_default(self):
        assert avatar_or_default(None) == DEFAULT_AVATAR == "brain-rocket"
        assert avatar_or_default("brain-globe") == "brain-globe"
        assert is_known_avatar("cat") is False
