"""Mood catalog and normalisation of free-form mood tags."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Mood:
    value: str
    emoji: str
    label: str
    positivity_score: int


MOODS: tuple[Mood, ...] = (
    Mood("happy", "\U0001f60a", "Happy", 90),
    Mood("excited", "\U0001f973", "Excited", 100),
    Mood("confident", "\U0001f60e", "Confident", 80),
    Mood("relaxed", "\U0001f60c", "Relaxed", 60),
    Mood("thoughtful", "\U0001f914", "Thoughtful", 50),
    Mood("sad", "\U0001f614", "Sad", 30),
    Mood("frustrated", "\U0001f624", "Frustrated", 20),
    Mood("tired", "\U0001f634", "Tired", 10),
)

DEFAULT_MOOD = "thoughtful"

_BY_VALUE = {m.value: m for m in MOODS}

# Labels used by earlier clients.
LEGACY_MOODS: dict[str, str] = {
    "heureux": "happy",
    "joyeux": "happy",
    "content": "happy",
    "détendu": "relaxed",
    "calme": "relaxed",
    "serein": "relaxed",
    "pensif": "thoughtful",
    "réfléchi": "thoughtful",
    "curieux": "thoughtful",
    "triste": "sad",
    "mélancolique": "sad",
    "nostalgique": "sad",
    "frustré": "frustrated",
    "énervé": "frustrated",
    "agacé": "frustrated",
    "fatigué": "tired",
    "épuisé": "tired",
    "las": "tired",
    "excité": "excited",
    "enthousiaste": "excited",
    "inspiré": "excited",
    "confiant": "confident",
    "sûr": "confident",
    "déterminé": "confident",
}


def get_mood(value: str) -> Mood | None:
    return _BY_VALUE.get(value)


def normalize_mood(value: str | None) -> str | None:
    """Map a mood tag onto the catalog. None stays None; unknown tags become the default."""
    if value is None or not value.strip():
        return None
    if value in _BY_VALUE:
        return value
    return LEGACY_MOODS.get(value.strip().lower(), DEFAULT_MOOD)
