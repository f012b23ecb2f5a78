"""Avatar catalog."""

from __future__ import annotations

AVATARS: tuple[str, ...] = (
    "brain-rocket",
    "brain-fire",
    "brain-star",
    "brain-lightning",
    "brain-rainbow",
    "brain-robot",
    "brain-book",
    "brain-plant",
    "brain-globe",
    "brain-magic",
)

DEFAULT_AVATAR = "brain-rocket"


def is_known_avatar(avatar_id: str) -> bool:
    return avatar_id in AVATARS


def avatar_or_default(avatar_id: str | None) -> str:
    return avatar_id if avatar_id in AVATARS else DEFAULT_AVATAR
