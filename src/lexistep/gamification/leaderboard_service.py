"""Writing leaderboard built from entry and streak aggregates."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.db.models import Streak, User, UserBadge, WritingEntry


@dataclass(frozen=True)
class LeaderboardRow:
    rank: int
    user_id: int
    name: str
    avatar: str | None
    total_words: int
    current_streak: int
    longest_streak: int
    badge_count: int


@dataclass
class Leaderboard:
    entries: list[LeaderboardRow]
    my_rank: int = 0
    me: LeaderboardRow | None = None


def _display_name(user: User) -> str:
    return user.username or user.name or f"writer-{user.id}"


def _leaderboard_query():  # noqa: ANN202
    words = (
        select(WritingEntry.user_id, func.sum(WritingEntry.word_count).label("total_words"))
        .group_by(WritingEntry.user_id)
        .subquery()
    )
    badges = (
        select(UserBadge.user_id, func.count(UserBadge.id).label("badge_count"))
        .group_by(UserBadge.user_id)
        .subquery()
    )
    total_words = func.coalesce(words.c.total_words, 0)
    current = func.coalesce(Streak.current_streak, 0)
    return (
        select(
            User,
            total_words.label("total_words"),
            current.label("current_streak"),
            func.coalesce(Streak.longest_streak, 0).label("longest_streak"),
            func.coalesce(badges.c.badge_count, 0).label("badge_count"),
        )
        .outerjoin(words, words.c.user_id == User.id)
        .outerjoin(badges, badges.c.user_id == User.id)
        .outerjoin(Streak, Streak.user_id == User.id)
        .order_by(total_words.desc(), current.desc(), User.id)
    )


def _row(rank: int, user: User, row) -> LeaderboardRow:  # noqa: ANN001
    return LeaderboardRow(
        rank=rank,
        user_id=user.id,
        name=_display_name(user),
        avatar=user.avatar,
        total_words=int(row.total_words),
        current_streak=int(row.current_streak),
        longest_streak=int(row.longest_streak),
        badge_count=int(row.badge_count),
    )


async def get_leaderboard(db: AsyncSession, limit: int = 50, user_id: int | None = None) -> Leaderboard:
    """Top writers by total words, ties broken by current streak.

    When ``user_id`` is given the caller's own figures are included, with
    ``my_rank`` set to 0 if they fall outside the top ``limit``.
    """
    result = await db.execute(_leaderboard_query().limit(limit))
    entries = [_row(rank, row[0], row) for rank, row in enumerate(result.all(), start=1)]
    board = Leaderboard(entries=entries)

    if user_id is None:
        return board

    board.my_rank = next((e.rank for e in entries if e.user_id == user_id), 0)
    if board.my_rank:
        board.me = entries[board.my_rank - 1]
    else:
        own = (await db.execute(_leaderboard_query().where(User.id == user_id))).one_or_none()
        if own is not None:
            board.me = _row(0, own[0], own)
    return board
