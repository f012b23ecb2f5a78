"""Badge condition evaluation.

Each :class:`BadgeCondition` maps to the figure its threshold is compared
against. Adding a condition kind means adding an enum member and an entry
in ``_MEASURES``; ``measure`` raises for a member without one.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from lexistep.db.enums import BadgeCondition
from lexistep.gamification.stats_service import WritingStats


@dataclass(frozen=True)
class EvaluationContext:
    """Figures available when deciding badge awards for one submission."""

    stats: WritingStats
    session_words: int


_MEASURES: dict[BadgeCondition, Callable[[EvaluationContext], int]] = {
    BadgeCondition.STREAK: lambda ctx: ctx.stats.current_streak,
    BadgeCondition.TOTAL_WORDS: lambda ctx: ctx.stats.total,
    BadgeCondition.SESSION_WORDS: lambda ctx: ctx.session_words,
    BadgeCondition.WEEKLY_GOAL: lambda ctx: ctx.stats.week,
}


def measure(condition: BadgeCondition, ctx: EvaluationContext) -> int:
    """Return the figure ``condition`` is compared against."""
    try:
        return _MEASURES[condition](ctx)
    except KeyError:
        msg = f"No measure registered for badge condition {condition.value!r}"
        raise NotImplementedError(msg) from None


def is_satisfied(condition: str | None, threshold: int | None, ctx: EvaluationContext) -> bool:
    """True when the stored condition holds. Missing condition or threshold never holds."""
    kind = BadgeCondition.parse(condition)
    if kind is None or not threshold:
        return False
    return measure(kind, ctx) >= threshold


def badge_icon(condition: str | None, threshold: int | None) -> str:
    """Pick a gallery icon from the condition kind and its threshold."""
    kind = BadgeCondition.parse(condition)
    value = threshold or 0
    if kind is BadgeCondition.STREAK:
        if value >= 30:
            return "\U0001f525"  # fire
        if value >= 21:
            return "\U0001f9e0"  # brain
        return "\U0001f4c5"  # calendar
    if kind is BadgeCondition.TOTAL_WORDS:
        if value >= 50_000:
            return "⚡️"  # lightning
        if value >= 10_000:
            return "\U0001f4dd"  # memo
        return "✍️"  # writing hand
    if kind is BadgeCondition.WEEKLY_GOAL:
        if value >= 5_000:
            return "\U0001f3c3"  # runner
        return "\U0001f3af"  # target
    if kind is BadgeCondition.SESSION_WORDS:
        return "⏱️"  # stopwatch
    return "\U0001f3c6"  # trophy
