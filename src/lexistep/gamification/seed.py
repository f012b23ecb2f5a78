"""Badge seed data: the writing-achievement catalog."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.db.models import Badge, BadgeTranslation
from lexistep.db.upsert import insert_for

logger = logging.getLogger(__name__)

BADGE_SEED_DATA: list[dict] = [
    # Streaks
    {
        "slug": "streak_3",
        "condition": "streak",
        "condition_value": 3,
        "category": "Streaks",
        "default_name": "Warming Up",
        "default_description": "Write three days in a row",
        "sort_order": 1,
        "translations": {
            "fr": ("Échauffement", "Écrire trois jours d'affilée"),
        },
    },
    {
        "slug": "streak_7",
        "condition": "streak",
        "condition_value": 7,
        "category": "Streaks",
        "default_name": "One Week Strong",
        "default_description": "Write seven days in a row",
        "sort_order": 2,
        "translations": {
            "fr": ("Une semaine solide", "Écrire sept jours d'affilée"),
        },
    },
    {
        "slug": "streak_21",
        "condition": "streak",
        "condition_value": 21,
        "category": "Streaks",
        "default_name": "Habit Formed",
        "default_description": "Write 21 days in a row",
        "sort_order": 3,
        "translations": {
            "fr": ("Habitude ancrée", "Écrire 21 jours d'affilée"),
        },
    },
    {
        "slug": "streak_30",
        "condition": "streak",
        "condition_value": 30,
        "category": "Streaks",
        "default_name": "On Fire",
        "default_description": "Write 30 days in a row",
        "sort_order": 4,
        "translations": {
            "fr": ("En feu", "Écrire 30 jours d'affilée"),
        },
    },
    # Volume
    {
        "slug": "words_200",
        "condition": "total_words",
        "condition_value": 200,
        "category": "Volume",
        "default_name": "First Steps",
        "default_description": "Write 200 words in total",
        "sort_order": 10,
        "translations": {
            "fr": ("Premiers pas", "Écrire 200 mots au total"),
        },
    },
    {
        "slug": "words_10k",
        "condition": "total_words",
        "condition_value": 10_000,
        "category": "Volume",
        "default_name": "Ten Thousand Words",
        "default_description": "Write 10,000 words in total",
        "sort_order": 11,
        "translations": {
            "fr": ("Dix mille mots", "Écrire 10 000 mots au total"),
        },
    },
    {
        "slug": "words_50k",
        "condition": "total_words",
        "condition_value": 50_000,
        "category": "Volume",
        "default_name": "Novelist",
        "default_description": "Write 50,000 words in total",
        "sort_order": 12,
        "translations": {
            "fr": ("Romancier", "Écrire 50 000 mots au total"),
        },
    },
    # Sessions
    {
        "slug": "session_500",
        "condition": "session_words",
        "condition_value": 500,
        "category": "Sessions",
        "default_name": "Deep Focus",
        "default_description": "Write 500 words in a single session",
        "sort_order": 20,
        "translations": {
            "fr": ("Concentration", "Écrire 500 mots en une seule session"),
        },
    },
    {
        "slug": "session_1000",
        "condition": "session_words",
        "condition_value": 1000,
        "category": "Sessions",
        "default_name": "Flow State",
        "default_description": "Write 1,000 words in a single session",
        "sort_order": 21,
        "translations": {
            "fr": ("État de flow", "Écrire 1 000 mots en une seule session"),
        },
    },
    # Weekly
    {
        "slug": "weekly_2000",
        "condition": "weekly_goal",
        "condition_value": 2000,
        "category": "Weekly",
        "default_name": "Productive Week",
        "default_description": "Write 2,000 words in one week",
        "sort_order": 30,
        "translations": {
            "fr": ("Semaine productive", "Écrire 2 000 mots en une semaine"),
        },
    },
    {
        "slug": "weekly_5000",
        "condition": "weekly_goal",
        "condition_value": 5000,
        "category": "Weekly",
        "default_name": "Marathon Week",
        "default_description": "Write 5,000 words in one week",
        "sort_order": 31,
        "translations": {
            "fr": ("Semaine marathon", "Écrire 5 000 mots en une semaine"),
        },
    },
]


async def seed_badges(db: AsyncSession) -> int:
    """Upsert every badge definition and its translations. Returns number of badges seeded."""
    seeded = 0
    for data in BADGE_SEED_DATA:
        badge_data = {k: v for k, v in data.items() if k != "translations"}
        stmt = insert_for(db, Badge).values(**badge_data)
        stmt = stmt.on_conflict_do_update(
            index_elements=["slug"],
            set_={
                "condition": stmt.excluded.condition,
                "condition_value": stmt.excluded.condition_value,
                "category": stmt.excluded.category,
                "default_name": stmt.excluded.default_name,
                "default_description": stmt.excluded.default_description,
                "sort_order": stmt.excluded.sort_order,
            },
        )
        await db.execute(stmt)
        seeded += 1

    badge_ids = dict((await db.execute(select(Badge.slug, Badge.id))).tuples().all())
    for data in BADGE_SEED_DATA:
        for locale, (name, description) in data["translations"].items():
            stmt = insert_for(db, BadgeTranslation).values(
                badge_id=badge_ids[data["slug"]],
                locale=locale,
                name=name,
                description=description,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["badge_id", "locale"],
                set_={"name": stmt.excluded.name, "description": stmt.excluded.description},
            )
            await db.execute(stmt)

    await db.commit()
    logger.info("Seeded %d badge definitions", seeded)
    return seeded
