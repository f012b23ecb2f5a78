"""Initial schema: users, writing entries, streaks, settings, billing and badges.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id BIGSERIAL PRIMARY KEY,
            email VARCHAR(320) UNIQUE NOT NULL,
            username VARCHAR(64) UNIQUE,
            name VARCHAR(128),
            password_hash VARCHAR(256) NOT NULL,
            is_pro BOOLEAN NOT NULL DEFAULT false,
            avatar VARCHAR(64),
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # --- Writing entries ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS writing_entries (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            title VARCHAR(200) NOT NULL,
            content TEXT NOT NULL,
            word_count INTEGER NOT NULL CHECK (word_count > 0),
            exercise_type VARCHAR(32) NOT NULL,
            user_mood VARCHAR(32),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_writing_entries_user_id ON writing_entries(user_id)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_writing_entries_created_at ON writing_entries(created_at)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS free_writing_entries (
            id BIGSERIAL PRIMARY KEY,
            entry_id BIGINT UNIQUE NOT NULL REFERENCES writing_entries(id),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS journal_entries (
            id BIGSERIAL PRIMARY KEY,
            entry_id BIGINT UNIQUE NOT NULL REFERENCES writing_entries(id),
            mood VARCHAR(32),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS prompt_writing_entries (
            id BIGSERIAL PRIMARY KEY,
            entry_id BIGINT UNIQUE NOT NULL REFERENCES writing_entries(id),
            prompt TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Per-user singletons ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS writing_streaks (
            user_id BIGINT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            current_streak INTEGER NOT NULL DEFAULT 0,
            longest_streak INTEGER NOT NULL DEFAULT 0,
            last_writing_day DATE,
            updated_at TIMESTAMPTZ,
            CHECK (longest_streak >= current_streak)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_settings (
            user_id BIGINT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            daily_word_goal INTEGER NOT NULL DEFAULT 200,
            updated_at TIMESTAMPTZ
        )
    """)

    # --- Billing ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS subscriptions (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT UNIQUE NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            stripe_customer_id VARCHAR(255) UNIQUE,
            stripe_subscription_id VARCHAR(255) UNIQUE,
            stripe_price_id VARCHAR(255),
            stripe_current_period_end TIMESTAMPTZ,
            is_canceled BOOLEAN NOT NULL DEFAULT false,
            updated_at TIMESTAMPTZ
        )
    """)

    # --- Badges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS badges (
            id SERIAL PRIMARY KEY,
            slug VARCHAR(64) UNIQUE NOT NULL,
            condition VARCHAR(32),
            condition_value INTEGER,
            category VARCHAR(64),
            default_name VARCHAR(128),
            default_description TEXT,
            sort_order INTEGER NOT NULL DEFAULT 0
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS badge_translations (
            id SERIAL PRIMARY KEY,
            badge_id INTEGER NOT NULL REFERENCES badges(id) ON DELETE CASCADE,
            locale VARCHAR(8) NOT NULL,
            name VARCHAR(128) NOT NULL,
            description TEXT NOT NULL,
            CONSTRAINT uq_badge_translations_badge_locale UNIQUE (badge_id, locale)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_badges (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            badge_id INTEGER NOT NULL REFERENCES badges(id),
            earned_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_user_badges_user_badge UNIQUE (user_id, badge_id)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_user_badges_user_id ON user_badges(user_id)")


def downgrade() -> None:
    for table in (
        "user_badges",
        "badge_translations",
        "badges",
        "subscriptions",
        "user_settings",
        "writing_streaks",
        "prompt_writing_entries",
        "journal_entries",
        "free_writing_entries",
        "writing_entries",
        "users",
    ):
        op.execute(f"DROP TABLE IF EXISTS {table}")
