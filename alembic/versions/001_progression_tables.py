"""Progression tables.

Creates user_stats, work_history, badges, user_achievements, zones and
dungeons for the progression engine.

Revision ID: 001_progression_tables
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_progression_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- User Stats ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_stats (
            user_id VARCHAR(64) PRIMARY KEY,
            trust_score INTEGER NOT NULL DEFAULT 0 CHECK (trust_score >= 0),
            rwis_score INTEGER NOT NULL DEFAULT 0 CHECK (rwis_score >= 0),
            xp_points INTEGER NOT NULL DEFAULT 0 CHECK (xp_points >= 0),
            current_level INTEGER NOT NULL DEFAULT 1 CHECK (current_level >= 1),
            unlocked_zones JSONB NOT NULL DEFAULT '[]',
            category_stats JSONB NOT NULL DEFAULT '{}',
            version INTEGER NOT NULL DEFAULT 0,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Work History ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS work_history (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL REFERENCES user_stats(user_id) ON DELETE CASCADE,
            event_id VARCHAR(128),
            task_id VARCHAR(64),
            category VARCHAR(16) NOT NULL,
            quality_score DOUBLE PRECISION,
            client_feedback TEXT,
            xp_earned INTEGER NOT NULL,
            trust_score_change INTEGER NOT NULL,
            rwis_earned INTEGER NOT NULL,
            completed_at TIMESTAMPTZ NOT NULL,
            CONSTRAINT work_history_user_event_key UNIQUE (user_id, event_id)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_work_history_user_id
        ON work_history(user_id)
    """)

    # --- Badges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS badges (
            id VARCHAR(64) PRIMARY KEY,
            name VARCHAR(128) UNIQUE NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            category VARCHAR(16) NOT NULL,
            rarity VARCHAR(16) NOT NULL,
            icon_url VARCHAR(256),
            unlock_criteria JSONB NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- User Achievements ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_achievements (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL REFERENCES user_stats(user_id) ON DELETE CASCADE,
            badge_id VARCHAR(64) NOT NULL REFERENCES badges(id),
            task_id VARCHAR(64),
            earned_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_achievements_user_badge_key UNIQUE (user_id, badge_id)
        )
    """)

    # --- Zones & Dungeons ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS zones (
            id VARCHAR(64) PRIMARY KEY,
            name VARCHAR(128) NOT NULL,
            terrain_type VARCHAR(16) NOT NULL,
            difficulty VARCHAR(16) NOT NULL,
            unlock_requirements JSONB NOT NULL DEFAULT '{}',
            sort_order INTEGER NOT NULL DEFAULT 0
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS dungeons (
            id VARCHAR(64) PRIMARY KEY,
            zone_id VARCHAR(64) NOT NULL REFERENCES zones(id) ON DELETE CASCADE,
            name VARCHAR(128) NOT NULL,
            category VARCHAR(16) NOT NULL,
            entry_requirements JSONB NOT NULL DEFAULT '{}',
            special_features JSONB NOT NULL DEFAULT '[]'
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_dungeons_zone
        ON dungeons(zone_id)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS dungeons CASCADE")
    op.execute("DROP TABLE IF EXISTS zones CASCADE")
    op.execute("DROP TABLE IF EXISTS user_achievements CASCADE")
    op.execute("DROP TABLE IF EXISTS badges CASCADE")
    op.execute("DROP TABLE IF EXISTS work_history CASCADE")
    op.execute("DROP TABLE IF EXISTS user_stats CASCADE")
