"""ORM models for progression state and the unlock catalog.

The schema is created by the Alembic migration in ``alembic/versions``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from goodgrid.db.base import Base


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


class UserStatsRecord(Base):
    """Per-user progression snapshot. ``version`` guards read-modify-write."""

    __tablename__ = "user_stats"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    trust_score: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    rwis_score: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    xp_points: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    current_level: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")
    unlocked_zones: Mapped[list[str]] = mapped_column(JSONB, nullable=False, server_default="[]")
    category_stats: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, server_default="{}")
    version: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class WorkHistoryRecord(Base):
    """Append-only ledger of applied task completions."""

    __tablename__ = "work_history"
    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="work_history_user_event_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("user_stats.user_id", ondelete="CASCADE"), nullable=False, index=True
    )
    event_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    task_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    category: Mapped[str] = mapped_column(String(16), nullable=False)
    quality_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    client_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    xp_earned: Mapped[int] = mapped_column(Integer, nullable=False)
    trust_score_change: Mapped[int] = mapped_column(Integer, nullable=False)
    rwis_earned: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class BadgeRecord(Base):
    __tablename__ = "badges"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    category: Mapped[str] = mapped_column(String(16), nullable=False)
    rarity: Mapped[str] = mapped_column(String(16), nullable=False)
    icon_url: Mapped[str | None] = mapped_column(String(256), nullable=True)
    unlock_criteria: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, server_default="{}")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class UserAchievementRecord(Base):
    """Badges earned by users. UNIQUE(user_id, badge_id) prevents duplicates."""

    __tablename__ = "user_achievements"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="user_achievements_user_badge_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("user_stats.user_id", ondelete="CASCADE"), nullable=False
    )
    badge_id: Mapped[str] = mapped_column(String(64), ForeignKey("badges.id"), nullable=False)
    task_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    earned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    badge: Mapped[BadgeRecord] = relationship("BadgeRecord", lazy="joined")


class ZoneRecord(Base):
    __tablename__ = "zones"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    terrain_type: Mapped[str] = mapped_column(String(16), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(16), nullable=False)
    unlock_requirements: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, server_default="{}")
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")


class DungeonRecord(Base):
    __tablename__ = "dungeons"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    zone_id: Mapped[str] = mapped_column(String(64), ForeignKey("zones.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    category: Mapped[str] = mapped_column(String(16), nullable=False)
    entry_requirements: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, server_default="{}")
    special_features: Mapped[list[str]] = mapped_column(JSONB, nullable=False, server_default="[]")
