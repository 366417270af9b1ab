"""PostgreSQL implementation of the repository contracts."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable

from sqlalchemy import select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from goodgrid.db.models import (
    BadgeRecord,
    DungeonRecord,
    UserAchievementRecord,
    UserStatsRecord,
    WorkHistoryRecord,
    ZoneRecord,
)
from goodgrid.errors import StatsNotFoundError, VersionConflictError
from goodgrid.progression.schemas import Badge, Dungeon, UserAchievement, UserStats, WorkHistoryEntry, Zone

logger = logging.getLogger(__name__)


def _stats_from_record(record: UserStatsRecord) -> UserStats:
    return UserStats(
        user_id=record.user_id,
        trust_score=record.trust_score,
        rwis_score=record.rwis_score,
        xp_points=record.xp_points,
        current_level=record.current_level,
        unlocked_zones=record.unlocked_zones or [],
        category_stats=record.category_stats or {},
        version=record.version,
    )


def _category_stats_json(stats: UserStats) -> dict:
    return {category.value: value.model_dump(mode="json") for category, value in stats.category_stats.items()}


def _badge_from_record(record: BadgeRecord) -> Badge:
    return Badge(
        id=record.id,
        name=record.name,
        description=record.description,
        category=record.category,
        rarity=record.rarity,
        icon_url=record.icon_url,
        unlock_criteria=record.unlock_criteria or {},
    )


class SqlProgressionRepository:
    """Stats, catalog and achievement storage on one ``AsyncSession``.

    Each write method commits its own transaction.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # --- StatsRepository ---

    async def get_stats(self, user_id: str) -> UserStats:
        result = await self.db.execute(
            select(UserStatsRecord)
            .where(UserStatsRecord.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise StatsNotFoundError(user_id)
        return _stats_from_record(record)

    async def create_stats(self, user_id: str) -> UserStats:
        """Insert the account-creation snapshot. Existing rows are left untouched."""
        stats = UserStats.initial(user_id)
        stmt = pg_insert(UserStatsRecord).values(
            user_id=user_id,
            unlocked_zones=[],
            category_stats=_category_stats_json(stats),
        )
        await self.db.execute(stmt.on_conflict_do_nothing(index_elements=["user_id"]))
        await self.db.commit()
        return await self.get_stats(user_id)

    async def update_if_version(
        self,
        user_id: str,
        expected_version: int,
        new_stats: UserStats,
        entry: WorkHistoryEntry,
    ) -> UserStats:
        result = await self.db.execute(
            update(UserStatsRecord)
            .where(UserStatsRecord.user_id == user_id, UserStatsRecord.version == expected_version)
            .values(
                trust_score=new_stats.trust_score,
                rwis_score=new_stats.rwis_score,
                xp_points=new_stats.xp_points,
                current_level=new_stats.current_level,
                unlocked_zones=sorted(new_stats.unlocked_zones),
                category_stats=_category_stats_json(new_stats),
                version=expected_version + 1,
                updated_at=text("now()"),
            )
        )
        if result.rowcount == 0:
            await self.db.rollback()
            actual = await self.db.scalar(select(UserStatsRecord.version).where(UserStatsRecord.user_id == user_id))
            if actual is None:
                raise StatsNotFoundError(user_id)
            raise VersionConflictError(user_id, expected_version, actual)

        self.db.add(
            WorkHistoryRecord(
                user_id=user_id,
                event_id=entry.event_id,
                task_id=entry.task_id,
                category=entry.category.value,
                quality_score=entry.quality_score,
                client_feedback=entry.client_feedback,
                xp_earned=entry.xp_earned,
                trust_score_change=entry.trust_score_change,
                rwis_earned=entry.rwis_earned,
                completed_at=entry.completed_at,
            )
        )
        await self.db.commit()
        return new_stats.model_copy(update={"user_id": user_id, "version": expected_version + 1})

    async def has_applied_event(self, user_id: str, event_id: str) -> bool:
        found = await self.db.scalar(
            select(WorkHistoryRecord.id).where(
                WorkHistoryRecord.user_id == user_id,
                WorkHistoryRecord.event_id == event_id,
            )
        )
        return found is not None

    async def grant_zones(self, user_id: str, zone_ids: Iterable[str]) -> UserStats:
        result = await self.db.execute(
            text("""
                UPDATE user_stats
                SET unlocked_zones = (
                        SELECT COALESCE(jsonb_agg(DISTINCT zone), '[]'::jsonb)
                        FROM jsonb_array_elements_text(unlocked_zones || CAST(:zones AS jsonb)) AS zone
                    ),
                    version = version + 1,
                    updated_at = now()
                WHERE user_id = :user_id
                RETURNING version
            """),
            {"user_id": user_id, "zones": json.dumps(sorted(set(zone_ids)))},
        )
        if result.scalar_one_or_none() is None:
            await self.db.rollback()
            raise StatsNotFoundError(user_id)
        await self.db.commit()
        return await self.get_stats(user_id)

    # --- CatalogRepository ---

    async def list_zones(self) -> list[Zone]:
        result = await self.db.execute(select(ZoneRecord).order_by(ZoneRecord.sort_order, ZoneRecord.id))
        return [
            Zone(
                id=record.id,
                name=record.name,
                terrain_type=record.terrain_type,
                difficulty=record.difficulty,
                unlock_requirements=record.unlock_requirements or {},
            )
            for record in result.scalars().all()
        ]

    async def list_dungeons(self, zone_ids: Iterable[str] | None = None) -> list[Dungeon]:
        query = select(DungeonRecord).order_by(DungeonRecord.zone_id, DungeonRecord.id)
        if zone_ids is not None:
            query = query.where(DungeonRecord.zone_id.in_(list(zone_ids)))
        result = await self.db.execute(query)
        return [
            Dungeon(
                id=record.id,
                zone_id=record.zone_id,
                name=record.name,
                category=record.category,
                entry_requirements=record.entry_requirements or {},
                special_features=record.special_features or [],
            )
            for record in result.scalars().all()
        ]

    async def list_unowned_badges(self, user_id: str) -> list[Badge]:
        owned = select(UserAchievementRecord.badge_id).where(UserAchievementRecord.user_id == user_id)
        result = await self.db.execute(
            select(BadgeRecord).where(BadgeRecord.id.not_in(owned)).order_by(BadgeRecord.id)
        )
        return [_badge_from_record(record) for record in result.scalars().all()]

    async def held_badges(self, user_id: str) -> list[str]:
        result = await self.db.execute(
            select(BadgeRecord.name)
            .join(UserAchievementRecord, UserAchievementRecord.badge_id == BadgeRecord.id)
            .where(UserAchievementRecord.user_id == user_id)
            .order_by(UserAchievementRecord.earned_at)
        )
        return list(result.scalars().all())

    # --- AchievementRepository ---

    async def award_badge(self, user_id: str, badge_id: str, task_id: str | None = None) -> UserAchievement:
        stmt = pg_insert(UserAchievementRecord).values(user_id=user_id, badge_id=badge_id, task_id=task_id)
        stmt = stmt.on_conflict_do_nothing(index_elements=["user_id", "badge_id"])
        inserted = await self.db.execute(stmt)
        if inserted.rowcount == 0:
            logger.debug("Badge %s already held by %s", badge_id, user_id)

        result = await self.db.execute(
            select(UserAchievementRecord).where(
                UserAchievementRecord.user_id == user_id,
                UserAchievementRecord.badge_id == badge_id,
            )
        )
        record = result.scalar_one()
        achievement = UserAchievement(
            id=str(record.id),
            user_id=record.user_id,
            badge_id=record.badge_id,
            earned_at=record.earned_at,
            task_id=record.task_id,
        )
        await self.db.commit()
        return achievement
