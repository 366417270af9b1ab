"""Task-completion pipeline: score, level, commit, then grant unlocks.

Stats are committed with a version check before any unlock is evaluated,
so grants always reflect a snapshot that exists in the store. If the
process dies between the stats commit and the grants, re-delivering the
same event (or calling :meth:`ProgressionOrchestrator.reconcile`) awards
what is still pending.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field

from goodgrid.progression import level_curve
from goodgrid.progression.badge_checker import find_unlockable_badges
from goodgrid.progression.criteria import ProgressFacts
from goodgrid.progression.level_curve import LevelProgress, LevelUpResult
from goodgrid.progression.repository import AchievementRepository, CatalogRepository, StatsRepository
from goodgrid.progression.schemas import Badge, Dungeon, TaskCompletionEvent, UserStats, WorkHistoryEntry
from goodgrid.progression.score_calculator import (
    RWISCalculation,
    TrustScoreCalculation,
    XPCalculation,
    apply_trust_delta,
    calculate_rwis,
    calculate_trust_score,
    calculate_xp,
)
from goodgrid.progression.unlock_evaluator import (
    ZoneProgressionStatus,
    ZoneUnlockResult,
    accessible_dungeons,
    newly_unlocked_zones,
    zone_progression_status,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressionResult:
    user_id: str
    stats: UserStats
    level_up: LevelUpResult
    xp: XPCalculation | None = None
    trust_score: TrustScoreCalculation | None = None
    rwis: RWISCalculation | None = None
    badges_earned: list[Badge] = field(default_factory=list)
    zones_unlocked: list[ZoneUnlockResult] = field(default_factory=list)
    replayed: bool = False

    @property
    def unlocked_zone_ids(self) -> list[str]:
        return [zone.zone_id for zone in self.zones_unlocked]

    @property
    def dungeons_unlocked(self) -> list[Dungeon]:
        return [dungeon for zone in self.zones_unlocked for dungeon in zone.new_dungeons_unlocked]


@dataclass(frozen=True)
class ProgressionStatus:
    user_id: str
    level: LevelProgress
    trust_score: int
    rwis_score: int
    xp_points: int
    total_tasks: int
    held_badges: list[str]
    unlocked_zones: list[str]


class ProgressionOrchestrator:
    def __init__(
        self,
        stats_repo: StatsRepository,
        catalog_repo: CatalogRepository,
        achievement_repo: AchievementRepository,
    ) -> None:
        self.stats_repo = stats_repo
        self.catalog_repo = catalog_repo
        self.achievement_repo = achievement_repo

    async def process_task_completion(self, user_id: str, event: TaskCompletionEvent) -> ProgressionResult:
        """Apply one completed task to the user's progression.

        Raises ``StatsNotFoundError`` when the user has no snapshot and
        ``VersionConflictError`` when the snapshot changed concurrently; the
        caller may re-read and retry.
        """
        stats = await self.stats_repo.get_stats(user_id)

        if event.event_id and await self.stats_repo.has_applied_event(user_id, event.event_id):
            logger.info("Event %s already applied for %s, re-evaluating grants", event.event_id, user_id)
            level_up = level_curve.advance(stats.xp_points, stats.current_level)
            return await self._grant(stats, level_up, event.task_id, replayed=True)

        xp = calculate_xp(
            event.rewards,
            event.category,
            quality_score=event.quality_score,
            completion_time_ratio=event.completion_time_ratio,
            user_level=stats.current_level,
        )
        trust = calculate_trust_score(
            event.rewards,
            event.category,
            quality_score=event.quality_score,
            on_time=event.on_time,
            client_feedback=event.client_feedback,
        )
        rwis = calculate_rwis(
            event.rewards,
            event.category,
            quality_score=event.quality_score,
            task_complexity=event.task_complexity,
        )

        total_xp = stats.xp_points + xp.total_xp
        level_up = level_curve.advance(total_xp, stats.current_level)
        category_stats = dict(stats.category_stats)
        category_stats[event.category] = stats.category(event.category).record_task(
            xp.total_xp, event.quality_score
        )

        new_stats = stats.model_copy(
            update={
                "xp_points": total_xp,
                "trust_score": apply_trust_delta(stats.trust_score, trust.total_trust_score),
                "rwis_score": stats.rwis_score + rwis.total_rwis,
                "current_level": level_up.new_level,
                "category_stats": category_stats,
            }
        )
        entry = WorkHistoryEntry(
            user_id=user_id,
            category=event.category,
            xp_earned=xp.total_xp,
            trust_score_change=trust.total_trust_score,
            rwis_earned=rwis.total_rwis,
            quality_score=event.quality_score,
            client_feedback=event.client_feedback,
            event_id=event.event_id,
            task_id=event.task_id,
        )
        committed = await self.stats_repo.update_if_version(user_id, stats.version, new_stats, entry)

        if level_up.leveled_up:
            logger.info(
                "User %s leveled up %d -> %d (%s)",
                user_id,
                level_up.previous_level,
                level_up.new_level,
                ", ".join(level_up.unlocked_features) or "no features",
            )

        result = await self._grant(committed, level_up, event.task_id)
        return dataclasses.replace(result, xp=xp, trust_score=trust, rwis=rwis)

    async def reconcile(self, user_id: str) -> ProgressionResult:
        """Award any badges and zones the current snapshot already qualifies for."""
        stats = await self.stats_repo.get_stats(user_id)
        level_up = level_curve.advance(stats.xp_points, stats.current_level)
        return await self._grant(stats, level_up, None, replayed=True)

    async def progression_status(self, user_id: str) -> ProgressionStatus:
        stats = await self.stats_repo.get_stats(user_id)
        return ProgressionStatus(
            user_id=user_id,
            level=level_curve.level_progress(stats.xp_points, stats.current_level),
            trust_score=stats.trust_score,
            rwis_score=stats.rwis_score,
            xp_points=stats.xp_points,
            total_tasks=stats.total_tasks,
            held_badges=await self.catalog_repo.held_badges(user_id),
            unlocked_zones=sorted(stats.unlocked_zones),
        )

    async def zone_progression_status(self, user_id: str) -> ZoneProgressionStatus:
        stats = await self.stats_repo.get_stats(user_id)
        facts = ProgressFacts.from_stats(stats, await self.catalog_repo.held_badges(user_id))
        zones = await self.catalog_repo.list_zones()
        dungeons = await self.catalog_repo.list_dungeons(stats.unlocked_zones)
        return zone_progression_status(zones, dungeons, facts, stats.unlocked_zones)

    async def _grant(
        self,
        stats: UserStats,
        level_up: LevelUpResult,
        task_id: str | None,
        replayed: bool = False,
    ) -> ProgressionResult:
        user_id = stats.user_id

        candidates = await self.catalog_repo.list_unowned_badges(user_id)
        earned = find_unlockable_badges(candidates, stats.total_tasks, stats.trust_score, stats.category_stats)
        for badge in earned:
            await self.achievement_repo.award_badge(user_id, badge.id, task_id)
            logger.info("Awarded badge %s to %s", badge.name, user_id)

        facts = ProgressFacts.from_stats(stats, await self.catalog_repo.held_badges(user_id))
        zones = newly_unlocked_zones(await self.catalog_repo.list_zones(), facts, stats.unlocked_zones)
        if zones:
            zone_ids = [zone.zone_id for zone in zones]
            dungeons = await self.catalog_repo.list_dungeons(zone_ids)
            zones = [
                dataclasses.replace(zone, new_dungeons_unlocked=accessible_dungeons(dungeons, zone.zone_id, facts))
                for zone in zones
            ]
            stats = await self.stats_repo.grant_zones(user_id, zone_ids)
            logger.info("Unlocked zones %s for %s", zone_ids, user_id)

        return ProgressionResult(
            user_id=user_id,
            stats=stats,
            level_up=level_up,
            badges_earned=earned,
            zones_unlocked=zones,
            replayed=replayed,
        )
