"""In-process implementation of the repository contracts.

Holds everything in dicts guarded by an ``asyncio.Lock``. Used by the
unit tests and by callers embedding the engine without a database.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Iterable
from datetime import datetime, timezone

from goodgrid.errors import StatsNotFoundError, VersionConflictError
from goodgrid.progression.schemas import Badge, Dungeon, UserAchievement, UserStats, WorkHistoryEntry, Zone


class InMemoryProgressionStore:
    """Stats, catalog and achievements behind the same semantics as the SQL store."""

    def __init__(
        self,
        badges: Iterable[Badge] = (),
        zones: Iterable[Zone] = (),
        dungeons: Iterable[Dungeon] = (),
    ) -> None:
        self.badges: dict[str, Badge] = {badge.id: badge for badge in badges}
        self.zones: list[Zone] = list(zones)
        self.dungeons: list[Dungeon] = list(dungeons)
        self.stats: dict[str, UserStats] = {}
        self.history: list[WorkHistoryEntry] = []
        self.achievements: dict[tuple[str, str], UserAchievement] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

    def add_user(self, stats: UserStats) -> UserStats:
        self.stats[stats.user_id] = stats
        return stats

    # --- StatsRepository ---

    def _current(self, user_id: str) -> UserStats:
        try:
            return self.stats[user_id]
        except KeyError:
            raise StatsNotFoundError(user_id) from None

    async def get_stats(self, user_id: str) -> UserStats:
        return self._current(user_id)

    async def update_if_version(
        self,
        user_id: str,
        expected_version: int,
        new_stats: UserStats,
        entry: WorkHistoryEntry,
    ) -> UserStats:
        async with self._lock:
            current = self._current(user_id)
            if current.version != expected_version:
                raise VersionConflictError(user_id, expected_version, current.version)
            committed = new_stats.model_copy(update={"user_id": user_id, "version": expected_version + 1})
            self.stats[user_id] = committed
            self.history.append(entry)
            return committed

    async def has_applied_event(self, user_id: str, event_id: str) -> bool:
        return any(e.user_id == user_id and e.event_id == event_id for e in self.history)

    async def grant_zones(self, user_id: str, zone_ids: Iterable[str]) -> UserStats:
        async with self._lock:
            current = self._current(user_id)
            updated = current.model_copy(
                update={
                    "unlocked_zones": current.unlocked_zones | frozenset(zone_ids),
                    "version": current.version + 1,
                }
            )
            self.stats[user_id] = updated
            return updated

    # --- CatalogRepository ---

    async def list_zones(self) -> list[Zone]:
        return list(self.zones)

    async def list_dungeons(self, zone_ids: Iterable[str] | None = None) -> list[Dungeon]:
        if zone_ids is None:
            return list(self.dungeons)
        wanted = set(zone_ids)
        return [dungeon for dungeon in self.dungeons if dungeon.zone_id in wanted]

    async def list_unowned_badges(self, user_id: str) -> list[Badge]:
        return [badge for badge_id, badge in self.badges.items() if (user_id, badge_id) not in self.achievements]

    async def held_badges(self, user_id: str) -> list[str]:
        return [
            self.badges[badge_id].name
            for (owner, badge_id) in self.achievements
            if owner == user_id and badge_id in self.badges
        ]

    # --- AchievementRepository ---

    async def award_badge(self, user_id: str, badge_id: str, task_id: str | None = None) -> UserAchievement:
        key = (user_id, badge_id)
        existing = self.achievements.get(key)
        if existing is not None:
            return existing
        achievement = UserAchievement(
            id=str(next(self._ids)),
            user_id=user_id,
            badge_id=badge_id,
            earned_at=datetime.now(timezone.utc),
            task_id=task_id,
        )
        self.achievements[key] = achievement
        return achievement
