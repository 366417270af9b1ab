"""Persistence contracts the orchestrator depends on.

Implementations: :class:`goodgrid.progression.memory_store.InMemoryProgressionStore`
and :class:`goodgrid.progression.sql_repository.SqlProgressionRepository`.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from goodgrid.progression.schemas import Badge, Dungeon, UserAchievement, UserStats, WorkHistoryEntry, Zone


class StatsRepository(Protocol):
    async def get_stats(self, user_id: str) -> UserStats:
        """Latest committed snapshot. Raises ``StatsNotFoundError`` if absent."""
        ...

    async def update_if_version(
        self,
        user_id: str,
        expected_version: int,
        new_stats: UserStats,
        entry: WorkHistoryEntry,
    ) -> UserStats:
        """Store ``new_stats`` and append ``entry`` atomically.

        Succeeds only when the stored version equals ``expected_version``,
        otherwise raises ``VersionConflictError``. Returns the committed
        snapshot with its version incremented.
        """
        ...

    async def has_applied_event(self, user_id: str, event_id: str) -> bool: ...

    async def grant_zones(self, user_id: str, zone_ids: Iterable[str]) -> UserStats:
        """Add zone ids to the unlocked set and bump the version."""
        ...


class CatalogRepository(Protocol):
    async def list_zones(self) -> list[Zone]: ...

    async def list_dungeons(self, zone_ids: Iterable[str] | None = None) -> list[Dungeon]: ...

    async def list_unowned_badges(self, user_id: str) -> list[Badge]: ...

    async def held_badges(self, user_id: str) -> list[str]:
        """Names of the badges the user holds."""
        ...


class AchievementRepository(Protocol):
    async def award_badge(self, user_id: str, badge_id: str, task_id: str | None = None) -> UserAchievement:
        """Idempotent on ``(user_id, badge_id)``: a duplicate returns the existing record."""
        ...
