"""In-memory repository semantics."""

import pytest

from factories import USER_ID
from goodgrid.errors import StatsNotFoundError, VersionConflictError
from goodgrid.progression.enums import WorkCategory
from goodgrid.progression.schemas import WorkHistoryEntry


def _entry(event_id=None):
    return WorkHistoryEntry(
        user_id=USER_ID,
        category=WorkCategory.FREELANCE,
        xp_earned=10,
        trust_score_change=1,
        rwis_earned=0,
        event_id=event_id,
    )


class TestStats:
    @pytest.mark.asyncio
    async def test_update_bumps_version(self, store):
        stats = await store.get_stats(USER_ID)
        committed = await store.update_if_version(
            USER_ID, 0, stats.model_copy(update={"xp_points": 10}), _entry("e1")
        )
        assert committed.version == 1
        assert committed.xp_points == 10
        assert await store.has_applied_event(USER_ID, "e1")
        assert not await store.has_applied_event(USER_ID, "e2")

    @pytest.mark.asyncio
    async def test_stale_version_rejected(self, store):
        stats = await store.get_stats(USER_ID)
        await store.update_if_version(USER_ID, 0, stats, _entry())
        with pytest.raises(VersionConflictError) as exc_info:
            await store.update_if_version(USER_ID, 0, stats, _entry())
        assert exc_info.value.actual_version == 1
        assert len(store.history) == 1

    @pytest.mark.asyncio
    async def test_missing_user(self, store):
        with pytest.raises(StatsNotFoundError):
            await store.get_stats("nobody")
        with pytest.raises(StatsNotFoundError):
            await store.grant_zones("nobody", ["z"])

    @pytest.mark.asyncio
    async def test_grant_zones_is_union(self, store):
        await store.grant_zones(USER_ID, ["a"])
        stats = await store.grant_zones(USER_ID, ["a", "b"])
        assert stats.unlocked_zones == frozenset({"a", "b"})
        assert stats.version == 2


class TestAchievements:
    @pytest.mark.asyncio
    async def test_award_is_idempotent(self, store):
        first = await store.award_badge(USER_ID, "first-steps", "task-1")
        second = await store.award_badge(USER_ID, "first-steps", "task-2")
        assert first == second
        assert second.task_id == "task-1"
        assert await store.held_badges(USER_ID) == ["First Steps"]

    @pytest.mark.asyncio
    async def test_unowned_excludes_held(self, store):
        before = await store.list_unowned_badges(USER_ID)
        await store.award_badge(USER_ID, "first-steps")
        after = await store.list_unowned_badges(USER_ID)
        assert len(after) == len(before) - 1
        assert "first-steps" not in {badge.id for badge in after}

    @pytest.mark.asyncio
    async def test_list_dungeons_by_zone(self, store):
        dungeons = await store.list_dungeons(["elite-summit"])
        assert {d.id for d in dungeons} == {"master-freelance-peak", "legendary-corporate-summit"}
        assert len(await store.list_dungeons()) == len(store.dungeons)
