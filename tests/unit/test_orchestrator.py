"""Task completion pipeline against the in-memory store."""

import pytest

from factories import USER_ID, make_event, make_stats
from goodgrid.errors import StatsNotFoundError, VersionConflictError
from goodgrid.progression.enums import WorkCategory
from goodgrid.progression.memory_store import InMemoryProgressionStore
from goodgrid.progression.orchestrator import ProgressionOrchestrator
from goodgrid.progression.seed import default_badges, default_dungeons, default_zones


class StaleReadStore(InMemoryProgressionStore):
    """Returns a snapshot one version behind, as if another writer got there first."""

    async def get_stats(self, user_id):
        current = await super().get_stats(user_id)
        return current.model_copy(update={"version": current.version - 1})


class TestProcessTaskCompletion:
    """One completed task through scoring, levels and grants."""

    @pytest.mark.asyncio
    async def test_first_task(self, orchestrator, store):
        result = await orchestrator.process_task_completion(USER_ID, make_event(event_id="evt-1"))

        assert result.xp.total_xp == 150
        assert result.trust_score.total_trust_score == 10
        assert result.rwis.total_rwis == 22
        assert result.level_up.leveled_up
        assert result.level_up.new_level == 2
        assert not result.replayed

        stats = result.stats
        assert stats.xp_points == 150
        assert stats.trust_score == 10
        assert stats.rwis_score == 22
        assert stats.current_level == 2
        community = stats.category(WorkCategory.COMMUNITY)
        assert community.tasks_completed == 1
        assert community.total_xp == 150
        assert community.average_rating == 5

        assert [badge.name for badge in result.badges_earned] == ["First Steps"]
        assert result.unlocked_zone_ids == ["downtown-district"]
        assert {d.id for d in result.dungeons_unlocked} == {
            "starter-freelance-tower",
            "local-community-center",
            "small-business-castle",
        }
        assert stats.unlocked_zones == frozenset({"downtown-district"})
        assert store.stats[USER_ID] == stats
        assert len(store.history) == 1

    @pytest.mark.asyncio
    async def test_missing_user(self, orchestrator):
        with pytest.raises(StatsNotFoundError):
            await orchestrator.process_task_completion("nobody", make_event())

    @pytest.mark.asyncio
    async def test_held_badge_not_earned_again(self, orchestrator):
        await orchestrator.process_task_completion(USER_ID, make_event(event_id="evt-1"))
        second = await orchestrator.process_task_completion(USER_ID, make_event(event_id="evt-2"))
        assert "First Steps" not in [badge.name for badge in second.badges_earned]
        assert second.zones_unlocked == []

    @pytest.mark.asyncio
    async def test_replayed_event_skips_deltas(self, orchestrator, store):
        first = await orchestrator.process_task_completion(USER_ID, make_event(event_id="evt-1"))
        replay = await orchestrator.process_task_completion(USER_ID, make_event(event_id="evt-1"))

        assert replay.replayed
        assert replay.xp is None
        assert replay.stats.xp_points == first.stats.xp_points
        assert replay.badges_earned == []
        assert len(store.history) == 1

    @pytest.mark.asyncio
    async def test_trust_never_negative(self, orchestrator, store):
        store.add_user(make_stats().model_copy(update={"trust_score": 2}))
        event = make_event(WorkCategory.FREELANCE, trust_score_bonus=0, quality_score=1, on_time=False)

        result = await orchestrator.process_task_completion(USER_ID, event)

        assert result.trust_score.total_trust_score == -5
        assert result.stats.trust_score == 0

    @pytest.mark.asyncio
    async def test_version_conflict(self):
        store = StaleReadStore(default_badges(), default_zones(), default_dungeons())
        store.add_user(make_stats().model_copy(update={"version": 3}))
        orchestrator = ProgressionOrchestrator(store, store, store)

        with pytest.raises(VersionConflictError):
            await orchestrator.process_task_completion(USER_ID, make_event())
        assert store.history == []
        assert store.achievements == {}


class TestReconcile:
    """Grants pending from an interrupted run are awarded on reconcile."""

    @pytest.mark.asyncio
    async def test_awards_pending_grants(self, orchestrator, store):
        stats = make_stats(freelance=5).model_copy(update={"trust_score": 30, "current_level": 2, "xp_points": 120})
        store.add_user(stats)

        result = await orchestrator.reconcile(USER_ID)

        assert {badge.name for badge in result.badges_earned} == {
            "First Steps",
            "Getting Started",
            "Trustworthy",
            "Freelance Starter",
        }
        assert set(result.unlocked_zone_ids) == {"downtown-district", "community-gardens", "tech-valley"}
        assert result.replayed

        again = await orchestrator.reconcile(USER_ID)
        assert again.badges_earned == []
        assert again.zones_unlocked == []


class TestStatus:
    @pytest.mark.asyncio
    async def test_progression_status(self, orchestrator):
        await orchestrator.process_task_completion(USER_ID, make_event(event_id="evt-1"))

        status = await orchestrator.progression_status(USER_ID)

        assert status.level.current_level == 2
        assert status.level.xp_in_current_level == 50
        assert status.held_badges == ["First Steps"]
        assert status.unlocked_zones == ["downtown-district"]
        assert status.total_tasks == 1

    @pytest.mark.asyncio
    async def test_zone_progression_status(self, orchestrator):
        await orchestrator.process_task_completion(USER_ID, make_event(event_id="evt-1"))

        status = await orchestrator.zone_progression_status(USER_ID)

        assert [z.id for z in status.unlocked_zones] == ["downtown-district"]
        assert status.next_unlockable_zone.id == "community-gardens"
        assert len(status.advanced_dungeons) == 3 * 4
