"""Model validation tests."""

import pytest
from pydantic import ValidationError

from goodgrid.progression.enums import WorkCategory
from goodgrid.progression.schemas import CategoryStats, TaskCompletionEvent, TaskRewards, UserStats


class TestUserStats:
    def test_missing_categories_filled(self):
        stats = UserStats(user_id="u", category_stats={"freelance": {"tasksCompleted": 3}})
        assert set(stats.category_stats) == set(WorkCategory)
        assert stats.category(WorkCategory.FREELANCE).tasks_completed == 3
        assert stats.category("COMMUNITY").tasks_completed == 0
        assert stats.total_tasks == 3

    def test_initial(self):
        stats = UserStats.initial("u")
        assert stats.current_level == 1
        assert stats.xp_points == 0
        assert stats.version == 0
        assert stats.unlocked_zones == frozenset()

    def test_negative_trust_rejected(self):
        with pytest.raises(ValidationError):
            UserStats(user_id="u", trust_score=-1)


class TestCategoryStats:
    def test_running_mean(self):
        stats = CategoryStats().record_task(50, 5).record_task(30, 3)
        assert stats.tasks_completed == 2
        assert stats.total_xp == 80
        assert stats.average_rating == pytest.approx(4.0)


class TestTaskCompletionEvent:
    def test_defaults(self):
        event = TaskCompletionEvent(rewards=TaskRewards(xp=10), category="FREELANCE")
        assert event.quality_score == 3
        assert event.on_time
        assert event.completion_time_ratio == 1

    @pytest.mark.parametrize("quality", [0, 7])
    def test_quality_out_of_range(self, quality):
        with pytest.raises(ValidationError):
            TaskCompletionEvent(rewards=TaskRewards(), category="FREELANCE", quality_score=quality)

    def test_rewards_camel_case(self):
        rewards = TaskRewards.model_validate({"xp": 10, "trustScoreBonus": 2, "rwisPoints": 4})
        assert rewards.trust_score_bonus == 2
        assert rewards.rwis_points == 4
