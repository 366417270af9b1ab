"""Badge unlock checks against the default catalog."""

from goodgrid.progression.badge_checker import badge_criteria_met, find_unlockable_badges
from goodgrid.progression.enums import WorkCategory
from goodgrid.progression.schemas import CategoryStats, UnlockCriteria
from goodgrid.progression.seed import default_badges


def _categories(**tasks):
    return {WorkCategory(name.upper()): CategoryStats(tasks_completed=count) for name, count in tasks.items()}


class TestFindUnlockableBadges:
    def test_milestones_reached(self):
        earned = find_unlockable_badges(default_badges(), 5, 25, _categories(freelance=5))
        names = {badge.name for badge in earned}
        assert names == {"First Steps", "Getting Started", "Trustworthy", "Freelance Starter"}

    def test_nothing_for_new_user(self):
        assert find_unlockable_badges(default_badges(), 0, 0, _categories()) == []

    def test_held_badges_never_returned(self):
        earned = find_unlockable_badges(
            default_badges(), 5, 25, _categories(freelance=5), held_badge_ids={"first-steps", "trustworthy"}
        )
        assert {badge.id for badge in earned} == {"getting-started", "freelance-starter"}

    def test_all_categories_required(self):
        stats = _categories(freelance=10, community=10, corporate=9)
        earned = {badge.id for badge in find_unlockable_badges(default_badges(), 29, 0, stats)}
        assert "well-rounded" not in earned

        stats = _categories(freelance=10, community=10, corporate=10)
        earned = {badge.id for badge in find_unlockable_badges(default_badges(), 30, 0, stats)}
        assert "well-rounded" in earned


class TestBadgeCriteriaMet:
    def test_level_predicate_ignored(self):
        criteria = UnlockCriteria(level=50, completed_tasks=1)
        assert badge_criteria_met(criteria, 1, 0, _categories())

    def test_trust_threshold(self):
        criteria = UnlockCriteria(trust_score=50)
        assert not badge_criteria_met(criteria, 0, 49, _categories())
        assert badge_criteria_met(criteria, 0, 50, _categories())
