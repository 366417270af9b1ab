"""Criteria, zone, dungeon and category tier evaluation tests."""

import pytest

from goodgrid.progression.badge_checker import find_unlockable_badges
from goodgrid.progression.criteria import ProgressFacts, evaluate_criteria, ratio_percent
from goodgrid.progression.enums import DifficultyLevel, DungeonTier, TerrainType, WorkCategory
from goodgrid.progression.schemas import CategoryStats, Dungeon, UnlockCriteria, Zone
from goodgrid.progression.seed import default_badges, default_dungeons, default_zones
from goodgrid.progression.unlock_evaluator import (
    CATEGORY_TIERS,
    accessible_dungeons,
    evaluate_category_tiers,
    evaluate_zone,
    evaluate_zones,
    newly_unlocked_zones,
    zone_progression_status,
)


def _facts(trust_score=0, level=1, total_tasks=0, held_badges=(), **category_stats):
    return ProgressFacts(
        trust_score=trust_score,
        level=level,
        total_tasks=total_tasks,
        held_badges=frozenset(held_badges),
        category_stats={WorkCategory(name.upper()): stats for name, stats in category_stats.items()},
    )


class TestEvaluateCriteria:
    """Every predicate is checked and reported."""

    def test_trust_blocks_but_level_passes(self):
        decision = evaluate_criteria(UnlockCriteria(trust_score=100, level=10), _facts(trust_score=10, level=15))
        assert not decision.unlocked
        assert "Trust Score" in decision.reason
        assert "Level" not in decision.reason
        assert decision.progress == 55

    def test_all_failures_reported(self):
        decision = evaluate_criteria(
            UnlockCriteria(trust_score=100, level=10, completed_tasks=5),
            _facts(trust_score=10, level=5, total_tasks=2),
        )
        assert decision.reasons == [
            "Need 100 Trust Score (current: 10)",
            "Need Level 10 (current: 5)",
            "Need 5 completed tasks (current: 2)",
        ]
        assert decision.reason.count("; ") == 2

    def test_empty_criteria_unlocked(self):
        decision = evaluate_criteria(UnlockCriteria(), _facts())
        assert decision.unlocked
        assert decision.progress == 100

    def test_zero_thresholds_never_block(self):
        decision = evaluate_criteria(UnlockCriteria(trust_score=0, level=1), _facts())
        assert decision.unlocked

    def test_missing_badges(self):
        decision = evaluate_criteria(UnlockCriteria(required_badges=("A", "B")), _facts(held_badges={"A"}))
        assert not decision.unlocked
        assert decision.reason == "Need badges: B"
        assert decision.progress == 50

    def test_category_predicates(self):
        criteria = UnlockCriteria(
            category_tasks={WorkCategory.FREELANCE: 10},
            category_xp={WorkCategory.FREELANCE: 500},
            category_rating={WorkCategory.FREELANCE: 4.0},
        )
        stats = CategoryStats(tasks_completed=10, total_xp=250, average_rating=3.5)
        decision = evaluate_criteria(criteria, _facts(freelance=stats))
        assert decision.reasons == [
            "Need 500 freelance XP (current: 250)",
            "Need 4 freelance rating (current: 3.50)",
        ]

    def test_progress_bounded(self):
        over = evaluate_criteria(UnlockCriteria(trust_score=10), _facts(trust_score=1000))
        assert over.progress == 100
        assert ratio_percent(-5, 10) == 0
        assert ratio_percent(5, 0) == 100

    def test_camel_case_and_unknown_keys(self):
        criteria = UnlockCriteria.model_validate(
            {"trustScore": 25, "categoryTasks": {"freelance": 5}, "mentorships": 3, "specificBadges": ["X"]}
        )
        assert criteria.trust_score == 25
        assert criteria.category_tasks == {WorkCategory.FREELANCE: 5}
        assert criteria.required_badges == ("X",)


class TestZoneUnlock:
    """Zone evaluation and celebration content."""

    def test_unlocked_zone_celebration(self):
        zone = Zone(
            id="z1",
            name="Tech Valley",
            terrain_type=TerrainType.URBAN,
            difficulty=DifficultyLevel.INTERMEDIATE,
            unlock_requirements=UnlockCriteria(trust_score=25, level=2),
        )
        result = evaluate_zone(zone, _facts(trust_score=30, level=2))
        assert result.unlocked
        assert result.reason == "Zone unlocked!"
        assert result.celebration.title == "Tech Valley Unlocked!"
        assert result.celebration.map_reveal_animation
        assert result.celebration.rewards["xp"] == 100
        assert "city_lights" in result.celebration.particle_effects

    def test_locked_zone_celebration(self):
        zone = Zone(id="z1", name="Elite Summit", unlock_requirements=UnlockCriteria(trust_score=200))
        result = evaluate_zone(zone, _facts())
        assert not result.unlocked
        assert result.celebration.title == "Elite Summit - Locked"
        assert result.celebration.rewards == {}

    def test_already_unlocked_zones_skipped(self):
        zones = default_zones()
        results = evaluate_zones(zones, _facts(level=1), {"downtown-district"})
        assert "downtown-district" not in [r.zone_id for r in results]
        assert len(results) == len(zones) - 1

    def test_newly_unlocked(self):
        unlocked = newly_unlocked_zones(default_zones(), _facts(trust_score=30, level=2), {"downtown-district"})
        assert [r.zone_id for r in unlocked] == ["community-gardens", "tech-valley"]


class TestDungeonAccess:
    def test_accessible_dungeons_in_zone(self):
        dungeons = accessible_dungeons(default_dungeons(), "downtown-district", _facts(trust_score=2))
        assert [d.id for d in dungeons] == ["starter-freelance-tower", "local-community-center"]

    def test_required_badges_gate_entry(self):
        dungeon = Dungeon(
            id="d1",
            zone_id="z1",
            name="Guild Hall",
            category=WorkCategory.COMMUNITY,
            entry_requirements=UnlockCriteria(required_badges=("Community Helper",)),
        )
        assert accessible_dungeons([dungeon], "z1", _facts()) == []
        assert accessible_dungeons([dungeon], "z1", _facts(held_badges={"Community Helper"})) == [dungeon]


class TestCategoryTiers:
    """BASIC through MASTER within a category."""

    def test_expert_needs_special_badge(self):
        stats = CategoryStats(tasks_completed=25, total_xp=1500, average_rating=4.2)
        tiers = {t.tier: t for t in evaluate_category_tiers(WorkCategory.FREELANCE, stats)}
        assert tiers[DungeonTier.BASIC].unlocked
        assert tiers[DungeonTier.ADVANCED].unlocked
        assert not tiers[DungeonTier.EXPERT].unlocked
        assert tiers[DungeonTier.EXPERT].missing_badges == ["Freelance Specialist"]
        assert tiers[DungeonTier.EXPERT].progress_to_unlock == 100
        assert tiers[DungeonTier.MASTER].progress_to_unlock == 64

    def test_expert_with_badge(self):
        stats = CategoryStats(tasks_completed=25, total_xp=1500, average_rating=4.2)
        tiers = evaluate_category_tiers(WorkCategory.FREELANCE, stats, {"Freelance Specialist"})
        expert = next(t for t in tiers if t.tier is DungeonTier.EXPERT)
        assert expert.unlocked
        assert expert.tier_id == "freelance_EXPERT"

    @pytest.mark.parametrize("category", list(WorkCategory))
    def test_catalog_badges_open_every_tier(self, category):
        stats = CategoryStats(tasks_completed=1000, total_xp=10**6, average_rating=5)
        held = {badge.name for badge in default_badges()}
        tiers = evaluate_category_tiers(category, stats, held)
        assert all(t.unlocked for t in tiers)
        assert all(t.missing_badges == [] for t in tiers)

    @pytest.mark.parametrize(
        ("category", "tier"),
        [(category, tier) for category in WorkCategory for tier in (DungeonTier.EXPERT, DungeonTier.MASTER)],
    )
    def test_tier_badges_earned_by_reaching_tier(self, category, tier):
        requirement = next(r for r in CATEGORY_TIERS[category] if r.tier is tier)
        # Master Freelancer is a 75-task milestone, above the 50-task tier
        tasks = max(requirement.tasks_completed, 75)
        stats = CategoryStats(tasks_completed=tasks, total_xp=requirement.xp, average_rating=requirement.rating)
        earned = find_unlockable_badges(default_badges(), tasks, 0, {category: stats})
        tiers = {t.tier: t for t in evaluate_category_tiers(category, stats, {b.name for b in earned})}
        assert tiers[tier].unlocked

    def test_expert_unlocks_at_threshold_with_earned_badges(self):
        stats = CategoryStats(tasks_completed=25, total_xp=1500, average_rating=4.2)
        earned = find_unlockable_badges(default_badges(), 25, 0, {WorkCategory.FREELANCE: stats})
        assert "Freelance Specialist" in {b.name for b in earned}
        tiers = {t.tier: t for t in evaluate_category_tiers(WorkCategory.FREELANCE, stats, {b.name for b in earned})}
        assert tiers[DungeonTier.EXPERT].unlocked

    def test_basic_always_open(self):
        tiers = evaluate_category_tiers(WorkCategory.CORPORATE, CategoryStats())
        assert tiers[0].tier is DungeonTier.BASIC
        assert tiers[0].unlocked
        assert tiers[0].progress_to_unlock == 100
        assert not any(t.unlocked for t in tiers[1:])


class TestZoneProgressionStatus:
    def test_next_zone_prefers_unlockable(self):
        status = zone_progression_status(
            default_zones(),
            default_dungeons()[:3],
            _facts(trust_score=30, level=2),
            {"downtown-district"},
        )
        assert [z.id for z in status.unlocked_zones] == ["downtown-district"]
        assert status.next_unlockable_zone.id == "community-gardens"
        assert status.progress_to_next_zone == 100
        assert len(status.zone_content) == 4
        assert len(status.advanced_dungeons) == 3 * 4

    def test_next_zone_when_nothing_unlockable(self):
        status = zone_progression_status(default_zones(), [], _facts(), {"downtown-district"})
        assert status.next_unlockable_zone.id == "community-gardens"
        assert 0 <= status.progress_to_next_zone < 100
