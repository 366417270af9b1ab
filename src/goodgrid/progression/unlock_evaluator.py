"""Zone, dungeon and in-category tier unlock evaluation."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from goodgrid.progression.criteria import ProgressFacts, UnlockDecision, evaluate_criteria, ratio_percent
from goodgrid.progression.enums import DungeonTier, WorkCategory
from goodgrid.progression.schemas import CategoryStats, Dungeon, Zone
from goodgrid.progression.zone_content import (
    ZoneCelebration,
    ZoneContent,
    build_zone_celebration,
    zone_specific_content,
)


@dataclass(frozen=True)
class TierRequirement:
    tier: DungeonTier
    tasks_completed: int
    xp: int
    rating: float
    special_badges: tuple[str, ...] = ()


def _tiers(rows: list[tuple], badges: dict[DungeonTier, tuple[str, ...]]) -> list[TierRequirement]:
    return [
        TierRequirement(tier=tier, tasks_completed=tasks, xp=xp, rating=rating, special_badges=badges.get(tier, ()))
        for tier, tasks, xp, rating in rows
    ]


CATEGORY_TIERS: dict[WorkCategory, list[TierRequirement]] = {
    WorkCategory.FREELANCE: _tiers(
        [
            (DungeonTier.BASIC, 0, 0, 0),
            (DungeonTier.ADVANCED, 10, 500, 3.5),
            (DungeonTier.EXPERT, 25, 1500, 4.0),
            (DungeonTier.MASTER, 50, 3000, 4.5),
        ],
        {
            DungeonTier.EXPERT: ("Freelance Specialist",),
            DungeonTier.MASTER: ("Freelance Specialist", "Master Freelancer"),
        },
    ),
    WorkCategory.COMMUNITY: _tiers(
        [
            (DungeonTier.BASIC, 0, 0, 0),
            (DungeonTier.ADVANCED, 15, 750, 3.5),
            (DungeonTier.EXPERT, 35, 2000, 4.0),
            (DungeonTier.MASTER, 75, 4500, 4.5),
        ],
        {
            DungeonTier.EXPERT: ("Community Champion",),
            DungeonTier.MASTER: ("Community Champion", "Community Leader"),
        },
    ),
    WorkCategory.CORPORATE: _tiers(
        [
            (DungeonTier.BASIC, 0, 0, 0),
            (DungeonTier.ADVANCED, 8, 400, 3.5),
            (DungeonTier.EXPERT, 20, 1200, 4.0),
            (DungeonTier.MASTER, 40, 2500, 4.5),
        ],
        {
            DungeonTier.EXPERT: ("Corporate Professional",),
            DungeonTier.MASTER: ("Corporate Professional", "Executive Level"),
        },
    ),
}


@dataclass(frozen=True)
class ZoneUnlockResult:
    zone_id: str
    zone_name: str
    unlocked: bool
    reason: str
    progress: int
    celebration: ZoneCelebration
    new_dungeons_unlocked: list[Dungeon] = field(default_factory=list)


@dataclass(frozen=True)
class TierUnlock:
    tier_id: str
    name: str
    category: WorkCategory
    tier: DungeonTier
    requirement: TierRequirement
    unlocked: bool
    progress_to_unlock: int
    missing_badges: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ZoneProgressionStatus:
    unlocked_zones: list[Zone]
    locked_zones: list[Zone]
    next_unlockable_zone: Zone | None
    progress_to_next_zone: int
    advanced_dungeons: list[TierUnlock]
    zone_content: list[ZoneContent]


# --- Zones ---


def evaluate_zone(zone: Zone, facts: ProgressFacts) -> ZoneUnlockResult:
    """Evaluate one zone's unlock requirements, reporting every blocker."""
    decision = evaluate_criteria(zone.unlock_requirements, facts)
    return ZoneUnlockResult(
        zone_id=zone.id,
        zone_name=zone.name,
        unlocked=decision.unlocked,
        reason="Zone unlocked!" if decision.unlocked else decision.reason,
        progress=decision.progress,
        celebration=build_zone_celebration(zone, decision.unlocked),
    )


def evaluate_zones(
    zones: Iterable[Zone],
    facts: ProgressFacts,
    unlocked_zone_ids: Iterable[str] = (),
) -> list[ZoneUnlockResult]:
    """Evaluate every zone not already unlocked, in catalog order."""
    already = set(unlocked_zone_ids)
    return [evaluate_zone(zone, facts) for zone in zones if zone.id not in already]


def newly_unlocked_zones(
    zones: Iterable[Zone],
    facts: ProgressFacts,
    unlocked_zone_ids: Iterable[str] = (),
) -> list[ZoneUnlockResult]:
    return [result for result in evaluate_zones(zones, facts, unlocked_zone_ids) if result.unlocked]


# --- Dungeons ---


def evaluate_dungeon(dungeon: Dungeon, facts: ProgressFacts) -> UnlockDecision:
    """Entry gate for a dungeon. Every required badge must be held."""
    return evaluate_criteria(dungeon.entry_requirements, facts)


def is_dungeon_unlocked(dungeon: Dungeon, facts: ProgressFacts) -> bool:
    return evaluate_dungeon(dungeon, facts).unlocked


def accessible_dungeons(dungeons: Iterable[Dungeon], zone_id: str, facts: ProgressFacts) -> list[Dungeon]:
    return [d for d in dungeons if d.zone_id == zone_id and is_dungeon_unlocked(d, facts)]


# --- Category tiers ---


def tier_progress(stats: CategoryStats, requirement: TierRequirement) -> int:
    """Mean of the task, XP and rating ratios, each capped at 100."""
    ratios = (
        ratio_percent(stats.tasks_completed, requirement.tasks_completed),
        ratio_percent(stats.total_xp, requirement.xp),
        ratio_percent(stats.average_rating, requirement.rating),
    )
    return math.floor(sum(ratios) / len(ratios))


def evaluate_tier(
    category: WorkCategory,
    stats: CategoryStats,
    requirement: TierRequirement,
    held_badges: Iterable[str] = (),
    dungeon: Dungeon | None = None,
) -> TierUnlock:
    held = set(held_badges)
    missing = [name for name in requirement.special_badges if name not in held]
    numeric_ok = (
        stats.tasks_completed >= requirement.tasks_completed
        and stats.total_xp >= requirement.xp
        and stats.average_rating >= requirement.rating
    )
    tier_name = requirement.tier.value
    if dungeon is not None:
        tier_id, name = f"{dungeon.id}_{tier_name}", f"{dungeon.name} - {tier_name}"
    else:
        tier_id, name = f"{category.value.lower()}_{tier_name}", f"{category.value.title()} - {tier_name}"
    return TierUnlock(
        tier_id=tier_id,
        name=name,
        category=category,
        tier=requirement.tier,
        requirement=requirement,
        unlocked=numeric_ok and not missing,
        progress_to_unlock=tier_progress(stats, requirement),
        missing_badges=missing,
    )


def evaluate_category_tiers(
    category: WorkCategory,
    stats: CategoryStats,
    held_badges: Iterable[str] = (),
) -> list[TierUnlock]:
    """BASIC → MASTER progression within one work category."""
    category = WorkCategory(category)
    held = frozenset(held_badges)
    return [evaluate_tier(category, stats, requirement, held) for requirement in CATEGORY_TIERS[category]]


def evaluate_advanced_dungeons(dungeons: Iterable[Dungeon], facts: ProgressFacts) -> list[TierUnlock]:
    """Tier unlocks for every dungeon, using the dungeon's category stats."""
    unlocks: list[TierUnlock] = []
    for dungeon in dungeons:
        stats = facts.category(dungeon.category)
        for requirement in CATEGORY_TIERS[dungeon.category]:
            unlocks.append(evaluate_tier(dungeon.category, stats, requirement, facts.held_badges, dungeon))
    return unlocks


# --- Status ---


def zone_progression_status(
    zones: Sequence[Zone],
    dungeons: Sequence[Dungeon],
    facts: ProgressFacts,
    unlocked_zone_ids: Iterable[str],
) -> ZoneProgressionStatus:
    """Overview of unlocked/locked zones and the closest next unlock.

    The next unlockable zone is the first locked zone that is already
    unlockable, else the first locked zone in catalog order.
    """
    unlocked_ids = set(unlocked_zone_ids)
    unlocked = [zone for zone in zones if zone.id in unlocked_ids]
    locked = [zone for zone in zones if zone.id not in unlocked_ids]

    next_zone: Zone | None = None
    next_progress = 0
    for zone in locked:
        decision = evaluate_criteria(zone.unlock_requirements, facts)
        if next_zone is None or decision.unlocked:
            next_zone = zone
            next_progress = decision.progress
            if decision.unlocked:
                break

    content: list[ZoneContent] = []
    for zone in unlocked:
        content.extend(zone_specific_content(zone))

    return ZoneProgressionStatus(
        unlocked_zones=unlocked,
        locked_zones=locked,
        next_unlockable_zone=next_zone,
        progress_to_next_zone=next_progress,
        advanced_dungeons=evaluate_advanced_dungeons(dungeons, facts),
        zone_content=content,
    )
