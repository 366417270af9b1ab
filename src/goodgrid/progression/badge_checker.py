"""Badge unlock checks against a user's totals and per-category stats."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from goodgrid.progression.criteria import ProgressFacts, criteria_met
from goodgrid.progression.enums import WorkCategory
from goodgrid.progression.schemas import Badge, CategoryStats, UnlockCriteria

logger = logging.getLogger(__name__)


def badge_criteria_met(
    criteria: UnlockCriteria,
    total_tasks: int,
    trust_score: int,
    category_stats: Mapping[WorkCategory, CategoryStats],
) -> bool:
    """Check the task-count, trust score and per-category task predicates.

    Level and badge predicates are not part of badge criteria and are
    ignored here.
    """
    scoped = UnlockCriteria(
        completed_tasks=criteria.completed_tasks,
        trust_score=criteria.trust_score,
        category_tasks=criteria.category_tasks,
    )
    facts = ProgressFacts(
        trust_score=trust_score,
        level=1,
        total_tasks=total_tasks,
        category_stats=category_stats,
    )
    return criteria_met(scoped, facts)


def find_unlockable_badges(
    candidates: Iterable[Badge],
    total_tasks: int,
    trust_score: int,
    category_stats: Mapping[WorkCategory, CategoryStats],
    held_badge_ids: Iterable[str] = (),
) -> list[Badge]:
    """Return the not-yet-held badges whose criteria are all satisfied.

    ``candidates`` is normally the catalog minus the user's badges already;
    ``held_badge_ids`` filters again so a held badge is never reported as new.
    """
    held = set(held_badge_ids)
    earned = []
    for badge in candidates:
        if badge.id in held:
            continue
        if badge_criteria_met(badge.unlock_criteria, total_tasks, trust_score, category_stats):
            earned.append(badge)
    if earned:
        logger.debug("Unlockable badges: %s", [badge.name for badge in earned])
    return earned
