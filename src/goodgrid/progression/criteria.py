"""Evaluation of sparse, conjunctive unlock criteria.

Every present predicate is checked so callers can show all blockers at once.
Predicates whose threshold is absent, zero or empty are skipped.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from goodgrid.progression.enums import WorkCategory
from goodgrid.progression.schemas import CategoryStats, UnlockCriteria, UserStats


@dataclass(frozen=True)
class ProgressFacts:
    """The user-side values criteria are evaluated against."""

    trust_score: int
    level: int
    total_tasks: int
    held_badges: frozenset[str] = frozenset()
    category_stats: Mapping[WorkCategory, CategoryStats] = field(default_factory=dict)

    @classmethod
    def from_stats(
        cls,
        stats: UserStats,
        held_badges: Iterable[str] = (),
        total_tasks: int | None = None,
    ) -> ProgressFacts:
        return cls(
            trust_score=stats.trust_score,
            level=stats.current_level,
            total_tasks=stats.total_tasks if total_tasks is None else total_tasks,
            held_badges=frozenset(held_badges),
            category_stats=stats.category_stats,
        )

    def category(self, category: WorkCategory) -> CategoryStats:
        return self.category_stats.get(category) or CategoryStats()


@dataclass(frozen=True)
class UnlockDecision:
    unlocked: bool
    progress: int
    reasons: list[str] = field(default_factory=list)

    @property
    def reason(self) -> str:
        return "; ".join(self.reasons)


def ratio_percent(current: float, required: float) -> float:
    """``current / required`` as a percentage capped at 100."""
    if required <= 0:
        return 100.0
    return min(100.0, max(0.0, current / required * 100))


def _check(
    current: float,
    required: float,
    reason: str,
    reasons: list[str],
    progress: list[float],
) -> None:
    progress.append(ratio_percent(current, required))
    if current < required:
        reasons.append(reason)


def evaluate_criteria(criteria: UnlockCriteria, facts: ProgressFacts) -> UnlockDecision:
    """Evaluate every present predicate of ``criteria`` against ``facts``."""
    reasons: list[str] = []
    progress: list[float] = []

    if criteria.trust_score:
        _check(
            facts.trust_score,
            criteria.trust_score,
            f"Need {criteria.trust_score} Trust Score (current: {facts.trust_score})",
            reasons,
            progress,
        )

    if criteria.level:
        _check(
            facts.level,
            criteria.level,
            f"Need Level {criteria.level} (current: {facts.level})",
            reasons,
            progress,
        )

    if criteria.completed_tasks:
        _check(
            facts.total_tasks,
            criteria.completed_tasks,
            f"Need {criteria.completed_tasks} completed tasks (current: {facts.total_tasks})",
            reasons,
            progress,
        )

    if criteria.required_badges:
        missing = [name for name in criteria.required_badges if name not in facts.held_badges]
        held = len(criteria.required_badges) - len(missing)
        progress.append(ratio_percent(held, len(criteria.required_badges)))
        if missing:
            reasons.append(f"Need badges: {', '.join(missing)}")

    for category, required in criteria.category_tasks.items():
        if required:
            current = facts.category(category).tasks_completed
            label = category.value.lower()
            _check(current, required, f"Need {required} {label} tasks (current: {current})", reasons, progress)

    for category, required in criteria.category_xp.items():
        if required:
            current = facts.category(category).total_xp
            label = category.value.lower()
            _check(current, required, f"Need {required} {label} XP (current: {current})", reasons, progress)

    for category, required in criteria.category_rating.items():
        if required:
            current = facts.category(category).average_rating
            label = category.value.lower()
            _check(
                current,
                required,
                f"Need {required:g} {label} rating (current: {current:.2f})",
                reasons,
                progress,
            )

    if not progress:
        return UnlockDecision(unlocked=True, progress=100)

    return UnlockDecision(
        unlocked=not reasons,
        progress=math.floor(sum(progress) / len(progress)),
        reasons=reasons,
    )


def criteria_met(criteria: UnlockCriteria, facts: ProgressFacts) -> bool:
    return evaluate_criteria(criteria, facts).unlocked
