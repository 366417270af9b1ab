"""XP, Trust Score and Impact Score (RWIS) calculation for a completed task.

All functions are pure and deterministic. Each returns a calculation trace
whose ``reasoning`` lines exist for auditing and tests only; nothing branches
on them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from goodgrid.progression.enums import TaskComplexity, WorkCategory
from goodgrid.progression.schemas import TaskRewards

XP_CATEGORY_MULTIPLIERS: dict[WorkCategory, float] = {
    WorkCategory.FREELANCE: 1.0,
    WorkCategory.COMMUNITY: 1.2,
    WorkCategory.CORPORATE: 1.1,
}

RWIS_CATEGORY_MULTIPLIERS: dict[WorkCategory, float] = {
    WorkCategory.FREELANCE: 1.0,
    WorkCategory.COMMUNITY: 1.5,
    WorkCategory.CORPORATE: 1.2,
}

COMPLEXITY_MULTIPLIERS: dict[TaskComplexity, float] = {
    TaskComplexity.LOW: 1.0,
    TaskComplexity.MEDIUM: 1.2,
    TaskComplexity.HIGH: 1.5,
}

# multiplier - 1, kept exact so that e.g. 100 * 0.2 floors to 20, not 19
_COMPLEXITY_BONUS_RATES: dict[TaskComplexity, float] = {
    TaskComplexity.LOW: 0.0,
    TaskComplexity.MEDIUM: 0.2,
    TaskComplexity.HIGH: 0.5,
}

HIGH_QUALITY_XP_BONUS = 0.25
GOOD_QUALITY_XP_BONUS = 0.10
EARLY_COMPLETION_XP_FACTOR = 0.2
LEVEL_DAMPING_PER_LEVEL = 0.02
LEVEL_DAMPING_FLOOR = 0.5
HIGH_QUALITY_RWIS_BONUS = 0.3
DETAILED_FEEDBACK_LENGTH = 50


@dataclass(frozen=True)
class XPCalculation:
    base_xp: int
    bonus_xp: int
    total_xp: int
    reasoning: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TrustScoreCalculation:
    base_trust_score: int
    bonus_trust_score: int
    total_trust_score: int
    reasoning: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RWISCalculation:
    base_rwis: int
    bonus_rwis: int
    total_rwis: int
    reasoning: list[str] = field(default_factory=list)


def level_damping(user_level: int) -> float:
    """XP scaling for higher levels, never below 0.5."""
    return max(LEVEL_DAMPING_FLOOR, 1 - (user_level - 1) * LEVEL_DAMPING_PER_LEVEL)


def calculate_xp(
    rewards: TaskRewards,
    category: WorkCategory,
    quality_score: float = 3,
    completion_time_ratio: float = 1,
    user_level: int = 1,
) -> XPCalculation:
    """Compute XP for a completed task.

    ``completion_time_ratio`` is actual/allotted time; values below 1 earn an
    early-completion bonus.
    """
    category = WorkCategory(category)
    reasoning = [f"Base XP from task: {rewards.xp}"]

    multiplier = XP_CATEGORY_MULTIPLIERS[category]
    base_xp = math.floor(rewards.xp * multiplier)
    reasoning.append(f"Category multiplier ({category.value}): x{multiplier}")

    bonus_xp = 0
    if quality_score >= 4:
        quality_bonus = math.floor(base_xp * HIGH_QUALITY_XP_BONUS)
        bonus_xp += quality_bonus
        reasoning.append(f"High quality bonus ({quality_score:g}/5): +{quality_bonus} XP")
    elif quality_score >= 3:
        quality_bonus = math.floor(base_xp * GOOD_QUALITY_XP_BONUS)
        bonus_xp += quality_bonus
        reasoning.append(f"Good quality bonus ({quality_score:g}/5): +{quality_bonus} XP")

    if completion_time_ratio < 1:
        time_bonus = math.floor(base_xp * (1 - completion_time_ratio) * EARLY_COMPLETION_XP_FACTOR)
        bonus_xp += time_bonus
        reasoning.append(f"Early completion bonus: +{time_bonus} XP")

    scaling = level_damping(user_level)
    total_xp = math.floor((base_xp + bonus_xp) * scaling)
    if scaling < 1:
        reasoning.append(f"Level scaling (Level {user_level}): x{scaling:.2f}")

    return XPCalculation(base_xp=base_xp, bonus_xp=bonus_xp, total_xp=total_xp, reasoning=reasoning)


def calculate_trust_score(
    rewards: TaskRewards,
    category: WorkCategory,
    quality_score: float = 3,
    on_time: bool = True,
    client_feedback: str | None = None,
) -> TrustScoreCalculation:
    """Compute the trust score delta for a completed task.

    The total may be negative. Clamping the cumulative score at zero happens
    in :func:`apply_trust_delta`.
    """
    category = WorkCategory(category)
    base = rewards.trust_score_bonus
    reasoning = [f"Base trust score from task: {base}"]

    bonus = 0
    if quality_score >= 5:
        bonus += 3
        reasoning.append("Excellent quality (5/5): +3 trust score")
    elif quality_score >= 4:
        bonus += 2
        reasoning.append("Good quality (4/5): +2 trust score")
    elif quality_score >= 3:
        bonus += 1
        reasoning.append("Satisfactory quality (3/5): +1 trust score")
    else:
        bonus -= 2
        reasoning.append(f"Poor quality ({quality_score:g}/5): -2 trust score")

    if on_time:
        bonus += 1
        reasoning.append("On-time completion: +1 trust score")
    else:
        bonus -= 3
        reasoning.append("Late completion: -3 trust score")

    if client_feedback and len(client_feedback) > DETAILED_FEEDBACK_LENGTH:
        bonus += 1
        reasoning.append("Detailed client feedback: +1 trust score")

    if category is WorkCategory.COMMUNITY:
        bonus += 1
        reasoning.append("Community work bonus: +1 trust score")

    return TrustScoreCalculation(
        base_trust_score=base,
        bonus_trust_score=bonus,
        total_trust_score=base + bonus,
        reasoning=reasoning,
    )


def apply_trust_delta(current: int, delta: int) -> int:
    """Apply a trust delta to a cumulative score, flooring at zero."""
    return max(0, current + delta)


def calculate_rwis(
    rewards: TaskRewards,
    category: WorkCategory,
    quality_score: float = 3,
    task_complexity: TaskComplexity = TaskComplexity.MEDIUM,
) -> RWISCalculation:
    """Compute the Real-World Impact Score for a completed task."""
    category = WorkCategory(category)
    task_complexity = TaskComplexity(task_complexity)
    reasoning = [f"Base RWIS from task: {rewards.rwis_points}"]

    multiplier = RWIS_CATEGORY_MULTIPLIERS[category]
    base = math.floor(rewards.rwis_points * multiplier)
    reasoning.append(f"Category impact multiplier ({category.value}): x{multiplier}")

    bonus = 0
    if quality_score >= 4:
        quality_bonus = math.floor(base * HIGH_QUALITY_RWIS_BONUS)
        bonus += quality_bonus
        reasoning.append(f"High quality impact bonus: +{quality_bonus} RWIS")

    complexity_bonus = math.floor(base * _COMPLEXITY_BONUS_RATES[task_complexity])
    bonus += complexity_bonus
    reasoning.append(
        f"Task complexity bonus ({task_complexity.value}, x{COMPLEXITY_MULTIPLIERS[task_complexity]}): "
        f"+{complexity_bonus} RWIS"
    )

    return RWISCalculation(base_rwis=base, bonus_rwis=bonus, total_rwis=base + bonus, reasoning=reasoning)
