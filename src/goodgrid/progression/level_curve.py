"""Level curve: cumulative XP to level, level-up detection, feature unlocks.

Level ``n`` costs ``floor(100 * 1.5 ** (n - 1))`` XP. The feature table is
configuration data shared with the client; keep it in sync.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

BASE_LEVEL_XP = 100
LEVEL_GROWTH = 1.5

LEVEL_FEATURES: dict[int, str] = {
    5: "Advanced Task Filtering",
    10: "Mentor Status",
    15: "Custom Character Accessories",
    20: "Zone Fast Travel",
    25: "Expert Task Access",
}

LEVEL_BADGE_INTERVAL = 10


@dataclass(frozen=True)
class LevelUpResult:
    leveled_up: bool
    new_level: int
    previous_level: int
    xp_required: int
    xp_to_next_level: int
    unlocked_features: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LevelProgress:
    current_level: int
    xp_in_current_level: int
    xp_required_for_next_level: int
    progress_percentage: float


def xp_for_level(level: int) -> int:
    """XP needed to complete ``level`` and reach the next one."""
    return math.floor(BASE_LEVEL_XP * LEVEL_GROWTH ** (level - 1))


def cumulative_xp_for_level(level: int) -> int:
    """Total XP at which ``level`` is reached."""
    return sum(xp_for_level(n) for n in range(1, level))


def features_for_level(level: int) -> list[str]:
    features = []
    if level in LEVEL_FEATURES:
        features.append(LEVEL_FEATURES[level])
    if level % LEVEL_BADGE_INTERVAL == 0:
        features.append(f"Level {level} Badge")
    return features


def advance(total_xp: int, current_level: int) -> LevelUpResult:
    """Advance ``current_level`` as far as ``total_xp`` allows.

    A single update may cross several levels. The level never goes down.
    """
    threshold = cumulative_xp_for_level(current_level)
    new_level = current_level
    while total_xp >= threshold + xp_for_level(new_level):
        threshold += xp_for_level(new_level)
        new_level += 1

    unlocked: list[str] = []
    for level in range(current_level + 1, new_level + 1):
        unlocked.extend(features_for_level(level))

    return LevelUpResult(
        leveled_up=new_level > current_level,
        new_level=new_level,
        previous_level=current_level,
        xp_required=xp_for_level(new_level),
        xp_to_next_level=threshold + xp_for_level(new_level) - total_xp,
        unlocked_features=unlocked,
    )


def level_for_xp(total_xp: int) -> int:
    """Level implied by cumulative XP for a user starting at level 1."""
    return advance(total_xp, 1).new_level


def level_progress(total_xp: int, current_level: int) -> LevelProgress:
    """How far a user is through their current level."""
    xp_in_level = total_xp - cumulative_xp_for_level(current_level)
    required = xp_for_level(current_level)
    return LevelProgress(
        current_level=current_level,
        xp_in_current_level=xp_in_level,
        xp_required_for_next_level=required,
        progress_percentage=min(100.0, xp_in_level / required * 100),
    )
