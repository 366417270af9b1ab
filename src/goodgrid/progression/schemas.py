"""Pydantic models for user stats, catalog entries and task events.

Catalog payloads may come from JSON columns written by other services, so the
camelCase spellings of criteria keys are accepted as aliases.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from goodgrid.progression.enums import (
    BadgeCategory,
    BadgeRarity,
    DifficultyLevel,
    TaskComplexity,
    TerrainType,
    WorkCategory,
)


def _category_keyed(value: Any) -> Any:
    """Normalize a mapping keyed by work category, dropping unknown keys."""
    if not isinstance(value, dict):
        return value
    normalized: dict[WorkCategory, Any] = {}
    for key, item in value.items():
        name = key.value if isinstance(key, WorkCategory) else str(key).upper()
        if name in WorkCategory.__members__:
            normalized[WorkCategory(name)] = item
    return normalized


# --- Stats ---


class CategoryStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    tasks_completed: int = Field(0, ge=0, validation_alias=AliasChoices("tasks_completed", "tasksCompleted"))
    total_xp: int = Field(0, ge=0, validation_alias=AliasChoices("total_xp", "totalXP"))
    average_rating: float = Field(0.0, ge=0, validation_alias=AliasChoices("average_rating", "averageRating"))
    specializations: frozenset[str] = frozenset()

    def record_task(self, xp_earned: int, quality_score: float | None) -> CategoryStats:
        """Return stats with one more completed task folded into the running mean."""
        completed = self.tasks_completed + 1
        rating = self.average_rating
        if quality_score is not None and quality_score > 0:
            rating = (self.average_rating * self.tasks_completed + quality_score) / completed
        return self.model_copy(
            update={
                "tasks_completed": completed,
                "total_xp": self.total_xp + xp_earned,
                "average_rating": rating,
            }
        )


class UserStats(BaseModel):
    """Snapshot of a user's progression, owned by the external stats store."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    trust_score: int = Field(0, ge=0)
    rwis_score: int = Field(0, ge=0)
    xp_points: int = Field(0, ge=0)
    current_level: int = Field(1, ge=1)
    unlocked_zones: frozenset[str] = frozenset()
    category_stats: dict[WorkCategory, CategoryStats] = Field(default_factory=dict, validate_default=True)
    version: int = Field(0, ge=0)

    @field_validator("category_stats", mode="before")
    @classmethod
    def _fill_categories(cls, value: Any) -> Any:
        value = _category_keyed(value or {})
        if not isinstance(value, dict):
            return value
        return {category: value.get(category, CategoryStats()) for category in WorkCategory}

    @classmethod
    def initial(cls, user_id: str) -> UserStats:
        """Stats for a freshly created account."""
        return cls(user_id=user_id)

    def category(self, category: WorkCategory | str) -> CategoryStats:
        return self.category_stats[WorkCategory(category)]

    @property
    def total_tasks(self) -> int:
        return sum(stats.tasks_completed for stats in self.category_stats.values())


# --- Rewards & criteria ---


class TaskRewards(BaseModel):
    """Static reward hints attached to a task template."""

    model_config = ConfigDict(frozen=True)

    xp: int = Field(0, ge=0)
    trust_score_bonus: int = Field(0, validation_alias=AliasChoices("trust_score_bonus", "trustScoreBonus"))
    rwis_points: int = Field(0, ge=0, validation_alias=AliasChoices("rwis_points", "rwisPoints"))
    payment: float | None = None
    badges: tuple[str, ...] = ()


class UnlockCriteria(BaseModel):
    """Sparse, conjunctive unlock predicates.

    Used for zone unlock requirements, dungeon entry requirements and badge
    unlock criteria alike. A field that is absent, zero or empty never blocks.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    trust_score: int | None = Field(None, validation_alias=AliasChoices("trust_score", "trustScore"))
    level: int | None = None
    completed_tasks: int | None = Field(
        None,
        validation_alias=AliasChoices("completed_tasks", "completedTasks", "tasks_completed", "tasksCompleted"),
    )
    required_badges: tuple[str, ...] = Field(
        (),
        validation_alias=AliasChoices(
            "required_badges", "specificBadges", "specific_badges", "badges", "specialBadges", "special_badges"
        ),
    )
    category_tasks: dict[WorkCategory, int] = Field(
        default_factory=dict, validation_alias=AliasChoices("category_tasks", "categoryTasks")
    )
    category_xp: dict[WorkCategory, int] = Field(
        default_factory=dict, validation_alias=AliasChoices("category_xp", "categoryXP", "categoryXp")
    )
    category_rating: dict[WorkCategory, float] = Field(
        default_factory=dict, validation_alias=AliasChoices("category_rating", "categoryRating")
    )

    @field_validator("category_tasks", "category_xp", "category_rating", mode="before")
    @classmethod
    def _normalize_categories(cls, value: Any) -> Any:
        return _category_keyed(value or {})

    @field_validator("required_badges", mode="before")
    @classmethod
    def _badge_names(cls, value: Any) -> Any:
        return tuple(value or ())


# --- Catalog ---


class Badge(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    category: BadgeCategory
    rarity: BadgeRarity
    icon_url: str | None = None
    unlock_criteria: UnlockCriteria = Field(default_factory=UnlockCriteria)


class UserAchievement(BaseModel):
    """A badge held by a user. Unique per (user_id, badge_id)."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    badge_id: str
    earned_at: datetime
    task_id: str | None = None


class Zone(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    terrain_type: TerrainType = TerrainType.URBAN
    difficulty: DifficultyLevel = DifficultyLevel.BEGINNER
    unlock_requirements: UnlockCriteria = Field(default_factory=UnlockCriteria)


class Dungeon(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    zone_id: str
    name: str
    category: WorkCategory
    entry_requirements: UnlockCriteria = Field(default_factory=UnlockCriteria)
    special_features: tuple[str, ...] = ()


# --- Events ---


class TaskCompletionEvent(BaseModel):
    """A verified task completion handed to the engine."""

    model_config = ConfigDict(frozen=True)

    rewards: TaskRewards
    category: WorkCategory
    quality_score: float = Field(3, ge=1, le=5)
    completion_time_ratio: float = Field(1.0, ge=0)
    on_time: bool = True
    client_feedback: str | None = None
    task_complexity: TaskComplexity = TaskComplexity.MEDIUM
    event_id: str | None = None
    task_id: str | None = None

    @field_validator("category", "task_complexity", mode="before")
    @classmethod
    def _upper_enum(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class WorkHistoryEntry(BaseModel):
    """Append-only ledger row committed together with the stats update."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    category: WorkCategory
    xp_earned: int
    trust_score_change: int
    rwis_earned: int
    quality_score: float | None = None
    client_feedback: str | None = None
    event_id: str | None = None
    task_id: str | None = None
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
