"""Enumerations shared by the progression engine."""

from __future__ import annotations

from enum import Enum


class WorkCategory(str, Enum):
    FREELANCE = "FREELANCE"
    COMMUNITY = "COMMUNITY"
    CORPORATE = "CORPORATE"


class TaskComplexity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class TerrainType(str, Enum):
    URBAN = "URBAN"
    FOREST = "FOREST"
    MOUNTAIN = "MOUNTAIN"
    WATER = "WATER"
    DESERT = "DESERT"


class DifficultyLevel(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    EXPERT = "EXPERT"


class BadgeCategory(str, Enum):
    SKILL = "SKILL"
    ACHIEVEMENT = "ACHIEVEMENT"
    CATEGORY = "CATEGORY"
    SPECIAL = "SPECIAL"


class BadgeRarity(str, Enum):
    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"


class DungeonTier(str, Enum):
    BASIC = "BASIC"
    ADVANCED = "ADVANCED"
    EXPERT = "EXPERT"
    MASTER = "MASTER"
