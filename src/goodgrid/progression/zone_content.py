"""Static zone content keyed by terrain and difficulty.

Celebration effects, unlock rewards and per-zone content are lookups only.
None of this participates in gating.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from goodgrid.progression.enums import DifficultyLevel, TerrainType
from goodgrid.progression.schemas import Zone

TERRAIN_EFFECTS: dict[TerrainType, dict[str, list[str]]] = {
    TerrainType.URBAN: {
        "particles": ["city_lights", "building_sparkles", "traffic_flow"],
        "sounds": ["city_ambience", "construction", "traffic"],
    },
    TerrainType.FOREST: {
        "particles": ["falling_leaves", "forest_sparkles", "wind_effects"],
        "sounds": ["forest_ambience", "birds_chirping", "wind_through_trees"],
    },
    TerrainType.MOUNTAIN: {
        "particles": ["snow_particles", "rock_debris", "mountain_mist"],
        "sounds": ["mountain_wind", "rock_falling", "echo_effects"],
    },
    TerrainType.WATER: {
        "particles": ["water_ripples", "bubble_effects", "wave_particles"],
        "sounds": ["water_flowing", "waves_crashing", "underwater_ambience"],
    },
    TerrainType.DESERT: {
        "particles": ["sand_particles", "heat_shimmer", "dust_clouds"],
        "sounds": ["desert_wind", "sand_shifting", "desert_ambience"],
    },
}

DIFFICULTY_REWARDS: dict[DifficultyLevel, dict] = {
    DifficultyLevel.BEGINNER: {"xp": 50, "trust_score": 5, "badges": []},
    DifficultyLevel.INTERMEDIATE: {"xp": 100, "trust_score": 10, "badges": ["Zone Explorer"]},
    DifficultyLevel.ADVANCED: {
        "xp": 200,
        "trust_score": 20,
        "badges": ["Zone Explorer", "Advanced Adventurer"],
    },
    DifficultyLevel.EXPERT: {
        "xp": 400,
        "trust_score": 40,
        "badges": ["Zone Explorer", "Advanced Adventurer", "Expert Navigator"],
    },
}

DIFFICULTY_MULTIPLIERS: dict[DifficultyLevel, float] = {
    DifficultyLevel.BEGINNER: 1.0,
    DifficultyLevel.INTERMEDIATE: 1.3,
    DifficultyLevel.ADVANCED: 1.6,
    DifficultyLevel.EXPERT: 2.0,
}

TERRAIN_BONUSES: dict[TerrainType, dict[str, float]] = {
    TerrainType.URBAN: {
        "tech_tasks_xp_bonus": 1.2,
        "networking_trust_bonus": 1.15,
        "business_rwis_bonus": 1.1,
    },
    TerrainType.FOREST: {
        "environmental_tasks_xp_bonus": 1.3,
        "sustainability_trust_bonus": 1.2,
        "conservation_rwis_bonus": 1.4,
    },
    TerrainType.MOUNTAIN: {
        "challenge_tasks_xp_bonus": 1.25,
        "perseverance_trust_bonus": 1.3,
        "leadership_rwis_bonus": 1.2,
    },
    TerrainType.WATER: {
        "research_tasks_xp_bonus": 1.2,
        "collaboration_trust_bonus": 1.25,
        "innovation_rwis_bonus": 1.3,
    },
    TerrainType.DESERT: {
        "endurance_tasks_xp_bonus": 1.4,
        "resilience_trust_bonus": 1.35,
        "survival_rwis_bonus": 1.25,
    },
}

SPECIAL_DUNGEON_TYPES: dict[TerrainType, dict[DifficultyLevel, list[str]]] = {
    TerrainType.URBAN: {
        DifficultyLevel.BEGINNER: ["Startup Incubator", "Community Center"],
        DifficultyLevel.INTERMEDIATE: ["Tech Hub", "Innovation Lab"],
        DifficultyLevel.ADVANCED: ["Corporate Headquarters", "Research Institute"],
        DifficultyLevel.EXPERT: ["Global Enterprise", "Think Tank"],
    },
    TerrainType.FOREST: {
        DifficultyLevel.BEGINNER: ["Nature Center", "Trail Maintenance"],
        DifficultyLevel.INTERMEDIATE: ["Conservation Project", "Wildlife Sanctuary"],
        DifficultyLevel.ADVANCED: ["Research Station", "Eco-Lodge"],
        DifficultyLevel.EXPERT: ["Biosphere Reserve", "Climate Research Facility"],
    },
    TerrainType.MOUNTAIN: {
        DifficultyLevel.BEGINNER: ["Base Camp", "Visitor Center"],
        DifficultyLevel.INTERMEDIATE: ["Climbing School", "Weather Station"],
        DifficultyLevel.ADVANCED: ["Rescue Operations", "Observatory"],
        DifficultyLevel.EXPERT: ["Extreme Conditions Lab", "Peak Research Station"],
    },
    TerrainType.WATER: {
        DifficultyLevel.BEGINNER: ["Marina", "Aquarium"],
        DifficultyLevel.INTERMEDIATE: ["Marine Lab", "Diving Center"],
        DifficultyLevel.ADVANCED: ["Oceanographic Institute", "Underwater Habitat"],
        DifficultyLevel.EXPERT: ["Deep Sea Research", "Submersible Operations"],
    },
    TerrainType.DESERT: {
        DifficultyLevel.BEGINNER: ["Oasis Outpost", "Desert Museum"],
        DifficultyLevel.INTERMEDIATE: ["Solar Farm", "Archaeological Site"],
        DifficultyLevel.ADVANCED: ["Survival Training", "Astronomical Observatory"],
        DifficultyLevel.EXPERT: ["Extreme Environment Lab", "Space Simulation Facility"],
    },
}

TERRAIN_REWARDS: dict[TerrainType, list[str]] = {
    TerrainType.URBAN: ["City Explorer Badge", "Tech Innovator Title", "Urban Planner Certification"],
    TerrainType.FOREST: ["Forest Guardian Badge", "Eco Warrior Title", "Conservation Specialist Certification"],
    TerrainType.MOUNTAIN: ["Peak Climber Badge", "Mountain Guide Title", "Extreme Conditions Certification"],
    TerrainType.WATER: ["Ocean Explorer Badge", "Marine Biologist Title", "Aquatic Specialist Certification"],
    TerrainType.DESERT: ["Desert Survivor Badge", "Nomad Title", "Extreme Environment Certification"],
}

DIFFICULTY_REWARD_TITLES: dict[DifficultyLevel, list[str]] = {
    DifficultyLevel.BEGINNER: [],
    DifficultyLevel.INTERMEDIATE: ["Zone Specialist Badge"],
    DifficultyLevel.ADVANCED: ["Zone Specialist Badge", "Advanced Explorer Title"],
    DifficultyLevel.EXPERT: [
        "Zone Specialist Badge",
        "Advanced Explorer Title",
        "Master Navigator Certification",
    ],
}


@dataclass(frozen=True)
class ZoneCelebration:
    animation_type: str
    title: str
    description: str
    rewards: dict = field(default_factory=dict)
    map_reveal_animation: bool = False
    particle_effects: list[str] = field(default_factory=list)
    sound_effects: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ZoneContent:
    zone_id: str
    content_type: str
    content: dict


def terrain_effects(terrain: TerrainType) -> dict[str, list[str]]:
    return TERRAIN_EFFECTS.get(terrain, TERRAIN_EFFECTS[TerrainType.URBAN])


def difficulty_rewards(difficulty: DifficultyLevel) -> dict:
    return DIFFICULTY_REWARDS.get(difficulty, DIFFICULTY_REWARDS[DifficultyLevel.BEGINNER])


def difficulty_multiplier(difficulty: DifficultyLevel) -> float:
    return DIFFICULTY_MULTIPLIERS.get(difficulty, 1.0)


def terrain_bonuses(terrain: TerrainType) -> dict[str, float]:
    return dict(TERRAIN_BONUSES.get(terrain, TERRAIN_BONUSES[TerrainType.URBAN]))


def special_dungeon_types(terrain: TerrainType, difficulty: DifficultyLevel) -> list[str]:
    return list(SPECIAL_DUNGEON_TYPES.get(terrain, {}).get(difficulty, ["Standard Dungeon"]))


def unique_zone_rewards(terrain: TerrainType, difficulty: DifficultyLevel) -> list[str]:
    return [*TERRAIN_REWARDS.get(terrain, []), *DIFFICULTY_REWARD_TITLES.get(difficulty, [])]


def build_zone_celebration(zone: Zone, unlocked: bool) -> ZoneCelebration:
    """Celebration payload attached to a zone unlock decision."""
    if not unlocked:
        return ZoneCelebration(
            animation_type="ZONE_UNLOCK",
            title=f"{zone.name} - Locked",
            description="Continue your journey to unlock this zone",
        )

    effects = terrain_effects(zone.terrain_type)
    rewards = difficulty_rewards(zone.difficulty)
    return ZoneCelebration(
        animation_type="ZONE_UNLOCK",
        title=f"{zone.name} Unlocked!",
        description=(
            f"You've gained access to the {zone.terrain_type.value.lower()} region of {zone.name}. "
            "New adventures await!"
        ),
        rewards={
            "xp": rewards["xp"],
            "trust_score": rewards["trust_score"],
            "badges": list(rewards["badges"]),
            "special_features": [
                f"{zone.terrain_type.value} terrain bonuses",
                f"{zone.difficulty.value} difficulty tasks",
                "New dungeon types",
            ],
        },
        map_reveal_animation=True,
        particle_effects=list(effects["particles"]),
        sound_effects=list(effects["sounds"]),
    )


def zone_specific_content(zone: Zone) -> list[ZoneContent]:
    """Difficulty scaling, terrain bonuses, special dungeons and rewards for a zone."""
    return [
        ZoneContent(
            zone_id=zone.id,
            content_type="TASK_DIFFICULTY_SCALING",
            content={"difficulty_multiplier": difficulty_multiplier(zone.difficulty)},
        ),
        ZoneContent(
            zone_id=zone.id,
            content_type="TERRAIN_BONUSES",
            content={"terrain_bonuses": terrain_bonuses(zone.terrain_type)},
        ),
        ZoneContent(
            zone_id=zone.id,
            content_type="SPECIAL_DUNGEONS",
            content={"special_dungeon_types": special_dungeon_types(zone.terrain_type, zone.difficulty)},
        ),
        ZoneContent(
            zone_id=zone.id,
            content_type="UNIQUE_REWARDS",
            content={"unique_rewards": unique_zone_rewards(zone.terrain_type, zone.difficulty)},
        ),
    ]
