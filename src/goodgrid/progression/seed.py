"""Default catalog: badges, zones and dungeons.

Badges whose criteria rely only on facts the engine does not track
(skill tags, mentorships, map exploration) are not seeded, since an
empty criteria set would unlock them on the first task.
"""

from __future__ import annotations

import logging

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from goodgrid.db.models import BadgeRecord, DungeonRecord, ZoneRecord
from goodgrid.progression.schemas import Badge, Dungeon, Zone

logger = logging.getLogger(__name__)


def _badge(slug: str, name: str, description: str, category: str, rarity: str, criteria: dict) -> dict:
    return {
        "id": slug,
        "name": name,
        "description": description,
        "category": category,
        "rarity": rarity,
        "icon_url": f"badge_{slug.replace('-', '_')}.png",
        "unlock_criteria": criteria,
    }


BADGE_SEED_DATA: list[dict] = [
    # Task milestones
    _badge("first-steps", "First Steps", "Complete your first task", "ACHIEVEMENT", "COMMON", {"completed_tasks": 1}),
    _badge("getting-started", "Getting Started", "Complete 5 tasks", "ACHIEVEMENT", "COMMON", {"completed_tasks": 5}),
    _badge("task-warrior", "Task Warrior", "Complete 25 tasks", "ACHIEVEMENT", "UNCOMMON", {"completed_tasks": 25}),
    _badge(
        "dedicated-contributor",
        "Dedicated Contributor",
        "Complete 50 tasks",
        "ACHIEVEMENT",
        "RARE",
        {"completed_tasks": 50},
    ),
    _badge("master-achiever", "Master Achiever", "Complete 100 tasks", "ACHIEVEMENT", "EPIC", {"completed_tasks": 100}),
    _badge("legend", "Legend", "Complete 250 tasks", "ACHIEVEMENT", "LEGENDARY", {"completed_tasks": 250}),
    # Trust milestones
    _badge("trustworthy", "Trustworthy", "Reach a Trust Score of 25", "ACHIEVEMENT", "COMMON", {"trust_score": 25}),
    _badge("reliable", "Reliable", "Reach a Trust Score of 50", "ACHIEVEMENT", "UNCOMMON", {"trust_score": 50}),
    _badge("dependable", "Dependable", "Reach a Trust Score of 100", "ACHIEVEMENT", "RARE", {"trust_score": 100}),
    _badge("pillar-of-trust", "Pillar of Trust", "Reach a Trust Score of 200", "ACHIEVEMENT", "EPIC", {"trust_score": 200}),
    _badge(
        "trust-champion",
        "Trust Champion",
        "Reach a Trust Score of 500",
        "ACHIEVEMENT",
        "LEGENDARY",
        {"trust_score": 500},
    ),
]

_CATEGORY_BADGES = {
    "FREELANCE": ["Freelance Starter", "Independent Professional", "Freelance Expert", "Master Freelancer"],
    "COMMUNITY": ["Community Helper", "Local Champion", "Community Leader", "Social Impact Hero"],
    "CORPORATE": ["Corporate Contributor", "Professional Partner", "Corporate Expert", "Executive Contributor"],
}
_CATEGORY_STEPS = [(5, "COMMON"), (15, "UNCOMMON"), (30, "RARE"), (75, "EPIC")]

BADGE_SEED_DATA.extend(
    _badge(
        name.lower().replace(" ", "-"),
        name,
        f"Complete {tasks} {category.lower()} tasks",
        "CATEGORY",
        rarity,
        {"category_tasks": {category: tasks}},
    )
    for category, names in _CATEGORY_BADGES.items()
    for name, (tasks, rarity) in zip(names, _CATEGORY_STEPS)
)

# Special badges gating the EXPERT and MASTER category tiers, earned at the
# tier's task threshold. Master Freelancer and Community Leader come from the
# category milestones above.
BADGE_SEED_DATA.extend(
    _badge(
        name.lower().replace(" ", "-"),
        name,
        f"Complete {tasks} {category.lower()} tasks to enter {tier} dungeon tiers",
        "CATEGORY",
        rarity,
        {"category_tasks": {category: tasks}},
    )
    for name, category, tasks, tier, rarity in [
        ("Freelance Specialist", "FREELANCE", 25, "expert", "RARE"),
        ("Community Champion", "COMMUNITY", 35, "expert", "RARE"),
        ("Corporate Professional", "CORPORATE", 20, "expert", "RARE"),
        ("Executive Level", "CORPORATE", 40, "master", "EPIC"),
    ]
)

BADGE_SEED_DATA.extend(
    _badge(
        slug,
        name,
        f"Complete {tasks} tasks in every category",
        "SPECIAL",
        rarity,
        {"category_tasks": {"FREELANCE": tasks, "COMMUNITY": tasks, "CORPORATE": tasks}},
    )
    for slug, name, tasks, rarity in [
        ("well-rounded", "Well-Rounded", 10, "RARE"),
        ("triple-threat", "Triple Threat", 25, "EPIC"),
        ("master-of-all", "Master of All", 50, "LEGENDARY"),
    ]
)

ZONE_SEED_DATA: list[dict] = [
    {
        "id": "downtown-district",
        "name": "Downtown District",
        "terrain_type": "URBAN",
        "difficulty": "BEGINNER",
        "unlock_requirements": {"trust_score": 0, "level": 1},
    },
    {
        "id": "community-gardens",
        "name": "Community Gardens Area",
        "terrain_type": "FOREST",
        "difficulty": "BEGINNER",
        "unlock_requirements": {"trust_score": 25, "level": 2},
    },
    {
        "id": "tech-valley",
        "name": "Tech Valley",
        "terrain_type": "URBAN",
        "difficulty": "INTERMEDIATE",
        "unlock_requirements": {"trust_score": 25, "level": 2},
    },
    {
        "id": "mountain-retreat",
        "name": "Mountain Retreat",
        "terrain_type": "MOUNTAIN",
        "difficulty": "INTERMEDIATE",
        "unlock_requirements": {"trust_score": 50, "level": 3},
    },
    {
        "id": "riverside-commons",
        "name": "Riverside Commons",
        "terrain_type": "WATER",
        "difficulty": "INTERMEDIATE",
        "unlock_requirements": {"trust_score": 50, "level": 3},
    },
    {
        "id": "corporate-heights",
        "name": "Corporate Heights",
        "terrain_type": "URBAN",
        "difficulty": "ADVANCED",
        "unlock_requirements": {"trust_score": 100, "level": 4},
    },
    {
        "id": "innovation-desert",
        "name": "Innovation Desert",
        "terrain_type": "DESERT",
        "difficulty": "ADVANCED",
        "unlock_requirements": {"trust_score": 100, "level": 4},
    },
    {
        "id": "elite-summit",
        "name": "Elite Summit",
        "terrain_type": "MOUNTAIN",
        "difficulty": "EXPERT",
        "unlock_requirements": {"trust_score": 200, "level": 5},
    },
]


def _dungeon(slug: str, zone_id: str, name: str, category: str, trust: int, level: int, features: list[str]) -> dict:
    return {
        "id": slug,
        "zone_id": zone_id,
        "name": name,
        "category": category,
        "entry_requirements": {"trust_score": trust, "level": level},
        "special_features": features,
    }


DUNGEON_SEED_DATA: list[dict] = [
    # Downtown District
    _dungeon("starter-freelance-tower", "downtown-district", "Starter Freelance Tower", "FREELANCE", 0, 1,
             ["beginner_friendly", "tutorial_available"]),
    _dungeon("local-community-center", "downtown-district", "Local Community Center", "COMMUNITY", 0, 1,
             ["group_tasks", "mentorship"]),
    _dungeon("small-business-castle", "downtown-district", "Small Business Castle", "CORPORATE", 5, 1,
             ["structured_tasks", "skill_building"]),
    # Community Gardens
    _dungeon("environmental-action-hub", "community-gardens", "Environmental Action Hub", "COMMUNITY", 25, 2,
             ["environmental_focus", "outdoor_activities"]),
    _dungeon("green-freelance-pavilion", "community-gardens", "Green Freelance Pavilion", "FREELANCE", 20, 2,
             ["eco_projects", "sustainability"]),
    # Tech Valley
    _dungeon("innovation-freelance-hub", "tech-valley", "Innovation Freelance Hub", "FREELANCE", 30, 2,
             ["tech_focus", "high_pay"]),
    _dungeon("startup-corporate-campus", "tech-valley", "Startup Corporate Campus", "CORPORATE", 35, 2,
             ["startup_culture", "equity_opportunities"]),
    # Mountain Retreat
    _dungeon("adventure-community-lodge", "mountain-retreat", "Adventure Community Lodge", "COMMUNITY", 50, 3,
             ["outdoor_adventures", "team_building"]),
    _dungeon("remote-work-fortress", "mountain-retreat", "Remote Work Fortress", "FREELANCE", 45, 3,
             ["remote_work", "flexible_schedule"]),
    # Riverside Commons
    _dungeon("waterfront-community-pier", "riverside-commons", "Waterfront Community Pier", "COMMUNITY", 50, 3,
             ["water_conservation", "marine_projects"]),
    # Corporate Heights
    _dungeon("executive-corporate-tower", "corporate-heights", "Executive Corporate Tower", "CORPORATE", 100, 4,
             ["leadership_roles", "high_responsibility"]),
    _dungeon("elite-freelance-spire", "corporate-heights", "Elite Freelance Spire", "FREELANCE", 90, 4,
             ["premium_clients", "expert_level"]),
    # Innovation Desert
    _dungeon("research-community-oasis", "innovation-desert", "Research Community Oasis", "COMMUNITY", 100, 4,
             ["research_projects", "innovation"]),
    # Elite Summit
    _dungeon("master-freelance-peak", "elite-summit", "Master Freelance Peak", "FREELANCE", 200, 5,
             ["master_level", "exclusive_clients"]),
    _dungeon("legendary-corporate-summit", "elite-summit", "Legendary Corporate Summit", "CORPORATE", 200, 5,
             ["c_level_projects", "board_level"]),
]


def default_badges() -> list[Badge]:
    return [Badge.model_validate(row) for row in BADGE_SEED_DATA]


def default_zones() -> list[Zone]:
    return [Zone.model_validate(row) for row in ZONE_SEED_DATA]


def default_dungeons() -> list[Dungeon]:
    return [Dungeon.model_validate(row) for row in DUNGEON_SEED_DATA]


async def seed_catalog(db: AsyncSession) -> int:
    """Upsert the default badges, zones and dungeons. Returns rows seeded."""
    seeded = 0

    for badge_data in BADGE_SEED_DATA:
        stmt = pg_insert(BadgeRecord).values(**badge_data)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={
                "name": stmt.excluded.name,
                "description": stmt.excluded.description,
                "category": stmt.excluded.category,
                "rarity": stmt.excluded.rarity,
                "icon_url": stmt.excluded.icon_url,
                "unlock_criteria": stmt.excluded.unlock_criteria,
            },
        )
        await db.execute(stmt)
        seeded += 1

    for sort_order, zone_data in enumerate(ZONE_SEED_DATA):
        stmt = pg_insert(ZoneRecord).values(**zone_data, sort_order=sort_order)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={
                "name": stmt.excluded.name,
                "terrain_type": stmt.excluded.terrain_type,
                "difficulty": stmt.excluded.difficulty,
                "unlock_requirements": stmt.excluded.unlock_requirements,
                "sort_order": stmt.excluded.sort_order,
            },
        )
        await db.execute(stmt)
        seeded += 1

    for dungeon_data in DUNGEON_SEED_DATA:
        stmt = pg_insert(DungeonRecord).values(**dungeon_data)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={
                "zone_id": stmt.excluded.zone_id,
                "name": stmt.excluded.name,
                "category": stmt.excluded.category,
                "entry_requirements": stmt.excluded.entry_requirements,
                "special_features": stmt.excluded.special_features,
            },
        )
        await db.execute(stmt)
        seeded += 1

    await db.commit()
    logger.info("Seeded %d catalog rows", seeded)
    return seeded
