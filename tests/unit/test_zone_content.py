"""Static zone content lookups."""

from goodgrid.progression.enums import DifficultyLevel, TerrainType
from goodgrid.progression.schemas import Zone
from goodgrid.progression.zone_content import unique_zone_rewards, zone_specific_content


class TestZoneSpecificContent:
    def test_content_entries(self):
        zone = Zone(id="z", name="Mountain Retreat", terrain_type=TerrainType.MOUNTAIN,
                    difficulty=DifficultyLevel.INTERMEDIATE)
        content = {entry.content_type: entry.content for entry in zone_specific_content(zone)}

        assert content["TASK_DIFFICULTY_SCALING"] == {"difficulty_multiplier": 1.3}
        assert content["TERRAIN_BONUSES"]["terrain_bonuses"]["perseverance_trust_bonus"] == 1.3
        assert content["SPECIAL_DUNGEONS"]["special_dungeon_types"] == ["Climbing School", "Weather Station"]
        assert "Zone Specialist Badge" in content["UNIQUE_REWARDS"]["unique_rewards"]

    def test_beginner_rewards_are_terrain_only(self):
        assert unique_zone_rewards(TerrainType.DESERT, DifficultyLevel.BEGINNER) == [
            "Desert Survivor Badge",
            "Nomad Title",
            "Extreme Environment Certification",
        ]
