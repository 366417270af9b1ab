"""User-facing progression events pushed over Redis pub/sub."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

import redis.asyncio as aioredis

from goodgrid.progression.orchestrator import ProgressionResult

logger = logging.getLogger(__name__)

BADGE_EARNED = "badge_earned"
LEVEL_UP = "level_up"
ZONE_UNLOCKED = "zone_unlocked"


@dataclass(frozen=True)
class ProgressionNotification:
    type: str
    payload: dict


def build_notifications(user_id: str, result: ProgressionResult) -> list[ProgressionNotification]:
    """Badge, level and zone events for one progression result, in that order."""
    notifications = [
        ProgressionNotification(
            type=BADGE_EARNED,
            payload={
                "user_id": user_id,
                "badge_id": badge.id,
                "badge_name": badge.name,
                "category": badge.category.value,
                "rarity": badge.rarity.value,
            },
        )
        for badge in result.badges_earned
    ]

    level_up = result.level_up
    if level_up.leveled_up:
        notifications.append(
            ProgressionNotification(
                type=LEVEL_UP,
                payload={
                    "user_id": user_id,
                    "old_level": level_up.previous_level,
                    "new_level": level_up.new_level,
                    "xp_to_next_level": level_up.xp_to_next_level,
                    "unlocked_features": list(level_up.unlocked_features),
                },
            )
        )

    for zone in result.zones_unlocked:
        notifications.append(
            ProgressionNotification(
                type=ZONE_UNLOCKED,
                payload={
                    "user_id": user_id,
                    "zone_id": zone.zone_id,
                    "zone_name": zone.zone_name,
                    "title": zone.celebration.title,
                    "rewards": zone.celebration.rewards,
                    "dungeons": [dungeon.id for dungeon in zone.new_dungeons_unlocked],
                },
            )
        )
    return notifications


async def publish_progression_events(
    redis: aioredis.Redis | None,
    user_id: str,
    result: ProgressionResult,
    channel_prefix: str = "pubsub",
) -> int:
    """Publish every notification for ``result``. Returns how many were sent.

    A failed publish is logged and skipped; the progression is already committed.
    """
    if redis is None:
        return 0

    sent = 0
    for notification in build_notifications(user_id, result):
        try:
            await redis.publish(
                f"{channel_prefix}:{notification.type}",
                json.dumps(notification.payload),
            )
            sent += 1
        except Exception:
            logger.warning("Failed to publish %s notification", notification.type, exc_info=True)
    return sent
