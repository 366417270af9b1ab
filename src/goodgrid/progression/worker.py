"""arq worker: consumes task completions from a Redis Stream.

Each message is one verified completion::

    XADD tasks:completed * user_id <id> data '{"category": "COMMUNITY", "rewards": {...}, ...}'

The engine applies it and the message is acknowledged only afterwards.
Malformed messages and completions for unknown users are acknowledged and
logged. Messages that fail to process stay pending and are re-read from this
consumer's backlog; the event id (the message id unless the payload
carries one) keeps a redelivered completion from being applied twice.

Run with: ``arq goodgrid.progression.worker.ProgressionWorkerSettings``
"""

from __future__ import annotations

import asyncio
import json
import logging

import redis.asyncio as aioredis
import structlog
from pydantic import ValidationError

from goodgrid.config import Settings, get_settings
from goodgrid.database import close_db, init_db, session_scope
from goodgrid.errors import StatsNotFoundError
from goodgrid.logging_config import setup_logging
from goodgrid.progression.notifications import publish_progression_events
from goodgrid.progression.orchestrator import ProgressionOrchestrator, ProgressionResult
from goodgrid.progression.schemas import TaskCompletionEvent
from goodgrid.progression.sql_repository import SqlProgressionRepository
from goodgrid.redis_client import close_redis, ensure_consumer_group, init_redis

logger = logging.getLogger(__name__)

RETRY_DELAY_SECONDS = 1


class MalformedMessageError(ValueError):
    """A stream message that can never be processed."""


def parse_completion_message(msg_id: str, raw_data: dict) -> tuple[str, TaskCompletionEvent]:
    """Turn a stream entry into ``(user_id, event)``.

    The event body is read from the JSON ``data`` field when present,
    otherwise from the entry's own fields.
    """
    if not raw_data:
        raise MalformedMessageError(f"Entry {msg_id} has no fields")
    data_str = raw_data.get("data")
    if isinstance(data_str, str):
        try:
            data = json.loads(data_str)
        except json.JSONDecodeError as e:
            raise MalformedMessageError(f"Invalid JSON in {msg_id}: {e}") from e
        if not isinstance(data, dict):
            raise MalformedMessageError(f"Event body of {msg_id} is not an object")
    else:
        data = dict(raw_data)

    user_id = data.pop("user_id", None) or raw_data.get("user_id")
    if not user_id:
        raise MalformedMessageError(f"Missing user_id in {msg_id}")

    data.setdefault("event_id", msg_id)
    try:
        event = TaskCompletionEvent.model_validate(data)
    except ValidationError as e:
        raise MalformedMessageError(f"Invalid completion event {msg_id}: {e}") from e
    return str(user_id), event


async def process_message(
    redis_client: aioredis.Redis,
    settings: Settings,
    msg_id: str,
    raw_data: dict,
) -> ProgressionResult:
    """Apply one completion in a fresh DB session and publish its notifications."""
    user_id, event = parse_completion_message(msg_id, raw_data)

    with structlog.contextvars.bound_contextvars(user_id=user_id, event_id=event.event_id):
        async with session_scope() as db:
            repo = SqlProgressionRepository(db)
            orchestrator = ProgressionOrchestrator(repo, repo, repo)
            result = await orchestrator.process_task_completion(user_id, event)

        await publish_progression_events(redis_client, user_id, result, settings.notification_channel_prefix)
        if result.badges_earned or result.zones_unlocked or result.level_up.leveled_up:
            logger.info(
                "Progression for %s: level %d, badges %s, zones %s",
                user_id,
                result.level_up.new_level,
                [badge.name for badge in result.badges_earned],
                result.unlocked_zone_ids,
            )
    return result


async def handle_batch(
    redis_client: aioredis.Redis,
    settings: Settings,
    stream: str,
    messages: list,
) -> int:
    """Process a batch of entries. Returns the number left pending."""
    failed = 0
    for msg_id, raw_data in messages:
        try:
            await process_message(redis_client, settings, msg_id, raw_data)
        except (MalformedMessageError, StatsNotFoundError) as e:
            # Redelivery cannot fix these
            logger.error("Dropping %s from %s: %s", msg_id, stream, e)
        except Exception:
            logger.exception("Failed to process %s from %s", msg_id, stream)
            failed += 1
            continue
        await redis_client.xack(stream, settings.consumer_group, msg_id)
    return failed


async def progression_startup(ctx: dict) -> None:  # type: ignore[type-arg]
    """Initialize Redis + DB connections and the consumer group."""
    settings = get_settings()
    setup_logging(settings)
    await init_db(settings.database_url, settings.db_pool_size, settings.db_max_overflow)

    redis_client = await init_redis(settings.redis_url)
    if await ensure_consumer_group(redis_client, settings.completion_stream, settings.consumer_group):
        logger.info("Created consumer group %s for %s", settings.consumer_group, settings.completion_stream)

    ctx["redis"] = redis_client
    ctx["settings"] = settings
    logger.info("Progression worker started")


async def progression_shutdown(ctx: dict) -> None:  # type: ignore[type-arg]
    await close_redis()
    await close_db()
    logger.info("Progression worker shut down")


async def consume_task_completions(ctx: dict) -> None:  # type: ignore[type-arg]
    """Main consumer loop. Starts with this consumer's pending backlog."""
    redis_client: aioredis.Redis = ctx["redis"]
    settings: Settings = ctx["settings"]
    stream = settings.completion_stream
    cursor = "0"

    while True:
        try:
            events = await redis_client.xreadgroup(
                groupname=settings.consumer_group,
                consumername=settings.consumer_name,
                streams={stream: cursor},
                count=settings.stream_batch_size,
                block=settings.stream_block_ms,
            )
        except aioredis.ResponseError as e:
            logger.error("XREADGROUP error: %s", e)
            await asyncio.sleep(RETRY_DELAY_SECONDS)
            continue

        messages = [message for _, batch in events or [] for message in batch]
        if not messages:
            # Backlog drained
            cursor = ">"
            continue

        failed = await handle_batch(redis_client, settings, stream, messages)
        if failed:
            cursor = "0"
            await asyncio.sleep(RETRY_DELAY_SECONDS)


class ProgressionWorkerSettings:
    """arq worker settings for the task completion consumer."""

    functions = [consume_task_completions]
    on_startup = progression_startup
    on_shutdown = progression_shutdown
    max_jobs = 2
    job_timeout = 0  # consume_task_completions runs forever
    allow_abort_jobs = True
