"""Slack conversation -> LLM thread mapping persistence.

One mapping per (channel_id, reply_target). Writes are upserts with
last-writer-wins semantics; there is no cross-request locking, so two
near-simultaneous messages in a brand-new Slack thread may each create an
LLM thread before the mapping settles. Retention is handled by key expiry.
"""

import logging
from typing import Protocol

from cachetools import TTLCache
from redis.asyncio import Redis

from orbit_bot.models.conversation import ThreadMapping

logger = logging.getLogger(__name__)

_KEY_PREFIX = "orbit:thread_map"


def mapping_key(channel_id: str, reply_target: str) -> str:
    """Storage key for a Slack conversation."""
    return f"{_KEY_PREFIX}:{channel_id}:{reply_target}"


class ThreadMappingStore(Protocol):
    async def get(self, channel_id: str, reply_target: str) -> ThreadMapping | None: ...

    async def put(
        self, channel_id: str, reply_target: str, workspace_slug: str, thread_slug: str
    ) -> None: ...


class RedisThreadMappingStore:
    """Mappings stored as Redis hashes with a retention TTL."""

    def __init__(self, redis: Redis, ttl_seconds: int) -> None:
        self._redis = redis
        self._ttl_seconds = ttl_seconds

    async def get(self, channel_id: str, reply_target: str) -> ThreadMapping | None:
        data = await self._redis.hgetall(mapping_key(channel_id, reply_target))
        if not data or "workspace_slug" not in data or "thread_slug" not in data:
            return None
        return ThreadMapping(
            workspace_slug=data["workspace_slug"],
            thread_slug=data["thread_slug"],
        )

    async def put(
        self, channel_id: str, reply_target: str, workspace_slug: str, thread_slug: str
    ) -> None:
        key = mapping_key(channel_id, reply_target)
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.hset(key, mapping={"workspace_slug": workspace_slug, "thread_slug": thread_slug})
            pipe.expire(key, self._ttl_seconds)
            await pipe.execute()
        logger.info("Stored thread mapping %s -> %s:%s", key, workspace_slug, thread_slug)


class InMemoryThreadMappingStore:
    """Process-local store for development and tests. Entries expire after the TTL."""

    def __init__(self, ttl_seconds: int, maxsize: int = 10_000) -> None:
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds)

    async def get(self, channel_id: str, reply_target: str) -> ThreadMapping | None:
        return self._cache.get(mapping_key(channel_id, reply_target))

    async def put(
        self, channel_id: str, reply_target: str, workspace_slug: str, thread_slug: str
    ) -> None:
        key = mapping_key(channel_id, reply_target)
        self._cache[key] = ThreadMapping(workspace_slug=workspace_slug, thread_slug=thread_slug)
        logger.info("Stored thread mapping %s -> %s:%s", key, workspace_slug, thread_slug)
