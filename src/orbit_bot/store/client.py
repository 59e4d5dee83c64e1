"""Thread mapping store singleton.

Uses Redis when ``redis_url`` is configured, otherwise an in-process TTL
cache (mappings are then lost on restart). Follows the lazy-init pattern of
the Slack and LLM clients.
"""

import logging

from redis.asyncio import Redis

from orbit_bot.config import get_settings
from orbit_bot.store.mappings import (
    InMemoryThreadMappingStore,
    RedisThreadMappingStore,
    ThreadMappingStore,
)

logger = logging.getLogger(__name__)

_store: ThreadMappingStore | None = None


def get_mapping_store() -> ThreadMappingStore:
    """Return the cached mapping store, creating it on first call."""
    global _store
    if _store is None:
        settings = get_settings()
        if settings.redis_url:
            redis = Redis.from_url(settings.redis_url, decode_responses=True)
            _store = RedisThreadMappingStore(redis, settings.thread_mapping_ttl_seconds)
        else:
            logger.warning("REDIS_URL not set; thread mappings are kept in memory only")
            _store = InMemoryThreadMappingStore(settings.thread_mapping_ttl_seconds)
    return _store


def reset_store() -> None:
    """Reset the cached store instance. Used for testing."""
    global _store
    _store = None
