"""Persistence of Slack conversation -> LLM thread mappings."""

from orbit_bot.store.client import get_mapping_store, reset_store
from orbit_bot.store.mappings import (
    InMemoryThreadMappingStore,
    RedisThreadMappingStore,
    ThreadMappingStore,
)

__all__ = [
    "InMemoryThreadMappingStore",
    "RedisThreadMappingStore",
    "ThreadMappingStore",
    "get_mapping_store",
    "reset_store",
]
