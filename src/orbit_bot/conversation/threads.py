"""Binding Slack conversations to LLM threads."""

import logging
from typing import Protocol

from orbit_bot.store.mappings import ThreadMappingStore

logger = logging.getLogger(__name__)


class ThreadCreator(Protocol):
    async def create_thread(self, workspace_slug: str) -> str: ...


async def ensure_thread(
    store: ThreadMappingStore,
    backend: ThreadCreator,
    channel_id: str,
    reply_target: str,
    workspace_slug: str,
) -> str:
    """Return the LLM thread for this conversation in ``workspace_slug``.

    Reuses the stored thread when the mapping already points at the same
    workspace. Otherwise creates a new thread and overwrites the mapping.
    """
    mapping = await store.get(channel_id, reply_target)
    if mapping and mapping.workspace_slug == workspace_slug:
        logger.info("Reusing thread mapping %s:%s", workspace_slug, mapping.thread_slug)
        return mapping.thread_slug

    if mapping:
        logger.info(
            "Workspace changed (mapped: %s, resolved: %s), creating new thread",
            mapping.workspace_slug,
            workspace_slug,
        )
    else:
        logger.info("No thread mapping for %s:%s, creating new thread", channel_id, reply_target)

    thread_slug = await backend.create_thread(workspace_slug)
    await store.put(channel_id, reply_target, workspace_slug, thread_slug)
    return thread_slug
