"""Workspace selection for conversational queries.

Precedence, highest first:
1. Inline override token in the message (``<sigil><slug>``, no whitespace)
2. Workspace suggested by intent detection
3. Per-user default, then per-channel default
4. Global fallback workspace

Candidates are checked against the backend's workspace catalog (cached for
5 minutes). If the catalog cannot be fetched, candidates are accepted as-is.
"""

import logging
import re
from typing import Protocol

import httpx
from cachetools import TTLCache

from orbit_bot.config import Settings

logger = logging.getLogger(__name__)

_CATALOG_KEY = "workspaces"


class WorkspaceResolutionError(RuntimeError):
    """No workspace could be determined for a message."""


class WorkspaceLister(Protocol):
    async def list_workspaces(self) -> list[str]: ...


class WorkspaceCatalog:
    """TTL-cached view of the workspaces the LLM backend exposes."""

    def __init__(self, backend: WorkspaceLister, ttl_seconds: int = 300) -> None:
        self._backend = backend
        self._cache: TTLCache = TTLCache(maxsize=1, ttl=ttl_seconds)

    async def available(self) -> set[str] | None:
        """Return known workspace slugs, or None when the backend can't be reached."""
        cached = self._cache.get(_CATALOG_KEY)
        if cached is not None:
            return cached
        try:
            slugs = set(await self._backend.list_workspaces())
        except httpx.HTTPError:
            logger.warning("Could not fetch workspace catalog", exc_info=True)
            return None
        self._cache[_CATALOG_KEY] = slugs
        return slugs

    def invalidate(self) -> None:
        """Clear the cached catalog."""
        self._cache.clear()


class WorkspaceResolver:
    """Decides which LLM workspace a message targets."""

    def __init__(self, settings: Settings, catalog: WorkspaceCatalog) -> None:
        self._settings = settings
        self._catalog = catalog
        self._override_pattern = re.compile(
            re.escape(settings.workspace_override_prefix) + r"(\S+)"
        )

    def _override_match(self, text: str, available: set[str] | None) -> re.Match | None:
        """First override token naming a known workspace (any token if the catalog is unknown).

        Tokens like ``#42`` that name no workspace are skipped, so an issue
        reference earlier in the message never shadows the real override.
        """
        for match in self._override_pattern.finditer(text):
            if available is None or match.group(1) in available:
                return match
            logger.debug("Ignoring override token '%s': unknown workspace", match.group(0))
        return None

    async def find_override(self, text: str) -> str | None:
        """Return the inline override workspace named in ``text``, if any."""
        match = self._override_match(text, await self._catalog.available())
        return match.group(1) if match else None

    def strip_override(self, text: str, workspace_slug: str) -> str:
        """Remove the override token naming ``workspace_slug``; other sigil tokens stay."""
        for match in self._override_pattern.finditer(text):
            if match.group(1) == workspace_slug:
                before, after = text[: match.start()].rstrip(), text[match.end() :].lstrip()
                return f"{before} {after}".strip()
        return text.strip()

    async def resolve(
        self,
        text: str,
        suggested_workspace: str | None,
        user_id: str,
        channel_id: str,
    ) -> str | None:
        """Return the highest-precedence valid workspace, or None if no tier yields one."""
        available = await self._catalog.available()
        override = self._override_match(text, available)
        candidates = [
            ("override", override.group(1) if override else None),
            ("intent", suggested_workspace),
            ("user", self._settings.user_workspace_mapping.get(user_id)),
            ("channel", self._settings.channel_workspace_mapping.get(channel_id)),
            ("fallback", self._settings.fallback_workspace_slug or None),
        ]

        for tier, slug in candidates:
            if not slug:
                continue
            if available is not None and slug not in available:
                logger.info("Skipping unknown workspace '%s' from %s tier", slug, tier)
                continue
            logger.info("Resolved workspace '%s' from %s tier", slug, tier)
            return slug

        logger.warning("No workspace resolved for user %s in channel %s", user_id, channel_id)
        return None
