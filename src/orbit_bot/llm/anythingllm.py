"""AnythingLLM REST client: workspace chat, thread creation, workspace catalog.

Transient failures (transport errors, 5xx, 429) are retried with tenacity;
everything else propagates to the caller as ``httpx.HTTPStatusError`` or
``LLMBackendError``.
"""

import logging

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from orbit_bot.config import get_settings

logger = logging.getLogger(__name__)

_client: "AnythingLLMClient | None" = None


class LLMBackendError(RuntimeError):
    """The conversational backend answered with an unusable payload."""


def _is_retryable(error: BaseException) -> bool:
    """Transport errors, server errors (5xx) and rate limits (429) are worth retrying."""
    if isinstance(error, httpx.TransportError):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        return status == 429 or status >= 500
    return False


_retry_transient = retry(
    retry=retry_if_exception(_is_retryable),
    wait=wait_exponential_jitter(initial=1, max=20, jitter=2),
    stop=stop_after_attempt(3),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)


class AnythingLLMClient:
    """Thin async wrapper over the AnythingLLM developer API."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    @_retry_transient
    async def _post(self, path: str, payload: dict) -> dict:
        response = await self._http.post(path, json=payload)
        response.raise_for_status()
        return response.json()

    @_retry_transient
    async def _get(self, path: str) -> dict:
        response = await self._http.get(path)
        response.raise_for_status()
        return response.json()

    async def create_thread(self, workspace_slug: str) -> str:
        """Create a new thread in a workspace and return its slug."""
        data = await self._post(f"/api/v1/workspace/{workspace_slug}/thread/new", {})
        slug = (data.get("thread") or {}).get("slug")
        if not slug:
            raise LLMBackendError(f"Failed to create thread in {workspace_slug}.")
        logger.info("Created LLM thread %s:%s", workspace_slug, slug)
        return slug

    async def query(self, workspace_slug: str, thread_slug: str | None, message: str) -> str:
        """Send a chat message and return the text reply.

        Without a thread slug the message goes to the workspace's default chat.
        """
        if thread_slug:
            path = f"/api/v1/workspace/{workspace_slug}/thread/{thread_slug}/chat"
        else:
            path = f"/api/v1/workspace/{workspace_slug}/chat"
        data = await self._post(path, {"message": message, "mode": "chat"})
        if data.get("error"):
            raise LLMBackendError(f"LLM error in {workspace_slug}: {data['error']}")
        return data.get("textResponse") or ""

    async def list_workspaces(self) -> list[str]:
        """Return the slugs of all workspaces visible to the API key."""
        data = await self._get("/api/v1/workspaces")
        return [ws["slug"] for ws in data.get("workspaces", []) if ws.get("slug")]


def get_llm_backend() -> AnythingLLMClient:
    """Return a cached AnythingLLM client configured from settings."""
    global _client
    if _client is None:
        settings = get_settings()
        http = httpx.AsyncClient(
            base_url=settings.anythingllm_api_url,
            headers={"Authorization": f"Bearer {settings.anythingllm_api_key}"},
            timeout=httpx.Timeout(120.0, connect=10.0),
        )
        _client = AnythingLLMClient(http)
    return _client


def reset_client() -> None:
    """Reset the cached client instance. Used for testing."""
    global _client
    _client = None
