"""Async GitHub REST client used by the command executors.

Transient failures (transport errors, 5xx, 429) are retried with tenacity.
Other HTTP errors surface as ``httpx.HTTPStatusError`` for the executor to
report.
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

_client: "GitHubClient | None" = None


def _is_retryable(error: BaseException) -> bool:
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


class GitHubClient:
    """Read-only access to releases, pull requests, issues and arbitrary GET endpoints."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    @_retry_transient
    async def _get(self, path: str, params: dict | None = None, accept: str | None = None) -> httpx.Response:
        headers = {"Accept": accept} if accept else None
        response = await self._http.get(path, params=params, headers=headers)
        response.raise_for_status()
        return response

    async def get_json(self, path: str, params: dict | None = None) -> object:
        """GET an arbitrary API path (must start with '/') and return decoded JSON."""
        if not path.startswith("/"):
            raise ValueError(f"GitHub API path must start with '/': {path}")
        response = await self._get(path, params=params)
        return response.json()

    async def get_latest_release(self, owner: str, repo: str) -> dict:
        response = await self._get(f"/repos/{owner}/{repo}/releases/latest")
        return response.json()

    async def get_pull_request(self, owner: str, repo: str, number: int) -> dict:
        response = await self._get(f"/repos/{owner}/{repo}/pulls/{number}")
        return response.json()

    async def get_pull_request_diff(self, owner: str, repo: str, number: int) -> str:
        response = await self._get(
            f"/repos/{owner}/{repo}/pulls/{number}", accept="application/vnd.github.diff"
        )
        return response.text

    async def get_issue(self, owner: str, repo: str, number: int) -> dict:
        response = await self._get(f"/repos/{owner}/{repo}/issues/{number}")
        return response.json()

    async def get_issue_comments(self, owner: str, repo: str, number: int, limit: int = 30) -> list[dict]:
        response = await self._get(
            f"/repos/{owner}/{repo}/issues/{number}/comments", params={"per_page": limit}
        )
        return response.json()


def get_github_client() -> GitHubClient | None:
    """Return a cached GitHub client, or None when no token is configured."""
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.github_token:
            return None
        http = httpx.AsyncClient(
            base_url=settings.github_api_url,
            headers={
                "Authorization": f"Bearer {settings.github_token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=httpx.Timeout(30.0),
        )
        _client = GitHubClient(http)
    return _client


def reset_client() -> None:
    """Reset the cached client instance. Used for testing."""
    global _client
    _client = None
