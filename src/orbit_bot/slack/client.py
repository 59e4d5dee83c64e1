"""Async Slack client singleton.

Creates a cached AsyncWebClient configured with the bot token from settings.
Rate-limited calls (HTTP 429) are retried by slack_sdk's own retry handler,
honouring Slack's Retry-After header.
"""

from slack_sdk.http_retry.builtin_async_handlers import AsyncRateLimitErrorRetryHandler
from slack_sdk.web.async_client import AsyncWebClient

from orbit_bot.config import get_settings

_client: AsyncWebClient | None = None


async def get_slack_client() -> AsyncWebClient:
    """Return a cached async Slack client instance."""
    global _client
    if _client is None:
        settings = get_settings()
        _client = AsyncWebClient(
            token=settings.slack_bot_token,
            retry_handlers=[AsyncRateLimitErrorRetryHandler(max_retry_count=2)],
        )
    return _client


def reset_client() -> None:
    """Reset the cached client instance. Used for testing."""
    global _client
    _client = None
