"""Gemini client singleton used for intent detection.

Creates a cached genai.Client instance configured with the API key from
application settings. Uses a 30-second HTTP timeout. Does NOT configure
HttpRetryOptions -- tenacity handles retries at the application level
to avoid double-retry behavior.
"""

from google import genai
from google.genai import types

from orbit_bot.config import get_settings

_client: genai.Client | None = None


def get_gemini_client() -> genai.Client | None:
    """Return a cached Gemini client, or None when no API key is configured."""
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.gemini_api_key:
            return None
        _client = genai.Client(
            api_key=settings.gemini_api_key,
            http_options=types.HttpOptions(timeout=30_000),
        )
    return _client


def reset_client() -> None:
    """Reset the cached client instance. Used for testing."""
    global _client
    _client = None
