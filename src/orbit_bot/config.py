"""Application configuration via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Frozen: built once at startup and passed by reference, never mutated.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Slack
    slack_bot_token: str = ""
    slack_signing_secret: str = ""
    slack_bot_user_id: str = ""

    # GitHub
    github_token: str = ""
    github_owner: str = "gravityforms"
    github_default_repo: str = "backlog"
    github_api_url: str = "https://api.github.com"

    # AnythingLLM
    anythingllm_api_url: str = "http://localhost:3001"
    anythingllm_api_key: str = ""
    github_workspace_slug: str = ""
    formatter_workspace_slug: str = ""
    fallback_workspace_slug: str = ""
    user_workspace_mapping: dict[str, str] = {}
    channel_workspace_mapping: dict[str, str] = {}

    # Gemini (intent detection)
    gemini_api_key: str = ""
    intent_model: str = "gemini-2.5-flash"
    intent_routing_enabled: bool = False
    intent_confidence_threshold: float = 0.75

    # Commands and replies
    command_prefix: str = "gh>"
    workspace_override_prefix: str = "#"
    min_substantive_response_length: int = 100
    segment_post_delay_seconds: float = 0.5

    # Thread mapping persistence
    redis_url: str = ""
    thread_mapping_ttl_seconds: int = 60 * 60 * 24 * 30

    # App
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 3000


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
