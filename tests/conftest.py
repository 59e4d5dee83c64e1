"""Shared test fixtures."""

import itertools
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from orbit_bot.app import app
from orbit_bot.config import Settings


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a TestClient for the FastAPI app."""
    return TestClient(app)


@pytest.fixture()
def settings() -> Settings:
    """Settings with every integration configured and no .env influence."""
    return Settings(
        _env_file=None,
        slack_bot_user_id="UBOT",
        github_token="ghp_test",
        github_owner="gravityforms",
        github_default_repo="backlog",
        github_workspace_slug="github",
        formatter_workspace_slug="formatter",
        fallback_workspace_slug="general",
        command_prefix="gh>",
        workspace_override_prefix="#",
        min_substantive_response_length=100,
        segment_post_delay_seconds=0.5,
    )


@pytest.fixture()
def chat() -> AsyncMock:
    """Chat port double whose post_message returns increasing Slack timestamps."""
    counter = itertools.count(1)
    port = AsyncMock()
    port.post_message.side_effect = lambda *args, **kwargs: f"1700000000.{next(counter):06d}"
    port.recent_messages.return_value = []
    return port
