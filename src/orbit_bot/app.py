"""FastAPI application with lifespan and health endpoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from orbit_bot.config import get_settings
from orbit_bot.logging_config import configure_logging
from orbit_bot.slack.router import router as slack_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging and load config on startup."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    if not settings.slack_bot_user_id:
        logger.warning("SLACK_BOT_USER_ID not set; bot mentions will not be stripped")
    if not settings.github_token:
        logger.warning("GITHUB_TOKEN not set; %s commands are disabled", settings.command_prefix)
    yield


app = FastAPI(
    title="Orbit",
    lifespan=lifespan,
)
app.include_router(slack_router)


@app.get("/health")
async def health():
    """Health check endpoint for container orchestration and local development."""
    return {
        "status": "ok",
        "service": "orbit-bot",
        "version": "1.0.0",
    }
