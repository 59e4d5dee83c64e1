"""Slack webhook routes with signature verification."""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse

from orbit_bot.slack.feedback import record_feedback
from orbit_bot.slack.handlers import handle_slack_event
from orbit_bot.slack.verification import verify_slack_interaction, verify_slack_request

router = APIRouter(prefix="", tags=["slack"])


@router.post("/slack/events")
async def slack_events(
    request: Request,
    background_tasks: BackgroundTasks,
    payload: dict = Depends(verify_slack_request),
) -> JSONResponse:
    """Receive Slack Events API callbacks.

    Slack retries (X-Slack-Retry-Num header) are acknowledged immediately
    to prevent duplicate processing.
    """
    if request.headers.get("X-Slack-Retry-Num"):
        return JSONResponse({"ok": True})

    return handle_slack_event(payload, background_tasks)


@router.post("/slack/interactions")
async def slack_interactions(
    background_tasks: BackgroundTasks,
    payload: dict = Depends(verify_slack_interaction),
) -> JSONResponse:
    """Receive interactivity callbacks (feedback buttons). Acknowledged before processing."""
    background_tasks.add_task(record_feedback, payload)
    return JSONResponse({"ok": True})
