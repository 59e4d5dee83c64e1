"""Slack event dispatch and message filtering logic."""

import logging

from fastapi import BackgroundTasks
from fastapi.responses import JSONResponse

from orbit_bot.config import get_settings
from orbit_bot.conversation.service import process_event
from orbit_bot.models.slack import InboundEvent

logger = logging.getLogger(__name__)


def handle_slack_event(payload: dict, background_tasks: BackgroundTasks) -> JSONResponse:
    """Dispatch a Slack event based on its type.

    - url_verification: return the challenge token
    - event_callback: process the contained event
    - anything else: acknowledge with 200
    """
    if payload.get("type") == "url_verification":
        return JSONResponse({"challenge": payload["challenge"]})

    if payload.get("type") == "event_callback":
        event = payload.get("event", {})
        handle_message_event(event, background_tasks)
        return JSONResponse({"ok": True})

    return JSONResponse({"ok": True})


def handle_message_event(event: dict, background_tasks: BackgroundTasks) -> None:
    """Apply message filters and dispatch handling to a background task.

    Filters (most common rejections first):
    1. Not an app_mention or message event -> skip
    2. Has subtype (edits, bot_message, joins, etc.) -> skip
    3. Has bot_id or comes from the bot itself -> skip
    4. Plain channel message (mentions arrive as app_mention) -> skip
    5. Missing channel or ts -> skip
    """
    settings = get_settings()
    event_type = event.get("type")

    # Filter 1: Only mentions and messages
    if event_type not in ("app_mention", "message"):
        return

    # Filter 2: Has subtype
    if event.get("subtype") is not None:
        return

    # Filter 3: Bot messages, including our own
    if event.get("bot_id") or event.get("user") == settings.slack_bot_user_id:
        return

    # Filter 4: Channel messages are handled via their app_mention twin; DMs come only as message
    if event_type == "message" and event.get("channel_type") != "im":
        return

    # Filter 5: Malformed
    if not event.get("channel") or not event.get("ts"):
        return

    inbound = InboundEvent.from_payload(event)
    logger.info(
        "Dispatching %s from user %s in channel %s",
        event_type,
        inbound.sender_id,
        inbound.channel_id,
    )
    background_tasks.add_task(process_event, inbound)
