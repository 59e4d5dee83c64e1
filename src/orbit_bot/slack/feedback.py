"""Feedback affordance on substantive replies and handling of button clicks."""

import logging

from slack_sdk.errors import SlackApiError

from orbit_bot.slack.client import get_slack_client

logger = logging.getLogger(__name__)

FEEDBACK_PROMPT = "Was this response helpful?"
FEEDBACK_ACTION_PREFIX = "feedback_"

# Slack caps section block text at 3000 characters
MAX_SECTION_TEXT = 3000

_BUTTONS = [
    ("👎", "bad", "danger"),
    ("👌", "ok", None),
    ("👍", "great", "primary"),
]


def feedback_block_id(event_ts: str, workspace_slug: str) -> str:
    return f"{FEEDBACK_ACTION_PREFIX}{event_ts}_{workspace_slug}"


def build_feedback_actions(block_id: str) -> list[dict]:
    """Divider plus the three feedback buttons."""
    elements = []
    for emoji, value, style in _BUTTONS:
        button = {
            "type": "button",
            "text": {"type": "plain_text", "text": emoji, "emoji": True},
            "value": value,
            "action_id": f"{FEEDBACK_ACTION_PREFIX}{value}",
        }
        if style:
            button["style"] = style
        elements.append(button)
    return [
        {"type": "divider"},
        {"type": "actions", "block_id": block_id, "elements": elements},
    ]


def build_feedback_message(text: str, block_id: str) -> list[dict] | None:
    """Blocks carrying ``text`` followed by the feedback buttons.

    Returns None when ``text`` is too long for a single section block.
    """
    if len(text) > MAX_SECTION_TEXT:
        return None
    return [
        {"type": "section", "text": {"type": "mrkdwn", "text": text}},
        *build_feedback_actions(block_id),
    ]


def parse_feedback_action(payload: dict) -> dict | None:
    """Extract the feedback click from a block_actions payload, if it is one."""
    if payload.get("type") != "block_actions":
        return None
    for action in payload.get("actions", []):
        if action.get("action_id", "").startswith(FEEDBACK_ACTION_PREFIX):
            return {
                "value": action.get("value"),
                "block_id": action.get("block_id", ""),
                "user_id": (payload.get("user") or {}).get("id"),
                "channel_id": (payload.get("channel") or {}).get("id"),
                "message_ts": (payload.get("message") or {}).get("ts"),
                "message_blocks": (payload.get("message") or {}).get("blocks", []),
            }
    return None


async def record_feedback(payload: dict) -> None:
    """Log a feedback click and replace the buttons with a thank-you note.

    Fire-and-forget: Slack failures are logged and never raised.
    """
    feedback = parse_feedback_action(payload)
    if feedback is None:
        return

    logger.info(
        "Feedback received",
        extra={
            "feedback": feedback["value"],
            "block_id": feedback["block_id"],
            "user_id": feedback["user_id"],
            "channel_id": feedback["channel_id"],
        },
    )

    if not feedback["channel_id"] or not feedback["message_ts"]:
        return

    kept = [
        block
        for block in feedback["message_blocks"]
        if block.get("type") != "actions" and block.get("block_id") != feedback["block_id"]
    ]
    kept.append(
        {
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": "_Thanks for the feedback!_"}],
        }
    )
    try:
        client = await get_slack_client()
        await client.chat_update(
            channel=feedback["channel_id"],
            ts=feedback["message_ts"],
            text="Thanks for the feedback!",
            blocks=kept,
        )
    except SlackApiError:
        logger.warning("Failed to acknowledge feedback on %s", feedback["message_ts"], exc_info=True)
