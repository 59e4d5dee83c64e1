"""Tests for feedback blocks and button click handling."""

from unittest.mock import AsyncMock, patch

from slack_sdk.errors import SlackApiError

from orbit_bot.slack.feedback import (
    MAX_SECTION_TEXT,
    build_feedback_actions,
    build_feedback_message,
    feedback_block_id,
    parse_feedback_action,
    record_feedback,
)


def _click_payload(value: str = "great") -> dict:
    block_id = feedback_block_id("1700000000.000100", "general")
    return {
        "type": "block_actions",
        "user": {"id": "U_HUMAN"},
        "channel": {"id": "C1"},
        "message": {
            "ts": "1700000000.000300",
            "blocks": [
                {"type": "section", "text": {"type": "mrkdwn", "text": "answer"}},
                {"type": "divider"},
                {"type": "actions", "block_id": block_id, "elements": []},
            ],
        },
        "actions": [{"action_id": f"feedback_{value}", "value": value, "block_id": block_id}],
    }


def test_feedback_block_id_carries_event_and_workspace():
    assert feedback_block_id("1.2", "docs") == "feedback_1.2_docs"


def test_build_feedback_actions_has_three_buttons():
    blocks = build_feedback_actions("feedback_1.2_docs")

    assert blocks[0] == {"type": "divider"}
    actions = blocks[1]
    assert actions["block_id"] == "feedback_1.2_docs"
    assert [e["value"] for e in actions["elements"]] == ["bad", "ok", "great"]
    assert actions["elements"][0]["style"] == "danger"
    assert "style" not in actions["elements"][1]


def test_build_feedback_message_wraps_text():
    blocks = build_feedback_message("answer", "feedback_x")

    assert blocks[0]["text"]["text"] == "answer"
    assert blocks[-1]["type"] == "actions"


def test_build_feedback_message_too_long_returns_none():
    assert build_feedback_message("x" * (MAX_SECTION_TEXT + 1), "feedback_x") is None


def test_parse_feedback_action_ignores_other_payloads():
    assert parse_feedback_action({"type": "view_submission"}) is None
    assert parse_feedback_action({"type": "block_actions", "actions": [{"action_id": "other"}]}) is None


def test_parse_feedback_action_extracts_fields():
    feedback = parse_feedback_action(_click_payload("bad"))

    assert feedback["value"] == "bad"
    assert feedback["user_id"] == "U_HUMAN"
    assert feedback["channel_id"] == "C1"
    assert feedback["message_ts"] == "1700000000.000300"


@patch("orbit_bot.slack.feedback.get_slack_client")
async def test_record_feedback_replaces_buttons(mock_get_client: AsyncMock):
    web_client = AsyncMock()
    mock_get_client.return_value = web_client

    await record_feedback(_click_payload())

    kwargs = web_client.chat_update.await_args.kwargs
    assert kwargs["channel"] == "C1"
    assert kwargs["ts"] == "1700000000.000300"
    types = [block["type"] for block in kwargs["blocks"]]
    assert "actions" not in types
    assert types[-1] == "context"


@patch("orbit_bot.slack.feedback.get_slack_client")
async def test_record_feedback_swallows_slack_errors(mock_get_client: AsyncMock):
    web_client = AsyncMock()
    web_client.chat_update.side_effect = SlackApiError("fail", {"ok": False, "error": "not_authed"})
    mock_get_client.return_value = web_client

    await record_feedback(_click_payload())


@patch("orbit_bot.slack.feedback.get_slack_client")
async def test_record_feedback_ignores_non_feedback(mock_get_client: AsyncMock):
    await record_feedback({"type": "block_actions", "actions": []})

    mock_get_client.assert_not_called()
