"""Tests for the thinking placeholder lifecycle."""

from unittest.mock import AsyncMock

import pytest
from slack_sdk.errors import SlackApiError

from orbit_bot.slack.placeholder import (
    PROCESSING_TEXT,
    PlaceholderPostError,
    ThinkingPlaceholder,
    thinking_placeholder,
)


async def test_posts_processing_text_in_thread(chat: AsyncMock):
    async with thinking_placeholder(chat, "C1", "1699.0001") as placeholder:
        assert placeholder.active

    chat.post_message.assert_awaited_once_with("C1", "1699.0001", PROCESSING_TEXT)


async def test_exit_deletes_unreleased_placeholder(chat: AsyncMock):
    async with thinking_placeholder(chat, "C1", "1699.0001") as placeholder:
        pass

    chat.delete_message.assert_awaited_once_with("C1", placeholder.ts)
    assert not placeholder.active


async def test_exit_after_finish_does_not_delete(chat: AsyncMock):
    async with thinking_placeholder(chat, "C1", "1699.0001") as placeholder:
        assert await placeholder.finish("done") is True

    chat.update_message.assert_awaited_once_with("C1", placeholder.ts, "done", None)
    chat.delete_message.assert_not_awaited()


async def test_exit_on_exception_still_deletes(chat: AsyncMock):
    with pytest.raises(ValueError):
        async with thinking_placeholder(chat, "C1", "1699.0001"):
            raise ValueError("boom")

    chat.delete_message.assert_awaited_once()


async def test_post_failure_raises_placeholder_error(chat: AsyncMock):
    chat.post_message.side_effect = SlackApiError("fail", {"ok": False, "error": "not_in_channel"})

    with pytest.raises(PlaceholderPostError):
        async with thinking_placeholder(chat, "C1", "1699.0001"):
            pytest.fail("body must not run")


async def test_released_exactly_once(chat: AsyncMock):
    placeholder = ThinkingPlaceholder(chat, "C1", "1.1")

    await placeholder.discard()
    assert await placeholder.finish("late") is False
    await placeholder.discard()

    chat.delete_message.assert_awaited_once()
    chat.update_message.assert_not_awaited()


async def test_set_status_keeps_placeholder_active(chat: AsyncMock):
    placeholder = ThinkingPlaceholder(chat, "C1", "1.1")

    await placeholder.set_status(":brain: Thinking...")

    assert placeholder.active
    chat.update_message.assert_awaited_once_with("C1", "1.1", ":brain: Thinking...")


async def test_finish_swallows_slack_errors(chat: AsyncMock):
    chat.update_message.side_effect = SlackApiError("fail", {"ok": False, "error": "not_authed"})
    placeholder = ThinkingPlaceholder(chat, "C1", "1.1")

    assert await placeholder.finish("done") is True
    assert not placeholder.active
