"""Scoped "thinking" placeholder message.

The placeholder is posted on entry and released exactly once: either by a
final in-place update (``finish``) or by deletion (``discard``). Leaving the
``thinking_placeholder`` context deletes it if nothing else released it.
All placeholder calls after the initial post are non-critical: Slack
failures are logged, never raised.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol

from slack_sdk.errors import SlackApiError

logger = logging.getLogger(__name__)

PROCESSING_TEXT = ":hourglass_flowing_sand: Processing..."


class PlaceholderPostError(RuntimeError):
    """The initial placeholder message could not be posted."""


class ChatPort(Protocol):
    async def post_message(
        self, channel_id: str, thread_ts: str | None, text: str, blocks: list[dict] | None = None
    ) -> str: ...

    async def update_message(
        self, channel_id: str, ts: str, text: str, blocks: list[dict] | None = None
    ) -> None: ...

    async def delete_message(self, channel_id: str, ts: str) -> None: ...

    async def recent_messages(
        self, channel_id: str, thread_ts: str | None, limit: int = 50
    ) -> list[dict]: ...


class ThinkingPlaceholder:
    """Handle to a posted placeholder message."""

    def __init__(self, chat: ChatPort, channel_id: str, ts: str) -> None:
        self._chat = chat
        self.channel_id = channel_id
        self.ts = ts
        self._released = False

    @property
    def active(self) -> bool:
        """True until the placeholder has been finished or discarded."""
        return not self._released

    async def set_status(self, text: str) -> None:
        """Replace the placeholder text while keeping it active."""
        if self._released:
            return
        try:
            await self._chat.update_message(self.channel_id, self.ts, text)
        except SlackApiError:
            logger.warning("Failed to update placeholder %s", self.ts, exc_info=True)

    async def finish(self, text: str, blocks: list[dict] | None = None) -> bool:
        """Turn the placeholder into the final message. Returns False if already released."""
        if self._released:
            return False
        self._released = True
        try:
            await self._chat.update_message(self.channel_id, self.ts, text, blocks)
        except SlackApiError:
            logger.warning("Failed to finalize placeholder %s", self.ts, exc_info=True)
        return True

    async def discard(self) -> None:
        """Delete the placeholder. No-op once released."""
        if self._released:
            return
        self._released = True
        try:
            await self._chat.delete_message(self.channel_id, self.ts)
        except SlackApiError:
            logger.warning("Failed to delete placeholder %s", self.ts, exc_info=True)


@asynccontextmanager
async def thinking_placeholder(
    chat: ChatPort, channel_id: str, reply_target: str, text: str = PROCESSING_TEXT
) -> AsyncIterator[ThinkingPlaceholder]:
    """Post a placeholder and guarantee its release when the block exits.

    A failure to post raises PlaceholderPostError before the block runs:
    nothing downstream should happen without visible feedback to the user.
    """
    try:
        ts = await chat.post_message(channel_id, reply_target, text)
    except (SlackApiError, RuntimeError) as exc:
        raise PlaceholderPostError(f"Could not post placeholder in {channel_id}") from exc
    placeholder = ThinkingPlaceholder(chat, channel_id, ts)
    try:
        yield placeholder
    finally:
        await placeholder.discard()
