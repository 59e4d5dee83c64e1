"""Chat port over the Slack Web API.

Update and delete calls tolerate ``message_not_found`` and
``cant_update_message``: the target (usually the thinking placeholder) may
already be gone. Any other SlackApiError propagates.
"""

import logging

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

logger = logging.getLogger(__name__)

_IGNORED_ERRORS = ("message_not_found", "cant_update_message")


def slack_error_code(exc: SlackApiError) -> str:
    """Return the Slack ``error`` code carried by a SlackApiError."""
    return exc.response.get("error", "") if exc.response else ""


class SlackChatPort:
    """Posts, updates, deletes and lists messages in a Slack conversation."""

    def __init__(self, client: AsyncWebClient) -> None:
        self._client = client

    async def post_message(
        self,
        channel_id: str,
        thread_ts: str | None,
        text: str,
        blocks: list[dict] | None = None,
    ) -> str:
        """Post a message (threaded when ``thread_ts`` is set) and return its ts."""
        kwargs: dict = {"channel": channel_id, "text": text}
        if thread_ts:
            kwargs["thread_ts"] = thread_ts
        if blocks:
            kwargs["blocks"] = blocks
        response = await self._client.chat_postMessage(**kwargs)
        ts = response.get("ts")
        if not ts:
            raise RuntimeError("Slack did not return a timestamp for the posted message.")
        return ts

    async def update_message(
        self,
        channel_id: str,
        ts: str,
        text: str,
        blocks: list[dict] | None = None,
    ) -> None:
        kwargs: dict = {"channel": channel_id, "ts": ts, "text": text}
        if blocks is not None:
            kwargs["blocks"] = blocks
        try:
            await self._client.chat_update(**kwargs)
        except SlackApiError as exc:
            if slack_error_code(exc) not in _IGNORED_ERRORS:
                raise
            logger.info("Message %s not updated (%s)", ts, slack_error_code(exc))

    async def delete_message(self, channel_id: str, ts: str) -> None:
        try:
            await self._client.chat_delete(channel=channel_id, ts=ts)
        except SlackApiError as exc:
            if slack_error_code(exc) not in _IGNORED_ERRORS:
                raise
            logger.info("Message %s not deleted (%s)", ts, slack_error_code(exc))

    async def recent_messages(
        self, channel_id: str, thread_ts: str | None, limit: int = 50
    ) -> list[dict]:
        """Return recent messages, oldest first: thread replies or channel history."""
        if thread_ts:
            response = await self._client.conversations_replies(
                channel=channel_id, ts=thread_ts, limit=limit
            )
            return list(response.get("messages", []))
        response = await self._client.conversations_history(channel=channel_id, limit=limit)
        # History is newest first
        return list(reversed(response.get("messages", [])))
