"""Sequential posting of segmented LLM replies.

Segments are posted one after another with a fixed delay between them so
they appear in the LLM's order and stay under Slack's rate limits. A failed
segment is logged and skipped; the remaining segments are still posted.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from slack_sdk.errors import SlackApiError

from orbit_bot.conversation.segmenter import fallback_text, render_segment, segment
from orbit_bot.models.conversation import ResponseSegment, SegmentKind
from orbit_bot.slack.feedback import FEEDBACK_PROMPT, build_feedback_actions, build_feedback_message
from orbit_bot.slack.placeholder import ChatPort

logger = logging.getLogger(__name__)

EMPTY_REPLY_TEXT = "_(I received an empty response. Please try rephrasing your query.)_"


async def post_reply(
    chat: ChatPort,
    channel_id: str,
    reply_target: str,
    reply: str,
    *,
    feedback_block_id: str | None = None,
    delay_seconds: float = 0.5,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> str | None:
    """Post ``reply`` as one message per segment. Returns the last posted ts.

    With ``feedback_block_id`` set, the feedback buttons are attached to the
    last posted message only.
    """
    trimmed = reply.strip()
    if not trimmed:
        return await chat.post_message(channel_id, reply_target, EMPTY_REPLY_TEXT)

    segments = segment(trimmed)
    if not segments:
        logger.warning("No segments extracted from non-empty reply, posting raw text")
        segments = [ResponseSegment(kind=SegmentKind.TEXT, content=trimmed)]

    last_ts: str | None = None
    for index, seg in enumerate(segments):
        is_last = index == len(segments) - 1
        block_id = feedback_block_id if is_last else None
        ts = await _post_segment(chat, channel_id, reply_target, seg, block_id)
        if ts:
            last_ts = ts
        if not is_last:
            await sleep(delay_seconds)

    logger.info("Posted %d reply segment(s) to %s:%s", len(segments), channel_id, reply_target)
    return last_ts


async def _post_segment(
    chat: ChatPort,
    channel_id: str,
    reply_target: str,
    seg: ResponseSegment,
    feedback_block_id: str | None,
) -> str | None:
    text = render_segment(seg)

    blocks = build_feedback_message(text, feedback_block_id) if feedback_block_id else None
    if blocks is not None:
        try:
            return await chat.post_message(
                channel_id, reply_target, fallback_text(seg), blocks=blocks
            )
        except SlackApiError:
            logger.warning("Failed to post segment with feedback, retrying without", exc_info=True)

    try:
        ts = await chat.post_message(channel_id, reply_target, text)
    except SlackApiError:
        logger.error("Failed to post reply segment (%s)", seg.kind.value, exc_info=True)
        return None

    # Buttons did not ride along with the segment, so they get their own message
    if feedback_block_id:
        await _post_feedback_prompt(chat, channel_id, reply_target, feedback_block_id)
    return ts


async def _post_feedback_prompt(
    chat: ChatPort, channel_id: str, reply_target: str, feedback_block_id: str
) -> None:
    """Separate feedback message for segments too long to carry the buttons."""
    try:
        await chat.post_message(
            channel_id,
            reply_target,
            FEEDBACK_PROMPT,
            blocks=build_feedback_actions(feedback_block_id),
        )
    except SlackApiError:
        logger.warning("Failed to post feedback buttons", exc_info=True)
