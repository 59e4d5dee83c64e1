"""Top-level handling of one inbound Slack message.

Flow: normalize text -> #delete_last_message -> thinking placeholder ->
gh> commands -> intent detection/routing -> workspace + thread resolution ->
LLM query -> segmented reply (+ feedback buttons on substantive answers).

``handle`` never raises: every failure is logged and, where possible,
shown to the user. The placeholder is released exactly once on every path.
"""

import asyncio
import logging
import re
import time
from collections.abc import Awaitable, Callable
from typing import Protocol

from slack_sdk.errors import SlackApiError

from orbit_bot.commands.executors import CommandExecutors, delete_last_message
from orbit_bot.commands.grammars import match_delete_last_message
from orbit_bot.commands.router import CommandRouter
from orbit_bot.config import Settings
from orbit_bot.conversation.intents import IntentContext, IntentHandler, default_intent_handlers
from orbit_bot.conversation.replies import EMPTY_REPLY_TEXT, post_reply
from orbit_bot.conversation.threads import ensure_thread
from orbit_bot.conversation.workspaces import WorkspaceResolutionError, WorkspaceResolver
from orbit_bot.github.client import GitHubClient
from orbit_bot.llm.prompts import RESPONSE_FORMAT_INSTRUCTION
from orbit_bot.models.conversation import IntentResult
from orbit_bot.models.outcome import StageOutcome
from orbit_bot.models.slack import InboundEvent
from orbit_bot.slack.feedback import feedback_block_id
from orbit_bot.slack.placeholder import (
    ChatPort,
    PlaceholderPostError,
    ThinkingPlaceholder,
    thinking_placeholder,
)
from orbit_bot.store.mappings import ThreadMappingStore

logger = logging.getLogger(__name__)


class ConversationalBackend(Protocol):
    async def query(self, workspace_slug: str, thread_slug: str | None, message: str) -> str: ...

    async def create_thread(self, workspace_slug: str) -> str: ...


class Classifier(Protocol):
    async def classify(self, text: str) -> IntentResult: ...


def clean_text(raw_text: str, bot_user_id: str) -> str:
    """Strip mentions of the bot (``<@U123>`` or ``<@U123|name>``) and trim."""
    text = raw_text.strip()
    if bot_user_id:
        text = re.sub(rf"<@{re.escape(bot_user_id)}(?:\|[^>]*)?>", "", text)
    return text.strip()


class ConversationOrchestrator:
    """Routes one inbound event to a command, an intent handler, or the LLM."""

    def __init__(
        self,
        settings: Settings,
        backend: ConversationalBackend,
        store: ThreadMappingStore,
        classifier: Classifier,
        resolver: WorkspaceResolver,
        intent_handlers: dict[str, IntentHandler] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._backend = backend
        self._store = store
        self._classifier = classifier
        self._resolver = resolver
        self._intent_handlers = (
            default_intent_handlers() if intent_handlers is None else intent_handlers
        )
        self._sleep = sleep
        self._commands = CommandRouter(
            settings,
            CommandExecutors(settings, backend, store, sleep),
            store,
            backend,
            resolver,
        )

    async def handle(
        self, event: InboundEvent, chat: ChatPort, github: GitHubClient | None
    ) -> None:
        started = time.monotonic()
        try:
            await self._handle(event, chat, github)
        except Exception:
            logger.error("Unhandled error processing message %s", event.event_ts, exc_info=True)
        finally:
            logger.info(
                "Finished message %s in %.0fms",
                event.event_ts,
                (time.monotonic() - started) * 1000,
            )

    async def _handle(
        self, event: InboundEvent, chat: ChatPort, github: GitHubClient | None
    ) -> None:
        query = clean_text(event.raw_text, self._settings.slack_bot_user_id)
        logger.info(
            "Message received",
            extra={
                "user_id": event.sender_id,
                "channel_id": event.channel_id,
                "event_ts": event.event_ts,
                "reply_target": event.reply_target,
            },
        )
        if not query:
            logger.info("Ignoring empty message after mention removal")
            return

        if match_delete_last_message(query) is not None:
            outcome = await delete_last_message(chat, event, self._settings.slack_bot_user_id)
            logger.info("Delete command handled (%s)", outcome.status.value)
            return

        try:
            async with thinking_placeholder(chat, event.channel_id, event.reply_target) as placeholder:
                outcome = await self._commands.dispatch(query, event, chat, github, placeholder)
                if outcome.consumed:
                    logger.info("Command handled (%s)", outcome.status.value)
                    return
                await self._converse(query, event, chat, github, placeholder)
        except PlaceholderPostError:
            logger.error("Failed to post thinking message, aborting", exc_info=True)

    async def _converse(
        self,
        query: str,
        event: InboundEvent,
        chat: ChatPort,
        github: GitHubClient | None,
        placeholder: ThinkingPlaceholder,
    ) -> None:
        """Intent routing and LLM fallback. Errors become a user-visible apology."""
        try:
            intent = await self._detect_intent(query)
            outcome = await self._route_intent(query, event, chat, github, placeholder, intent)
            if outcome.consumed:
                return
            await self._ask_llm(query, event, chat, placeholder, intent)
        except Exception as exc:
            logger.error("Error in intent/LLM path", exc_info=True)
            await self._report_error(exc, event, chat, placeholder)

    async def _detect_intent(self, query: str) -> IntentResult:
        try:
            return await self._classifier.classify(query)
        except Exception:
            logger.warning("Intent detection failed, continuing without intent", exc_info=True)
            return IntentResult.empty()

    async def _route_intent(
        self,
        query: str,
        event: InboundEvent,
        chat: ChatPort,
        github: GitHubClient | None,
        placeholder: ThinkingPlaceholder,
        intent: IntentResult,
    ) -> StageOutcome:
        settings = self._settings
        if not (
            settings.intent_routing_enabled
            and intent.intent
            and intent.confidence >= settings.intent_confidence_threshold
        ):
            return StageOutcome.not_handled()

        handler = self._intent_handlers.get(intent.intent)
        if handler is None:
            logger.info("No handler for intent '%s', proceeding to LLM", intent.intent)
            return StageOutcome.not_handled()

        logger.info("Routing to '%s' handler (confidence %.2f)", intent.intent, intent.confidence)
        ctx = IntentContext(
            query=query,
            event=event,
            chat=chat,
            github=github,
            placeholder=placeholder,
            intent=intent,
        )
        return await handler(ctx)

    async def _ask_llm(
        self,
        query: str,
        event: InboundEvent,
        chat: ChatPort,
        placeholder: ThinkingPlaceholder,
        intent: IntentResult,
    ) -> None:
        workspace_slug = await self._resolver.resolve(
            query, intent.suggested_workspace, event.sender_id, event.channel_id
        )
        if not workspace_slug:
            raise WorkspaceResolutionError(
                "Could not determine a valid workspace. Check configuration "
                "(mappings, fallback) and LLM workspace availability."
            )

        thread_slug = await ensure_thread(
            self._store, self._backend, event.channel_id, event.reply_target, workspace_slug
        )

        await placeholder.set_status(f":brain: Thinking in workspace `{workspace_slug}`...")
        llm_input = self._resolver.strip_override(query, workspace_slug) + RESPONSE_FORMAT_INSTRUCTION
        logger.info(
            "Querying LLM: workspace=%s thread=%s input_length=%d",
            workspace_slug,
            thread_slug,
            len(llm_input),
        )
        raw_reply = await self._backend.query(workspace_slug, thread_slug, llm_input)
        await placeholder.discard()

        reply = (raw_reply or "").strip()
        if not reply:
            logger.info("LLM returned empty response")
            await chat.post_message(event.channel_id, event.reply_target, EMPTY_REPLY_TEXT)
            return

        substantive = len(reply) >= self._settings.min_substantive_response_length
        await post_reply(
            chat,
            event.channel_id,
            event.reply_target,
            reply,
            feedback_block_id=feedback_block_id(event.event_ts, workspace_slug) if substantive else None,
            delay_seconds=self._settings.segment_post_delay_seconds,
            sleep=self._sleep,
        )

    async def _report_error(
        self,
        exc: Exception,
        event: InboundEvent,
        chat: ChatPort,
        placeholder: ThinkingPlaceholder,
    ) -> None:
        text = f"⚠️ Oops! An error occurred: {exc}"
        if await placeholder.finish(text):
            return
        try:
            await chat.post_message(event.channel_id, event.reply_target, text)
        except SlackApiError:
            logger.error("Failed to post error message", exc_info=True)
