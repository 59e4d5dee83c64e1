"""Intent-specific handlers.

Only intents registered here are routed away from the conversational path;
any other detected intent falls through to the LLM. The two registered
handlers are placeholders that acknowledge the intent and stop routing.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from orbit_bot.github.client import GitHubClient
from orbit_bot.models.conversation import IntentResult
from orbit_bot.models.outcome import StageOutcome
from orbit_bot.models.slack import InboundEvent
from orbit_bot.slack.placeholder import ChatPort, ThinkingPlaceholder

logger = logging.getLogger(__name__)


@dataclass
class IntentContext:
    query: str
    event: InboundEvent
    chat: ChatPort
    github: GitHubClient | None
    placeholder: ThinkingPlaceholder
    intent: IntentResult


IntentHandler = Callable[[IntentContext], Awaitable[StageOutcome]]


async def _not_implemented(ctx: IntentContext) -> StageOutcome:
    logger.warning("Handler for intent '%s' not implemented", ctx.intent.intent)
    await ctx.placeholder.finish(f"🚧 Intent '{ctx.intent.intent}' handler not implemented yet.")
    return StageOutcome.handled()


def default_intent_handlers() -> dict[str, IntentHandler]:
    return {
        "github_issue_lookup": _not_implemented,
        "ask_faq": _not_implemented,
    }
