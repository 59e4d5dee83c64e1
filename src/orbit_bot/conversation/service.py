"""Wires settings and client singletons into a shared orchestrator.

``process_event`` is the background-task entry point used by the Slack
webhook router.
"""

import logging

from orbit_bot.config import get_settings
from orbit_bot.conversation.orchestrator import ConversationOrchestrator
from orbit_bot.conversation.workspaces import WorkspaceCatalog, WorkspaceResolver
from orbit_bot.github.client import get_github_client
from orbit_bot.llm.anythingllm import get_llm_backend
from orbit_bot.llm.client import get_gemini_client
from orbit_bot.llm.intent import IntentClassifier
from orbit_bot.models.slack import InboundEvent
from orbit_bot.slack.chat import SlackChatPort
from orbit_bot.slack.client import get_slack_client
from orbit_bot.store.client import get_mapping_store

logger = logging.getLogger(__name__)

_orchestrator: ConversationOrchestrator | None = None


def get_orchestrator() -> ConversationOrchestrator:
    """Return the cached orchestrator, building it from settings on first call."""
    global _orchestrator
    if _orchestrator is None:
        settings = get_settings()
        backend = get_llm_backend()
        catalog = WorkspaceCatalog(backend)
        _orchestrator = ConversationOrchestrator(
            settings=settings,
            backend=backend,
            store=get_mapping_store(),
            classifier=IntentClassifier(get_gemini_client(), settings.intent_model, catalog),
            resolver=WorkspaceResolver(settings, catalog),
        )
    return _orchestrator


def reset_orchestrator() -> None:
    """Reset the cached orchestrator. Used for testing."""
    global _orchestrator
    _orchestrator = None


async def process_event(event: InboundEvent) -> None:
    """Handle one inbound message with the shared orchestrator."""
    chat = SlackChatPort(await get_slack_client())
    await get_orchestrator().handle(event, chat, get_github_client())
