"""Message routing and conversational context.

Public API:
    ConversationOrchestrator.handle(event, chat, github)
        Routes one Slack message to a command, an intent handler, or the LLM.
    segment(text) -> list[ResponseSegment]
        Splits an LLM reply into text and code segments.
"""

from orbit_bot.conversation.segmenter import segment
from orbit_bot.conversation.threads import ensure_thread
from orbit_bot.conversation.workspaces import (
    WorkspaceCatalog,
    WorkspaceResolutionError,
    WorkspaceResolver,
)

__all__ = [
    "WorkspaceCatalog",
    "WorkspaceResolutionError",
    "WorkspaceResolver",
    "ensure_thread",
    "segment",
]
