"""Conversation-level models: thread mappings, intent results, reply segments."""

from enum import Enum

from pydantic import BaseModel, Field


class ThreadMapping(BaseModel):
    """The LLM (workspace, thread) pair a Slack conversation is bound to."""

    workspace_slug: str
    thread_slug: str


class IntentResult(BaseModel):
    """Outcome of intent classification for one message. Never persisted."""

    intent: str | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    suggested_workspace: str | None = None

    @classmethod
    def empty(cls) -> "IntentResult":
        """No intent, no suggestion. Used when classification is off or fails."""
        return cls()


class SegmentKind(str, Enum):
    """Kinds of reply segments."""

    TEXT = "text"
    CODE = "code"


class ResponseSegment(BaseModel):
    """One independently postable piece of an LLM reply."""

    kind: SegmentKind
    content: str
    language: str = ""  # Declared fence language, code segments only
