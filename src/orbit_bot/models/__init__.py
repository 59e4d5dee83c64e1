"""Data models for the Orbit bot."""

from orbit_bot.models.commands import (
    CommandMatch,
    DeleteLastMessage,
    GenericApi,
    IssueAnalysis,
    MalformedCommand,
    PrReview,
    ReleaseInfo,
    Unrecognized,
)
from orbit_bot.models.conversation import (
    IntentResult,
    ResponseSegment,
    SegmentKind,
    ThreadMapping,
)
from orbit_bot.models.outcome import OutcomeStatus, StageOutcome
from orbit_bot.models.slack import InboundEvent

__all__ = [
    "InboundEvent",
    "ThreadMapping",
    "IntentResult",
    "ResponseSegment",
    "SegmentKind",
    "CommandMatch",
    "DeleteLastMessage",
    "ReleaseInfo",
    "PrReview",
    "IssueAnalysis",
    "GenericApi",
    "MalformedCommand",
    "Unrecognized",
    "OutcomeStatus",
    "StageOutcome",
]
