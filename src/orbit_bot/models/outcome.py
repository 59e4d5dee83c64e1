"""Explicit result type returned by every routing stage."""

from enum import Enum

from pydantic import BaseModel


class OutcomeStatus(str, Enum):
    """Whether a stage consumed the message."""

    HANDLED = "handled"
    NOT_HANDLED = "not_handled"
    ERROR = "error"


class StageOutcome(BaseModel):
    """Result of a routing stage. Anything other than NOT_HANDLED ends routing."""

    status: OutcomeStatus
    reason: str | None = None

    @property
    def consumed(self) -> bool:
        return self.status is not OutcomeStatus.NOT_HANDLED

    @classmethod
    def handled(cls) -> "StageOutcome":
        return cls(status=OutcomeStatus.HANDLED)

    @classmethod
    def not_handled(cls) -> "StageOutcome":
        return cls(status=OutcomeStatus.NOT_HANDLED)

    @classmethod
    def error(cls, reason: str) -> "StageOutcome":
        return cls(status=OutcomeStatus.ERROR, reason=reason)
