"""Gemini structured output schema for intent detection."""

from pydantic import BaseModel, Field


class IntentResponse(BaseModel):
    """Schema for Gemini structured output. Used as response_schema parameter."""

    intent: str | None = Field(
        default=None,
        description="One of the listed intent labels, or null if none applies",
    )
    confidence: float = Field(
        ge=0.0, le=1.0, description="Confidence in the intent label between 0 and 1"
    )
    suggested_workspace: str | None = Field(
        default=None,
        description="Slug of the best-fit workspace from the list, or null if unsure",
    )
