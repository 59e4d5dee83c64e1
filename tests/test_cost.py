"""Tests for token usage extraction, cost calculation, and structured logging."""

import logging
from unittest.mock import MagicMock

from orbit_bot.cost import (
    INPUT_PRICE_PER_TOKEN,
    OUTPUT_PRICE_PER_TOKEN,
    TokenUsage,
    extract_usage,
    log_usage,
)


def _make_mock_response(prompt_tokens: int | None, completion_tokens: int | None) -> MagicMock:
    """Build a mock Gemini response with usage_metadata."""
    metadata = MagicMock()
    metadata.prompt_token_count = prompt_tokens
    metadata.candidates_token_count = completion_tokens
    response = MagicMock()
    response.usage_metadata = metadata
    return response


def test_extract_usage_normal():
    """Token counts produce the expected totals and cost."""
    usage = extract_usage(_make_mock_response(prompt_tokens=400, completion_tokens=20))

    assert usage.prompt_tokens == 400
    assert usage.completion_tokens == 20
    assert usage.total_tokens == 420
    expected = (400 * INPUT_PRICE_PER_TOKEN) + (20 * OUTPUT_PRICE_PER_TOKEN)
    assert abs(usage.cost_usd - expected) < 1e-12


def test_extract_usage_none_counts():
    """None token counts default to zero."""
    usage = extract_usage(_make_mock_response(prompt_tokens=None, completion_tokens=None))

    assert usage.total_tokens == 0
    assert usage.cost_usd == 0.0


def test_extract_usage_missing_metadata():
    """A response without usage_metadata yields zero usage."""
    response = MagicMock(spec=[])

    usage = extract_usage(response)

    assert usage == TokenUsage(prompt_tokens=0, completion_tokens=0, total_tokens=0, cost_usd=0.0)


def test_log_usage_emits_structured_fields(caplog):
    """log_usage logs operation, model and token counts as extras."""
    usage = TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15, cost_usd=0.0000155)

    with caplog.at_level(logging.INFO, logger="orbit_bot.cost"):
        log_usage("intent_detection", "gemini-2.5-flash", usage)

    record = caplog.records[-1]
    assert record.operation == "intent_detection"
    assert record.model == "gemini-2.5-flash"
    assert record.total_tokens == 15
