"""Tests for Gemini-backed intent classification."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from orbit_bot.llm.intent import IntentClassifier
from orbit_bot.llm.schemas import IntentResponse
from orbit_bot.models.conversation import IntentResult


def _catalog(slugs: list[str] | None) -> AsyncMock:
    catalog = AsyncMock()
    catalog.available.return_value = set(slugs) if slugs is not None else None
    return catalog


def _response(parsed: IntentResponse | None) -> MagicMock:
    response = MagicMock()
    response.parsed = parsed
    response.usage_metadata.prompt_token_count = 120
    response.usage_metadata.candidates_token_count = 15
    return response


async def test_no_client_returns_empty():
    classifier = IntentClassifier(None, "gemini-2.5-flash", _catalog(["docs"]))

    assert await classifier.classify("hello") == IntentResult.empty()


@patch("orbit_bot.llm.intent._call_gemini", new_callable=AsyncMock)
async def test_classify_known_intent(mock_call: AsyncMock):
    mock_call.return_value = _response(
        IntentResponse(intent="code_help", confidence=0.92, suggested_workspace="docs")
    )
    classifier = IntentClassifier(MagicMock(), "gemini-2.5-flash", _catalog(["docs", "faq"]))

    result = await classifier.classify("why does my hook not fire?")

    assert result == IntentResult(intent="code_help", confidence=0.92, suggested_workspace="docs")
    client, model, system_prompt, text = mock_call.await_args.args
    assert model == "gemini-2.5-flash"
    assert "- docs" in system_prompt and "- faq" in system_prompt
    assert text == "why does my hook not fire?"


@patch("orbit_bot.llm.intent._call_gemini", new_callable=AsyncMock)
async def test_unknown_intent_normalized(mock_call: AsyncMock):
    mock_call.return_value = _response(
        IntentResponse(intent="order_pizza", confidence=0.99, suggested_workspace=None)
    )
    classifier = IntentClassifier(MagicMock(), "m", _catalog(["docs"]))

    result = await classifier.classify("pizza")

    assert result.intent is None
    assert result.confidence == 0.0


@patch("orbit_bot.llm.intent._call_gemini", new_callable=AsyncMock)
async def test_unknown_workspace_suggestion_dropped(mock_call: AsyncMock):
    mock_call.return_value = _response(
        IntentResponse(intent="ask_faq", confidence=0.8, suggested_workspace="nonexistent")
    )
    classifier = IntentClassifier(MagicMock(), "m", _catalog(["docs"]))

    result = await classifier.classify("refunds?")

    assert result.intent == "ask_faq"
    assert result.suggested_workspace is None


@patch("orbit_bot.llm.intent._call_gemini", new_callable=AsyncMock)
async def test_unparsable_response_returns_empty(mock_call: AsyncMock):
    mock_call.return_value = _response(None)
    classifier = IntentClassifier(MagicMock(), "m", _catalog(None))

    assert await classifier.classify("hi") == IntentResult.empty()


@patch("orbit_bot.llm.intent._call_gemini", new_callable=AsyncMock)
async def test_gemini_failure_propagates(mock_call: AsyncMock):
    mock_call.side_effect = RuntimeError("quota")
    classifier = IntentClassifier(MagicMock(), "m", _catalog(["docs"]))

    with pytest.raises(RuntimeError):
        await classifier.classify("hi")
