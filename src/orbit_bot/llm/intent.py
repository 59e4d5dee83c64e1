"""Intent detection via Gemini structured output.

Classifies a message into one of KNOWN_INTENTS with a confidence score and
an optional workspace suggestion. Transient Gemini errors are retried; any
remaining failure propagates, and the orchestrator treats it as "no intent".
"""

import logging

from google import genai
from google.genai import types
from google.genai.errors import ClientError, ServerError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from orbit_bot.conversation.workspaces import WorkspaceCatalog
from orbit_bot.cost import extract_usage, log_usage
from orbit_bot.llm.prompts import KNOWN_INTENTS, build_intent_prompt
from orbit_bot.llm.schemas import IntentResponse
from orbit_bot.models.conversation import IntentResult

logger = logging.getLogger(__name__)


def _is_retryable(error: BaseException) -> bool:
    """Server errors (5xx) and rate limits (429) are transient; other client errors are not."""
    if isinstance(error, ServerError):
        return True
    if isinstance(error, ClientError) and error.code == 429:
        return True
    return False


@retry(
    retry=retry_if_exception(_is_retryable),
    wait=wait_exponential_jitter(initial=1, max=10, jitter=1),
    stop=stop_after_attempt(3),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def _call_gemini(
    client: genai.Client,
    model: str,
    system_prompt: str,
    text: str,
) -> object:
    """Call Gemini with structured output, retrying on transient errors."""
    return await client.aio.models.generate_content(
        model=model,
        contents=text,
        config=types.GenerateContentConfig(
            system_instruction=system_prompt,
            response_mime_type="application/json",
            response_schema=IntentResponse,
            temperature=0.0,
        ),
    )


class IntentClassifier:
    """Infers a coarse intent label and workspace suggestion for free text."""

    def __init__(
        self, client: genai.Client | None, model: str, catalog: WorkspaceCatalog
    ) -> None:
        self._client = client
        self._model = model
        self._catalog = catalog

    async def classify(self, text: str) -> IntentResult:
        if self._client is None:
            return IntentResult.empty()

        workspaces = sorted(await self._catalog.available() or [])
        response = await _call_gemini(
            self._client, self._model, build_intent_prompt(workspaces), text
        )
        log_usage("intent_detection", self._model, extract_usage(response))

        parsed: IntentResponse | None = response.parsed
        if parsed is None:
            logger.warning("Intent detection returned no parsable result")
            return IntentResult.empty()

        intent = parsed.intent if parsed.intent in KNOWN_INTENTS else None
        suggested = parsed.suggested_workspace
        if suggested and suggested not in workspaces:
            suggested = None

        result = IntentResult(
            intent=intent,
            confidence=parsed.confidence if intent else 0.0,
            suggested_workspace=suggested,
        )
        logger.info(
            "Intent detected",
            extra={
                "intent": result.intent,
                "confidence": round(result.confidence, 3),
                "suggested_workspace": result.suggested_workspace,
            },
        )
        return result
