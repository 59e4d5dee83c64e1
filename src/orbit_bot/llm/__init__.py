"""LLM integrations: AnythingLLM conversations and Gemini intent detection.

Public API:
    AnythingLLMClient.query(workspace, thread, text) -> str
    AnythingLLMClient.create_thread(workspace) -> str
    IntentClassifier.classify(text) -> IntentResult
"""

from orbit_bot.llm.anythingllm import AnythingLLMClient, LLMBackendError, get_llm_backend
from orbit_bot.llm.client import get_gemini_client
from orbit_bot.llm.intent import IntentClassifier

__all__ = [
    "AnythingLLMClient",
    "IntentClassifier",
    "LLMBackendError",
    "get_gemini_client",
    "get_llm_backend",
]
