"""LLM interface layer for chat-completion API calls."""

from wolfden.llm_interface.base import BaseLLMClient, LLMResponse
from wolfden.llm_interface.openai_compat import OpenAICompatibleClient

__all__ = [
    "BaseLLMClient",
    "LLMResponse",
    "OpenAICompatibleClient",
]
