"""LLM-backed agents."""

from wolfden.agents.llm.llm_agent import LLMAgent

__all__ = ["LLMAgent"]
