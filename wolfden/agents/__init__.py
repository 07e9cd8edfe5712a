"""Agent implementations for wolfden."""

from wolfden.agents.llm.llm_agent import LLMAgent
from wolfden.agents.baselines.random_agent import RandomAgent

__all__ = ["LLMAgent", "RandomAgent"]
