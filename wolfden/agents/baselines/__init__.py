"""Baseline agents."""

from wolfden.agents.baselines.random_agent import RandomAgent

__all__ = ["RandomAgent"]
