"""wolfden - Werewolf game orchestration for mixed human and LLM tables."""

__version__ = "0.1.0"

from wolfden.core.base_agent import BaseAgent
from wolfden.core.types import ActionResult, GameResult
from wolfden.core.exceptions import (
    WolfdenError,
    InvalidActionError,
    InvalidStateError,
    HumanInputError,
    AgentError,
    ConfigurationError,
)

__all__ = [
    "__version__",
    "BaseAgent",
    "ActionResult",
    "GameResult",
    "WolfdenError",
    "InvalidActionError",
    "InvalidStateError",
    "HumanInputError",
    "AgentError",
    "ConfigurationError",
]
