"""Core framework components for wolfden."""

from wolfden.core.channel import SnapshotChannel
from wolfden.core.types import ActionResult, GameResult, NO_TARGET, TieBreak
from wolfden.core.exceptions import (
    WolfdenError,
    InvalidActionError,
    InvalidStateError,
    HumanInputError,
    AgentError,
    ConfigurationError,
    LLMError,
)
from wolfden.core.utils import seed_everything, extract_json_object

__all__ = [
    "SnapshotChannel",
    "ActionResult",
    "GameResult",
    "NO_TARGET",
    "TieBreak",
    "WolfdenError",
    "InvalidActionError",
    "InvalidStateError",
    "HumanInputError",
    "AgentError",
    "ConfigurationError",
    "LLMError",
    "seed_everything",
    "extract_json_object",
]
