"""Common types shared by the engine, agents and hosts."""

from enum import Enum
from typing import Any, Dict, Optional
from dataclasses import dataclass, field


# Reserved target id meaning "skip / abstain / no target". Never a player id.
NO_TARGET = 0


class TieBreak(str, Enum):
    """Policy applied when several targets share the top vote count."""

    RANDOM = "random"
    NONE = "none"


@dataclass
class ActionResult:
    """A resolved decision for one player.

    Attributes:
        action: Chosen target id (0 = skip/abstain/no target)
        speech: What the player says aloud (only meaningful for speech prompts)
        thought: Private reasoning, only produced by AI players
    """

    action: int = NO_TARGET
    speech: str = ""
    thought: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "action": self.action,
            "speech": self.speech,
            "thought": self.thought,
        }


@dataclass
class GameResult:
    """Represents the outcome of a match."""

    game_id: str
    winner: Optional[str]
    win_reason: str
    num_days: int
    duration_seconds: float
    player_stats: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "game_id": self.game_id,
            "winner": self.winner,
            "win_reason": self.win_reason,
            "num_days": self.num_days,
            "duration_seconds": self.duration_seconds,
            "player_stats": self.player_stats,
            "metadata": self.metadata,
        }
