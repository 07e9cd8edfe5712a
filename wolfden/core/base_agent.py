"""Base agent class for AI decision makers."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from wolfden.core.types import ActionResult

if TYPE_CHECKING:
    from wolfden.game.state import GameState
    from wolfden.game.types import Player
    from wolfden.logging.game_logger import GameLogger


class BaseAgent(ABC):
    """Abstract base class for everything that decides for AI players.

    One agent serves every AI seat; the acting player is passed with each
    request. Implementations must never raise: any failure is turned into a
    fallback ``ActionResult`` so a match keeps flowing.
    """

    def __init__(self, name: Optional[str] = None, config: Optional[Dict[str, Any]] = None):
        """Initialize agent.

        Args:
            name: Human-readable name for the agent
            config: Configuration dictionary for the agent
        """
        self.name = name or self.__class__.__name__
        self.config = config or {}
        self.logger: Optional["GameLogger"] = None

        self.decisions = 0
        self.fallbacks = 0

    @abstractmethod
    async def decide(
        self,
        player: "Player",
        state: "GameState",
        instruction: str,
        valid_targets: List[int],
        is_speech: bool = False,
    ) -> ActionResult:
        """Choose an action for ``player``.

        Args:
            player: Acting player
            state: Current game state (read-only)
            instruction: What the player must decide
            valid_targets: Legal target ids; 0 is always allowed
            is_speech: Whether a spoken statement is expected

        Returns:
            The decision
        """
        pass

    def bind_logger(self, logger: Optional["GameLogger"]) -> None:
        """Attach the match logger unless one is already set."""
        if self.logger is None:
            self.logger = logger

    @staticmethod
    def fallback(valid_targets: List[int], speech: str) -> ActionResult:
        """Deterministic decision used when an agent cannot decide."""
        return ActionResult(action=valid_targets[0] if valid_targets else 0, speech=speech)

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about this agent's behavior."""
        return {
            "name": self.name,
            "decisions": self.decisions,
            "fallbacks": self.fallbacks,
        }

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"

    def __repr__(self) -> str:
        return self.__str__()
