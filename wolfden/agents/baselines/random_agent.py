"""Random agent that chooses actions randomly."""

import random
from typing import Any, Dict, Optional

from wolfden.core.base_agent import BaseAgent
from wolfden.core.types import ActionResult, NO_TARGET

CANNED_SPEECHES = [
    "I have nothing to add yet.",
    "Someone here is lying, and I intend to find out who.",
    "I trust the quiet ones least.",
    "Let's not rush the vote.",
    "I'm a simple villager, believe me.",
]


class RandomAgent(BaseAgent):
    """Agent that picks uniformly among the legal targets.

    Useful as a baseline and for running matches without any model
    endpoint.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        name: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        """Initialize random agent.

        Args:
            seed: Random seed for reproducibility
            name: Agent name
            config: Additional configuration
        """
        super().__init__(name=name, config=config)
        self.rng = random.Random(seed)

    async def decide(self, player, state, instruction, valid_targets, is_speech=False) -> ActionResult:
        self.decisions += 1
        choices = sorted(set(valid_targets) | {NO_TARGET})
        return ActionResult(
            action=self.rng.choice(choices),
            speech=self.rng.choice(CANNED_SPEECHES) if is_speech else "",
        )
