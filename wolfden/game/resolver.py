"""Per-player action resolution: human rendezvous and AI fan-out."""

import asyncio
from typing import Callable, List, Optional, Sequence, Tuple, Union

from wolfden.core.base_agent import BaseAgent
from wolfden.core.exceptions import HumanInputError
from wolfden.core.types import ActionResult, NO_TARGET
from wolfden.game import prompts
from wolfden.game.state import GameState
from wolfden.game.types import EventCategory, Player

TargetSpec = Union[Sequence[int], Callable[[Player], Sequence[int]]]


class HumanRendezvous:
    """Single-slot, one-shot hand-off from the host to the engine.

    At most one slot is open at a time and each slot is fulfilled exactly
    once. Breaking either rule raises ``HumanInputError``; the slot is left
    as it was.
    """

    def __init__(self):
        self._future: Optional[asyncio.Future] = None
        self.player_id: Optional[int] = None

    @property
    def pending(self) -> bool:
        return self._future is not None and not self._future.done()

    def open(self, player_id: int) -> asyncio.Future:
        """Open the slot for ``player_id`` and return the future to await."""
        if self.pending:
            raise HumanInputError(
                "A human decision is already pending",
                details={"pending_for": self.player_id, "requested_for": player_id},
            )
        self._future = asyncio.get_running_loop().create_future()
        self.player_id = player_id
        return self._future

    def fulfil(self, result: ActionResult) -> None:
        """Resolve the open slot."""
        if self._future is None:
            raise HumanInputError("No human decision is pending")
        if self._future.done():
            raise HumanInputError("Human decision already submitted", details={"player_id": self.player_id})
        self._future.set_result(result)

    def close(self) -> None:
        self._future = None
        self.player_id = None


class ActionResolver:
    """Turns "player X must decide" into an ``ActionResult``.

    Humans suspend the engine on a ``HumanRendezvous`` until the host calls
    ``submit``. AI players are delegated to the agent. Cohorts resolve their
    humans one by one, then fan out every AI member concurrently and join
    them before returning.
    """

    def __init__(
        self,
        state: GameState,
        agent: BaseAgent,
        notify: Callable[[], None],
        prompt_delay: float = 0.0,
    ):
        """Initialize resolver.

        Args:
            state: Match state (the resolver writes only the prompt fields and thoughts)
            agent: Decision maker for AI players
            notify: Pushes a snapshot to the host
            prompt_delay: Pause after publishing a prompt (seconds)
        """
        self.state = state
        self.agent = agent
        self.notify = notify
        self.prompt_delay = prompt_delay
        self.rendezvous = HumanRendezvous()

    async def resolve(
        self,
        player: Player,
        prompt: str,
        valid_targets: Sequence[int],
        is_speech: bool = False,
        posthumous: bool = False,
    ) -> Optional[ActionResult]:
        """Resolve one player's decision.

        Args:
            player: Acting player
            prompt: Instruction shown to the player
            valid_targets: Legal target ids (0 is always accepted)
            is_speech: Whether a spoken statement is expected
            posthumous: Let a dead player act (last words, Hunter shot)

        Returns:
            The decision, or None for a dead player
        """
        if not player.is_alive and not posthumous:
            return None

        valid_targets = list(valid_targets)
        self._publish(player.id, prompt, valid_targets, is_speech)
        if self.prompt_delay:
            await asyncio.sleep(self.prompt_delay)

        if player.is_human:
            return await self._wait_for_human(player)

        result = await self.agent.decide(player, self.state, prompt, valid_targets, is_speech)
        result = _checked(result, valid_targets)
        self._record_thought(player, result)
        return result

    async def resolve_cohort(
        self,
        players: List[Player],
        prompt: str,
        valid_targets: TargetSpec,
        is_speech: bool = False,
        waiting_prompt: str = "",
    ) -> List[Tuple[Player, ActionResult]]:
        """Resolve a group that acts in the same sub-phase.

        Humans go first, one at a time. AI members are then dispatched
        together and joined. Results are returned in the cohort's seat
        order, whatever order the AI calls completed in.

        Args:
            players: Cohort in seat order
            prompt: Instruction for every member
            valid_targets: Target list, or a function of the player returning one
            is_speech: Whether a spoken statement is expected
            waiting_prompt: Shown to the host while the AI batch runs
        """
        living = [p for p in players if p.is_alive]
        results = {}

        for player in living:
            if player.is_human:
                results[player.id] = await self.resolve(player, prompt, _targets_for(valid_targets, player), is_speech)

        ai_members = [p for p in living if not p.is_human]
        if ai_members:
            self._publish(None, waiting_prompt, [], False)
            decisions = await asyncio.gather(*[
                self.agent.decide(p, self.state, prompt, list(_targets_for(valid_targets, p)), is_speech)
                for p in ai_members
            ])
            for player, result in zip(ai_members, decisions):
                result = _checked(result, _targets_for(valid_targets, player))
                self._record_thought(player, result)
                results[player.id] = result

        return [(p, results[p.id]) for p in living if results.get(p.id) is not None]

    def submit(self, action: int, speech: Optional[str] = None) -> None:
        """Host entry point for the pending human decision.

        Raises:
            HumanInputError: No pending decision, already submitted, or an
                action outside the published target set
        """
        if not self.rendezvous.pending:
            raise HumanInputError("No human decision is pending")
        if isinstance(action, bool) or not isinstance(action, int):
            raise HumanInputError(f"Action must be an integer, got {action!r}")
        if action != NO_TARGET and action not in self.state.valid_targets:
            raise HumanInputError(
                f"Invalid target {action}",
                details={"valid_targets": list(self.state.valid_targets)},
            )
        self.rendezvous.fulfil(ActionResult(action=action, speech=speech or ""))

    async def _wait_for_human(self, player: Player) -> ActionResult:
        future = self.rendezvous.open(player.id)
        self.state.waiting_for_human = True
        self.notify()
        try:
            return await future
        finally:
            self.rendezvous.close()
            self.state.waiting_for_human = False
            self.notify()

    def _publish(self, player_id: Optional[int], prompt: str, valid_targets: List[int], is_speech: bool) -> None:
        self.state.current_player_id = player_id
        self.state.action_prompt = prompt
        self.state.valid_targets = valid_targets
        self.state.is_speech = is_speech
        self.notify()

    def _record_thought(self, player: Player, result: ActionResult) -> None:
        if result.thought:
            self.state.log(
                prompts.THOUGHT.format(id=player.id, thought=result.thought),
                EventCategory.THOUGHT,
                private_for=player.id,
                player_id=player.id,
            )
            self.notify()


def _targets_for(targets: TargetSpec, player: Player) -> Sequence[int]:
    return targets(player) if callable(targets) else targets


def _checked(result: ActionResult, valid_targets: Sequence[int]) -> ActionResult:
    """Replace an out-of-range AI action with the fallback target."""
    if result.action != NO_TARGET and result.action not in valid_targets:
        result.action = valid_targets[0] if valid_targets else NO_TARGET
    return result
