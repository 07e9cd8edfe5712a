"""Pytest configuration and fixtures."""

import pytest

from wolfden.core.base_agent import BaseAgent
from wolfden.core.types import ActionResult
from wolfden.game.config import WerewolfConfig
from wolfden.game.state import new_game
from wolfden.game.types import ActorKind, AIConfig, Player, Role
from wolfden.llm_interface.base import BaseLLMClient, LLMResponse

# Seats 1-4 wolves, 5-8 villagers, then Seer, Witch, Hunter, Guard
FIXED_ROLES = (
    [Role.WEREWOLF] * 4
    + [Role.VILLAGER] * 4
    + [Role.SEER, Role.WITCH, Role.HUNTER, Role.GUARD]
)
SEER, WITCH, HUNTER, GUARD = 9, 10, 11, 12


class ScriptedAgent(BaseAgent):
    """Agent answering from a script keyed by (sub-phase, player id).

    A script value is an int action, an ``ActionResult``, or a list of
    either consumed one per call. Unscripted decisions return action 0.
    """

    def __init__(self, script=None):
        super().__init__(name="scripted")
        self.script = dict(script or {})
        self.calls = []

    async def decide(self, player, state, instruction, valid_targets, is_speech=False):
        self.decisions += 1
        key = (state.sub_phase, player.id)
        self.calls.append((state.sub_phase, player.id, list(valid_targets)))
        value = self.script.get(key, 0)
        if isinstance(value, list):
            value = value.pop(0) if value else 0
        if isinstance(value, ActionResult):
            return ActionResult(value.action, value.speech, value.thought)
        return ActionResult(action=value, speech=f"speech from {player.id}" if is_speech else "")

    def calls_for(self, sub_phase, player_id=None):
        return [c for c in self.calls if c[0] == sub_phase and (player_id is None or c[1] == player_id)]


class FakeLLMClient(BaseLLMClient):
    """Chat client returning canned replies, or raising a canned error."""

    def __init__(self, replies=None, error=None, **kwargs):
        super().__init__(api_key="test-key", model=kwargs.get("model", "fake-model"))
        self.replies = list(replies or [])
        self.error = error
        self.requests = []

    async def chat_completion(self, messages, temperature=None, max_tokens=None, **kwargs):
        self.requests.append(messages)
        if self.error is not None:
            raise self.error
        content = self.replies.pop(0) if self.replies else ""
        response = LLMResponse(content=content, model=self.model, prompt_tokens=10, completion_tokens=5, total_tokens=15)
        self._update_stats(response)
        return response


@pytest.fixture
def fast_config():
    """Default deck without pacing delays or the sheriff election."""
    return WerewolfConfig(
        prompt_delay=0.0,
        announce_delay=0.0,
        speech_delay=0.0,
        sheriff_election=False,
        seed=1,
    )


@pytest.fixture
def roster():
    """Twelve AI seats."""
    return [
        Player(id=i, name=f"P{i}", ai_config=AIConfig("http://llm.test/v1", "key", "fake-model"))
        for i in range(1, 13)
    ]


@pytest.fixture
def state(roster, fast_config):
    """Fresh match with the fixed role layout."""
    return new_game(roster, fast_config, roles=list(FIXED_ROLES), game_id="test_game")


@pytest.fixture
def human_state(roster, fast_config):
    """Fresh match with the Guard seat played by a human."""
    roster[GUARD - 1].actor_kind = ActorKind.HUMAN
    roster[GUARD - 1].ai_config = None
    return new_game(roster, fast_config, roles=list(FIXED_ROLES), game_id="test_human_game")
