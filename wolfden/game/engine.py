"""Werewolf phase controller."""

import asyncio
import random
import time
from typing import Callable, Dict, List, Optional

from wolfden.core.base_agent import BaseAgent
from wolfden.core.channel import SnapshotChannel
from wolfden.core.exceptions import InvalidStateError
from wolfden.core.types import GameResult, NO_TARGET, TieBreak
from wolfden.game import prompts
from wolfden.game.config import WerewolfConfig
from wolfden.game.history import PrivacyScope
from wolfden.game.resolver import ActionResolver
from wolfden.game.rules import check_win_condition, get_majority, get_team_for_role
from wolfden.game.state import GameState
from wolfden.game.types import (
    DaySubPhase,
    DeathReason,
    EventCategory,
    NightActions,
    NightSubPhase,
    Phase,
    Player,
    Role,
    SubPhase,
    Team,
)
from wolfden.logging.formats import EventType
from wolfden.logging.game_logger import GameLogger

_CATEGORY_EVENTS = {
    EventCategory.SYSTEM: EventType.ANNOUNCEMENT,
    EventCategory.SPEECH: EventType.SPEECH,
    EventCategory.ACTION: EventType.PLAYER_ACTION,
    EventCategory.THOUGHT: EventType.AGENT_THOUGHT,
}


class WerewolfEngine:
    """Drives a match through its night/day cycle.

    The engine is the only writer of ``GameState``. Every mutation is
    followed by a snapshot pushed through the ``SnapshotChannel``; hosts
    never block the engine. The only way back in is
    ``submit_human_action`` while a human rendezvous is pending.

    Night: Guard -> WerewolfDiscuss -> Werewolf -> Witch -> Seer, then
    resolution. Day: Announce -> [HunterShoot] -> [sheriff election, day 1]
    -> Speech -> Vote -> [LastWords -> HunterShoot]. The win check runs after
    every death-causing step and ends the match on the spot.
    """

    def __init__(
        self,
        state: GameState,
        config: Optional[WerewolfConfig] = None,
        agent: Optional[BaseAgent] = None,
        logger: Optional[GameLogger] = None,
        on_update: Optional[Callable[[GameState], None]] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize engine.

        Args:
            state: Fresh state from ``new_game``
            config: Match configuration (pacing, tie-break seed)
            agent: Decides for AI players (defaults to LLMAgent)
            logger: Optional GameLogger receiving structured events
            on_update: Optional snapshot subscriber
            rng: Random source for random tie-breaks
        """
        self.state = state
        self.config = config or WerewolfConfig()
        self.logger = logger
        self.rng = rng or random.Random(self.config.seed)

        if agent is None:
            from wolfden.agents.llm.llm_agent import LLMAgent
            agent = LLMAgent.from_config(self.config)
        self.agent = agent
        self.agent.bind_logger(logger)

        self.channel = SnapshotChannel()
        if on_update is not None:
            self.channel.subscribe(on_update)

        self.resolver = ActionResolver(
            state,
            self.agent,
            notify=self._notify,
            prompt_delay=self.config.prompt_delay,
        )

        self._mirrored = 0
        self._started = False

    def subscribe(self, callback: Callable[[GameState], None]) -> Callable[[], None]:
        """Register a snapshot subscriber; returns its unsubscribe function."""
        return self.channel.subscribe(callback)

    def submit_human_action(self, action: int, speech: Optional[str] = None) -> None:
        """Deliver the pending human decision.

        Raises:
            HumanInputError: Nothing pending, already submitted, or invalid target
        """
        self.resolver.submit(action, speech)

    async def start(self) -> GameResult:
        """Play the match to completion.

        Returns:
            GameResult with winner, reason and per-player outcome
        """
        if self._started:
            raise InvalidStateError("Match already started", details={"game_id": self.state.game_id})
        self._started = True

        start_time = time.time()
        if self.logger:
            self.logger.log_game_start(self.config.to_dict())
            self.logger.log(
                EventType.ROLE_ASSIGNMENT,
                {"roles": {p.id: p.role.value for p in self.state.players}},
                is_private=True,
            )
            self.logger.log_day_start(self.state.day, self.state.phase.value)

        self.log(prompts.GAME_STARTED)

        while not self.state.is_over:
            if self.state.phase == Phase.NIGHT:
                await self.run_night()
            else:
                await self.run_day()

        result = self._build_result(time.time() - start_time)
        if self.logger:
            self.logger.log_game_end(result.winner, result.win_reason, {
                "num_days": result.num_days,
                "agent": self.agent.get_stats(),
            })
        return result

    async def run_night(self) -> None:
        """Run one night and resolve its deaths. Ends with phase Day."""
        state = self.state
        state.night_actions = NightActions(last_protected=state.night_actions.guard_protect)
        state.died_tonight = []
        night = state.night_actions

        await self._guard_step(night)
        await self._werewolf_discussion()
        await self._werewolf_kill(night)
        await self._witch_step(night)
        await self._seer_step(night)

        kill = night.werewolf_kill_target
        died = []
        if kill:
            victim = state.get_player(kill)
            protected = night.guard_protect == kill
            if victim and victim.is_alive and not (protected or night.witch_save):
                self._kill(victim, DeathReason.KILLED)
                died.append(victim.id)
        if night.witch_poison:
            target = state.get_player(night.witch_poison)
            if target and target.is_alive:
                self._kill(target, DeathReason.POISONED)
                died.append(target.id)

        state.died_tonight = died
        state.phase = Phase.DAY
        state.clear_prompt()
        self._notify()

    async def _guard_step(self, night: NightActions) -> None:
        guard = self.state.find_alive_by_role(Role.GUARD)
        if guard is None:
            return
        self._set_sub_phase(NightSubPhase.GUARD)
        targets = [NO_TARGET] + [pid for pid in self.state.get_alive_ids() if pid != night.last_protected]
        result = await self.resolver.resolve(guard, prompts.GUARD_PROTECT, targets)
        if result and result.action:
            night.guard_protect = result.action
            self.log(
                prompts.GUARD_PROTECTED.format(target=result.action),
                EventCategory.ACTION,
                private_for=Role.GUARD,
                player_id=guard.id,
            )

    async def _werewolf_discussion(self) -> None:
        wolves = self.state.get_alive_by_role(Role.WEREWOLF)
        if not wolves:
            return
        self._set_sub_phase(NightSubPhase.WEREWOLF_DISCUSS)
        results = await self.resolver.resolve_cohort(
            wolves, prompts.WOLF_DISCUSS, [], is_speech=True, waiting_prompt=prompts.WOLF_DISCUSSING,
        )
        for wolf, result in results:
            if result.speech:
                self.log(
                    prompts.WEREWOLF_SPEECH.format(id=wolf.id, speech=result.speech),
                    EventCategory.SPEECH,
                    private_for=Role.WEREWOLF,
                    player_id=wolf.id,
                )

    async def _werewolf_kill(self, night: NightActions) -> None:
        wolves = self.state.get_alive_by_role(Role.WEREWOLF)
        if not wolves:
            return
        self._set_sub_phase(NightSubPhase.WEREWOLF)
        targets = [NO_TARGET] + [p.id for p in self.state.get_alive_players() if p.role != Role.WEREWOLF]
        results = await self.resolver.resolve_cohort(
            wolves, prompts.WOLF_KILL, targets, waiting_prompt=prompts.WOLF_VOTING,
        )

        votes = []
        for wolf, result in results:
            if result.action:
                votes.append(result.action)
                self.log(
                    prompts.WEREWOLF_KILL_INTENT.format(id=wolf.id, target=result.action),
                    EventCategory.ACTION,
                    private_for=Role.WEREWOLF,
                    player_id=wolf.id,
                )

        kill = get_majority(votes, TieBreak.RANDOM, self.rng)
        if kill:
            night.werewolf_kill_target = kill
            self.log(prompts.WEREWOLVES_KILL.format(target=kill), EventCategory.ACTION, private_for=Role.WEREWOLF)

    async def _witch_step(self, night: NightActions) -> None:
        witch = self.state.find_alive_by_role(Role.WITCH)
        if witch is None or witch.potions is None:
            return
        self._set_sub_phase(NightSubPhase.WITCH)
        kill = night.werewolf_kill_target

        if not witch.potions.heal_used and kill:
            result = await self.resolver.resolve(witch, prompts.WITCH_SAVE.format(target=kill), [NO_TARGET, kill])
            if result and result.action == kill:
                witch.potions.use_heal()
                night.witch_save = True
                self.log(
                    prompts.WITCH_SAVED.format(target=kill),
                    EventCategory.ACTION,
                    private_for=Role.WITCH,
                    player_id=witch.id,
                )

        if not witch.potions.poison_used:
            targets = [NO_TARGET] + [pid for pid in self.state.get_alive_ids() if pid != kill]
            result = await self.resolver.resolve(witch, prompts.WITCH_POISON, targets)
            if result and result.action:
                witch.potions.use_poison()
                night.witch_poison = result.action
                self.log(
                    prompts.WITCH_POISONED.format(target=result.action),
                    EventCategory.ACTION,
                    private_for=Role.WITCH,
                    player_id=witch.id,
                )

    async def _seer_step(self, night: NightActions) -> None:
        seer = self.state.find_alive_by_role(Role.SEER)
        if seer is None:
            return
        self._set_sub_phase(NightSubPhase.SEER)
        targets = [NO_TARGET] + [pid for pid in self.state.get_alive_ids() if pid != seer.id]
        result = await self.resolver.resolve(seer, prompts.SEER_CHECK, targets)
        if not (result and result.action):
            return

        target = self.state.get_player(result.action)
        is_wolf = target.role == Role.WEREWOLF
        night.seer_check = target.id
        verdict = prompts.SEER_RESULT_WOLF if is_wolf else prompts.SEER_RESULT_GOOD
        self.log(
            prompts.SEER_CHECKED.format(target=target.id, result=verdict),
            EventCategory.ACTION,
            private_for=Role.SEER,
            player_id=seer.id,
        )
        if self.logger:
            self.logger.log(
                EventType.SEER_CHECK,
                {"target": target.id, "is_werewolf": is_wolf},
                player_id=seer.id,
                is_private=True,
            )

    async def run_day(self) -> None:
        """Run one day. Ends with phase Night, or GameOver on a win."""
        state = self.state
        self._set_sub_phase(DaySubPhase.ANNOUNCE)
        if state.died_tonight:
            self.log(prompts.DIED_TONIGHT.format(targets=", ".join(str(pid) for pid in state.died_tonight)))
        else:
            self.log(prompts.PEACEFUL_NIGHT)
        await self._pause(self.config.announce_delay)

        if self._check_win():
            return

        for pid in state.died_tonight:
            player = state.get_player(pid)
            if player.role == Role.HUNTER and player.death_reason != DeathReason.POISONED:
                await self._handle_hunter(player)
                if self._check_win():
                    return

        if state.day == 1 and self.config.sheriff_election:
            await self._sheriff_election()

        self._set_sub_phase(DaySubPhase.SPEECH)
        for player in state.get_alive_players():
            result = await self.resolver.resolve(player, prompts.DAY_SPEECH, [], is_speech=True)
            if result and result.speech:
                self.log(
                    prompts.SPEECH.format(id=player.id, speech=result.speech),
                    EventCategory.SPEECH,
                    player_id=player.id,
                )
                await self._pause(self.config.speech_delay)

        exiled = await self._exile_vote()
        if exiled is not None:
            if self._check_win():
                return

            self._set_sub_phase(DaySubPhase.LAST_WORDS)
            result = await self.resolver.resolve(exiled, prompts.LAST_WORDS, [], is_speech=True, posthumous=True)
            if result and result.speech:
                self.log(
                    prompts.LAST_WORDS_SPOKEN.format(id=exiled.id, speech=result.speech),
                    EventCategory.SPEECH,
                    player_id=exiled.id,
                )
                await self._pause(self.config.speech_delay)

            if exiled.role == Role.HUNTER:
                await self._handle_hunter(exiled)
                if self._check_win():
                    return

        state.day += 1
        state.phase = Phase.NIGHT
        state.sub_phase = None
        state.clear_prompt()
        if self.logger:
            self.logger.log_day_start(state.day, state.phase.value)
        self._notify()

    async def _exile_vote(self) -> Optional[Player]:
        """Day vote. Returns the exiled player, or None."""
        self._set_sub_phase(DaySubPhase.VOTE)
        voters = self.state.get_alive_players()
        targets = [NO_TARGET] + [p.id for p in voters]
        results = await self.resolver.resolve_cohort(
            voters, prompts.VOTE_EXILE, targets, waiting_prompt=prompts.PLAYERS_VOTING,
        )

        votes = self._tally(results, prompts.VOTED_FOR, prompts.ABSTAINED, "exile")
        if not votes:
            self.log(prompts.NO_ONE_EXILED)
            return None

        exiled_id = get_majority(votes, TieBreak.NONE)
        if not exiled_id:
            self.log(prompts.VOTING_TIED_EXILE)
            return None

        exiled = self.state.get_player(exiled_id)
        self.log(prompts.EXILED.format(id=exiled_id))
        self._kill(exiled, DeathReason.EXILED)
        return exiled

    async def _sheriff_election(self) -> None:
        """Day-1 election: run, campaign, vote. A tie elects no one."""
        state = self.state
        self._set_sub_phase(DaySubPhase.SHERIFF_RUN)
        candidates = []
        for player in state.get_alive_players():
            result = await self.resolver.resolve(player, prompts.RUN_SHERIFF, [NO_TARGET, player.id])
            if result and result.action == player.id:
                player.sheriff_candidate = True
                candidates.append(player)
                self.log(prompts.RUNNING_FOR_SHERIFF.format(id=player.id), player_id=player.id)

        if not candidates:
            self.log(prompts.NO_ONE_RAN)
            return

        self._set_sub_phase(DaySubPhase.SHERIFF_SPEECH)
        for candidate in candidates:
            result = await self.resolver.resolve(candidate, prompts.SHERIFF_SPEECH, [], is_speech=True)
            if result and result.speech:
                self.log(
                    prompts.SHERIFF_SPEECH_SPOKEN.format(id=candidate.id, speech=result.speech),
                    EventCategory.SPEECH,
                    player_id=candidate.id,
                )
                await self._pause(self.config.speech_delay)

        self._set_sub_phase(DaySubPhase.SHERIFF_VOTE)
        voters = [p for p in state.get_alive_players() if not p.sheriff_candidate]
        targets = [NO_TARGET] + [c.id for c in candidates]
        results = await self.resolver.resolve_cohort(
            voters, prompts.VOTE_SHERIFF, targets, waiting_prompt=prompts.SHERIFF_VOTING,
        )

        votes = self._tally(results, prompts.VOTED_FOR_SHERIFF, None, "sheriff")
        if not votes:
            self.log(prompts.NO_SHERIFF_ELECTED)
            return

        sheriff_id = get_majority(votes, TieBreak.NONE)
        if sheriff_id:
            state.get_player(sheriff_id).is_sheriff = True
            self.log(prompts.ELECTED_SHERIFF.format(id=sheriff_id))
        else:
            self.log(prompts.VOTING_TIED_SHERIFF)
        if self.logger:
            self.logger.log(EventType.SHERIFF_ELECTION, {
                "candidates": [c.id for c in candidates],
                "votes": votes,
                "sheriff": sheriff_id or None,
            })

    def _tally(self, results, voted_template: str, abstain_template: Optional[str], kind: str) -> List[int]:
        """Log each ballot in seat order and return the non-zero votes."""
        votes = []
        for voter, result in results:
            if result.action:
                votes.append(result.action)
                self.log(voted_template.format(id=voter.id, target=result.action), player_id=voter.id)
            elif abstain_template:
                self.log(abstain_template.format(id=voter.id), player_id=voter.id)
            if self.logger:
                self.logger.log(
                    EventType.VOTE_CAST,
                    {"vote": kind, "target": result.action or None},
                    player_id=voter.id,
                )
        return votes

    async def _handle_hunter(self, hunter: Player) -> None:
        """Posthumous shot. A Hunter who is shot gets to shoot in turn."""
        self._set_sub_phase(DaySubPhase.HUNTER_SHOOT)
        targets = [NO_TARGET] + self.state.get_alive_ids()
        result = await self.resolver.resolve(hunter, prompts.HUNTER_SHOOT, targets, posthumous=True)
        if not (result and result.action):
            self.log(prompts.HUNTER_NO_SHOOT.format(id=hunter.id), player_id=hunter.id)
            return

        target = self.state.get_player(result.action)
        self.log(prompts.HUNTER_SHOT.format(id=hunter.id, target=target.id), EventCategory.ACTION, player_id=hunter.id)
        self._kill(target, DeathReason.SHOT)
        if target.role == Role.HUNTER and not self._check_win():
            await self._handle_hunter(target)

    def _kill(self, player: Player, reason: DeathReason) -> None:
        self.state.kill_player(player, reason)
        if self.logger:
            self.logger.log_elimination(player.id, player.role.value, reason.value)
        self._notify()

    def _check_win(self) -> bool:
        """Evaluate the win condition; on a win, end the match."""
        state = self.state
        if state.is_over:
            return True

        over, team, reason = check_win_condition(state.players)
        if not over:
            return False

        state.phase = Phase.GAME_OVER
        state.sub_phase = None
        state.winner = team
        state.win_reason = reason
        state.clear_prompt()
        template = prompts.VILLAGERS_WIN if team == Team.VILLAGERS else prompts.WEREWOLVES_WIN
        self.log(template.format(reason=reason))
        return True

    def log(
        self,
        message: str,
        category: EventCategory = EventCategory.SYSTEM,
        private_for: Optional[PrivacyScope] = None,
        player_id: Optional[int] = None,
    ) -> None:
        """Append to history and push a snapshot."""
        self.state.log(message, category, private_for=private_for, player_id=player_id)
        self._notify()

    def _set_sub_phase(self, sub_phase: SubPhase) -> None:
        self.state.sub_phase = sub_phase
        if self.logger:
            self.logger.log_phase_change(self.state.phase.value, sub_phase.value, day=self.state.day)
        self._notify()

    async def _pause(self, seconds: float) -> None:
        if seconds:
            await asyncio.sleep(seconds)

    def _notify(self) -> None:
        """Mirror new history into the logger, then publish a snapshot."""
        if self.logger:
            history = self.state.history
            for entry in history[self._mirrored:]:
                self.logger.log(
                    _CATEGORY_EVENTS[entry.category],
                    {"message": entry.message},
                    player_id=entry.player_id,
                    is_private=entry.private_for is not None,
                    day=entry.day,
                )
            self._mirrored = len(history)
        self.channel.publish(self.state)

    def _build_result(self, duration: float) -> GameResult:
        state = self.state
        player_stats: Dict[int, Dict] = {}
        for p in state.players:
            team = get_team_for_role(p.role)
            player_stats[p.id] = {
                "name": p.name,
                "role": p.role.value,
                "team": team.value,
                "won": team == state.winner,
                "actor_kind": p.actor_kind.value,
                "survived": p.is_alive,
                "death_reason": p.death_reason.value if p.death_reason else None,
                "death_day": p.death_day,
                "is_sheriff": p.is_sheriff,
            }
        return GameResult(
            game_id=state.game_id,
            winner=state.winner.value if state.winner else None,
            win_reason=state.win_reason,
            num_days=state.day,
            duration_seconds=duration,
            player_stats=player_stats,
            metadata={"history_entries": len(state.history)},
        )
