"""Tests for the Werewolf phase controller."""

import asyncio

import pytest

from conftest import GUARD, HUNTER, SEER, WITCH, ScriptedAgent
from wolfden.agents.baselines.random_agent import RandomAgent
from wolfden.core.exceptions import HumanInputError, InvalidStateError
from wolfden.core.types import ActionResult
from wolfden.game.engine import WerewolfEngine
from wolfden.game.types import DaySubPhase, DeathReason, NightSubPhase, Phase, Team
from wolfden.logging.formats import EventType
from wolfden.logging.game_logger import GameLogger

WOLVES = [1, 2, 3, 4]


def wolves_kill(target):
    return {(NightSubPhase.WEREWOLF, wid): target for wid in WOLVES}


def everyone_votes(state, target, sub_phase=DaySubPhase.VOTE):
    return {(sub_phase, p.id): target for p in state.players}


def start_day(state):
    state.phase = Phase.DAY
    state.died_tonight = []


def messages(state):
    return [e.message for e in state.history]


class TestNight:
    """Night sub-phases and their resolution."""

    def test_kill_lands_when_guard_protects_someone_else(self, state, fast_config):
        """Test that an unprotected, unhealed target dies."""
        agent = ScriptedAgent({(NightSubPhase.GUARD, GUARD): 3, **wolves_kill(5)})
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())

        victim = state.get_player(5)
        assert state.died_tonight == [5]
        assert victim.is_alive is False
        assert victim.death_reason == DeathReason.KILLED
        assert victim.death_day == 1
        assert state.phase == Phase.DAY

    def test_guard_protection_saves_target(self, state, fast_config):
        agent = ScriptedAgent({(NightSubPhase.GUARD, GUARD): 5, **wolves_kill(5)})
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())

        assert state.died_tonight == []
        assert state.get_player(5).is_alive

    def test_witch_heal_saves_target(self, state, fast_config):
        agent = ScriptedAgent({
            (NightSubPhase.GUARD, GUARD): 7,
            **wolves_kill(5),
            (NightSubPhase.WITCH, WITCH): [5, 0],
        })
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())

        assert state.died_tonight == []
        assert state.get_player(WITCH).potions.heal_used is True
        assert state.night_actions.witch_save is True

    def test_guard_and_heal_together_still_save(self, state, fast_config):
        """Test that a target both protected and healed survives."""
        agent = ScriptedAgent({
            (NightSubPhase.GUARD, GUARD): 5,
            **wolves_kill(5),
            (NightSubPhase.WITCH, WITCH): [5, 0],
        })
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())

        assert state.died_tonight == []
        assert state.get_player(5).is_alive

    def test_poison_ignores_guard(self, state, fast_config):
        """Test that the poison target dies even when protected."""
        agent = ScriptedAgent({
            (NightSubPhase.GUARD, GUARD): 7,
            (NightSubPhase.WITCH, WITCH): 7,
        })
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())

        poisoned = state.get_player(7)
        assert state.died_tonight == [7]
        assert poisoned.death_reason == DeathReason.POISONED
        # No kill target, so only the poison was offered
        assert len(agent.calls_for(NightSubPhase.WITCH)) == 1

    def test_kill_and_poison_on_same_night(self, state, fast_config):
        agent = ScriptedAgent({**wolves_kill(5), (NightSubPhase.WITCH, WITCH): [0, 6]})
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())

        assert state.died_tonight == [5, 6]

    def test_poison_never_offered_on_kill_target(self, state, fast_config):
        agent = ScriptedAgent(wolves_kill(5))
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())

        heal_call, poison_call = agent.calls_for(NightSubPhase.WITCH)
        assert heal_call[2] == [0, 5]
        assert 5 not in poison_call[2]

    def test_guard_cannot_repeat_target(self, state, fast_config):
        agent = ScriptedAgent({(NightSubPhase.GUARD, GUARD): [3, 0]})
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())
        asyncio.run(engine.run_night())

        first, second = agent.calls_for(NightSubPhase.GUARD)
        assert 3 in first[2]
        assert 3 not in second[2]
        assert state.night_actions.last_protected == 3

    def test_heal_is_single_use(self, state, fast_config):
        agent = ScriptedAgent({
            (NightSubPhase.WEREWOLF, 1): [5, 6],
            (NightSubPhase.WEREWOLF, 2): [5, 6],
            (NightSubPhase.WITCH, WITCH): [5, 0, 0],
        })
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())
        asyncio.run(engine.run_night())

        # Night 1: heal + poison offered, night 2: poison only
        witch_calls = agent.calls_for(NightSubPhase.WITCH)
        assert len(witch_calls) == 3
        assert state.died_tonight == [6]

    def test_werewolf_tie_is_broken_randomly(self, state, fast_config):
        agent = ScriptedAgent({
            (NightSubPhase.WEREWOLF, 1): 5,
            (NightSubPhase.WEREWOLF, 2): 5,
            (NightSubPhase.WEREWOLF, 3): 6,
            (NightSubPhase.WEREWOLF, 4): 6,
        })
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())

        assert state.night_actions.werewolf_kill_target in (5, 6)
        assert len(state.died_tonight) == 1

    def test_werewolf_targets_exclude_wolves(self, state, fast_config):
        agent = ScriptedAgent()
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())

        for _, _, targets in agent.calls_for(NightSubPhase.WEREWOLF):
            assert targets == [0, 5, 6, 7, 8, 9, 10, 11, 12]

    def test_seer_result_is_private(self, state, fast_config):
        agent = ScriptedAgent({(NightSubPhase.SEER, SEER): 2})
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())

        seer = state.get_player(SEER)
        villager = state.get_player(5)
        seer_view = [e.message for e in state.history.visible_to(seer)]
        villager_view = [e.message for e in state.history.visible_to(villager)]
        assert "Seer checked player 2: Werewolf." in seer_view
        assert "Seer checked player 2: Werewolf." not in villager_view
        assert state.night_actions.seer_check == 2

    def test_werewolf_discussion_is_wolf_scoped(self, state, fast_config):
        agent = ScriptedAgent()
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())

        wolf_view = [e.message for e in state.history.visible_to(state.get_player(1))]
        village_view = [e.message for e in state.history.visible_to(state.get_player(5))]
        assert "Werewolf 1: speech from 1" in wolf_view
        assert "Werewolf 1: speech from 1" not in village_view


class TestDay:
    """Day sub-phases: announcement, election, vote, Hunter."""

    def test_majority_vote_exiles(self, state, fast_config):
        start_day(state)
        agent = ScriptedAgent(everyone_votes(state, 1))
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_day())

        exiled = state.get_player(1)
        assert exiled.death_reason == DeathReason.EXILED
        assert "Player 1 was exiled by vote." in messages(state)
        assert "Last words of player 1: speech from 1" in messages(state)
        assert state.day == 2
        assert state.phase == Phase.NIGHT

    def test_tied_vote_exiles_no_one(self, state, fast_config):
        start_day(state)
        script = {(DaySubPhase.VOTE, pid): 2 for pid in range(1, 7)}
        script.update({(DaySubPhase.VOTE, pid): 1 for pid in range(7, 13)})
        engine = WerewolfEngine(state, fast_config, agent=ScriptedAgent(script))

        asyncio.run(engine.run_day())

        assert all(p.is_alive for p in state.players)
        assert "The vote was tied. No one was exiled." in messages(state)

    def test_votes_logged_in_seat_order(self, state, fast_config):
        start_day(state)
        engine = WerewolfEngine(state, fast_config, agent=ScriptedAgent(everyone_votes(state, 0)))

        asyncio.run(engine.run_day())

        abstentions = [m for m in messages(state) if m.endswith("abstained.")]
        assert abstentions == [f"Player {pid} abstained." for pid in range(1, 13)]
        assert "No votes were cast. No one was exiled." in messages(state)

    def test_exiled_hunter_shoots_after_last_words(self, state, fast_config):
        start_day(state)
        script = everyone_votes(state, HUNTER)
        script[(DaySubPhase.HUNTER_SHOOT, HUNTER)] = 1
        agent = ScriptedAgent(script)
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_day())

        shot = state.get_player(1)
        assert shot.death_reason == DeathReason.SHOT
        log = messages(state)
        assert log.index("Last words of player 11: speech from 11") < log.index("Hunter 11 shot player 1!")

    def test_hunter_killed_at_night_shoots(self, state, fast_config):
        agent = ScriptedAgent({**wolves_kill(HUNTER), (DaySubPhase.HUNTER_SHOOT, HUNTER): 2})
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())
        asyncio.run(engine.run_day())

        assert state.get_player(2).death_reason == DeathReason.SHOT

    def test_poisoned_hunter_does_not_shoot(self, state, fast_config):
        agent = ScriptedAgent({(NightSubPhase.WITCH, WITCH): HUNTER})
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())
        asyncio.run(engine.run_day())

        assert state.get_player(HUNTER).death_reason == DeathReason.POISONED
        assert agent.calls_for(DaySubPhase.HUNTER_SHOOT) == []

    def test_win_ends_day_immediately(self, state, fast_config):
        """Test that exiling the last werewolf ends the match before last words."""
        start_day(state)
        for wid in (1, 2, 3):
            state.kill_player(state.get_player(wid), DeathReason.EXILED)
        agent = ScriptedAgent(everyone_votes(state, 4))
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_day())

        assert state.phase == Phase.GAME_OVER
        assert state.winner == Team.VILLAGERS
        assert state.win_reason == "All werewolves eliminated"
        assert agent.calls_for(DaySubPhase.LAST_WORDS) == []
        assert state.day == 1

    def test_werewolves_win_when_special_roles_gone(self, state, fast_config):
        state.phase = Phase.DAY
        for pid in (SEER, WITCH, HUNTER):
            state.kill_player(state.get_player(pid), DeathReason.EXILED)
        state.kill_player(state.get_player(GUARD), DeathReason.KILLED)
        state.died_tonight = [GUARD]
        engine = WerewolfEngine(state, fast_config, agent=ScriptedAgent())

        asyncio.run(engine.run_day())

        assert state.winner == Team.WEREWOLVES
        assert state.win_reason == "All special roles eliminated"
        assert "Game over! The werewolves win: All special roles eliminated." in messages(state)

    def test_sheriff_election(self, state, fast_config):
        start_day(state)
        fast_config.sheriff_election = True
        script = everyone_votes(state, 5, DaySubPhase.SHERIFF_VOTE)
        script[(DaySubPhase.SHERIFF_RUN, 5)] = 5
        script[(DaySubPhase.SHERIFF_RUN, 6)] = 6
        agent = ScriptedAgent(script)
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_day())

        assert state.get_player(5).is_sheriff is True
        assert state.get_player(6).sheriff_candidate is True
        voters = [c[1] for c in agent.calls_for(DaySubPhase.SHERIFF_VOTE)]
        assert 5 not in voters and 6 not in voters
        assert agent.calls_for(DaySubPhase.SHERIFF_RUN, 3)[0][2] == [0, 3]

    def test_sheriff_tie_elects_no_one(self, state, fast_config):
        start_day(state)
        fast_config.sheriff_election = True
        script = {(DaySubPhase.SHERIFF_RUN, 5): 5, (DaySubPhase.SHERIFF_RUN, 6): 6}
        script[(DaySubPhase.SHERIFF_VOTE, 1)] = 5
        script[(DaySubPhase.SHERIFF_VOTE, 2)] = 6
        engine = WerewolfEngine(state, fast_config, agent=ScriptedAgent(script))

        asyncio.run(engine.run_day())

        assert not any(p.is_sheriff for p in state.players)
        assert "The sheriff vote was tied. No sheriff was elected." in messages(state)

    def test_no_sheriff_election_after_day_one(self, state, fast_config):
        start_day(state)
        state.day = 2
        fast_config.sheriff_election = True
        agent = ScriptedAgent()
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_day())

        assert agent.calls_for(DaySubPhase.SHERIFF_RUN) == []


class TestHumanPlayer:
    """The engine suspending on a human seat."""

    def test_human_guard_submits_through_rendezvous(self, human_state, fast_config):
        engine = WerewolfEngine(human_state, fast_config, agent=ScriptedAgent(wolves_kill(5)))

        async def play():
            night = asyncio.create_task(engine.run_night())
            for _ in range(100):
                if human_state.waiting_for_human:
                    break
                await asyncio.sleep(0)

            assert human_state.current_player_id == GUARD
            assert human_state.sub_phase == NightSubPhase.GUARD
            with pytest.raises(HumanInputError):
                engine.submit_human_action(99)
            assert human_state.waiting_for_human is True

            engine.submit_human_action(5)
            with pytest.raises(HumanInputError):
                engine.submit_human_action(5)
            await night

        asyncio.run(play())

        assert human_state.night_actions.guard_protect == 5
        assert human_state.died_tonight == []
        assert human_state.waiting_for_human is False

    def test_submit_without_pending_decision_raises(self, state, fast_config):
        engine = WerewolfEngine(state, fast_config, agent=ScriptedAgent())

        with pytest.raises(HumanInputError):
            engine.submit_human_action(0)


class TestMatch:
    """Whole matches and the ambient outputs."""

    def test_random_match_reaches_game_over(self, state, fast_config):
        engine = WerewolfEngine(state, fast_config, agent=RandomAgent(seed=3))

        result = asyncio.run(engine.start())

        assert state.phase == Phase.GAME_OVER
        assert result.winner in (Team.VILLAGERS.value, Team.WEREWOLVES.value)
        assert result.win_reason == state.win_reason
        assert set(result.player_stats) == set(range(1, 13))
        stats = result.player_stats
        assert {pid for pid, s in stats.items() if s["team"] == "Werewolves"} == {1, 2, 3, 4}
        assert all(s["won"] == (s["team"] == result.winner) for s in stats.values())
        assert state.history[0].message == "The game has started. Night falls."

    def test_start_twice_raises(self, state, fast_config):
        engine = WerewolfEngine(state, fast_config, agent=RandomAgent(seed=1))
        asyncio.run(engine.start())

        with pytest.raises(InvalidStateError):
            asyncio.run(engine.start())

    def test_snapshots_are_copies(self, state, fast_config):
        snapshots = []
        engine = WerewolfEngine(state, fast_config, agent=ScriptedAgent(wolves_kill(5)), on_update=snapshots.append)

        asyncio.run(engine.run_night())

        assert snapshots
        assert snapshots[-1] is not state
        assert snapshots[-1].died_tonight == [5]
        snapshots[-1].players[0].is_alive = False
        assert state.players[0].is_alive is True

    def test_thoughts_hidden_without_god_view(self, state, fast_config):
        agent = ScriptedAgent({(NightSubPhase.SEER, SEER): ActionResult(action=2, thought="check the quiet one")})
        engine = WerewolfEngine(state, fast_config, agent=agent)

        asyncio.run(engine.run_night())

        thought = "Player 9 thinks: check the quiet one"
        assert thought not in [e.message for e in state.visible_history(state.get_player(SEER))]
        assert thought in [e.message for e in state.visible_history(elevated=True)]

    def test_logger_records_match(self, state, fast_config, tmp_path):
        logger = GameLogger(game_id=state.game_id, output_dir=tmp_path)
        engine = WerewolfEngine(state, fast_config, agent=RandomAgent(seed=5), logger=logger)

        asyncio.run(engine.start())

        assert (tmp_path / f"{state.game_id}.jsonl").exists()
        assert logger.get_entries(EventType.GAME_START)
        assert logger.get_entries(EventType.GAME_END)[0].data["winner"] == state.winner.value
        eliminations = logger.get_entries(EventType.PLAYER_ELIMINATED)
        assert len(eliminations) == len([p for p in state.players if not p.is_alive])
        public = logger.get_entries(include_private=False)
        assert all(not e.is_private for e in public)
        assert any(e.data.get("message") == "The game has started. Night falls." for e in public)

    def test_log_entries_carry_match_clock(self, state, fast_config):
        logger = GameLogger(game_id=state.game_id)
        agent = ScriptedAgent({(NightSubPhase.SEER, SEER): 2, **wolves_kill(5)})
        engine = WerewolfEngine(state, fast_config, agent=agent, logger=logger)

        asyncio.run(engine.run_night())

        check = logger.get_entries(EventType.SEER_CHECK, include_private=True)[0]
        assert (check.day, check.phase, check.sub_phase) == (1, "Night", "Seer")
        assert check.data == {"target": 2, "is_werewolf": True}
        death = logger.get_entries(EventType.PLAYER_ELIMINATED)[0]
        assert (death.player_id, death.day, death.phase) == (5, 1, "Night")
