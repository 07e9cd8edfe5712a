#!/usr/bin/env python3
"""Command-line host for wolfden Werewolf matches."""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from wolfden.agents.baselines.random_agent import RandomAgent
from wolfden.agents.llm.llm_agent import LLMAgent
from wolfden.core.exceptions import HumanInputError, WolfdenError
from wolfden.core.utils import format_duration, seed_everything
from wolfden.game import prompts
from wolfden.game.config import load_config
from wolfden.game.engine import WerewolfEngine
from wolfden.game.state import new_game
from wolfden.game.types import ActorKind, Role
from wolfden.logging.game_logger import GameLogger

DEFAULT_CONFIG = Path(__file__).parent.parent / "configs" / "werewolf.yaml"


class TerminalHost:
    """Prints the table as it evolves and reads the human's decisions."""

    def __init__(self, engine: WerewolfEngine, human_id=None, god_view=False):
        self.engine = engine
        self.human_id = human_id
        self.god_view = god_view
        self.latest = None
        self.printed = 0
        self.updated = asyncio.Event()
        engine.subscribe(self._on_update)

    def _on_update(self, snapshot) -> None:
        self.latest = snapshot
        self.updated.set()

    async def run(self):
        """Run the match; returns its GameResult."""
        engine_task = asyncio.create_task(self.engine.start())
        engine_task.add_done_callback(lambda _: self.updated.set())

        while not engine_task.done():
            await self.updated.wait()
            self.updated.clear()
            if self.latest is None:
                continue
            self._print_history(self.latest)
            if self.latest.waiting_for_human and self.engine.resolver.rendezvous.pending:
                await self._ask_human(self.latest)

        if self.latest is not None:
            self._print_history(self.latest)
        return engine_task.result()

    def _print_history(self, snapshot) -> None:
        viewer = snapshot.get_player(self.human_id) if self.human_id else None
        visible = snapshot.history.visible_to(viewer, elevated=self.god_view)
        for entry in visible[self.printed:]:
            print(entry.format())
        self.printed = len(visible)

    async def _ask_human(self, snapshot) -> None:
        loop = asyncio.get_running_loop()
        player = snapshot.get_player(snapshot.current_player_id)
        print()
        print(f"🎭 {player.label} [{player.role.value}] - {snapshot.action_prompt}")
        if player.role == Role.WEREWOLF:
            print(f"   {prompts.describe_role(player, snapshot.players).splitlines()[-1]}")

        while True:
            speech = None
            if snapshot.is_speech:
                speech = await loop.run_in_executor(None, input, "   Say: ")
            action = 0
            if snapshot.valid_targets:
                raw = await loop.run_in_executor(
                    None, input, f"   Target ({prompts.format_targets(snapshot.valid_targets)}, 0 to skip): "
                )
                try:
                    action = int(raw.strip() or 0)
                except ValueError:
                    print(f"   ⚠️  Not a number: {raw!r}")
                    continue
            try:
                self.engine.submit_human_action(action, speech)
                return
            except HumanInputError as e:
                print(f"   ⚠️  {e}")


def cmd_play(args):
    """Play a single match."""
    overrides = {}
    if args.seed is not None:
        overrides["seed"] = args.seed
    try:
        config, roster, logging_settings = load_config(Path(args.config), overrides=overrides)
    except WolfdenError as e:
        print(f"Error loading config: {e}")
        return 1

    if args.fast:
        config = config.without_delays()
    if config.seed is not None:
        seed_everything(config.seed)

    human_id = None
    if args.human is not None:
        seat = next((p for p in roster if p.id == args.human), None)
        if seat is None:
            print(f"Error: no seat with id {args.human}")
            return 1
        seat.actor_kind = ActorKind.HUMAN
        seat.ai_config = None
    humans = [p for p in roster if p.actor_kind == ActorKind.HUMAN]
    if len(humans) > 1:
        print("Error: at most one human seat is supported")
        return 1
    if humans:
        human_id = humans[0].id

    if args.agent == "llm":
        agent = LLMAgent.from_config(config)
        unconfigured = [p.id for p in roster if p.ai_config is not None and not p.ai_config.api_key]
        if unconfigured:
            print(f"⚠️  No API key for seats {unconfigured}; they will stay silent")
    else:
        agent = RandomAgent(seed=config.seed)

    output_dir = args.log_dir or logging_settings.get("output_dir")
    state = new_game(roster, config)
    logger = GameLogger(
        game_id=state.game_id,
        output_dir=Path(output_dir) if output_dir else None,
        log_private=logging_settings.get("log_private", True),
    )
    state.god_view = args.god_view
    engine = WerewolfEngine(state, config, agent=agent, logger=logger)

    print("🐺 Werewolf")
    print("=" * 70)
    print(f"  • Players: {config.n_players}")
    print(f"  • Agent: {agent.name}")
    if human_id:
        print(f"  • You are player {human_id}: {state.get_player(human_id).role.value}")
    if logger.log_file:
        print(f"  • Logs: {logger.log_file}")
    print("-" * 70)

    host = TerminalHost(engine, human_id=human_id, god_view=args.god_view)
    try:
        result = asyncio.run(host.run())
    except KeyboardInterrupt:
        print("\n\nGame interrupted by user")
        return 130

    print("\n" + "=" * 70)
    print("🏁 GAME OVER")
    print("=" * 70)
    print(f"Winner: {result.winner}")
    print(f"Reason: {result.win_reason}")
    print(f"Days: {result.num_days}")
    print(f"Duration: {format_duration(result.duration_seconds)}")
    print("\nRoles:")
    for pid, stats in result.player_stats.items():
        status = "alive" if stats["survived"] else f"{stats['death_reason']} on day {stats['death_day']}"
        sheriff = " ⭐" if stats["is_sheriff"] else ""
        won = " 🏆" if stats["won"] else ""
        print(f"  {pid:>2}. {stats['name']:<10} {stats['role']:<9} {status}{sheriff}{won}")
    return 0


def cmd_roles(args):
    """Describe every role."""
    for role, text in prompts.ROLE_DESCRIPTIONS.items():
        print(f"{role.value:<9} {text.split(' Your fellow')[0]}")
    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="wolfden - Werewolf with humans and LLM players",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Watch twelve LLM players
  python scripts/wolfden_cli.py play

  # Take seat 3 yourself
  python scripts/wolfden_cli.py play --human 3

  # Offline run with random players, no pauses, every secret shown
  python scripts/wolfden_cli.py play --agent random --fast --god-view --seed 7
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_play = subparsers.add_parser("play", help="Play a single match")
    parser_play.add_argument("--config", default=str(DEFAULT_CONFIG),
                             help="YAML match configuration (default: configs/werewolf.yaml)")
    parser_play.add_argument("--human", type=int,
                             help="Seat id played from this terminal")
    parser_play.add_argument("--agent", choices=["llm", "random"], default="llm",
                             help="Who decides for AI seats (default: llm)")
    parser_play.add_argument("--seed", type=int,
                             help="Seed for role shuffling and tie-breaks")
    parser_play.add_argument("--god-view", action="store_true",
                             help="Show private history (roles, night actions, thoughts)")
    parser_play.add_argument("--fast", action="store_true",
                             help="Disable pacing delays")
    parser_play.add_argument("--log-dir",
                             help="Directory for the JSONL event log")
    parser_play.set_defaults(func=cmd_play)

    parser_roles = subparsers.add_parser("roles", help="Describe the roles")
    parser_roles.set_defaults(func=cmd_roles)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
