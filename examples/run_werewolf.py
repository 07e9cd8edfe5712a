"""Example: Run a Werewolf match with twelve LLM players."""

import asyncio
import os
from pathlib import Path

from wolfden.agents.llm.llm_agent import LLMAgent
from wolfden.core.utils import format_duration
from wolfden.game import load_config, new_game, WerewolfEngine
from wolfden.logging.game_logger import GameLogger


async def main():
    """Run an all-AI Werewolf match."""

    # Check for API key
    if not os.getenv("OPENROUTER_API_KEY"):
        print("❌ Error: OPENROUTER_API_KEY not set")
        print("Set it with: export OPENROUTER_API_KEY='your-key-here'")
        return

    print("🐺 Werewolf")
    print("=" * 70)

    config_path = Path(__file__).parent.parent / "configs" / "werewolf.yaml"
    config, roster, logging_settings = load_config(config_path)
    print(f"✅ Loaded config from werewolf.yaml")

    print(f"\n⚙️  Configuration:")
    print(f"  • Players: {config.n_players}")
    print(f"  • Roles: {', '.join(f'{r.value} x{n}' for r, n in config.role_counts.items())}")
    print(f"  • Sheriff election: {config.sheriff_election}")

    output_dir = Path(logging_settings.get("output_dir", "experiments/werewolf"))
    state = new_game(roster, config)
    logger = GameLogger(game_id=state.game_id, output_dir=output_dir, log_private=True)
    print(f"\n📁 Logs will be saved to: {output_dir}/ (including private info)")

    print(f"\n👥 Roles:")
    for player in state.players:
        role_emoji = "🐺" if player.role.value == "Werewolf" else "👤"
        print(f"  {role_emoji} Player {player.label}: {player.role.value} ({player.ai_config.model})")

    # Print every history entry with god view as it is appended
    printed = 0

    def on_update(snapshot):
        nonlocal printed
        entries = snapshot.history.visible_to(None, elevated=True)
        for entry in entries[printed:]:
            print(f"  {entry.format()}")
        printed = len(entries)

    engine = WerewolfEngine(
        state,
        config,
        agent=LLMAgent.from_config(config),
        logger=logger,
        on_update=on_update,
    )

    print(f"\n▶️  Game will run automatically...")
    print("-" * 70)
    result = await engine.start()

    print("\n" + "=" * 70)
    print("🏁 GAME OVER!")
    print("=" * 70)
    winner_emoji = "🐺" if result.winner == "Werewolves" else "👥"
    print(f"\n🏆 Winner: {winner_emoji} {result.winner.upper()}")
    print(f"📝 Win Condition: {result.win_reason}")

    survivors = [s for s in result.player_stats.values() if s["survived"]]
    agent_stats = engine.agent.get_stats()
    print(f"\n📊 Final Stats:")
    print(f"  • Days played: {result.num_days}")
    print(f"  • Players remaining: {len(survivors)}")
    print(f"  • AI decisions: {agent_stats['decisions']} ({agent_stats['fallbacks']} fallbacks)")
    print(f"  • Duration: {format_duration(result.duration_seconds)}")

    print(f"\n📁 Game log: {logger.log_file}")
    print(f"  ({len(logger.entries)} events logged)")

    print("\n✅ Example completed!")


if __name__ == "__main__":
    asyncio.run(main())
