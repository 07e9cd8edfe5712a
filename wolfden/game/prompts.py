"""Prompts, instructions and narration for Werewolf.

This module holds everything players read: the per-role descriptions, the
instruction shown for each decision, the system prompt sent to AI players,
and the history lines the moderator writes.
"""

from typing import List

from wolfden.core.types import NO_TARGET
from wolfden.game.history import format_history
from wolfden.game.types import Player, Role

ROLE_DESCRIPTIONS = {
    Role.VILLAGER: "You are a Villager. You have no special abilities. Find the werewolves and vote them out.",
    Role.WEREWOLF: (
        "You are a Werewolf. You wake up at night to kill a player. Try to blend in during the day. "
        "Your fellow werewolves are: {wolf_list}"
    ),
    Role.SEER: "You are the Seer. Every night you can check one player to see if they are a Werewolf or Good.",
    Role.WITCH: (
        "You are the Witch. You have one poison and one antidote. You will be told who was killed at night "
        "and can choose to save them, or you can poison someone."
    ),
    Role.HUNTER: "You are the Hunter. If you are killed or exiled, you can shoot one player to take them down with you.",
    Role.GUARD: (
        "You are the Guard. Every night you can protect one player from being killed. "
        "You cannot protect the same player two nights in a row."
    ),
}

# Instructions
GUARD_PROTECT = "Choose a player to protect tonight. You cannot protect the same player as last night."
WOLF_DISCUSS = "Discuss with your fellow werewolves who to kill tonight. Your words are only heard by werewolves."
WOLF_DISCUSSING = "The werewolves are discussing..."
WOLF_KILL = "Choose a player to kill tonight."
WOLF_VOTING = "The werewolves are choosing a victim..."
WITCH_SAVE = "Player {target} was killed tonight. Use your antidote to save them? Choose {target} to save, 0 to skip."
WITCH_POISON = "Use your poison on a player tonight? Choose a player, or 0 to skip."
SEER_CHECK = "Choose a player to check tonight."
DAY_SPEECH = "It is your turn to speak. Share your thoughts with the village."
VOTE_EXILE = "Vote for a player to exile, or 0 to abstain."
PLAYERS_VOTING = "Players are voting..."
LAST_WORDS = "You have been exiled. Say your last words."
HUNTER_SHOOT = "You have died. Choose a player to shoot, or 0 to hold your fire."
RUN_SHERIFF = "Do you want to run for sheriff? Choose your own id to run, 0 to decline."
SHERIFF_SPEECH = "Give your campaign speech for sheriff."
VOTE_SHERIFF = "Vote for a sheriff candidate, or 0 to abstain."
SHERIFF_VOTING = "Players are voting for sheriff..."
DECIDE_NOW = "Make your decision now. Output ONLY JSON."

# Narration
GAME_STARTED = "The game has started. Night falls."
GUARD_PROTECTED = "Guard protected player {target}."
WEREWOLF_SPEECH = "Werewolf {id}: {speech}"
WEREWOLF_KILL_INTENT = "Werewolf {id} wants to kill player {target}."
WEREWOLVES_KILL = "The werewolves chose to kill player {target}."
WITCH_SAVED = "Witch saved player {target}."
WITCH_POISONED = "Witch poisoned player {target}."
SEER_CHECKED = "Seer checked player {target}: {result}."
SEER_RESULT_WOLF = "Werewolf"
SEER_RESULT_GOOD = "Good"
PEACEFUL_NIGHT = "Last night was peaceful. No one died."
DIED_TONIGHT = "Last night, player(s) {targets} died."
SPEECH = "Player {id}: {speech}"
VOTED_FOR = "Player {id} voted for player {target}."
ABSTAINED = "Player {id} abstained."
EXILED = "Player {id} was exiled by vote."
VOTING_TIED_EXILE = "The vote was tied. No one was exiled."
NO_ONE_EXILED = "No votes were cast. No one was exiled."
LAST_WORDS_SPOKEN = "Last words of player {id}: {speech}"
HUNTER_SHOT = "Hunter {id} shot player {target}!"
HUNTER_NO_SHOOT = "Hunter {id} chose not to shoot."
RUNNING_FOR_SHERIFF = "Player {id} is running for sheriff."
SHERIFF_SPEECH_SPOKEN = "Sheriff candidate {id}: {speech}"
VOTED_FOR_SHERIFF = "Player {id} voted for player {target} as sheriff."
ELECTED_SHERIFF = "Player {id} was elected sheriff."
VOTING_TIED_SHERIFF = "The sheriff vote was tied. No sheriff was elected."
NO_SHERIFF_ELECTED = "No votes were cast. No sheriff was elected."
NO_ONE_RAN = "No one ran for sheriff."
VILLAGERS_WIN = "Game over! The villagers win: {reason}."
WEREWOLVES_WIN = "Game over! The werewolves win: {reason}."
THOUGHT = "Player {id} thinks: {thought}"

# Fallback speech for AI players that could not produce a decision
UNCONFIGURED_AI = "(This AI player is not configured and stays silent.)"
AI_ERROR = "I encountered an error."


def describe_role(player: Player, players: List[Player]) -> str:
    """Role description for a player, with teammate info for werewolves.

    Args:
        player: Player whose role is described
        players: Full roster (dead players included)
    """
    if player.role != Role.WEREWOLF:
        return ROLE_DESCRIPTIONS[player.role]

    wolves = ", ".join(p.label for p in players if p.role == Role.WEREWOLF)
    text = ROLE_DESCRIPTIONS[Role.WEREWOLF].format(wolf_list=wolves)
    return text + f"\n[SECRET] Your Werewolf teammates are: {wolves}. Do not attack them!"


def format_targets(valid_targets: List[int]) -> str:
    if not valid_targets:
        return "None"
    return ", ".join(str(t) for t in valid_targets)


def build_ai_prompt(player: Player, state, instruction: str, valid_targets: List[int], is_speech: bool) -> str:
    """System prompt for an AI player's decision.

    Args:
        player: Acting player
        state: Current GameState
        instruction: What the player must decide
        valid_targets: Legal target ids (0 is always allowed)
        is_speech: Whether a spoken statement is expected

    Returns:
        Prompt text
    """
    visible = state.history.visible_to(player, elevated=False)
    history_text = format_history(visible) or "(nothing yet)"
    alive = ", ".join(p.label for p in state.get_alive_players())
    sub_phase = state.sub_phase.value if state.sub_phase else "-"

    speech_field = "What you say aloud to the group" if is_speech else ""
    action_field = "An integer from the valid targets list" if valid_targets else str(NO_TARGET)

    return f"""You are playing a {len(state.players)}-player game of Werewolf.
Your Player ID: {player.id}
Your Name: {player.name}
Your Role: {player.role.value}

Role Description:
{describe_role(player, state.players)}

Game State:
Phase: {state.phase.value} - {sub_phase} (Day {state.day})
Alive Players: {alive}

History (What you know):
{history_text}

Instruction:
{instruction}
Valid targets (Player IDs): {format_targets(valid_targets)} (Use 0 to skip/abstain/no target).

CRITICAL INSTRUCTION:
You MUST respond with ONLY a valid JSON object. Do not include markdown formatting.
The JSON object must have exactly these keys:
{{
  "thought": "Your internal reasoning for your action",
  "speech": "{speech_field}",
  "action": {action_field}
}}"""
