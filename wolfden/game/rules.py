"""Game rules and logic for Werewolf."""

import random
from collections import Counter
from typing import Iterable, List, Optional, Tuple

from wolfden.core.exceptions import ConfigurationError
from wolfden.core.types import NO_TARGET, TieBreak
from wolfden.game.config import WerewolfConfig
from wolfden.game.types import Player, Role, Team


def assign_roles(config: WerewolfConfig, rng: Optional[random.Random] = None) -> List[Role]:
    """Shuffle the configured deck.

    Args:
        config: Game configuration
        rng: Random source (module-level random if None)

    Returns:
        List of roles, one per seat
    """
    roles = config.deck()
    (rng or random).shuffle(roles)
    return roles


def get_team_for_role(role: Role) -> Team:
    """Get the team for a given role."""
    if role == Role.WEREWOLF:
        return Team.WEREWOLVES
    return Team.VILLAGERS


def validate_roster(players: List[Player], config: WerewolfConfig) -> None:
    """Check seat ids and roster size against the deck.

    Raises:
        ConfigurationError: If the roster cannot be seated
    """
    if len(players) != config.n_players:
        raise ConfigurationError(
            f"Roster has {len(players)} players but the deck has {config.n_players} roles"
        )
    ids = [p.id for p in players]
    if len(set(ids)) != len(ids):
        raise ConfigurationError("Player ids must be unique", details={"ids": ids})
    if any(pid <= NO_TARGET for pid in ids):
        raise ConfigurationError("Player ids must be positive (0 means no target)", details={"ids": ids})


def get_majority(
    votes: Iterable[int],
    tie_break: TieBreak = TieBreak.NONE,
    rng: Optional[random.Random] = None,
) -> int:
    """Plurality winner of a vote.

    Args:
        votes: Target ids, one per ballot
        tie_break: RANDOM picks uniformly among tied ids, NONE returns 0
        rng: Random source for RANDOM tie-breaks

    Returns:
        Winning id, or 0 when there is no winner
    """
    counts = Counter(votes)
    if not counts:
        return NO_TARGET

    max_votes = max(counts.values())
    leaders = [target for target, count in counts.items() if count == max_votes]

    if len(leaders) == 1:
        return leaders[0]
    if tie_break == TieBreak.RANDOM:
        return (rng or random).choice(leaders)
    return NO_TARGET


def check_win_condition(players: List[Player]) -> Tuple[bool, Optional[Team], str]:
    """Check if a team has won.

    Args:
        players: Full roster

    Returns:
        Tuple of (game_over, winning_team, reason)
    """
    alive = [p for p in players if p.is_alive]
    wolves = [p for p in alive if p.role == Role.WEREWOLF]
    villagers = [p for p in alive if p.role == Role.VILLAGER]
    gods = [p for p in alive if p.role is not None and p.role.is_god]

    if not wolves:
        return True, Team.VILLAGERS, "All werewolves eliminated"

    if not villagers:
        return True, Team.WEREWOLVES, "All villagers eliminated"

    if not gods:
        return True, Team.WEREWOLVES, "All special roles eliminated"

    return False, None, ""
