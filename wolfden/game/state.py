"""Game state for Werewolf."""

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from wolfden.core.exceptions import ConfigurationError, InvalidStateError
from wolfden.core.utils import generate_game_id
from wolfden.game.config import WerewolfConfig
from wolfden.game.history import HistoryEntry, HistoryLog, PrivacyScope
from wolfden.game.rules import assign_roles, validate_roster
from wolfden.game.types import (
    DeathReason,
    EventCategory,
    NightActions,
    Phase,
    Player,
    PotionUsage,
    Role,
    SubPhase,
    Team,
)


@dataclass
class GameState:
    """Complete state of a Werewolf match.

    The engine is the only writer. Hosts receive deep copies through the
    snapshot channel.

    Attributes:
        players: Seats in stable order
        phase: Night, Day or GameOver
        sub_phase: Current step within the phase
        day: Day counter, starts at 1 and grows once per night/day cycle
        history: Append-only, privacy-scoped log
        current_player_id: Whose turn is on display (None for cohort batches)
        waiting_for_human: True while the engine is suspended on a human
        action_prompt: Instruction for the acting player
        valid_targets: Legal target ids for the acting player
        is_speech: Whether the acting player is expected to speak
        night_actions: Scratch record for the current night
        died_tonight: Ids that died during the last night
        winner: Winning team once the match is over
        win_reason: Why the match ended
        god_view: Host preference for elevated history display
    """
    players: List[Player] = field(default_factory=list)
    game_id: str = field(default_factory=lambda: generate_game_id("werewolf"))
    phase: Phase = Phase.NIGHT
    sub_phase: Optional[SubPhase] = None
    day: int = 1
    history: HistoryLog = field(default_factory=HistoryLog)

    current_player_id: Optional[int] = None
    waiting_for_human: bool = False
    action_prompt: str = ""
    valid_targets: List[int] = field(default_factory=list)
    is_speech: bool = False

    night_actions: NightActions = field(default_factory=NightActions)
    died_tonight: List[int] = field(default_factory=list)

    winner: Optional[Team] = None
    win_reason: str = ""
    god_view: bool = False

    @property
    def is_over(self) -> bool:
        return self.phase == Phase.GAME_OVER

    def get_player(self, player_id: int) -> Optional[Player]:
        """Find a player by seat id."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_alive_players(self) -> List[Player]:
        """Living players in seat order."""
        return [p for p in self.players if p.is_alive]

    def get_alive_ids(self) -> List[int]:
        return [p.id for p in self.players if p.is_alive]

    def get_alive_by_role(self, role: Role) -> List[Player]:
        return [p for p in self.players if p.is_alive and p.role == role]

    def find_alive_by_role(self, role: Role) -> Optional[Player]:
        """First living player holding ``role``."""
        alive = self.get_alive_by_role(role)
        return alive[0] if alive else None

    def log(
        self,
        message: str,
        category: EventCategory = EventCategory.SYSTEM,
        private_for: Optional[PrivacyScope] = None,
        player_id: Optional[int] = None,
    ) -> HistoryEntry:
        """Append a history entry stamped with the current day."""
        return self.history.append(HistoryEntry(
            day=self.day,
            category=category,
            message=message,
            player_id=player_id,
            private_for=private_for,
        ))

    def kill_player(self, player: Player, reason: DeathReason) -> None:
        """Mark a player dead. Death reason and day are written once."""
        if not player.is_alive:
            raise InvalidStateError(f"Player {player.id} is already dead")
        player.is_alive = False
        if player.death_reason is None:
            player.death_reason = reason
            player.death_day = self.day

    def visible_history(self, viewer: Optional[Player] = None, elevated: Optional[bool] = None) -> List[HistoryEntry]:
        """History slice a viewer may read (god_view decides when elevated is None)."""
        if elevated is None:
            elevated = self.god_view
        return self.history.visible_to(viewer, elevated)

    def clear_prompt(self) -> None:
        """Drop the transient acting-player contract."""
        self.current_player_id = None
        self.waiting_for_human = False
        self.action_prompt = ""
        self.valid_targets = []
        self.is_speech = False

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe snapshot."""
        return {
            "game_id": self.game_id,
            "phase": self.phase.value,
            "sub_phase": self.sub_phase.value if self.sub_phase else None,
            "day": self.day,
            "players": [p.to_dict() for p in self.players],
            "history": self.history.to_list(),
            "current_player_id": self.current_player_id,
            "waiting_for_human": self.waiting_for_human,
            "action_prompt": self.action_prompt,
            "valid_targets": list(self.valid_targets),
            "is_speech": self.is_speech,
            "night_actions": self.night_actions.to_dict(),
            "died_tonight": list(self.died_tonight),
            "winner": self.winner.value if self.winner else None,
            "win_reason": self.win_reason,
            "god_view": self.god_view,
        }

    def __str__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"game_id={self.game_id}, "
            f"phase={self.phase.value}, "
            f"day={self.day}, "
            f"alive={len(self.get_alive_players())}/{len(self.players)})"
        )


def new_game(
    roster: List[Player],
    config: Optional[WerewolfConfig] = None,
    roles: Optional[List[Role]] = None,
    rng: Optional[random.Random] = None,
    game_id: Optional[str] = None,
) -> GameState:
    """Seat a roster and deal roles.

    Args:
        roster: Players in seating order (roles are overwritten)
        config: Match configuration (defaults to the 12-player deck)
        roles: Fixed role per seat instead of a shuffled deck
        rng: Random source for the shuffle
        game_id: Optional game ID

    Returns:
        Fresh state at night 1
    """
    config = config or WerewolfConfig()
    validate_roster(roster, config)

    if roles is None:
        roles = assign_roles(config, rng)
    elif sorted(r.value for r in roles) != sorted(r.value for r in config.deck()):
        raise ConfigurationError("Fixed role assignment does not match the configured deck")

    for player, role in zip(roster, roles):
        player.role = role
        player.is_alive = True
        player.is_sheriff = False
        player.sheriff_candidate = False
        player.death_reason = None
        player.death_day = None
        player.potions = PotionUsage() if role == Role.WITCH else None

    state = GameState(players=list(roster))
    if game_id:
        state.game_id = game_id
    return state
