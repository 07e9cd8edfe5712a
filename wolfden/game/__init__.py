"""Werewolf game for wolfden."""

from wolfden.game.config import WerewolfConfig, build_roster, load_config
from wolfden.game.engine import WerewolfEngine
from wolfden.game.history import HistoryEntry, HistoryLog
from wolfden.game.resolver import ActionResolver, HumanRendezvous
from wolfden.game.rules import check_win_condition, get_majority
from wolfden.game.state import GameState, new_game
from wolfden.game.types import (
    ActorKind,
    AIConfig,
    DaySubPhase,
    DeathReason,
    EventCategory,
    NightSubPhase,
    Phase,
    Player,
    Role,
    Team,
)

__all__ = [
    "WerewolfConfig",
    "build_roster",
    "load_config",
    "WerewolfEngine",
    "HistoryEntry",
    "HistoryLog",
    "ActionResolver",
    "HumanRendezvous",
    "check_win_condition",
    "get_majority",
    "GameState",
    "new_game",
    "ActorKind",
    "AIConfig",
    "DaySubPhase",
    "DeathReason",
    "EventCategory",
    "NightSubPhase",
    "Phase",
    "Player",
    "Role",
    "Team",
]
