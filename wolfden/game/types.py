"""Type definitions for the Werewolf game."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from wolfden.core.exceptions import InvalidActionError


class Role(str, Enum):
    """Player roles in Werewolf."""
    VILLAGER = "Villager"
    WEREWOLF = "Werewolf"
    SEER = "Seer"
    WITCH = "Witch"
    HUNTER = "Hunter"
    GUARD = "Guard"

    @property
    def is_god(self) -> bool:
        """True for the powered village roles."""
        return self in GOD_ROLES


GOD_ROLES = frozenset({Role.SEER, Role.WITCH, Role.HUNTER, Role.GUARD})


class Team(str, Enum):
    """Winning sides."""
    VILLAGERS = "Villagers"
    WEREWOLVES = "Werewolves"


class ActorKind(str, Enum):
    """Who makes a player's decisions."""
    HUMAN = "Human"
    AI = "AI"


class Phase(str, Enum):
    """Top-level game phases. GAME_OVER is terminal."""
    NIGHT = "Night"
    DAY = "Day"
    GAME_OVER = "GameOver"


class NightSubPhase(str, Enum):
    """Night steps, in the order they run."""
    GUARD = "Guard"
    WEREWOLF_DISCUSS = "WerewolfDiscuss"
    WEREWOLF = "Werewolf"
    WITCH = "Witch"
    SEER = "Seer"


class DaySubPhase(str, Enum):
    """Day steps. Sheriff steps run on day 1 only."""
    ANNOUNCE = "Announce"
    SHERIFF_RUN = "SheriffRun"
    SHERIFF_SPEECH = "SheriffSpeech"
    SHERIFF_VOTE = "SheriffVote"
    SPEECH = "Speech"
    VOTE = "Vote"
    LAST_WORDS = "LastWords"
    HUNTER_SHOOT = "HunterShoot"


SubPhase = Union[NightSubPhase, DaySubPhase]


class DeathReason(str, Enum):
    """How a player died."""
    EXILED = "Exiled"
    KILLED = "Killed"
    POISONED = "Poisoned"
    SHOT = "Shot"


class EventCategory(str, Enum):
    """History entry categories."""
    SYSTEM = "System"
    SPEECH = "Speech"
    ACTION = "Action"
    THOUGHT = "Thought"


@dataclass
class AIConfig:
    """Connection settings for an AI-driven player."""
    base_url: str
    api_key: str
    model: str

    def to_dict(self) -> Dict[str, Any]:
        # api_key is never serialized
        return {"base_url": self.base_url, "model": self.model, "has_api_key": bool(self.api_key)}


@dataclass
class PotionUsage:
    """The Witch's two single-use potions."""
    heal_used: bool = False
    poison_used: bool = False

    def use_heal(self) -> None:
        if self.heal_used:
            raise InvalidActionError("Heal potion already used")
        self.heal_used = True

    def use_poison(self) -> None:
        if self.poison_used:
            raise InvalidActionError("Poison potion already used")
        self.poison_used = True


@dataclass
class Player:
    """A seat at the table.

    Attributes:
        id: Seat number, unique and >= 1 (0 is the no-target sentinel)
        name: Display name
        actor_kind: Human or AI
        ai_config: Endpoint settings for AI players
        role: Assigned at match start
        is_alive: False once dead, never revived
        is_sheriff: Elected on day 1
        sheriff_candidate: Ran for sheriff on day 1
        death_reason: Set once on death
        death_day: Day counter at death
        potions: Witch only
    """
    id: int
    name: str
    actor_kind: ActorKind = ActorKind.AI
    ai_config: Optional[AIConfig] = None
    role: Optional[Role] = None
    is_alive: bool = True
    is_sheriff: bool = False
    sheriff_candidate: bool = False
    death_reason: Optional[DeathReason] = None
    death_day: Optional[int] = None
    potions: Optional[PotionUsage] = None

    @property
    def is_human(self) -> bool:
        return self.actor_kind == ActorKind.HUMAN

    @property
    def label(self) -> str:
        """Short ``id(name)`` form used in prompts."""
        return f"{self.id}({self.name})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "actor_kind": self.actor_kind.value,
            "ai_config": self.ai_config.to_dict() if self.ai_config else None,
            "role": self.role.value if self.role else None,
            "is_alive": self.is_alive,
            "is_sheriff": self.is_sheriff,
            "sheriff_candidate": self.sheriff_candidate,
            "death_reason": self.death_reason.value if self.death_reason else None,
            "death_day": self.death_day,
            "potions": (
                {"heal_used": self.potions.heal_used, "poison_used": self.potions.poison_used}
                if self.potions else None
            ),
        }


@dataclass
class NightActions:
    """Scratch record for the current night.

    ``last_protected`` carries the previous night's guard target forward;
    everything else is reset at dusk.
    """
    last_protected: Optional[int] = None
    guard_protect: Optional[int] = None
    werewolf_kill_target: Optional[int] = None
    witch_save: bool = False
    witch_poison: Optional[int] = None
    seer_check: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)
