"""Configuration for Werewolf matches."""

import inspect
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from wolfden.core.exceptions import ConfigurationError
from wolfden.game.types import ActorKind, AIConfig, Player, Role

DEFAULT_ROLES = {
    "Werewolf": 4,
    "Villager": 4,
    "Seer": 1,
    "Witch": 1,
    "Hunter": 1,
    "Guard": 1,
}

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "openai/gpt-4o-mini"
DEFAULT_API_KEY_ENV = "OPENROUTER_API_KEY"


@dataclass
class WerewolfConfig:
    """Configuration for a Werewolf match.

    Attributes:
        roles: Role deck as ``{role name: count}``; its total is the roster size
        sheriff_election: Whether day 1 runs the sheriff election
        prompt_delay: Pause after publishing a player's prompt (seconds)
        announce_delay: Pause after the dawn announcement (seconds)
        speech_delay: Pause after each logged speech (seconds)
        ai_temperature: Sampling temperature for AI players
        ai_max_tokens: Completion budget for AI players (None = provider default)
        ai_max_attempts: Requests per AI decision before falling back
        ai_request_timeout: Per-request timeout in seconds (None = no timeout)
        seed: Seed for role shuffling and random tie-breaks
    """
    roles: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_ROLES))
    sheriff_election: bool = True
    prompt_delay: float = 0.5
    announce_delay: float = 2.0
    speech_delay: float = 1.0
    ai_temperature: float = 0.7
    ai_max_tokens: Optional[int] = None
    ai_max_attempts: int = 1
    ai_request_timeout: Optional[float] = None
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate and normalise values."""
        counts: Dict[Role, int] = {}
        for name, count in self.roles.items():
            role = _parse_role(name)
            if not isinstance(count, int) or count < 0:
                raise ConfigurationError(f"Invalid count for {role.value}: {count!r}")
            counts[role] = counts.get(role, 0) + count
        self.role_counts = counts

        if counts.get(Role.WEREWOLF, 0) < 1:
            raise ConfigurationError("Need at least 1 werewolf")
        if counts.get(Role.VILLAGER, 0) < 1:
            raise ConfigurationError("Need at least 1 villager")
        if not any(counts.get(role, 0) for role in Role if role.is_god):
            raise ConfigurationError("Need at least 1 of Seer, Witch, Hunter or Guard")

        for name in ("prompt_delay", "announce_delay", "speech_delay"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} cannot be negative")
        if self.ai_max_attempts < 1:
            raise ConfigurationError("ai_max_attempts must be at least 1")

    @property
    def n_players(self) -> int:
        return sum(self.role_counts.values())

    def deck(self) -> List[Role]:
        """Unshuffled role deck."""
        deck: List[Role] = []
        for role in Role:
            deck.extend([role] * self.role_counts.get(role, 0))
        return deck

    def without_delays(self) -> "WerewolfConfig":
        """Copy with all pacing delays set to zero."""
        params = self.to_dict()
        params.update(prompt_delay=0.0, announce_delay=0.0, speech_delay=0.0)
        return WerewolfConfig(**params)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roles": {role.value: count for role, count in self.role_counts.items()},
            "sheriff_election": self.sheriff_election,
            "prompt_delay": self.prompt_delay,
            "announce_delay": self.announce_delay,
            "speech_delay": self.speech_delay,
            "ai_temperature": self.ai_temperature,
            "ai_max_tokens": self.ai_max_tokens,
            "ai_max_attempts": self.ai_max_attempts,
            "ai_request_timeout": self.ai_request_timeout,
            "seed": self.seed,
        }


def _parse_role(name: Any) -> Role:
    if isinstance(name, Role):
        return name
    for role in Role:
        if str(name).lower() in (role.value.lower(), role.name.lower()):
            return role
    raise ConfigurationError(f"Unknown role: {name!r}")


def build_roster(entries: List[Dict[str, Any]], agent_defaults: Optional[Dict[str, Any]] = None) -> List[Player]:
    """Turn roster entries into seated players.

    Each entry may set ``id`` (defaults to its 1-based seat), ``name``,
    ``type`` (Human/AI), ``base_url``, ``model``, ``api_key`` and
    ``api_key_env``. Missing AI settings fall back to ``agent_defaults``.

    Args:
        entries: Roster entries, in seating order
        agent_defaults: Shared AI endpoint settings

    Returns:
        List of players without roles
    """
    defaults = agent_defaults or {}
    players = []
    for seat, entry in enumerate(entries, start=1):
        kind_name = str(entry.get("type", "AI"))
        try:
            kind = ActorKind[kind_name.upper()]
        except KeyError:
            raise ConfigurationError(f"Unknown player type: {kind_name!r}", details={"seat": seat})

        ai_config = None
        if kind == ActorKind.AI:
            key_env = entry.get("api_key_env", defaults.get("api_key_env", DEFAULT_API_KEY_ENV))
            api_key = entry.get("api_key") or defaults.get("api_key") or os.getenv(key_env, "")
            ai_config = AIConfig(
                base_url=entry.get("base_url", defaults.get("base_url", DEFAULT_BASE_URL)),
                api_key=api_key,
                model=entry.get("model", defaults.get("model", DEFAULT_MODEL)),
            )

        players.append(Player(
            id=int(entry.get("id", seat)),
            name=str(entry.get("name", f"Player {seat}")),
            actor_kind=kind,
            ai_config=ai_config,
        ))
    return players


def load_config(
    path: Path,
    overrides: Optional[Dict[str, Any]] = None,
) -> Tuple[WerewolfConfig, List[Player], Dict[str, Any]]:
    """Load a match configuration from YAML.

    Args:
        path: YAML file with ``game``, ``agent``, ``players`` and ``logging`` sections
        overrides: Values replacing keys of the ``game`` section

    Returns:
        Tuple of (config, roster, logging_settings)
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    with open(path) as f:
        yaml_config = yaml.safe_load(f) or {}

    game_config = dict(yaml_config.get("game") or {})
    if overrides:
        game_config.update(overrides)

    valid_params = inspect.signature(WerewolfConfig).parameters.keys()
    unknown = sorted(k for k in game_config if k not in valid_params)
    if unknown:
        raise ConfigurationError(f"Unknown game settings: {', '.join(unknown)}")

    config = WerewolfConfig(**game_config)
    agent_settings = yaml_config.get("agent") or {}
    entries = yaml_config.get("players")
    if not entries:
        entries = [{"name": f"Player {i}"} for i in range(1, config.n_players + 1)]
    roster = build_roster(entries, agent_settings)
    logging_settings = yaml_config.get("logging") or {}

    return config, roster, logging_settings
