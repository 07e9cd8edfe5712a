"""Match log records."""

from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from datetime import datetime

from wolfden.core.utils import safe_json_dumps


class EventType(Enum):
    """Kinds of match events."""

    # Match lifecycle
    GAME_START = auto()
    GAME_END = auto()
    DAY_START = auto()
    PHASE_CHANGE = auto()
    ROLE_ASSIGNMENT = auto()

    # Mirrored history, one per EventCategory
    ANNOUNCEMENT = auto()
    SPEECH = auto()
    PLAYER_ACTION = auto()
    AGENT_THOUGHT = auto()

    # Resolved outcomes
    SEER_CHECK = auto()
    SHERIFF_ELECTION = auto()
    VOTE_CAST = auto()
    PLAYER_ELIMINATED = auto()

    # Agent and transport
    LLM_CALL = auto()
    AGENT_ERROR = auto()
    ERROR = auto()


@dataclass
class LogEntry:
    """One record of the match log.

    ``day``, ``phase`` and ``sub_phase`` place the event on the match clock;
    phase values are the string values of the game's Phase and sub-phase
    enums (``"Night"``, ``"Witch"``, ...).
    """

    timestamp: datetime
    event_type: EventType
    game_id: str
    day: int
    phase: Optional[str] = None
    sub_phase: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    player_id: Optional[int] = None
    is_private: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.name,
            "game_id": self.game_id,
            "day": self.day,
            "phase": self.phase,
            "sub_phase": self.sub_phase,
            "data": self.data,
            "player_id": self.player_id,
            "is_private": self.is_private,
        }

    def to_json(self) -> str:
        return safe_json_dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        """Rebuild an entry read back from a JSONL line."""
        data = data.copy()
        data["timestamp"] = datetime.fromisoformat(data["timestamp"])
        data["event_type"] = EventType[data["event_type"]]
        return cls(**data)

    def format(self) -> str:
        """One-line rendering, e.g. ``[Day 2 Night/Witch] PLAYER_ACTION #10``."""
        clock = f"Day {self.day}"
        if self.phase:
            clock += f" {self.phase}" + (f"/{self.sub_phase}" if self.sub_phase else "")
        who = f" #{self.player_id}" if self.player_id is not None else ""
        return f"[{clock}] {self.event_type.name}{who}"
