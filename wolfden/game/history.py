"""Append-only, privacy-scoped match history."""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Union

from wolfden.game.types import EventCategory, Player, Role

PrivacyScope = Union[Role, int]


@dataclass(frozen=True)
class HistoryEntry:
    """One immutable line of match history.

    Attributes:
        day: Day counter when the entry was written
        category: System, Speech, Action or Thought
        message: Human-readable text
        player_id: Player the entry is about (if any)
        private_for: Role or player id allowed to read it (None = public)
    """
    day: int
    category: EventCategory
    message: str
    player_id: Optional[int] = None
    private_for: Optional[PrivacyScope] = None

    def is_visible_to(self, viewer: Optional[Player], elevated: bool = False) -> bool:
        """Decide visibility at read time.

        Args:
            viewer: Observing player (None = anonymous spectator)
            elevated: God view, sees everything
        """
        if elevated:
            return True
        if self.category == EventCategory.THOUGHT:
            return False
        if self.private_for is None:
            return True
        if viewer is None:
            return False
        if isinstance(self.private_for, Role):
            return viewer.role == self.private_for
        return viewer.id == self.private_for

    def format(self) -> str:
        return f"[Day {self.day}] {self.category.value}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        scope = self.private_for
        return {
            "day": self.day,
            "category": self.category.value,
            "message": self.message,
            "player_id": self.player_id,
            "private_for": scope.value if isinstance(scope, Role) else scope,
        }


class HistoryLog:
    """Append-only sequence of history entries."""

    def __init__(self):
        self._entries: List[HistoryEntry] = []

    def append(self, entry: HistoryEntry) -> HistoryEntry:
        self._entries.append(entry)
        return entry

    def visible_to(self, viewer: Optional[Player], elevated: bool = False) -> List[HistoryEntry]:
        """Entries the viewer is allowed to read, in order."""
        return [e for e in self._entries if e.is_visible_to(viewer, elevated)]

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index):
        return self._entries[index]

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._entries]


def format_history(entries: List[HistoryEntry]) -> str:
    """Render entries one per line for prompts and terminals."""
    return "\n".join(entry.format() for entry in entries)
