"""Game logger for recording match events."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional
from datetime import datetime

from wolfden.logging.formats import LogEntry, EventType
from wolfden.core.utils import generate_game_id


class GameLogger:
    """Structured recorder for match events.

    Keeps every entry in memory and, when an output directory is given,
    appends it to ``<output_dir>/<game_id>.jsonl``. Entries flagged private
    (werewolf chatter, role actions, AI reasoning) can be left out of
    exports.
    """

    def __init__(
        self,
        game_id: Optional[str] = None,
        output_dir: Optional[Path] = None,
        log_private: bool = True,
        enabled: bool = True,
    ):
        """Initialize game logger.

        Args:
            game_id: Unique game identifier
            output_dir: Directory to save logs (None for memory-only)
            log_private: Whether to log private information (default: True)
            enabled: Whether logging is enabled
        """
        self.game_id = game_id or generate_game_id("werewolf")
        self.output_dir = Path(output_dir) if output_dir else None
        self.log_private = log_private
        self.enabled = enabled

        self.entries: List[LogEntry] = []
        self.current_day = 0
        self.current_phase: Optional[str] = None
        self.current_sub_phase: Optional[str] = None

        if self.output_dir:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self.output_dir / f"{self.game_id}.jsonl"
        else:
            self.log_file = None

    def log(
        self,
        event_type: EventType,
        data: Dict[str, Any],
        player_id: Optional[int] = None,
        is_private: bool = False,
        day: Optional[int] = None,
    ) -> None:
        """Log an event.

        Args:
            event_type: Type of event
            data: Event data
            player_id: Player associated with event (if any)
            is_private: Whether this is private information
            day: Match day the event belongs to (default: the current day)
        """
        if not self.enabled:
            return

        if is_private and not self.log_private:
            return

        entry = LogEntry(
            timestamp=datetime.now(),
            event_type=event_type,
            game_id=self.game_id,
            day=self.current_day if day is None else day,
            phase=self.current_phase,
            sub_phase=self.current_sub_phase,
            data=data,
            player_id=player_id,
            is_private=is_private,
        )

        self.entries.append(entry)

        if self.log_file:
            self._write_to_file(entry)

    def _write_to_file(self, entry: LogEntry) -> None:
        """Append entry to the JSONL file."""
        try:
            with open(self.log_file, 'a') as f:
                f.write(entry.to_json() + '\n')
        except OSError as e:
            print(f"Warning: Failed to write log entry: {e}")

    def log_game_start(self, config: Dict[str, Any]) -> None:
        """Log game start."""
        self.log(EventType.GAME_START, {"config": config})

    def log_game_end(self, winner: Any, reason: str, stats: Dict[str, Any]) -> None:
        """Log game end."""
        self.current_phase = "GameOver"
        self.current_sub_phase = None
        self.log(
            EventType.GAME_END,
            {"winner": winner, "reason": reason, "stats": stats}
        )

    def log_phase_change(self, phase: str, sub_phase: Optional[str], day: Optional[int] = None) -> None:
        """Move the match clock to a new phase or sub-phase and log it.

        Every later entry carries this phase until the next change.
        """
        if day is not None:
            self.current_day = day
        self.current_phase = phase
        self.current_sub_phase = sub_phase
        self.log(EventType.PHASE_CHANGE, {})

    def log_day_start(self, day: int, phase: Optional[str] = None) -> None:
        """Log the start of a night/day cycle, which opens in ``phase``."""
        self.current_day = day
        self.current_phase = phase
        self.current_sub_phase = None
        self.log(EventType.DAY_START, {})

    def log_elimination(self, player_id: int, role: str, reason: str) -> None:
        """Log a player's death."""
        self.log(
            EventType.PLAYER_ELIMINATED,
            {"role": role, "reason": reason},
            player_id=player_id
        )

    def log_llm_call(
        self,
        player_id: int,
        model: str,
        prompt_tokens: int,
        completion_tokens: int,
        response: Optional[str] = None
    ) -> None:
        """Log LLM API call."""
        self.log(
            EventType.LLM_CALL,
            {
                "model": model,
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "response": response if self.log_private else None
            },
            player_id=player_id,
            is_private=response is not None
        )

    def log_error(
        self,
        error_type: str,
        message: str,
        details: Optional[Dict] = None,
        player_id: Optional[int] = None,
    ) -> None:
        """Log error."""
        self.log(
            EventType.AGENT_ERROR if player_id is not None else EventType.ERROR,
            {
                "error_type": error_type,
                "message": message,
                "details": details or {}
            },
            player_id=player_id
        )

    def get_entries(
        self,
        event_type: Optional[EventType] = None,
        player_id: Optional[int] = None,
        include_private: bool = False
    ) -> List[LogEntry]:
        """Get log entries with optional filtering.

        Args:
            event_type: Filter by event type
            player_id: Filter by player ID
            include_private: Include private entries

        Returns:
            Filtered list of log entries
        """
        entries = self.entries

        if event_type:
            entries = [e for e in entries if e.event_type == event_type]

        if player_id is not None:
            entries = [e for e in entries if e.player_id == player_id]

        if not include_private:
            entries = [e for e in entries if not e.is_private]

        return entries

    def export_to_json(self, filepath: Path, include_private: bool = False) -> None:
        """Export logs to JSON file."""
        entries = self.get_entries(include_private=include_private)
        data = [entry.to_dict() for entry in entries]

        with open(filepath, 'w') as f:
            json.dump(data, f, indent=2)

    def get_stats(self) -> Dict[str, Any]:
        """Get logging statistics."""
        counts: Dict[str, int] = {}
        for entry in self.entries:
            counts[entry.event_type.name] = counts.get(entry.event_type.name, 0) + 1
        return {
            "game_id": self.game_id,
            "total_entries": len(self.entries),
            "current_day": self.current_day,
            "private_entries": sum(1 for e in self.entries if e.is_private),
            "event_type_counts": counts,
        }
