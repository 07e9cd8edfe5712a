"""Structured event logging for wolfden matches."""

from wolfden.logging.game_logger import GameLogger
from wolfden.logging.formats import LogEntry, EventType

__all__ = [
    "GameLogger",
    "LogEntry",
    "EventType",
]
