"""Tests for the structured game logger."""

import json

from wolfden.logging.formats import EventType, LogEntry
from wolfden.logging.game_logger import GameLogger


class TestGameLogger:
    """JSONL output and private filtering."""

    def test_jsonl_round_trip(self, tmp_path):
        logger = GameLogger(game_id="log_test", output_dir=tmp_path)
        logger.log_day_start(2, "Night")
        logger.log_phase_change("Night", "Witch")
        logger.log_elimination(5, "Villager", "Poisoned")

        lines = (tmp_path / "log_test.jsonl").read_text().splitlines()
        entries = [LogEntry.from_dict(json.loads(line)) for line in lines]

        assert [e.event_type for e in entries] == [
            EventType.DAY_START, EventType.PHASE_CHANGE, EventType.PLAYER_ELIMINATED,
        ]
        assert (entries[0].day, entries[0].phase, entries[0].sub_phase) == (2, "Night", None)
        assert (entries[2].day, entries[2].phase, entries[2].sub_phase) == (2, "Night", "Witch")
        assert entries[2].player_id == 5

    def test_explicit_day_overrides_clock(self):
        logger = GameLogger(game_id="log_test")
        logger.log_phase_change("Day", "Speech", day=3)
        logger.log(EventType.SPEECH, {"message": "late mirror"}, day=2)

        assert [e.day for e in logger.entries] == [3, 2]
        assert logger.get_stats()["current_day"] == 3

    def test_game_end_closes_clock(self):
        logger = GameLogger(game_id="log_test")
        logger.log_phase_change("Day", "Vote", day=4)
        logger.log_game_end("Villagers", "All werewolves are dead.", {})

        end = logger.entries[-1]
        assert (end.day, end.phase, end.sub_phase) == (4, "GameOver", None)

    def test_entry_format(self):
        logger = GameLogger(game_id="log_test")
        logger.log_phase_change("Night", "Seer", day=1)
        logger.log(EventType.SEER_CHECK, {"target": 2}, player_id=9)

        assert logger.entries[-1].format() == "[Day 1 Night/Seer] SEER_CHECK #9"

    def test_private_entries_filtered(self, tmp_path):
        logger = GameLogger(game_id="log_test")
        logger.log(EventType.ANNOUNCEMENT, {"message": "public"})
        logger.log(EventType.PLAYER_ACTION, {"message": "secret"}, is_private=True)

        path = tmp_path / "export.json"
        logger.export_to_json(path)

        exported = json.loads(path.read_text())
        assert [e["data"]["message"] for e in exported] == ["public"]
        assert logger.get_stats()["private_entries"] == 1

    def test_private_entries_dropped_when_disabled(self):
        logger = GameLogger(game_id="log_test", log_private=False)
        logger.log_llm_call(player_id=1, model="m", prompt_tokens=1, completion_tokens=1, response="raw")
        logger.log_error("LLMError", "boom")

        assert [e.event_type for e in logger.entries] == [EventType.ERROR]

    def test_disabled_logger_records_nothing(self):
        logger = GameLogger(enabled=False)
        logger.log_game_start({})
        assert logger.entries == []
