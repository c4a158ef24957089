"""
Game Events
===========

Semantic notifications emitted by the session for audio and effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class GameEvent(Enum):
    DIFFICULTY_CHANGE = "difficulty_change"
    START_GAME = "start_game"
    PAUSE_GAME = "pause_game"
    RESUME_GAME = "resume_game"
    OPEN_QUIT_CONFIRMATION = "open_quit_confirmation"
    RETURN_TO_GAME = "return_to_game"
    QUIT_GAME = "quit_game"
    DROP_CARD = "drop_card"
    MAKE_MATCH = "make_match"
    EXPLODE_CARD = "explode_card"
    FORFEIT_GAME = "forfeit_game"
    GAME_OVER = "game_over"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    SOFT_DROP = "soft_drop"
    HARD_DROP = "hard_drop"


@dataclass
class EventRecord:
    """An emitted event with optional details (cell, card, chain, ...)."""
    event: GameEvent
    data: Dict[str, Any] = field(default_factory=dict)


class EventQueue:
    """FIFO of events waiting to be drained by the presentation layer."""

    def __init__(self):
        self._records: List[EventRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def push(self, event: GameEvent, **data: Any) -> EventRecord:
        record = EventRecord(event=event, data=data)
        self._records.append(record)
        return record

    def drain(self) -> List[EventRecord]:
        """Return every queued record and empty the queue."""
        records, self._records = self._records, []
        return records
