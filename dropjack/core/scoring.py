"""
Scoring System
==============

Awards points for removed cards and cascade waves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from dropjack.core.config_loader import GameConfig, get_config


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    is_cascade_bonus: bool = False
    chain_multiplier: int = 1

    def __repr__(self) -> str:
        if self.is_cascade_bonus:
            return f"ScoreEvent(cascade_bonus={self.points}, chain={self.chain_multiplier})"
        return f"ScoreEvent(card={self.points})"


class ScoreTracker:
    """
    Tracks the session score.

    Score only ever grows during a session:
    - each removed card earns the flat card score
    - each follow-up cascade wave earns the flat cascade bonus once
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._card_score = config.scoring.card_score
        self._cascade_bonus = config.scoring.cascade_bonus
        self._score: int = 0
        self._cards_removed: int = 0
        self._cascades: int = 0
        self._history: List[ScoreEvent] = []

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def cards_removed(self) -> int:
        """Total number of cards cleared."""
        return self._cards_removed

    @property
    def cascades(self) -> int:
        """Number of follow-up waves triggered."""
        return self._cascades

    @property
    def history(self) -> List[ScoreEvent]:
        """All score events since the last reset."""
        return list(self._history)

    def apply_card_removed(self) -> ScoreEvent:
        """Award the base score for one cleared card."""
        event = ScoreEvent(points=self._card_score)
        self._score += event.points
        self._cards_removed += 1
        self._history.append(event)
        return event

    def apply_cascade(self, chain_multiplier: int) -> ScoreEvent:
        """
        Award the flat cascade bonus for a new wave.

        Args:
            chain_multiplier: Multiplier of the wave being started.
        """
        event = ScoreEvent(
            points=self._cascade_bonus,
            is_cascade_bonus=True,
            chain_multiplier=chain_multiplier
        )
        self._score += event.points
        self._cascades += 1
        self._history.append(event)
        return event

    def reset(self) -> None:
        """Reset score to zero."""
        self._score = 0
        self._cards_removed = 0
        self._cascades = 0
        self._history = []
