"""
Cascade Scheduler
=================

Stages combinations for staggered removal, settles the board when a wave
finishes, and looks for follow-up combinations (chains).

States per removal episode:

    IDLE -> SCHEDULED -> MATURING -> final check -> SCHEDULED (next wave) | IDLE

The final check settles gravity and reruns the finder in the same call, so
it is never observed as a separate state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from dropjack.core.board import GridBoard, Position
from dropjack.core.cards import Card, Difficulty
from dropjack.core.combinations import find_combinations
from dropjack.core.config_loader import GameConfig, get_config
from dropjack.core.scoring import ScoreEvent, ScoreTracker

logger = logging.getLogger(__name__)


class CascadePhase(Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"   # marks placed, none matured yet
    MATURING = "maturing"     # at least one card of the wave removed


@dataclass
class CascadeWave:
    """One wave of staggered removals."""
    chain_multiplier: int
    positions: Tuple[Position, ...]
    started_at: float
    final_check_at: float

    @property
    def size(self) -> int:
        return len(self.positions)


@dataclass
class CascadeUpdate:
    """What happened during one scheduler update."""
    removed: List[Tuple[int, int, Card]] = field(default_factory=list)
    new_waves: List[CascadeWave] = field(default_factory=list)
    score_events: List[ScoreEvent] = field(default_factory=list)
    finished: bool = False  # an episode ended this update

    @property
    def points(self) -> int:
        return sum(event.points for event in self.score_events)


class CascadeScheduler:
    """
    Timed wave state machine driving delayed card removal.

    Mutates the board only through its public methods. Never raises:
    an empty rescan simply ends the episode.
    """

    def __init__(
        self,
        board: GridBoard,
        scorer: ScoreTracker,
        difficulty: Difficulty = Difficulty.EASY,
        config: Optional[GameConfig] = None
    ):
        """
        Initialize scheduler.

        Args:
            board: Board whose cards get removed.
            scorer: Score tracker credited for removals and cascades.
            difficulty: Difficulty used for rescans.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._board = board
        self._scorer = scorer
        self._difficulty = difficulty
        self._stagger = config.timing.removal_stagger
        self._wave: Optional[CascadeWave] = None
        self._phase = CascadePhase.IDLE

    @property
    def phase(self) -> CascadePhase:
        return self._phase

    @property
    def is_idle(self) -> bool:
        return self._phase is CascadePhase.IDLE

    @property
    def active_wave(self) -> Optional[CascadeWave]:
        """The wave waiting for its final check, if any."""
        return self._wave

    @property
    def chain_multiplier(self) -> int:
        """Multiplier of the current wave, 0 when idle."""
        return self._wave.chain_multiplier if self._wave is not None else 0

    def schedule(self, positions: List[Position], now: float) -> Optional[CascadeWave]:
        """
        Start a new removal episode.

        Any wave still pending is discarded; its marks are overwritten or
        left to mature on their own.

        Args:
            positions: Sorted combination positions from the finder.
            now: Current clock time.

        Returns:
            The scheduled wave, or None if positions is empty.
        """
        if not positions:
            return None
        return self._start_wave(positions, now, chain_multiplier=1)

    def _start_wave(
        self,
        positions: List[Position],
        now: float,
        chain_multiplier: int
    ) -> CascadeWave:
        """Mark each position with its staggered deadline and arm the final check."""
        for index, position in enumerate(positions):
            self._board.mark_for_removal([position], now + index * self._stagger)

        wave = CascadeWave(
            chain_multiplier=chain_multiplier,
            positions=tuple(positions),
            started_at=now,
            final_check_at=now + len(positions) * self._stagger
        )
        self._wave = wave
        self._phase = CascadePhase.SCHEDULED
        logger.debug(
            "Scheduled wave x%d with %d cards (final check at %.3f)",
            chain_multiplier, wave.size, wave.final_check_at
        )
        return wave

    def collect(self, now: float) -> Tuple[List[Tuple[int, int, Card]], List[ScoreEvent]]:
        """
        Remove matured cards, award their base score and settle gravity.

        Args:
            now: Current clock time.

        Returns:
            (removed cards, score events).
        """
        removed = self._board.collect_matured(now)
        events = [self._scorer.apply_card_removed() for _ in removed]
        if removed:
            self._board.settle()
            if self._phase is CascadePhase.SCHEDULED:
                self._phase = CascadePhase.MATURING
        return removed, events

    def update(self, now: float) -> CascadeUpdate:
        """
        Advance the state machine to `now`.

        Collects matured removals first, then runs the final check of the
        active wave if its deadline has passed.
        """
        result = CascadeUpdate()
        removed, events = self.collect(now)
        result.removed.extend(removed)
        result.score_events.extend(events)

        wave = self._wave
        if wave is None or now < wave.final_check_at:
            return result

        # Final check: settle fully, then rescan
        self._board.settle()
        positions = find_combinations(self._board, self._difficulty)
        if positions:
            next_wave = self._start_wave(positions, now, wave.chain_multiplier + 1)
            result.new_waves.append(next_wave)
            result.score_events.append(self._scorer.apply_cascade(next_wave.chain_multiplier))
            logger.debug("Cascade chain reached x%d", next_wave.chain_multiplier)
        else:
            self._wave = None
            self._phase = CascadePhase.IDLE
            result.finished = True
            logger.debug(
                "Cascade ended at x%d after %.2fs",
                wave.chain_multiplier, now - wave.started_at
            )
        return result

    def reset(self) -> None:
        """Forget any pending wave (board marks are left to the board owner)."""
        self._wave = None
        self._phase = CascadePhase.IDLE
