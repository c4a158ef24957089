"""
Game Rules
==========

Handles spawn positioning and the game-over condition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from dropjack.core.board import GridBoard, Position
from dropjack.core.config_loader import GameConfig, get_config


@dataclass
class TerminationResult:
    """Result of termination check."""
    terminated: bool
    reason: str

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, "")

    @staticmethod
    def game_over(reason: str) -> "TerminationResult":
        return TerminationResult(True, reason)


class SpawnRules:
    """
    Handles spawn position calculation.

    New pieces appear on the spawn row in the column of the last locked
    piece, or in the middle column before anything has locked.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize spawn rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._width = config.board.width
        self._spawn_row = config.board.spawn_row
        self._last_locked_x: Optional[int] = None

    @property
    def spawn_row(self) -> int:
        """Row new pieces appear on."""
        return self._spawn_row

    @property
    def last_locked_x(self) -> Optional[int]:
        """Column of the most recently locked piece, if any."""
        return self._last_locked_x

    def spawn_position(self) -> Position:
        """Cell the next piece should appear in."""
        x = self._last_locked_x if self._last_locked_x is not None else self._width // 2
        return (x, self._spawn_row)

    def record_lock(self, x: int) -> None:
        """Remember the column a piece locked in."""
        self._last_locked_x = x

    def reset(self) -> None:
        self._last_locked_x = None


class TerminationRules:
    """
    Handles game termination conditions.

    - Top out: any card in the top row once the board has settled
    - Blocked spawn: the spawn cell is already occupied
    """

    def check(self, board: GridBoard) -> TerminationResult:
        """
        Settle the board, then check the top row.

        Args:
            board: Board to inspect. Gravity is applied in place.

        Returns:
            TerminationResult with the reason when the game is over.
        """
        board.settle()
        if board.has_any_card_in_top_row():
            return TerminationResult.game_over("top_out")
        return TerminationResult.none()

    def check_spawn(self, board: GridBoard, position: Position) -> TerminationResult:
        """Game over if a new piece cannot appear at `position`."""
        x, y = position
        if not board.is_empty(x, y):
            return TerminationResult.game_over("spawn_blocked")
        return TerminationResult.none()
