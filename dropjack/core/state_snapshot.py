"""
State Snapshot
==============

Packs session state into numpy arrays for the presentation layer.
Grid arrays are indexed [y, x] with row 0 at the top.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from dropjack.core.board import FallingMotion, GridBoard
from dropjack.core.cards import Card
from dropjack.core.piece import ActivePiece

EMPTY_RANK = 0
EMPTY_SUIT = -1


@dataclass
class PieceView:
    """Read-only view of a moving piece."""
    card: str
    x: int
    y: int
    target_x: int
    target_y: int
    falling: bool
    fast_fall: bool

    @staticmethod
    def of(piece: ActivePiece) -> "PieceView":
        return PieceView(
            card=str(piece.card),
            x=piece.x,
            y=piece.y,
            target_x=piece.target_x,
            target_y=piece.target_y,
            falling=piece.falling,
            fast_fall=piece.fast_fall
        )


@dataclass
class SessionSnapshot:
    """
    Complete session state at one tick.

    Card arrays are fixed-size (height, width) with a mask for occupancy.
    """
    state: str
    difficulty: str
    score: int
    chain_multiplier: int
    fall_interval: float
    board_width: int
    board_height: int

    # Grid arrays
    rank: np.ndarray          # (H, W) int8, 1-13, 0 when empty
    suit: np.ndarray          # (H, W) int8, 0-3, -1 when empty
    mask: np.ndarray          # (H, W) bool
    removal_at: np.ndarray    # (H, W) float64 deadlines, NaN when unmarked

    active: Optional[PieceView] = None
    in_flight: List[PieceView] = field(default_factory=list)
    next_card: Optional[str] = None
    falling_motions: List[Tuple[int, int, int]] = field(default_factory=list)  # (x, from_y, to_y)
    initials: str = ""

    @property
    def card_count(self) -> int:
        return int(self.mask.sum())

    def column_heights(self) -> np.ndarray:
        """Stack height per column from the occupancy mask."""
        filled = self.mask.any(axis=0)
        first = np.argmax(self.mask, axis=0)
        return np.where(filled, self.board_height - first, 0).astype(np.int16)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form for front ends."""
        return {
            "state": self.state,
            "difficulty": self.difficulty,
            "score": self.score,
            "chain_multiplier": self.chain_multiplier,
            "fall_interval": self.fall_interval,
            "board_width": self.board_width,
            "board_height": self.board_height,
            "rank": self.rank,
            "suit": self.suit,
            "mask": self.mask,
            "removal_at": self.removal_at,
            "active": self.active,
            "in_flight": list(self.in_flight),
            "next_card": self.next_card,
            "falling_motions": list(self.falling_motions),
            "initials": self.initials,
        }


def grid_arrays(board: GridBoard) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Encode the board as (rank, suit, mask, removal_at) arrays.
    """
    shape = (board.height, board.width)
    rank = np.full(shape, EMPTY_RANK, dtype=np.int8)
    suit = np.full(shape, EMPTY_SUIT, dtype=np.int8)
    for x, y, card in board.occupied():
        rank[y, x] = card.rank.value
        suit[y, x] = card.suit.index
    mask = rank != EMPTY_RANK
    return rank, suit, mask, board.marks()


def motion_tuples(motions: List[FallingMotion]) -> List[Tuple[int, int, int]]:
    """(x, from_y, to_y) for the motions a renderer has not animated yet."""
    return [(m.x, m.from_y, m.to_y) for m in motions if not m.settled]


def build_snapshot(
    board: GridBoard,
    state: str,
    difficulty: str,
    score: int,
    chain_multiplier: int,
    fall_interval: float,
    active: Optional[ActivePiece] = None,
    in_flight: Optional[List[ActivePiece]] = None,
    next_card: Optional[Card] = None,
    initials: str = ""
) -> SessionSnapshot:
    """Assemble a SessionSnapshot from live session objects."""
    rank, suit, mask, removal_at = grid_arrays(board)
    return SessionSnapshot(
        state=state,
        difficulty=difficulty,
        score=score,
        chain_multiplier=chain_multiplier,
        fall_interval=fall_interval,
        board_width=board.width,
        board_height=board.height,
        rank=rank,
        suit=suit,
        mask=mask,
        removal_at=removal_at,
        active=PieceView.of(active) if active is not None else None,
        in_flight=[PieceView.of(p) for p in (in_flight or [])],
        next_card=str(next_card) if next_card is not None else None,
        falling_motions=motion_tuples(board.falling_motions),
        initials=initials
    )
