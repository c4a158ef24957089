"""
Active Piece
============

The falling card under player control, and the cards already hard-dropped
and still travelling to their landing cell (in flight).

All movement checks take a `blocked` set of cells claimed by in-flight
pieces; those cells count as occupied for the active piece.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Iterable, Optional, Set

from dropjack.core.board import GridBoard, Position
from dropjack.core.cards import Card


@dataclass
class PieceConfig:
    """Construction parameters for a piece; every field has a default."""
    x: int = 0
    y: int = 0
    falling: bool = False
    fast_fall: bool = False
    spawned_at: float = 0.0


@dataclass
class ActivePiece:
    """
    A card moving on the grid.

    (x, y) is the cell the piece occupies. target_x is the column a
    horizontal move asked for; target_y is the landing row of a hard drop.
    """
    card: Card
    x: int
    y: int
    target_x: int
    target_y: int
    falling: bool = False
    fast_fall: bool = False
    last_step_at: float = 0.0

    @property
    def position(self) -> Position:
        return (self.x, self.y)

    @property
    def target(self) -> Position:
        return (self.target_x, self.target_y)

    @property
    def at_target(self) -> bool:
        """True when no move is pending."""
        return self.x == self.target_x and self.y == self.target_y


def make_piece(card: Card, config: Optional[PieceConfig] = None) -> ActivePiece:
    """
    Build a piece resting at the configured cell.

    Args:
        card: Card carried by the piece.
        config: Placement and flags. Defaults to PieceConfig().
    """
    if config is None:
        config = PieceConfig()
    return ActivePiece(
        card=card,
        x=config.x,
        y=config.y,
        target_x=config.x,
        target_y=config.y,
        falling=config.falling,
        fast_fall=config.fast_fall,
        last_step_at=config.spawned_at
    )


def is_free(board: GridBoard, x: int, y: int, blocked: AbstractSet[Position] = frozenset()) -> bool:
    """True if (x, y) is on the board, holds no card and is not claimed."""
    return board.is_empty(x, y) and (x, y) not in blocked


def blocked_cells(in_flight: Iterable[ActivePiece]) -> Set[Position]:
    """Cells claimed by in-flight pieces: where they are and where they land."""
    cells: Set[Position] = set()
    for piece in in_flight:
        cells.add(piece.position)
        cells.add(piece.target)
    return cells


def landing_targets(in_flight: Iterable[ActivePiece]) -> Set[Position]:
    """Landing cells already reserved by in-flight pieces."""
    return {piece.target for piece in in_flight}


def try_shift(
    piece: ActivePiece,
    dx: int,
    board: GridBoard,
    blocked: AbstractSet[Position] = frozenset()
) -> bool:
    """
    Request a one-column horizontal move.

    The move is only accepted while the previous one has been carried out
    and the destination beside the piece is free. It sets the target
    column; the piece reaches it on its next downward step.

    Returns:
        True if the target column changed.
    """
    if piece.x != piece.target_x:
        return False
    new_x = piece.x + dx
    if not is_free(board, new_x, piece.y, blocked):
        return False
    piece.target_x = new_x
    return True


def advance(
    piece: ActivePiece,
    board: GridBoard,
    blocked: AbstractSet[Position] = frozenset()
) -> bool:
    """
    Move the piece one row down.

    Tries the diagonal toward the target column first. A diagonal step is
    only allowed when both cells it cuts past are free as well, so a piece
    never slips between two cards. Falls back to straight down, dropping the
    horizontal request.

    Returns:
        True if the piece moved, False if it must lock where it is. The
        piece's falling flag is set to the same value.
    """
    below = piece.y + 1

    if piece.target_x != piece.x:
        tx = piece.target_x
        if (is_free(board, tx, below, blocked)
                and is_free(board, tx, piece.y, blocked)
                and is_free(board, piece.x, below, blocked)):
            piece.x = tx
            piece.y = below
            piece.target_y = below
            piece.falling = True
            return True

    if is_free(board, piece.x, below, blocked):
        piece.target_x = piece.x
        piece.y = below
        piece.target_y = below
        piece.falling = True
        return True

    piece.target_x = piece.x
    piece.target_y = piece.y
    piece.falling = False
    return False


def hard_drop_row(
    piece: ActivePiece,
    board: GridBoard,
    reserved: AbstractSet[Position] = frozenset()
) -> int:
    """
    Lowest row the piece can reach straight down its current column.

    The scan stops above the first card or reserved landing cell.
    """
    y = piece.y
    while board.is_empty(piece.x, y + 1) and (piece.x, y + 1) not in reserved:
        y += 1
    return y


def step_in_flight(piece: ActivePiece, now: float, row_interval: float) -> bool:
    """
    Move a fast-falling piece as many rows as the elapsed time allows.

    Args:
        piece: In-flight piece.
        now: Current clock time.
        row_interval: Seconds per row; zero means arrive at once.

    Returns:
        True once the piece sits on its landing row.
    """
    if row_interval <= 0:
        piece.y = piece.target_y
    else:
        rows = int((now - piece.last_step_at) / row_interval)
        if rows > 0:
            piece.y = min(piece.target_y, piece.y + rows)
            piece.last_step_at += rows * row_interval
    return piece.y >= piece.target_y
