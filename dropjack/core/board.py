"""
Grid Board
==========

Owns the card grid, delayed-removal marks, and gravity compaction.

Coordinates are (x, y) with x the column and y the row; row 0 is the top.
Every mutator validates its input first and reports failure through its
return value instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np

from dropjack.core.cards import Card

Position = Tuple[int, int]


@dataclass
class FallingMotion:
    """A card moved by the last gravity pass (presentation only)."""
    x: int
    card: Card
    from_y: int
    to_y: int
    settled: bool = False

    @property
    def distance(self) -> int:
        """Rows travelled."""
        return self.to_y - self.from_y


class GridBoard:
    """
    Fixed-size grid of optional cards.

    Removal marks live in a float matrix of deadlines where NaN means
    "not marked". A mark only ever sits on an occupied cell.
    """

    def __init__(self, width: int, height: int):
        """
        Initialize an empty board.

        Args:
            width: Number of columns.
            height: Number of rows.
        """
        if width < 1 or height < 1:
            raise ValueError(f"Board dimensions must be positive, got {width}x{height}")

        self._width = width
        self._height = height
        self._grid: List[List[Optional[Card]]] = [
            [None] * width for _ in range(height)
        ]
        self._marks = np.full((height, width), np.nan, dtype=np.float64)
        self._falling_motions: List[FallingMotion] = []

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def falling_motions(self) -> List[FallingMotion]:
        """Motions produced by the most recent gravity pass that moved cards."""
        return list(self._falling_motions)

    @property
    def card_count(self) -> int:
        """Number of occupied cells."""
        return sum(1 for row in self._grid for card in row if card is not None)

    @property
    def pending_marks(self) -> int:
        """Number of cells currently marked for removal."""
        return int(np.count_nonzero(~np.isnan(self._marks)))

    # -- queries ---------------------------------------------------------

    def is_valid(self, x: int, y: int) -> bool:
        """True if (x, y) lies inside the grid."""
        return 0 <= x < self._width and 0 <= y < self._height

    def is_empty(self, x: int, y: int) -> bool:
        """True if (x, y) is inside the grid and holds no card."""
        if not self.is_valid(x, y):
            return False
        return self._grid[y][x] is None

    def card_at(self, x: int, y: int) -> Optional[Card]:
        """Card at (x, y), or None if empty or out of bounds."""
        if not self.is_valid(x, y):
            return None
        return self._grid[y][x]

    def mark_at(self, x: int, y: int) -> Optional[float]:
        """Removal deadline at (x, y), or None if unmarked."""
        if not self.is_valid(x, y):
            return None
        deadline = self._marks[y, x]
        return None if np.isnan(deadline) else float(deadline)

    def marks(self) -> np.ndarray:
        """Copy of the (height, width) deadline matrix, NaN where unmarked."""
        return self._marks.copy()

    def occupied(self) -> Iterator[Tuple[int, int, Card]]:
        """Yield (x, y, card) for every occupied cell in row-major order."""
        for y, row in enumerate(self._grid):
            for x, card in enumerate(row):
                if card is not None:
                    yield x, y, card

    def rows(self) -> List[List[Optional[Card]]]:
        """Copy of the grid, indexed [y][x]."""
        return [list(row) for row in self._grid]

    def has_any_card_in_top_row(self) -> bool:
        """True if any cell in row 0 is occupied."""
        return any(card is not None for card in self._grid[0])

    # -- mutators --------------------------------------------------------

    def place(self, x: int, y: int, card: Card) -> bool:
        """
        Put a card on an empty cell.

        Returns:
            True on success; False (and no change) if invalid or occupied.
        """
        if not self.is_empty(x, y):
            return False
        self._grid[y][x] = card
        return True

    def remove(self, x: int, y: int) -> Optional[Card]:
        """
        Clear a cell and its removal mark.

        Returns:
            The card that was there, or None if invalid or empty.
        """
        if not self.is_valid(x, y):
            return None
        card = self._grid[y][x]
        self._grid[y][x] = None
        self._marks[y, x] = np.nan
        return card

    def clear(self) -> None:
        """Empty every cell and drop all marks."""
        for row in self._grid:
            for x in range(self._width):
                row[x] = None
        self._marks.fill(np.nan)
        self._falling_motions = []

    def mark_for_removal(self, positions: Iterable[Position], fire_at: float) -> int:
        """
        Schedule cards for removal at a given time.

        Overwrites existing marks. Invalid or empty positions are skipped.

        Args:
            positions: Cells to mark.
            fire_at: Clock time at which the marks mature.

        Returns:
            Number of cells marked.
        """
        marked = 0
        for x, y in positions:
            if self.is_valid(x, y) and self._grid[y][x] is not None:
                self._marks[y, x] = fire_at
                marked += 1
        return marked

    def collect_matured(self, now: float) -> List[Tuple[int, int, Card]]:
        """
        Remove every card whose mark deadline has passed.

        Args:
            now: Current clock time.

        Returns:
            Removed (x, y, card) triples in row-major order.
        """
        removed: List[Tuple[int, int, Card]] = []
        # argwhere yields (row, col) pairs in row-major order; NaN never matches
        for y, x in np.argwhere(self._marks <= now):
            x, y = int(x), int(y)
            card = self.remove(x, y)
            if card is not None:
                removed.append((x, y, card))
        return removed

    def apply_gravity(self) -> bool:
        """
        Compact each column toward the bottom in a single pass.

        Relative vertical order is preserved and marks travel with their
        cards. A pass that moves nothing leaves the board untouched.

        Returns:
            True if any card changed row.
        """
        motions: List[FallingMotion] = []

        for x in range(self._width):
            write_y = self._height - 1
            for read_y in range(self._height - 1, -1, -1):
                card = self._grid[read_y][x]
                if card is None:
                    continue
                if read_y != write_y:
                    self._grid[write_y][x] = card
                    self._grid[read_y][x] = None
                    self._marks[write_y, x] = self._marks[read_y, x]
                    self._marks[read_y, x] = np.nan
                    motions.append(FallingMotion(x=x, card=card, from_y=read_y, to_y=write_y))
                write_y -= 1

        if motions:
            self._falling_motions = motions
            return True
        return False

    def settle(self, max_passes: Optional[int] = None) -> int:
        """
        Apply gravity until nothing moves.

        Args:
            max_passes: Optional safety cap on the number of passes.

        Returns:
            Number of passes that moved cards.
        """
        limit = max_passes if max_passes is not None else self._height + 1
        passes = 0
        while passes < limit and self.apply_gravity():
            passes += 1
        return passes

    def mark_motions_settled(self) -> None:
        """Flag all recorded falling motions as settled."""
        for motion in self._falling_motions:
            motion.settled = True

    def pretty(self, empty: str = ".") -> str:
        """Text rendering of the board, one line per row."""
        lines = []
        for y, row in enumerate(self._grid):
            cells = []
            for x, card in enumerate(row):
                text = str(card) if card is not None else empty
                if not np.isnan(self._marks[y, x]):
                    text += "*"
                cells.append(text.rjust(4))
            lines.append("".join(cells))
        return "\n".join(lines)

    @classmethod
    def from_rows(cls, rows: List[List[Optional[Card]]]) -> "GridBoard":
        """Build a board from a list of rows (top row first)."""
        if not rows or not rows[0]:
            raise ValueError("rows must be a non-empty rectangle")
        width = len(rows[0])
        board = cls(width, len(rows))
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"Row {y} has {len(row)} cells, expected {width}")
            for x, card in enumerate(row):
                if card is not None:
                    board.place(x, y, card)
        return board
