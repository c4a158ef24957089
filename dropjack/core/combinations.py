"""
Combination Finder
==================

Finds connected runs of cards whose blackjack values sum to exactly 21.

The search is a pure function of the board: it never mutates it.
"""

from __future__ import annotations

from typing import List, Set

from dropjack.core.board import GridBoard, Position
from dropjack.core.cards import Card, Difficulty

TARGET_SUM = 21

# Neighbour exploration order: up, down, left, right
DIRECTIONS = ((0, -1), (0, 1), (-1, 0), (1, 0))


def _paths_to_target(
    board: GridBoard,
    x: int,
    y: int,
    card: Card,
    total: int,
    path: List[Position],
    visited: Set[Position],
    difficulty: Difficulty,
    found: List[List[Position]]
) -> None:
    """
    Depth-first search appending every path that reaches the target sum.

    `path` and `visited` belong to the current start cell only and are
    restored on the way back out.
    """
    visited.add((x, y))
    path.append((x, y))

    for value in card.blackjack_values():
        new_total = total + value
        if new_total == TARGET_SUM:
            found.append(list(path))
        elif new_total < TARGET_SUM:
            for dx, dy in DIRECTIONS:
                nx, ny = x + dx, y + dy
                if (nx, ny) in visited:
                    continue
                neighbour = board.card_at(nx, ny)
                if neighbour is None:
                    continue
                if difficulty is Difficulty.HARD and neighbour.suit is not card.suit:
                    continue
                _paths_to_target(
                    board, nx, ny, neighbour, new_total, path, visited, difficulty, found
                )

    path.pop()
    visited.discard((x, y))


def group_combinations(board: GridBoard, difficulty: Difficulty) -> List[List[Position]]:
    """
    Find the accepted combination for each start cell, in scan order.

    Start cells are visited row by row. A cell already used by an accepted
    combination is not tried as a start. From each start the longest path
    summing to 21 wins (first found on ties) and must hold at least two cards.

    Args:
        board: Board to scan.
        difficulty: HARD requires neighbouring cards to share a suit.

    Returns:
        One position list per accepted combination, in path order.
    """
    consumed: Set[Position] = set()
    groups: List[List[Position]] = []

    for x, y, card in board.occupied():
        if (x, y) in consumed:
            continue

        candidates: List[List[Position]] = []
        _paths_to_target(board, x, y, card, 0, [], set(), difficulty, candidates)
        candidates = [c for c in candidates if len(c) >= 2]
        if not candidates:
            continue

        best = max(candidates, key=len)
        consumed.update(best)
        groups.append(best)

    return groups


def find_combinations(board: GridBoard, difficulty: Difficulty) -> List[Position]:
    """
    All positions taking part in a 21-sum combination.

    Returns:
        Deduplicated positions sorted row-major (by row, then column).
    """
    positions: Set[Position] = set()
    for group in group_combinations(board, difficulty):
        positions.update(group)
    return sorted(positions, key=lambda p: (p[1], p[0]))
