"""
Tests for the 21-sum combination finder.
"""

import numpy as np
import pytest

from dropjack.core.board import GridBoard
from dropjack.core.cards import Card, Difficulty, Rank, Suit, parse_card
from dropjack.core.combinations import (
    TARGET_SUM,
    find_combinations,
    group_combinations,
)


def combination_total(board, positions):
    """Every sum the cards at `positions` can reach, Aces counting 1 or 11."""
    totals = {0}
    for x, y in positions:
        totals = {t + v for t in totals for v in board.card_at(x, y).blackjack_values()}
    return totals


def board_from(rows):
    return GridBoard.from_rows(
        [[None if cell == "." else parse_card(cell) for cell in row] for row in rows]
    )


def random_board(seed, width=6, height=6):
    rng = np.random.default_rng(seed)
    suits, ranks = list(Suit), list(Rank)
    board = GridBoard(width, height)
    for y in range(height):
        for x in range(width):
            if rng.random() < 0.7:
                card = Card(suits[rng.integers(len(suits))], ranks[rng.integers(len(ranks))])
                board.place(x, y, card)
    return board


class TestKnownBoards:
    """Hand-built boards with known answers."""

    @pytest.mark.parametrize("difficulty", [Difficulty.EASY, Difficulty.HARD])
    def test_ten_five_six_same_suit(self, difficulty):
        board = board_from([["10H", "5H", "6H"]])
        assert find_combinations(board, difficulty) == [(0, 0), (1, 0), (2, 0)]

    def test_ace_king_mixed_suits(self):
        board = board_from([["AS", "KH"]])
        assert find_combinations(board, Difficulty.EASY) == [(0, 0), (1, 0)]
        assert find_combinations(board, Difficulty.HARD) == []

    def test_ten_five_six_mixed_suits(self):
        board = board_from([["10H", "5S", "6D"]])
        assert find_combinations(board, Difficulty.EASY) != []
        assert find_combinations(board, Difficulty.HARD) == []

    def test_ace_counts_as_one(self):
        """King + Queen + Ace only works with the Ace as 1."""
        board = board_from([["KH", "QH", "AH"]])
        assert find_combinations(board, Difficulty.EASY) == [(0, 0), (1, 0), (2, 0)]

    def test_longest_path_wins(self):
        """5+5+A(1)+10 beats 5+5+A(11) from the same start."""
        board = board_from([["5H", "5H", "AH", "10H"]])
        groups = group_combinations(board, Difficulty.EASY)
        assert groups == [[(0, 0), (1, 0), (2, 0), (3, 0)]]

    def test_single_card_never_matches(self):
        board = board_from([["AS", "."], [".", "."]])
        assert find_combinations(board, Difficulty.EASY) == []

    def test_no_match_when_sum_overshoots(self):
        board = board_from([["9S", "KH", "QD"]])
        assert find_combinations(board, Difficulty.EASY) == []

    def test_empty_board(self):
        assert find_combinations(GridBoard(5, 5), Difficulty.EASY) == []

    def test_sorted_row_major(self):
        """Results are ordered by row first, then column."""
        board = board_from([
            [".", "AS"],
            ["KH", "JH"],
        ])
        assert find_combinations(board, Difficulty.EASY) == [(1, 0), (0, 1), (1, 1)]

    def test_vertical_combination(self):
        board = board_from([
            ["7C"],
            ["7C"],
            ["7C"],
        ])
        assert find_combinations(board, Difficulty.HARD) == [(0, 0), (0, 1), (0, 2)]

    def test_does_not_mutate_board(self):
        board = board_from([["10H", "5H", "6H"], [".", "AS", "KS"]])
        before = board.rows()
        find_combinations(board, Difficulty.EASY)
        assert board.rows() == before
        assert board.pending_marks == 0


class TestCombinationProperties:
    """Properties that hold on any board."""

    @pytest.mark.parametrize("seed", range(8))
    @pytest.mark.parametrize("difficulty", [Difficulty.EASY, Difficulty.HARD])
    def test_groups_are_valid(self, seed, difficulty):
        board = random_board(seed)
        for group in group_combinations(board, difficulty):
            assert len(group) >= 2
            assert len(set(group)) == len(group)
            assert TARGET_SUM in combination_total(board, group)

            # Consecutive cells of a path are neighbours
            for (ax, ay), (bx, by) in zip(group, group[1:]):
                assert abs(ax - bx) + abs(ay - by) == 1

            if difficulty is Difficulty.HARD:
                assert len({board.card_at(x, y).suit for x, y in group}) == 1

    @pytest.mark.parametrize("seed", range(4))
    def test_flattened_result_is_sorted_and_unique(self, seed):
        board = random_board(seed)
        positions = find_combinations(board, Difficulty.EASY)
        assert positions == sorted(set(positions), key=lambda p: (p[1], p[0]))

    @pytest.mark.parametrize("seed", range(4))
    def test_easy_finds_a_group_when_hard_does(self, seed):
        """Every Hard path is also a valid Easy path, so Easy finds at least one group."""
        board = random_board(seed)
        if group_combinations(board, Difficulty.HARD):
            assert group_combinations(board, Difficulty.EASY)
