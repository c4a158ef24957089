"""
Tests for the grid board: placement, marks and gravity.
"""

import pytest

from dropjack.core.board import GridBoard
from dropjack.core.cards import parse_card


def board_from(rows):
    """Build a board from short card names, "." for empty cells."""
    return GridBoard.from_rows(
        [[None if cell == "." else parse_card(cell) for cell in row] for row in rows]
    )


@pytest.fixture
def board():
    return GridBoard(4, 5)


class TestPlacement:
    """Test place/remove and bounds handling."""

    def test_rejects_bad_dimensions(self):
        with pytest.raises(ValueError):
            GridBoard(0, 5)

    def test_place_on_empty_cell(self, board):
        card = parse_card("7H")
        assert board.place(1, 2, card)
        assert board.card_at(1, 2) == card
        assert board.card_count == 1

    def test_place_on_occupied_cell_fails(self, board):
        board.place(1, 2, parse_card("7H"))
        assert not board.place(1, 2, parse_card("8S"))
        assert board.card_at(1, 2) == parse_card("7H")

    @pytest.mark.parametrize("x,y", [(-1, 0), (4, 0), (0, 5), (0, -1)])
    def test_out_of_bounds(self, board, x, y):
        """Invalid cells are never empty and never accept cards."""
        assert not board.is_valid(x, y)
        assert not board.is_empty(x, y)
        assert not board.place(x, y, parse_card("2C"))
        assert board.remove(x, y) is None
        assert board.card_at(x, y) is None

    def test_remove_returns_card(self, board):
        board.place(0, 4, parse_card("KD"))
        assert board.remove(0, 4) == parse_card("KD")
        assert board.is_empty(0, 4)
        assert board.remove(0, 4) is None

    def test_top_row(self, board):
        assert not board.has_any_card_in_top_row()
        board.place(3, 0, parse_card("5S"))
        assert board.has_any_card_in_top_row()

    def test_from_rows_rejects_ragged(self):
        with pytest.raises(ValueError):
            GridBoard.from_rows([[None, None], [None]])


class TestRemovalMarks:
    """Test delayed-removal marks."""

    def test_mark_skips_empty_cells(self, board):
        board.place(0, 4, parse_card("9H"))
        marked = board.mark_for_removal([(0, 4), (1, 4), (9, 9)], fire_at=5.0)
        assert marked == 1
        assert board.mark_at(0, 4) == 5.0
        assert board.mark_at(1, 4) is None
        assert board.pending_marks == 1

    def test_mark_overwrites(self, board):
        board.place(0, 4, parse_card("9H"))
        board.mark_for_removal([(0, 4)], fire_at=5.0)
        board.mark_for_removal([(0, 4)], fire_at=2.0)
        assert board.mark_at(0, 4) == 2.0

    def test_collect_matured_in_row_major_order(self):
        board = board_from([
            [".", "AS"],
            ["2H", "3H"],
        ])
        board.mark_for_removal([(1, 1), (0, 1), (1, 0)], fire_at=1.0)

        removed = board.collect_matured(1.0)

        assert [(x, y) for x, y, _ in removed] == [(1, 0), (0, 1), (1, 1)]
        assert removed[0][2] == parse_card("AS")
        assert board.card_count == 0
        assert board.pending_marks == 0

    def test_unmatured_marks_untouched(self):
        board = board_from([["2H", "3H"]])
        board.mark_for_removal([(0, 0)], fire_at=1.0)
        board.mark_for_removal([(1, 0)], fire_at=2.0)

        removed = board.collect_matured(1.5)

        assert [(x, y) for x, y, _ in removed] == [(0, 0)]
        assert board.card_at(1, 0) == parse_card("3H")
        assert board.mark_at(1, 0) == 2.0

    def test_remove_clears_mark(self, board):
        board.place(2, 4, parse_card("4D"))
        board.mark_for_removal([(2, 4)], fire_at=1.0)
        board.remove(2, 4)
        assert board.mark_at(2, 4) is None
        assert board.pending_marks == 0

    def test_clear_drops_everything(self, board):
        board.place(2, 4, parse_card("4D"))
        board.mark_for_removal([(2, 4)], fire_at=1.0)
        board.clear()
        assert board.card_count == 0
        assert board.pending_marks == 0


class TestGravity:
    """Test column compaction."""

    def test_compacts_preserving_order(self):
        board = board_from([
            ["AS", "."],
            [".", "5C"],
            ["2H", "."],
            [".", "."],
        ])

        assert board.apply_gravity()

        assert board.card_at(0, 3) == parse_card("2H")
        assert board.card_at(0, 2) == parse_card("AS")
        assert board.card_at(1, 3) == parse_card("5C")
        assert board.card_count == 3

    def test_idempotent(self):
        """A second pass moves nothing and changes nothing."""
        board = board_from([
            ["AS", "."],
            [".", "5C"],
            ["2H", "."],
        ])
        board.apply_gravity()
        before = board.rows()
        motions = board.falling_motions

        assert not board.apply_gravity()
        assert board.rows() == before
        assert len(board.falling_motions) == len(motions)

    def test_settled_board_does_not_move(self):
        board = board_from([
            [".", "."],
            ["2H", "."],
            ["3H", "4S"],
        ])
        assert not board.apply_gravity()
        assert board.falling_motions == []

    def test_falling_motions(self):
        board = board_from([
            ["KH"],
            ["."],
            ["."],
        ])
        board.apply_gravity()

        motions = board.falling_motions
        assert len(motions) == 1
        assert (motions[0].x, motions[0].from_y, motions[0].to_y) == (0, 0, 2)
        assert motions[0].distance == 2
        assert not motions[0].settled

        board.mark_motions_settled()
        assert board.falling_motions[0].settled

    def test_marks_travel_with_cards(self):
        board = board_from([
            ["KH"],
            ["."],
        ])
        board.mark_for_removal([(0, 0)], fire_at=3.0)
        board.apply_gravity()

        assert board.mark_at(0, 0) is None
        assert board.mark_at(0, 1) == 3.0

    def test_settle_counts_moving_passes(self):
        board = board_from([
            ["KH"],
            ["."],
        ])
        assert board.settle() == 1
        assert board.settle() == 0

    def test_pretty_shows_marks(self):
        board = board_from([["KH", "."]])
        board.mark_for_removal([(0, 0)], fire_at=1.0)
        text = board.pretty()
        assert "K♥*" in text
        assert "." in text
