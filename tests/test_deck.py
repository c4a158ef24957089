"""
Tests for cards and the shuffle-bag deck.
"""

from collections import Counter

import pytest

from dropjack.core.cards import Card, Difficulty, Rank, Suit, parse_card, standard_deck
from dropjack.core.deck import Deck


class TestCards:
    """Test card values and parsing."""

    def test_ace_has_two_values(self):
        assert Card(Suit.SPADES, Rank.ACE).blackjack_values() == (1, 11)

    @pytest.mark.parametrize("rank", [Rank.TEN, Rank.JACK, Rank.QUEEN, Rank.KING])
    def test_tens_and_faces_count_ten(self, rank):
        assert Card(Suit.HEARTS, rank).blackjack_values() == (10,)

    def test_number_cards_count_face_value(self):
        assert Card(Suit.CLUBS, Rank.SEVEN).blackjack_values() == (7,)

    def test_str(self):
        assert str(Card(Suit.HEARTS, Rank.TEN)) == "10♥"
        assert str(Card(Suit.SPADES, Rank.ACE)) == "A♠"

    def test_parse_card(self):
        assert parse_card("10H") == Card(Suit.HEARTS, Rank.TEN)
        assert parse_card("as") == Card(Suit.SPADES, Rank.ACE)
        assert parse_card(" QD ") == Card(Suit.DIAMONDS, Rank.QUEEN)

    @pytest.mark.parametrize("text", ["", "H", "1H", "10X", "ZZ"])
    def test_parse_card_rejects_garbage(self, text):
        with pytest.raises(ValueError):
            parse_card(text)

    def test_cards_are_hashable(self):
        assert len({Card(Suit.CLUBS, Rank.TWO), Card(Suit.CLUBS, Rank.TWO)}) == 1

    def test_suit_colour(self):
        assert Suit.HEARTS.is_red and Suit.DIAMONDS.is_red
        assert not Suit.SPADES.is_red and not Suit.CLUBS.is_red

    def test_difficulty_parse(self):
        assert Difficulty.parse("Hard") is Difficulty.HARD
        with pytest.raises(ValueError):
            Difficulty.parse("medium")


class TestDeck:
    """Test deck composition, determinism and refills."""

    def _assert_full(self, cards):
        assert len(cards) == 52
        suits = Counter(card.suit for card in cards)
        ranks = Counter(card.rank for card in cards)
        assert all(suits[suit] == 13 for suit in Suit)
        assert all(ranks[rank] == 4 for rank in Rank)

    def test_standard_deck_composition(self):
        self._assert_full(standard_deck())

    def test_fresh_deck_is_full(self):
        deck = Deck(seed=1)
        assert deck.remaining == 52
        self._assert_full(deck.cards)

    def test_reset_deck_is_full(self):
        deck = Deck(seed=1)
        for _ in range(30):
            deck.draw()
        deck.reset()
        assert len(deck) == 52
        self._assert_full(deck.cards)

    def test_deterministic_with_seed(self):
        """Same seed should produce same sequence."""
        d1 = Deck(seed=42)
        d2 = Deck(seed=42)
        assert [d1.draw() for _ in range(52)] == [d2.draw() for _ in range(52)]

    def test_different_seeds_differ(self):
        d1 = Deck(seed=42)
        d2 = Deck(seed=123)
        assert [d1.draw() for _ in range(52)] != [d2.draw() for _ in range(52)]

    def test_unshuffled_order(self):
        """Without shuffling, draws come from the end of the standard order."""
        deck = Deck(shuffle=False)
        assert deck.draw() == Card(Suit.CLUBS, Rank.KING)
        assert deck.draw() == Card(Suit.CLUBS, Rank.QUEEN)

    def test_peek_matches_draw(self):
        deck = Deck(seed=5)
        for _ in range(10):
            assert deck.peek() == deck.draw()

    def test_draw_empty_returns_none(self):
        deck = Deck(seed=3)
        drawn = [deck.draw() for _ in range(52)]
        self._assert_full(drawn)
        assert deck.draw() is None
        assert deck.peek() is None

    def test_draw_or_refill(self):
        """An exhausted deck refills instead of running dry."""
        deck = Deck(seed=3)
        for _ in range(52):
            deck.draw_or_refill()
        assert deck.remaining == 0
        card = deck.draw_or_refill()
        assert isinstance(card, Card)
        assert deck.remaining == 51
