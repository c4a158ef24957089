"""
Card Catalog
============

Suits, ranks, cards and difficulty modes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple


class Suit(Enum):
    """The four French suits."""
    SPADES = "spades"
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOLS[self]

    @property
    def is_red(self) -> bool:
        """True for hearts and diamonds."""
        return self in (Suit.HEARTS, Suit.DIAMONDS)

    @property
    def index(self) -> int:
        """Stable 0-3 index, used for array encodings."""
        return _SUIT_ORDER.index(self)


_SUIT_SYMBOLS = {
    Suit.SPADES: "♠",
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
}

_SUIT_ORDER: Tuple[Suit, ...] = (Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS)


class Rank(Enum):
    """Card ranks, valued 1-13 in deck order."""
    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    @property
    def symbol(self) -> str:
        if self is Rank.ACE:
            return "A"
        if self is Rank.JACK:
            return "J"
        if self is Rank.QUEEN:
            return "Q"
        if self is Rank.KING:
            return "K"
        return str(self.value)

    @property
    def points(self) -> int:
        """Base blackjack value (face cards count 10, Ace counts 1)."""
        return min(self.value, 10)


class Difficulty(Enum):
    """
    Game difficulty modes.

    Easy: any adjacent cards may form a combination.
    Hard: adjacent cards must share a suit.
    """
    EASY = "easy"
    HARD = "hard"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: str) -> "Difficulty":
        """Parse a difficulty name (case-insensitive)."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown difficulty: {value!r}") from None


@dataclass(frozen=True)
class Card:
    """An immutable playing card."""
    suit: Suit
    rank: Rank

    @property
    def value(self) -> int:
        return self.rank.points

    def blackjack_values(self) -> Tuple[int, ...]:
        """Values this card may contribute to a sum; an Ace can be 1 or 11."""
        if self.rank is Rank.ACE:
            return (1, 11)
        return (self.rank.points,)

    def __str__(self) -> str:
        return f"{self.rank.symbol}{self.suit.symbol}"


def standard_deck() -> List[Card]:
    """All 52 cards, suit by suit in rank order."""
    return [Card(suit, rank) for suit in _SUIT_ORDER for rank in Rank]


def parse_card(text: str) -> Card:
    """
    Parse a short card name such as "10H", "AS" or "kd".

    Args:
        text: Rank symbol followed by a suit letter (S, H, D, C).

    Returns:
        The matching Card.
    """
    text = text.strip().upper()
    if len(text) < 2:
        raise ValueError(f"Invalid card: {text!r}")
    rank_part, suit_part = text[:-1], text[-1]
    suits = {"S": Suit.SPADES, "H": Suit.HEARTS, "D": Suit.DIAMONDS, "C": Suit.CLUBS}
    if suit_part not in suits:
        raise ValueError(f"Invalid suit in card: {text!r}")
    for rank in Rank:
        if rank.symbol == rank_part:
            return Card(suits[suit_part], rank)
    raise ValueError(f"Invalid rank in card: {text!r}")
