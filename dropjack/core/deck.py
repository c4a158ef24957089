"""
Deck - Seeded Shuffle Bag
=========================

A standard 52-card deck drawn without replacement. When exhausted it
refills and reshuffles, so play never runs out of cards.
"""

from __future__ import annotations

import random
from typing import List, Optional

from dropjack.core.cards import Card, standard_deck


class Deck:
    """
    Shuffle-bag deck of playing cards.

    Cards are drawn from the end of the shuffled list. A given seed always
    produces the same sequence, including across refills.
    """

    def __init__(self, seed: Optional[int] = None, shuffle: bool = True):
        """
        Initialize deck.

        Args:
            seed: Random seed for reproducibility. Random if None.
            shuffle: If False the deck keeps standard order (useful for tests).
        """
        self._rng = random.Random(seed)
        self._shuffle = shuffle
        self._cards: List[Card] = []
        self._refill()

    def _refill(self) -> None:
        """Rebuild all 52 cards and shuffle them."""
        self._cards = standard_deck()
        if self._shuffle:
            self._rng.shuffle(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    @property
    def remaining(self) -> int:
        """Number of cards left before the next refill."""
        return len(self._cards)

    @property
    def cards(self) -> List[Card]:
        """Copy of the remaining cards, next draw last."""
        return list(self._cards)

    def peek(self) -> Optional[Card]:
        """The card the next draw() would return, or None if empty."""
        return self._cards[-1] if self._cards else None

    def draw(self) -> Optional[Card]:
        """Remove and return the top card, or None if the deck is empty."""
        if not self._cards:
            return None
        return self._cards.pop()

    def draw_or_refill(self) -> Card:
        """Draw a card, refilling and reshuffling first when empty."""
        if not self._cards:
            self._refill()
        return self._cards.pop()

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Rebuild and reshuffle the full deck.

        Args:
            seed: New random seed. Keeps the current generator if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)
        self._refill()
