"""Card abstractions and deck helpers for Twenty-One."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence

CARDS_PER_DECK = 52


class Suit(str, Enum):
    """Enumeration of the four suits in a standard deck."""

    HEARTS = "H"
    DIAMONDS = "D"
    CLUBS = "C"
    SPADES = "S"

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOLS[self]

    @property
    def is_red(self) -> bool:
        return self in (Suit.HEARTS, Suit.DIAMONDS)


_SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}


class Rank(int, Enum):
    """Card ranks with their center-pile ordinal (Ace low, King wild)."""

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

    @classmethod
    def ordered(cls) -> tuple["Rank", ...]:
        """Return ranks in building order, Ace first."""

        return tuple(sorted(cls, key=int))

    @property
    def symbol(self) -> str:
        """Short label used in card faces and rule messages."""

        return _RANK_SYMBOLS.get(self, str(int(self)))


_RANK_SYMBOLS = {
    Rank.ACE: "A",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
}


@dataclass(frozen=True, slots=True)
class Card:
    """Value object describing a physical card."""

    id: int
    rank: Rank
    suit: Suit

    @property
    def is_wild(self) -> bool:
        """Return ``True`` for Kings, which stand in for any needed rank."""

        return self.rank is Rank.KING

    def label(self) -> str:
        """Create a display label such as ``"A♥"`` or ``"10♠"``."""

        return f"{self.rank.symbol}{self.suit.symbol}"

    def __str__(self) -> str:
        return self.label()


def card_id_for(deck_index: int, suit: Suit, rank: Rank) -> int:
    """Return the unique identifier for ``rank`` of ``suit`` in deck ``deck_index``."""

    suit_index = list(Suit).index(suit)
    return deck_index * CARDS_PER_DECK + suit_index * 13 + (int(rank) - 1)


def iter_full_deck(num_decks: int = 1) -> Iterable[Card]:
    """Yield every physical card across ``num_decks`` standard decks."""

    for deck_index in range(num_decks):
        for suit in Suit:
            for rank in Rank.ordered():
                yield Card(id=card_id_for(deck_index, suit, rank), rank=rank, suit=suit)


def build_deck(num_decks: int = 1) -> List[Card]:
    """Return a deterministic ordering of all cards."""

    return list(iter_full_deck(num_decks))


def shuffled_deck(num_decks: int, rng: random.Random) -> List[Card]:
    """Return a freshly shuffled deck built from ``num_decks`` standard decks."""

    deck = build_deck(num_decks)
    rng.shuffle(deck)
    return deck


def format_cards(cards: Sequence[Card]) -> str:
    return " ".join(card.label() for card in cards)
