from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .constants import MAX_RANK, MIN_RANK, RANK_LABELS, RANK_NAMES


class Category(Enum):
    """What a card does when it is resolved in a room."""

    MONSTER = "monster"
    WEAPON = "weapon"
    POTION = "potion"


class Suit(Enum):
    SPADES = "Spades"
    CLUBS = "Clubs"
    DIAMONDS = "Diamonds"
    HEARTS = "Hearts"

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOLS[self]

    @property
    def category(self) -> Category:
        return _SUIT_CATEGORIES[self]


_SUIT_SYMBOLS = {
    Suit.SPADES: "♠",
    Suit.CLUBS: "♣",
    Suit.DIAMONDS: "♦",
    Suit.HEARTS: "♥",
}

_SUIT_CATEGORIES = {
    Suit.SPADES: Category.MONSTER,
    Suit.CLUBS: Category.MONSTER,
    Suit.DIAMONDS: Category.WEAPON,
    Suit.HEARTS: Category.POTION,
}


@dataclass(frozen=True)
class Card:
    """A single playing card.

    The category and value are derived from suit and rank; a card never changes
    once created. Monsters deal their rank as damage, weapons absorb their rank,
    potions heal their rank.
    """

    suit: Suit
    rank: int

    def __post_init__(self) -> None:
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Invalid card suit: {self.suit!r}")
        if not (MIN_RANK <= self.rank <= MAX_RANK):
            raise ValueError(f"Invalid card rank: {self.rank}")

    @property
    def category(self) -> Category:
        return self.suit.category

    @property
    def value(self) -> int:
        return self.rank

    @property
    def is_monster(self) -> bool:
        return self.category is Category.MONSTER

    @property
    def is_weapon(self) -> bool:
        return self.category is Category.WEAPON

    @property
    def is_potion(self) -> bool:
        return self.category is Category.POTION

    @property
    def name(self) -> str:
        return f"{RANK_NAMES[self.rank]} of {self.suit.value}"

    @property
    def label(self) -> str:
        return f"{self.suit.symbol} {RANK_LABELS[self.rank]}"

    def __str__(self) -> str:
        return self.label
