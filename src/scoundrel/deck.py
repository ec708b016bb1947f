from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Iterator, List, Optional

from .cards import Card, Suit
from .constants import DECK_SIZE, MAX_RANK, MIN_RANK, POTION_MAX_RANK, WEAPON_MAX_RANK
from .errors import DeckCompositionError
from .utils.random_provider import RandomProvider

logger = logging.getLogger(__name__)


def standard_cards() -> List[Card]:
    """Return the 44 cards of a fresh game, unshuffled.

    Spades and Clubs 2-Ace are monsters (26), Diamonds 2-10 weapons (9) and
    Hearts 2-10 potions (9).
    """
    cards: List[Card] = []
    for rank in range(MIN_RANK, MAX_RANK + 1):
        cards.append(Card(Suit.SPADES, rank))
        cards.append(Card(Suit.CLUBS, rank))
    for rank in range(MIN_RANK, WEAPON_MAX_RANK + 1):
        cards.append(Card(Suit.DIAMONDS, rank))
    for rank in range(MIN_RANK, POTION_MAX_RANK + 1):
        cards.append(Card(Suit.HEARTS, rank))
    return cards


def validate_composition(cards: Iterable[Card]) -> None:
    """Raise DeckCompositionError unless ``cards`` is exactly the standard multiset."""
    given = Counter(cards)
    expected = Counter(standard_cards())
    if given != expected:
        missing = expected - given
        extra = given - expected
        raise DeckCompositionError(
            f"Deck must contain the {DECK_SIZE} standard cards "
            f"(missing={sorted(str(c) for c in missing)}, extra={sorted(str(c) for c in extra)})"
        )


class Deck:
    """The draw pile.

    Cards are drawn from the front and returned to the back, so skipped cards
    come back later rather than sooner.
    """

    def __init__(
        self,
        cards: Optional[Iterable[Card]] = None,
        rng: Optional[RandomProvider] = None,
        shuffle: bool = True,
    ) -> None:
        self.rng = rng or RandomProvider()
        self.cards: List[Card] = list(cards) if cards is not None else standard_cards()
        validate_composition(self.cards)
        if shuffle:
            self.shuffle()

    @classmethod
    def stacked(cls, top: Iterable[Card], rng: Optional[RandomProvider] = None) -> "Deck":
        """Build an unshuffled deck whose first cards are ``top`` in order.

        The remaining standard cards follow in their default order. Used to set
        up deterministic games.
        """
        top = list(top)
        rest = list(standard_cards())
        for card in top:
            if card not in rest:
                raise DeckCompositionError(f"Card {card} is duplicated or not part of the deck")
            rest.remove(card)
        return cls(top + rest, rng=rng, shuffle=False)

    def shuffle(self) -> None:
        self.rng.shuffle(self.cards)
        logger.debug("Deck shuffled (%d cards)", len(self.cards))

    def draw(self, count: int = 1) -> List[Card]:
        """Remove and return up to ``count`` cards from the front.

        Returns fewer cards when the deck runs short; callers size rooms from
        the result.
        """
        if count < 0:
            raise ValueError("Cannot draw a negative number of cards")
        drawn = self.cards[:count]
        del self.cards[:count]
        logger.debug("Drew %d/%d cards, %d remaining", len(drawn), count, len(self.cards))
        return drawn

    def push_to_back(self, cards: Iterable[Card]) -> None:
        cards = list(cards)
        self.cards.extend(cards)
        logger.debug("Returned %d cards to the back of the deck", len(cards))

    def is_empty(self) -> bool:
        return not self.cards

    @property
    def remaining(self) -> int:
        return len(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(list(self.cards))
