from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .cards import Card
from .constants import CARDS_PER_ROOM, CARDS_TO_INTERACT

logger = logging.getLogger(__name__)


class Room:
    """
    The batch of cards drawn for one decision cycle.

    A normal room holds 4 cards of which 3 must be resolved. A room drawn when
    the deck ran short is final: it holds fewer cards and every one of them must
    be resolved. Card contents are fixed; only the resolution bookkeeping moves.
    """

    def __init__(self, cards: Sequence[Card], carried_index: Optional[int] = None) -> None:
        if not 1 <= len(cards) <= CARDS_PER_ROOM:
            raise ValueError(f"Room must have 1-{CARDS_PER_ROOM} cards, got {len(cards)}")
        if carried_index is not None and not 0 <= carried_index < len(cards):
            raise ValueError(f"Carried index {carried_index} outside room of {len(cards)} cards")
        self.cards: Tuple[Card, ...] = tuple(cards)
        self.carried_index = carried_index
        self._resolved: List[int] = []
        self.pending_index: Optional[int] = None

    @classmethod
    def assemble(cls, drawn: Iterable[Card], carried: Optional[Tuple[int, Card]] = None) -> "Room":
        """Lay out fresh cards around a card carried over from the last room.

        The carried card keeps its slot; the fresh cards fill the other slots in
        draw order. Slots the deck could not fill are dropped, so the carried
        card may shift left when the room comes up short.
        """
        fresh = list(drawn)
        if carried is None:
            return cls(fresh)
        slot, card = carried
        slots: List[Optional[Card]] = []
        for i in range(CARDS_PER_ROOM):
            if i == slot:
                slots.append(card)
            elif fresh:
                slots.append(fresh.pop(0))
            else:
                slots.append(None)
        cards = [c for c in slots if c is not None]
        return cls(cards, carried_index=cards.index(card))

    @property
    def size(self) -> int:
        return len(self.cards)

    @property
    def is_final(self) -> bool:
        return self.size < CARDS_PER_ROOM

    @property
    def required_interactions(self) -> int:
        return self.size if self.is_final else CARDS_TO_INTERACT

    @property
    def resolved_indices(self) -> Set[int]:
        return set(self._resolved)

    @property
    def resolved_count(self) -> int:
        return len(self._resolved)

    @property
    def remaining_interactions(self) -> int:
        return self.required_interactions - self.resolved_count

    @property
    def is_complete(self) -> bool:
        return self.resolved_count >= self.required_interactions

    def is_resolved(self, index: int) -> bool:
        return index in self._resolved

    def unresolved_indices(self) -> List[int]:
        return [i for i in range(self.size) if i not in self._resolved]

    def card_at(self, index: int) -> Card:
        return self.cards[index]

    def mark_pending(self, index: int) -> None:
        self.pending_index = index

    def mark_resolved(self, index: int) -> None:
        if index in self._resolved:
            raise ValueError(f"Card {index} already resolved")
        self._resolved.append(index)
        if self.pending_index == index:
            self.pending_index = None
        logger.debug("Room card %d resolved (%d/%d)", index, self.resolved_count, self.required_interactions)

    def carry_over(self) -> Optional[Tuple[int, Card]]:
        """The (slot, card) that survives into the next room, if any."""
        unresolved = self.unresolved_indices()
        if not self.is_complete or not unresolved:
            return None
        index = unresolved[0]
        return index, self.cards[index]

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f"Room(cards={[str(c) for c in self.cards]!r}, resolved={sorted(self._resolved)!r})"
