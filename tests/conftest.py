import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from scoundrel.cards import Card, Suit  # noqa: E402
from scoundrel.deck import Deck  # noqa: E402
from scoundrel.engine import GameEngine  # noqa: E402
from scoundrel.utils.random_provider import RandomProvider  # noqa: E402

_SUITS = {"S": Suit.SPADES, "C": Suit.CLUBS, "D": Suit.DIAMONDS, "H": Suit.HEARTS}
_RANKS = {"J": 11, "Q": 12, "K": 13, "A": 14}


def parse_card(code: str) -> Card:
    """'8S' -> 8 of Spades, 'JC' -> Jack of Clubs, '10D' -> 10 of Diamonds."""
    rank, suit = code[:-1], code[-1]
    return Card(_SUITS[suit], _RANKS.get(rank) or int(rank))


@pytest.fixture
def card():
    return parse_card


@pytest.fixture
def cards():
    def _cards(*codes):
        return [parse_card(c) for c in codes]

    return _cards


@pytest.fixture
def stacked_engine():
    """Build a started engine whose deck begins with the given cards in order.

    Fleeing still shuffles with a seeded RNG so tests stay deterministic.
    """

    def _make(*codes, seed: int = 7, events=None):
        top = [parse_card(c) for c in codes]
        engine = GameEngine(
            rng=RandomProvider(seed),
            events=events,
            deck_factory=lambda rng: Deck.stacked(top, rng=rng),
        )
        result = engine.start_game()
        assert result.ok
        return engine

    return _make


@pytest.fixture
def leave_in_deck():
    """Reduce a started engine's deck to the given cards, discarding the rest.

    Keeps the 44-card accounting intact so endgame situations can be set up
    without playing through the whole deck.
    """

    def _leave(engine, *codes):
        keep = [parse_card(c) for c in codes]
        missing = [c for c in keep if c not in engine.deck.cards]
        assert not missing, f"{missing} not in deck"
        rest = [c for c in engine.deck.cards if c not in keep]
        engine.deck.cards = keep
        engine._discard.extend(rest)

    return _leave
