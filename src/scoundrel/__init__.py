"""
Scoundrel core package.

This package provides headless rules for the Scoundrel solo card dungeon:
- Card, Deck, Player and Room models
- Combat resolution with weapon degradation
- GameEngine, the room lifecycle state machine with a command/query API
- Persistent win/loss statistics
- A terminal front-end (``scoundrel`` console script)

Front-ends should drive a GameEngine and read its query methods.
"""
from .cards import Card, Category, Suit
from .combat import CombatOptions, CombatResult, preview_combat, resolve_combat
from .deck import Deck, standard_cards
from .engine import CommandResult, GameEngine, GameOutcome, GameState, PlayerStatus, RoomCardView
from .errors import DeckCompositionError, InvalidCommand, ScoundrelError, SettingsError
from .player import Player
from .room import Room

__version__ = "0.1.0"

__all__ = [
    "Card",
    "Category",
    "Suit",
    "Deck",
    "standard_cards",
    "Player",
    "Room",
    "CombatOptions",
    "CombatResult",
    "preview_combat",
    "resolve_combat",
    "GameEngine",
    "GameState",
    "CommandResult",
    "PlayerStatus",
    "RoomCardView",
    "GameOutcome",
    "ScoundrelError",
    "InvalidCommand",
    "DeckCompositionError",
    "SettingsError",
    "__version__",
]
