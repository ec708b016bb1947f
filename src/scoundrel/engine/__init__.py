"""
Game engine package for Scoundrel.

Contains:
- The GameEngine state machine and its command/query API.
- Result and query models handed to front-ends.
- The structured game log.
"""

from .engine import (
    EVENT_FLED,
    EVENT_GAME_OVER,
    EVENT_ROOM_COMPLETE,
    EVENT_ROOM_ENTERED,
    GameEngine,
)
from .log import GameEvent, GameLog
from .models import CardAccounting, CommandResult, GameOutcome, PlayerStatus, RoomCardView
from .states import GameState

__all__ = [
    "GameEngine",
    "GameState",
    "CommandResult",
    "PlayerStatus",
    "RoomCardView",
    "CardAccounting",
    "GameOutcome",
    "GameLog",
    "GameEvent",
    "EVENT_ROOM_ENTERED",
    "EVENT_ROOM_COMPLETE",
    "EVENT_FLED",
    "EVENT_GAME_OVER",
]
