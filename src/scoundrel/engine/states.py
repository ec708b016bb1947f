from enum import Enum


class GameState(Enum):
    """Phases of a game. GAME_OVER absorbs every command but a new game."""

    MENU = "menu"
    ROOM_DECISION = "room-decision"
    CARD_INTERACTION = "card-interaction"
    COMBAT_CHOICE = "combat-choice"
    ROOM_COMPLETE = "room-complete"
    GAME_OVER = "game-over"
