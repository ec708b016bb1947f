class ScoundrelError(Exception):
    """Base error for Scoundrel domain exceptions."""


class InvalidCommand(ScoundrelError):
    """Raised when a command cannot be performed in the current game state."""


class DeckCompositionError(ScoundrelError):
    """Raised when a deck is built from anything but the standard 44 cards."""


class SettingsError(ScoundrelError):
    """Raised when settings values are missing or invalid."""
