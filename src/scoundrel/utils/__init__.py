"""Small shared helpers (random source, event bus)."""
from .events import EventBus
from .random_provider import RandomProvider

__all__ = ["EventBus", "RandomProvider"]
