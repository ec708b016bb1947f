"""Persistent statistics across games.

- StatsRecord: versioned counters (played, won, best room, streaks, flees)
- StatsManager: atomic JSON storage with a .bak backup and recovery
"""

from .errors import CorruptStatsError, StatsError
from .manager import StatsManager
from .models import SCHEMA_VERSION, StatsRecord

__all__ = [
    "SCHEMA_VERSION",
    "StatsRecord",
    "StatsManager",
    "StatsError",
    "CorruptStatsError",
]
