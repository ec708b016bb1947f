class StatsError(Exception):
    """Base exception for stats save/load errors."""


class CorruptStatsError(StatsError):
    """Raised when the stats file and its backup are both unreadable."""
