from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Mapping

from ..constants import STARTING_HP
from .errors import StatsError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


@dataclass
class StatsRecord:
    """Lifetime statistics for one player.

    ``total_rooms`` accumulates rooms reached across all games; ``best_room``
    is the furthest single run.
    """

    version: int = SCHEMA_VERSION
    played: int = 0
    won: int = 0
    best_room: int = 0
    total_rooms: int = 0
    highest_hp: int = STARTING_HP
    total_flees: int = 0
    longest_streak: int = 0
    current_streak: int = 0

    @property
    def win_rate(self) -> int:
        """Win percentage rounded to the nearest integer."""
        if self.played == 0:
            return 0
        return round(self.won * 100 / self.played)

    def record(self, outcome: Mapping[str, Any]) -> "StatsRecord":
        """Fold one game outcome (``GameOutcome.to_dict()``) into the counters."""
        try:
            won = bool(outcome["won"])
            rooms = int(outcome["rooms_reached"])
            final_hp = int(outcome["final_hp"])
            flees = int(outcome.get("flee_count") or 0)
        except (KeyError, TypeError, ValueError) as exc:
            raise StatsError(f"Malformed game outcome: {outcome!r}") from exc

        self.played += 1
        if won:
            self.won += 1
            self.current_streak += 1
            self.longest_streak = max(self.longest_streak, self.current_streak)
        else:
            self.current_streak = 0
        self.best_room = max(self.best_room, rooms)
        self.total_rooms += rooms
        self.highest_hp = max(self.highest_hp, final_hp)
        self.total_flees += flees
        logger.debug("Recorded outcome: won=%s rooms=%d hp=%d flees=%d", won, rooms, final_hp, flees)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StatsRecord":
        if not isinstance(data, Mapping):
            raise StatsError("Stats payload must be a JSON object")
        version = data.get("version") or 0
        if not isinstance(version, int):
            raise StatsError(f"Stats schema version must be an integer, got {version!r}")
        if version > SCHEMA_VERSION:
            raise StatsError(f"Stats schema version {version} is newer than supported {SCHEMA_VERSION}")
        if version < SCHEMA_VERSION:
            data = migrate(data)
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        for name, value in values.items():
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise StatsError(f"Stats field {name} must be a non-negative integer, got {value!r}")
        return cls(**values)

    def format_lines(self) -> List[str]:
        return [
            f"Games played:   {self.played}",
            f"Games won:      {self.won}",
            f"Win rate:       {self.win_rate}%",
            f"Best run:       Room {self.best_room}",
            f"Rooms explored: {self.total_rooms}",
            f"Highest HP:     {self.highest_hp}",
            f"Current streak: {self.current_streak}",
            f"Longest streak: {self.longest_streak}",
            f"Times fled:     {self.total_flees}",
        ]


# Field renames between the unversioned layout and schema 1.
_LEGACY_KEYS = {
    "bestRoom": "best_room",
    "totalCards": "total_rooms",
    "highestHP": "highest_hp",
    "totalFlees": "total_flees",
    "longestStreak": "longest_streak",
    "currentStreak": "current_streak",
}


def migrate(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Bring an older stats payload up to the current schema.

    Missing counters take their defaults.
    """
    migrated: Dict[str, Any] = asdict(StatsRecord())
    for key, value in data.items():
        if value is None:
            continue
        migrated[_LEGACY_KEYS.get(key, key)] = value
    migrated["version"] = SCHEMA_VERSION
    logger.info("Migrated stats from schema %s to %s", data.get("version") or 0, SCHEMA_VERSION)
    return migrated
