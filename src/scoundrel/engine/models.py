from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..cards import Card
from .states import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of an engine command. Failed commands never change state."""

    ok: bool
    message: str
    state: GameState

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class PlayerStatus:
    hp: int
    max_hp: int
    room_number: int
    weapon: Optional[Card]
    weapon_ceiling: Optional[int]
    weapon_history: List[Card]
    deck_remaining: int
    discard_count: int
    can_flee: bool
    fled_last_room: bool
    used_potion_this_room: bool

    @property
    def weapon_name(self) -> str:
        return self.weapon.name if self.weapon else "None"


@dataclass(frozen=True)
class RoomCardView:
    """One slot of the current room as a front-end sees it."""

    index: int
    card: Card
    resolved: bool
    pending: bool
    carried: bool


@dataclass(frozen=True)
class CardAccounting:
    deck: int
    in_play: int
    discard: int
    equipped: int

    @property
    def total(self) -> int:
        return self.deck + self.in_play + self.discard + self.equipped


@dataclass
class GameOutcome:
    """Terminal result of a game, handed to the stats recorder and front-ends.

    ``rooms_reached`` is the number of the last room entered; ``rooms_cleared``
    counts rooms completed by staying.
    """

    won: bool
    final_hp: int
    max_hp: int
    rooms_reached: int
    rooms_cleared: int
    flee_count: int
    weapon: Optional[str] = None
    killed_by: Optional[str] = None
    seed: Optional[int] = None

    def title(self) -> str:
        return "Victory!" if self.won else "You Died"

    def subtitle(self) -> str:
        if self.won:
            return f"Survived all {self.rooms_reached} rooms with {self.final_hp} HP"
        return f"Fell in room {self.rooms_reached}"

    def format_lines(self, width: int = 60) -> List[str]:
        """Format the outcome into fixed-width text lines for any UI."""
        lines: List[str] = []
        lines.append(self.title().center(width))
        lines.append(self.subtitle().center(width))
        lines.append("".center(width, "-"))
        lines.append(f"Rooms reached: {self.rooms_reached}")
        lines.append(f"Rooms cleared: {self.rooms_cleared}")
        lines.append(f"Final HP: {self.final_hp}/{self.max_hp}")
        lines.append(f"Times fled: {self.flee_count}")
        lines.append(f"Weapon: {self.weapon or 'None'}")
        if self.killed_by:
            lines.append(f"Killed by: {self.killed_by}")
        if self.seed is not None:
            lines.append(f"Seed: {self.seed}")
        return lines

    def to_dict(self) -> dict:
        """Serialize for the stats recorder."""
        return {
            "won": self.won,
            "final_hp": self.final_hp,
            "max_hp": self.max_hp,
            "rooms_reached": self.rooms_reached,
            "rooms_cleared": self.rooms_cleared,
            "flee_count": self.flee_count,
            "weapon": self.weapon,
            "killed_by": self.killed_by,
            "seed": self.seed,
        }
