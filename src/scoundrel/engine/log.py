from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

CARD_MOVEMENT = "card-movement"
WEAPON_CHANGE = "weapon-change"
STATE_TRANSITION = "state-transition"
ACTION = "action"
COMBAT = "combat"
STATUS_UPDATE = "status-update"


@dataclass(frozen=True)
class GameEvent:
    """A numbered entry in the game log.

    Event types: "card-movement", "weapon-change", "state-transition",
    "action", "combat", "status-update".
    """

    seq: int
    type: str
    message: str
    data: Optional[Dict[str, Any]] = None


class GameLog:
    """In-memory record of everything that happened in the current game."""

    def __init__(self) -> None:
        self._events: List[GameEvent] = []
        self._counter = 0

    def add(self, event_type: str, message: str, **data: Any) -> GameEvent:
        self._counter += 1
        ev = GameEvent(seq=self._counter, type=event_type, message=message, data=data or None)
        self._events.append(ev)
        # Forward to standard logging for visibility if configured.
        if event_type == STATUS_UPDATE:
            logger.info("[%d] %s", ev.seq, message)
        else:
            logger.debug("[%d] %s", ev.seq, message)
        return ev

    def card_moved(self, card, source: str, dest: str, reason: str, **data: Any) -> GameEvent:
        return self.add(
            CARD_MOVEMENT,
            f"{card} {source} -> {dest} ({reason})",
            card=card.name,
            source=source,
            dest=dest,
            reason=reason,
            **data,
        )

    def events(self) -> List[GameEvent]:
        return list(self._events)

    def by_type(self, event_type: str) -> List[GameEvent]:
        return [e for e in self._events if e.type == event_type]

    def recent(self, count: int = 10) -> List[GameEvent]:
        if count <= 0:
            return []
        return self._events[-count:]

    def clear(self) -> None:
        self._events.clear()
        self._counter = 0

    def to_json(self) -> str:
        return json.dumps([asdict(e) for e in self._events], indent=2)

    def __len__(self) -> int:
        return len(self._events)
