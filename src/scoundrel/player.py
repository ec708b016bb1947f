from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .cards import Card
from .constants import MAX_HP, STARTING_HP

logger = logging.getLogger(__name__)


@dataclass
class Player:
    """
    The adventurer working through the dungeon.

    Attributes:
        hp: Current hit points, always within [0, max_hp].
        max_hp: Healing cap.
        equipped_weapon: The weapon card currently held, if any.
        weapon_ceiling: Strict upper bound on the monster rank the weapon may
            still be used against. None while the weapon is unused.
        defeated_monsters: Monsters killed with the current weapon, in order.
        used_potion_this_room: Set by the first potion resolved in a room.
        room_number: Rooms entered so far.
    """

    hp: int = STARTING_HP
    max_hp: int = MAX_HP
    equipped_weapon: Optional[Card] = None
    weapon_ceiling: Optional[int] = None
    defeated_monsters: List[Card] = field(default_factory=list)
    used_potion_this_room: bool = False
    room_number: int = 0

    def __post_init__(self) -> None:
        if self.max_hp <= 0:
            raise ValueError("max_hp must be positive")
        self.hp = max(0, min(self.max_hp, self.hp))

    @property
    def alive(self) -> bool:
        return self.hp > 0

    @property
    def weapon_value(self) -> int:
        return self.equipped_weapon.value if self.equipped_weapon else 0

    def take_damage(self, amount: int) -> int:
        """Apply damage, clamping at zero. Returns the HP actually lost."""
        if amount < 0:
            raise ValueError("Damage amount cannot be negative.")
        prev = self.hp
        self.hp = max(0, self.hp - amount)
        logger.debug("Player takes %d damage (HP: %d/%d)", amount, self.hp, self.max_hp)
        return prev - self.hp

    def heal(self, amount: int) -> int:
        """Heal by amount, not exceeding max HP. Returns actual healed amount."""
        if amount < 0:
            raise ValueError("Heal amount cannot be negative.")
        prev = self.hp
        self.hp = min(self.max_hp, self.hp + amount)
        healed = self.hp - prev
        if healed:
            logger.debug("Player heals %d HP (HP: %d/%d)", healed, self.hp, self.max_hp)
        return healed

    def equip_weapon(self, card: Card) -> Optional[Card]:
        """Equip ``card`` and return the weapon it replaces.

        The replaced weapon's degradation ceiling and kill history go with it.
        """
        if not card.is_weapon:
            raise ValueError(f"{card.name} is not a weapon")
        old = self.equipped_weapon
        self.equipped_weapon = card
        self.weapon_ceiling = None
        self.defeated_monsters = []
        logger.debug("Equipped %s (replacing %s)", card, old)
        return old

    def can_use_weapon(self, monster_rank: int) -> bool:
        if self.equipped_weapon is None:
            return False
        if self.weapon_ceiling is None:
            return True
        return monster_rank < self.weapon_ceiling

    def record_weapon_kill(self, monster: Card) -> None:
        """Lower the ceiling to the rank of a monster just killed with the weapon."""
        if self.equipped_weapon is None:
            return
        self.defeated_monsters.append(monster)
        if self.weapon_ceiling is None:
            self.weapon_ceiling = monster.rank
        else:
            self.weapon_ceiling = min(self.weapon_ceiling, monster.rank)

    def weapon_history(self) -> List[Card]:
        """Monsters killed with the current weapon, strongest first."""
        return sorted(self.defeated_monsters, key=lambda c: c.rank, reverse=True)

    def reset_room_state(self) -> None:
        self.used_potion_this_room = False
