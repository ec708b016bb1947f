from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .cards import Card
from .player import Player

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CombatOptions:
    """What the player is offered after picking a monster."""

    monster: Card
    weapon: Optional[Card]
    can_use_weapon: bool
    barehanded_damage: int
    weapon_damage: Optional[int]


@dataclass(frozen=True)
class CombatResult:
    """Result of fighting one monster."""

    monster: Card
    requested_weapon: bool
    used_weapon: bool
    weapon: Optional[Card]
    damage: int
    hp_before: int
    hp_after: int
    ceiling_before: Optional[int]
    ceiling_after: Optional[int]

    @property
    def defeated(self) -> bool:
        return self.hp_after == 0

    @property
    def weapon_degraded(self) -> bool:
        """True when a previously used weapon had its ceiling lowered."""
        return (
            self.ceiling_before is not None
            and self.ceiling_after is not None
            and self.ceiling_after < self.ceiling_before
        )

    @property
    def method(self) -> str:
        return "weapon" if self.used_weapon else "barehanded"


def weapon_damage(monster_rank: int, weapon_rank: int) -> int:
    return max(0, monster_rank - weapon_rank)


def preview_combat(player: Player, monster: Card) -> CombatOptions:
    usable = player.can_use_weapon(monster.rank)
    return CombatOptions(
        monster=monster,
        weapon=player.equipped_weapon,
        can_use_weapon=usable,
        barehanded_damage=monster.rank,
        weapon_damage=weapon_damage(monster.rank, player.weapon_value) if usable else None,
    )


def resolve_combat(player: Player, monster: Card, use_weapon: bool) -> CombatResult:
    """Fight ``monster`` and apply the damage to ``player``.

    The request to use the weapon is re-checked against the degradation
    ceiling; an unusable weapon means a barehanded fight.
    """
    if not monster.is_monster:
        raise ValueError(f"{monster.name} is not a monster")

    rank = monster.rank
    effective = use_weapon and player.can_use_weapon(rank)
    if use_weapon and not effective:
        logger.debug("Weapon cannot be used on %s; fighting barehanded", monster)

    hp_before = player.hp
    ceiling_before = player.weapon_ceiling
    weapon = player.equipped_weapon

    if effective:
        damage = weapon_damage(rank, player.weapon_value)
        player.take_damage(damage)
        player.record_weapon_kill(monster)
    else:
        damage = rank
        player.take_damage(damage)

    result = CombatResult(
        monster=monster,
        requested_weapon=use_weapon,
        used_weapon=effective,
        weapon=weapon if effective else None,
        damage=damage,
        hp_before=hp_before,
        hp_after=player.hp,
        ceiling_before=ceiling_before,
        ceiling_after=player.weapon_ceiling,
    )
    logger.debug(
        "Combat: %s (%s) -> %d damage, HP %d->%d",
        monster,
        result.method,
        damage,
        hp_before,
        player.hp,
    )
    return result
