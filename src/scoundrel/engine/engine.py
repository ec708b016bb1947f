from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Tuple

from ..cards import Card, Category
from ..combat import CombatOptions, preview_combat, resolve_combat
from ..constants import CARDS_PER_ROOM, DECK_SIZE
from ..deck import Deck
from ..errors import InvalidCommand
from ..player import Player
from ..room import Room
from ..utils.events import EventBus
from ..utils.random_provider import RandomProvider
from .log import ACTION, COMBAT, STATE_TRANSITION, STATUS_UPDATE, WEAPON_CHANGE, GameLog
from .models import CardAccounting, CommandResult, GameOutcome, PlayerStatus, RoomCardView
from .states import GameState

logger = logging.getLogger(__name__)

DeckFactory = Callable[[RandomProvider], Deck]

# Events published on the engine's bus.
EVENT_ROOM_ENTERED = "room_entered"
EVENT_ROOM_COMPLETE = "room_complete"
EVENT_FLED = "fled"
EVENT_GAME_OVER = "game_over"


class GameEngine:
    """Runs one game of Scoundrel.

    Front-ends drive the game through the command methods (``start_game``,
    ``flee``, ``stay``, ``select_card``, ``choose_combat``,
    ``advance_to_next_room``) and read it back through the query methods.
    Every command returns a :class:`CommandResult`. A rejected command leaves
    the game exactly as it was.

    Args:
        rng: Random source for shuffling. Seed it for reproducible games.
        events: Bus on which room and game-over events are published.
        deck_factory: Builds the deck for a new game; defaults to a shuffled
            standard deck.
    """

    def __init__(
        self,
        rng: Optional[RandomProvider] = None,
        events: Optional[EventBus] = None,
        deck_factory: Optional[DeckFactory] = None,
    ) -> None:
        self.rng = rng or RandomProvider()
        self.events = events or EventBus()
        self.log = GameLog()
        self._deck_factory = deck_factory or (lambda rng: Deck(rng=rng))

        self.deck: Optional[Deck] = None
        self.player: Optional[Player] = None
        self.room: Optional[Room] = None
        self.state = GameState.MENU
        self.message = "Start a new game to enter the dungeon."
        self.fled_last_room = False
        self.won: Optional[bool] = None
        self.rooms_cleared = 0
        self.flee_count = 0
        self._discard: List[Card] = []
        self._killed_by: Optional[Card] = None

    # --- Commands ---

    def start_game(self) -> CommandResult:
        return self._run("start_game", self._start_game)

    def flee(self) -> CommandResult:
        return self._run("flee", self._flee)

    def stay(self) -> CommandResult:
        return self._run("stay", self._stay)

    def select_card(self, index: int) -> CommandResult:
        return self._run("select_card", self._select_card, index)

    def choose_combat(self, use_weapon: bool) -> CommandResult:
        return self._run("choose_combat", self._choose_combat, use_weapon)

    def advance_to_next_room(self) -> CommandResult:
        return self._run("advance_to_next_room", self._advance)

    def _run(self, name: str, handler: Callable[..., str], *args: Any) -> CommandResult:
        try:
            message = handler(*args)
        except InvalidCommand as exc:
            logger.info("%s rejected in state %s: %s", name, self.state.value, exc)
            return CommandResult(ok=False, message=str(exc), state=self.state)
        self.message = message
        return CommandResult(ok=True, message=message, state=self.state)

    # --- Queries ---

    @property
    def is_over(self) -> bool:
        return self.state is GameState.GAME_OVER

    @property
    def can_flee(self) -> bool:
        return (
            self.state is GameState.ROOM_DECISION
            and not self.fled_last_room
            and self.room is not None
            and not self.room.is_final
        )

    def player_status(self) -> Optional[PlayerStatus]:
        if self.player is None or self.deck is None:
            return None
        p = self.player
        return PlayerStatus(
            hp=p.hp,
            max_hp=p.max_hp,
            room_number=p.room_number,
            weapon=p.equipped_weapon,
            weapon_ceiling=p.weapon_ceiling,
            weapon_history=p.weapon_history(),
            deck_remaining=self.deck.remaining,
            discard_count=len(self._discard),
            can_flee=self.can_flee,
            fled_last_room=self.fled_last_room,
            used_potion_this_room=p.used_potion_this_room,
        )

    def room_cards(self) -> List[RoomCardView]:
        room = self.room
        if room is None:
            return []
        return [
            RoomCardView(
                index=i,
                card=card,
                resolved=room.is_resolved(i),
                pending=room.pending_index == i,
                carried=room.carried_index == i,
            )
            for i, card in enumerate(room.cards)
        ]

    def combat_options(self) -> Optional[CombatOptions]:
        if self.state is not GameState.COMBAT_CHOICE or self.room is None or self.room.pending_index is None:
            return None
        return preview_combat(self.player, self.room.card_at(self.room.pending_index))

    def discard_pile(self) -> List[Card]:
        """Discarded cards, most recent first."""
        return list(reversed(self._discard))

    def card_accounting(self) -> CardAccounting:
        return CardAccounting(
            deck=self.deck.remaining if self.deck else 0,
            in_play=len(self.room.unresolved_indices()) if self.room else 0,
            discard=len(self._discard),
            equipped=1 if self.player and self.player.equipped_weapon else 0,
        )

    def outcome(self) -> Optional[GameOutcome]:
        if not self.is_over:
            return None
        p = self.player
        return GameOutcome(
            won=bool(self.won),
            final_hp=p.hp,
            max_hp=p.max_hp,
            rooms_reached=p.room_number,
            rooms_cleared=self.rooms_cleared,
            flee_count=self.flee_count,
            weapon=p.equipped_weapon.name if p.equipped_weapon else None,
            killed_by=self._killed_by.name if self._killed_by else None,
            seed=self.rng.seed,
        )

    # --- Command handlers ---

    def _start_game(self) -> str:
        deck = self._deck_factory(self.rng)
        if len(deck) != DECK_SIZE:
            raise ValueError(f"New game deck must hold {DECK_SIZE} cards, got {len(deck)}")
        self.log.clear()
        self.deck = deck
        self.player = Player()
        self.room = None
        self.fled_last_room = False
        self.won = None
        self.rooms_cleared = 0
        self.flee_count = 0
        self._discard = []
        self._killed_by = None
        self.state = GameState.MENU
        self.log.add(ACTION, "New game started", deck_size=len(deck), seed=self.rng.seed)
        logger.info("New game started (seed=%s)", self.rng.seed)
        welcome = f"Welcome to Scoundrel! Survive all {DECK_SIZE} cards with HP > 0."
        return welcome + "\n" + self._enter_next_room(None)

    def _flee(self) -> str:
        room = self._require_room()
        if self.fled_last_room:
            raise InvalidCommand("Cannot flee twice in a row! You must face this room.")
        if room.is_final:
            raise InvalidCommand("Cannot flee the final room! You must face all remaining cards.")
        if self.state is not GameState.ROOM_DECISION:
            raise InvalidCommand("You can only flee before facing the room.")

        fled = list(room.cards)
        self.rng.shuffle(fled)
        self.deck.push_to_back(fled)
        for card in fled:
            self.log.card_moved(card, self._slot(room.cards.index(card)), "deck-bottom", "fled")
        self.fled_last_room = True
        self.flee_count += 1
        self.room = None
        self.log.add(
            ACTION,
            f"Fled room {self.player.room_number}",
            room_number=self.player.room_number,
            deck_remaining=self.deck.remaining,
        )
        self.events.publish(EVENT_FLED, {"room_number": self.player.room_number, "flee_count": self.flee_count})
        message = f"You fled the room! The {len(fled)} cards shuffle to the bottom of the deck."
        return message + "\n" + self._enter_next_room(None)

    def _stay(self) -> str:
        room = self._require_room()
        if self.state is not GameState.ROOM_DECISION:
            raise InvalidCommand("You are already facing this room.")
        self.log.add(ACTION, f"Stayed in room {self.player.room_number}", room_number=self.player.room_number)
        self._transition(GameState.CARD_INTERACTION, "stay")
        return f"You face the room. Choose {room.required_interactions} of {room.size} cards."

    def _select_card(self, index: int) -> str:
        room = self._require_room()
        if self.state is GameState.ROOM_DECISION:
            raise InvalidCommand("Decide whether to flee or stay first.")
        if self.state is GameState.COMBAT_CHOICE:
            pending = room.card_at(room.pending_index)
            raise InvalidCommand(f"Choose how to fight {pending.name} first.")
        if self.state is GameState.ROOM_COMPLETE:
            raise InvalidCommand("This room is complete. Advance to the next room.")
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < room.size:
            raise InvalidCommand("Invalid card selection!")
        if room.is_resolved(index):
            raise InvalidCommand("You already interacted with that card!")

        card = room.card_at(index)
        self.log.add(ACTION, f"Selected {card}", card=card.name, index=index, category=card.category.value)

        if card.category is Category.MONSTER:
            room.mark_pending(index)
            self._transition(GameState.COMBAT_CHOICE, "monster-selected")
            options = preview_combat(self.player, card)
            message = f"You selected {card.name}. Choose how to fight:"
            message += f"\n  barehanded: {options.barehanded_damage} damage"
            if options.can_use_weapon:
                message += f"\n  with {options.weapon.name}: {options.weapon_damage} damage"
            elif options.weapon is not None:
                message += f"\n  {options.weapon.name} cannot be used against this monster"
            return message
        if card.category is Category.WEAPON:
            message = self._equip(index, card)
        elif card.category is Category.POTION:
            message = self._drink(index, card)
        else:  # pragma: no cover - Category is closed
            raise ValueError(f"Unhandled card category: {card.category}")
        room.mark_resolved(index)
        return message + self._after_resolution()

    def _choose_combat(self, use_weapon: bool) -> str:
        room = self._require_room()
        if self.state is not GameState.COMBAT_CHOICE or room.pending_index is None:
            raise InvalidCommand("No monster selected for combat!")

        index = room.pending_index
        monster = room.card_at(index)
        result = resolve_combat(self.player, monster, bool(use_weapon))
        room.mark_resolved(index)
        self._discard_card(monster, self._slot(index), "defeated-in-combat")

        if result.used_weapon:
            message = (
                f"{monster.name} ({monster.rank}) vs {result.weapon.name} ({result.weapon.rank})"
                f" -> {result.damage} dmg ({result.hp_after}/{self.player.max_hp})"
            )
        else:
            message = (
                f"{monster.name} ({monster.rank}) barehanded"
                f" -> {result.damage} dmg ({result.hp_after}/{self.player.max_hp})"
            )
            if result.requested_weapon:
                message += "\nYour weapon could not be used against this monster."
        self.log.add(
            COMBAT,
            f"Combat: {monster} ({result.method}) -> {result.damage} damage",
            monster=monster.name,
            method=result.method,
            weapon=result.weapon.name if result.weapon else None,
            damage=result.damage,
            hp_before=result.hp_before,
            hp_after=result.hp_after,
        )
        if result.ceiling_after != result.ceiling_before:
            change = "degraded" if result.weapon_degraded else "locked"
            self.log.add(
                WEAPON_CHANGE,
                f"{self.player.equipped_weapon} {change}: usable below {result.ceiling_after}",
                weapon=self.player.equipped_weapon.name,
                change=change,
                previous_ceiling=result.ceiling_before,
                ceiling=result.ceiling_after,
            )

        if result.defeated:
            self._killed_by = monster
            return message + "\n\n" + self._finish(won=False)
        return message + self._after_resolution()

    def _advance(self) -> str:
        room = self._require_room()
        if self.state is not GameState.ROOM_COMPLETE:
            raise InvalidCommand("Finish the room before moving on.")

        carried = room.carry_over()
        for i in room.unresolved_indices():
            card = room.card_at(i)
            if carried is not None and i == carried[0]:
                self.log.card_moved(card, self._slot(i), "next-room", "carried-over")
                continue
            self._discard_card(card, self._slot(i), "auto-discard")
        self.log.add(ACTION, f"Left room {self.player.room_number}", room_number=self.player.room_number)
        self.room = None
        return self._enter_next_room(carried)

    # --- Internals ---

    def _require_room(self) -> Room:
        if self.state is GameState.MENU or self.player is None:
            raise InvalidCommand("No game in progress. Start a new game.")
        if self.state is GameState.GAME_OVER:
            raise InvalidCommand("The game is over. Start a new game.")
        if self.room is None:
            raise InvalidCommand("No room in progress!")
        return self.room

    def _enter_next_room(self, carried: Optional[Tuple[int, Card]]) -> str:
        if self.deck.is_empty():
            if carried is not None:
                self._discard_card(carried[1], "carry-over", "game-won")
            return self._finish(won=True)

        player = self.player
        player.room_number += 1
        player.reset_room_state()

        wanted = CARDS_PER_ROOM - (1 if carried is not None else 0)
        drawn = self.deck.draw(wanted)
        room = Room.assemble(drawn, carried)
        self.room = room
        for i, card in enumerate(room.cards):
            if i != room.carried_index:
                self.log.card_moved(card, "deck", self._slot(i), "drawn")
        self.log.add(
            STATUS_UPDATE,
            f"Room {player.room_number}: HP {player.hp}/{player.max_hp}, deck {self.deck.remaining}",
            room_number=player.room_number,
            hp=player.hp,
            max_hp=player.max_hp,
            deck_remaining=self.deck.remaining,
            discard_count=len(self._discard),
            cards=[c.name for c in room.cards],
            final=room.is_final,
        )
        self.events.publish(
            EVENT_ROOM_ENTERED,
            {
                "room_number": player.room_number,
                "cards": [c.name for c in room.cards],
                "carried": carried is not None,
                "final": room.is_final,
            },
        )

        message = f"Room {player.room_number}: you drew {len(drawn)} cards."
        if carried is not None:
            message += f"\nCarried over: {carried[1].name}"
        if room.is_final:
            message += f"\nFinal room! You must face all {room.size} cards."
        if self.fled_last_room:
            self._transition(GameState.CARD_INTERACTION, "forced-stay-after-flee")
            message += "\nYou fled last room - you cannot flee again!"
        else:
            self._transition(GameState.ROOM_DECISION, "room-entered")
        return message

    def _equip(self, index: int, card: Card) -> str:
        old = self.player.equip_weapon(card)
        self.log.card_moved(card, self._slot(index), "equipped", "equip-weapon")
        self.log.add(
            WEAPON_CHANGE,
            f"{card} equipped, no degradation history",
            weapon=card.name,
            change="reset",
            replaced=old.name if old else None,
        )
        if old is not None:
            self._discard_card(old, "equipped", "replaced")
        return f"Equipped {card.name} (was {old.name if old else 'nothing'})"

    def _drink(self, index: int, card: Card) -> str:
        player = self.player
        if player.used_potion_this_room:
            message = f"Already used a potion this room, {card.name} has no effect"
            self.log.add(ACTION, f"{card} wasted", potion=card.name, healed=0)
        else:
            healed = player.heal(card.value)
            player.used_potion_this_room = True
            message = f"Drank {card.name}: +{healed} HP -> {player.hp}/{player.max_hp}"
            self.log.add(ACTION, f"{card} drunk for {healed} HP", potion=card.name, healed=healed, hp=player.hp)
        self._discard_card(card, self._slot(index), "potion-consumed")
        return message

    def _after_resolution(self) -> str:
        room = self.room
        player = self.player
        if room.is_complete:
            self.fled_last_room = False
            self.rooms_cleared += 1
            self._transition(GameState.ROOM_COMPLETE, "required-cards-resolved")
            self.log.add(
                STATUS_UPDATE,
                f"Room {player.room_number} complete",
                room_number=player.room_number,
                hp=player.hp,
                deck_remaining=self.deck.remaining,
                discard_count=len(self._discard),
            )
            self.events.publish(EVENT_ROOM_COMPLETE, {"room_number": player.room_number, "hp": player.hp})
            return (
                "\n\nRoom complete!"
                f"\nStatus: {player.hp}/{player.max_hp} HP | Deck: {self.deck.remaining} cards"
            )
        self._transition(GameState.CARD_INTERACTION, "card-resolved")
        return (
            f"\n({room.resolved_count}/{room.required_interactions} cards resolved,"
            f" {room.remaining_interactions} remaining)"
        )

    def _finish(self, won: bool) -> str:
        self.won = won
        self._transition(GameState.GAME_OVER, "victory" if won else "defeat")
        outcome = self.outcome()
        self.log.add(
            STATUS_UPDATE,
            f"{'Victory' if won else 'Defeat'} in room {outcome.rooms_reached} with {outcome.final_hp} HP",
            **outcome.to_dict(),
        )
        self.events.publish(EVENT_GAME_OVER, outcome.to_dict())
        if won:
            return f"VICTORY! You survived all rooms with {self.player.hp} HP remaining!"
        return "You were defeated!"

    def _discard_card(self, card: Card, source: str, reason: str) -> None:
        self._discard.append(card)
        self.log.card_moved(card, source, "discard", reason, discard_count=len(self._discard))

    def _transition(self, new_state: GameState, trigger: str = "") -> None:
        old = self.state
        self.state = new_state
        if old is not new_state:
            self.log.add(
                STATE_TRANSITION,
                f"State: {old.value} -> {new_state.value}" + (f" ({trigger})" if trigger else ""),
                source=old.value,
                dest=new_state.value,
                trigger=trigger,
            )

    def _slot(self, index: int) -> str:
        return f"room-{self.player.room_number}[{index}]"
