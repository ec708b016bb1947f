import pytest

from scoundrel.engine import (
    EVENT_FLED,
    EVENT_GAME_OVER,
    EVENT_ROOM_COMPLETE,
    EVENT_ROOM_ENTERED,
    GameEngine,
    GameState,
)
from scoundrel.utils.events import EventBus
from scoundrel.utils.random_provider import RandomProvider


def snapshot(engine):
    room = engine.room
    return (
        engine.state,
        list(engine.deck.cards),
        room.cards if room else None,
        sorted(room.resolved_indices) if room else None,
        room.pending_index if room else None,
        engine.player.hp,
        engine.player.equipped_weapon,
        engine.player.weapon_ceiling,
        engine.player.used_potion_this_room,
        engine.fled_last_room,
        engine.discard_pile(),
        engine.message,
    )


def test_commands_before_start_are_rejected():
    engine = GameEngine(rng=RandomProvider(1))
    assert engine.state is GameState.MENU
    for result in (engine.flee(), engine.stay(), engine.select_card(0), engine.choose_combat(True),
                   engine.advance_to_next_room()):
        assert not result.ok
        assert "No game in progress" in result.message
    assert engine.player_status() is None
    assert engine.room_cards() == []
    assert engine.outcome() is None


def test_start_game_enters_first_room():
    engine = GameEngine(rng=RandomProvider(3))
    result = engine.start_game()
    assert result.ok
    assert result.state is GameState.ROOM_DECISION
    status = engine.player_status()
    assert status.room_number == 1
    assert status.hp == 20
    assert status.deck_remaining == 40
    assert status.discard_count == 0
    assert status.can_flee
    assert len(engine.room_cards()) == 4
    assert engine.card_accounting().total == 44


def test_invalid_selections_do_not_mutate(stacked_engine):
    engine = stacked_engine("3D", "8S", "6H", "JC")

    before = snapshot(engine)
    result = engine.select_card(0)
    assert not result.ok and "flee or stay" in result.message
    assert snapshot(engine) == before

    engine.stay()
    before = snapshot(engine)
    for bad in (-1, 4, 10, True, "1"):
        assert not engine.select_card(bad).ok
    assert not engine.stay().ok
    assert not engine.choose_combat(False).ok
    assert not engine.advance_to_next_room().ok
    assert snapshot(engine) == before

    engine.select_card(0)
    before = snapshot(engine)
    again = engine.select_card(0)
    assert not again.ok and "already interacted" in again.message
    assert snapshot(engine) == before


def test_pending_combat_blocks_other_commands(stacked_engine):
    engine = stacked_engine("3D", "8S", "6H", "JC")
    engine.stay()
    engine.select_card(1)
    assert engine.state is GameState.COMBAT_CHOICE
    view = engine.room_cards()[1]
    assert view.pending and not view.resolved

    before = snapshot(engine)
    blocked = engine.select_card(2)
    assert not blocked.ok
    assert "8 of Spades" in blocked.message
    assert not engine.flee().ok
    assert not engine.advance_to_next_room().ok
    assert snapshot(engine) == before

    assert engine.choose_combat(False).ok
    assert engine.player.hp == 12
    assert engine.state is GameState.CARD_INTERACTION


def test_flee_returns_room_to_bottom_of_deck(stacked_engine, card):
    engine = stacked_engine("2S", "3S", "4S", "5S")
    fled = set(engine.room.cards)
    result = engine.flee()
    assert result.ok
    assert set(engine.deck.cards[-4:]) == fled
    assert engine.player_status().deck_remaining == 40
    assert engine.player.room_number == 2
    assert engine.card_accounting().total == 44
    assert engine.player_status().can_flee is False
    assert [v.card for v in engine.room_cards()] == [card("2C"), card("3C"), card("4C"), card("5C")]


def test_flee_only_before_facing_the_room(stacked_engine):
    engine = stacked_engine("3D", "8S", "6H", "JC")
    engine.stay()
    before = snapshot(engine)
    result = engine.flee()
    assert not result.ok
    assert "before facing" in result.message
    assert snapshot(engine) == before


def test_second_potion_in_room_heals_nothing(stacked_engine):
    engine = stacked_engine("8S", "5H", "6H", "2D")
    engine.stay()
    engine.select_card(0)
    engine.choose_combat(False)
    assert engine.player.hp == 12

    engine.select_card(1)
    assert engine.player.hp == 17
    wasted = engine.select_card(2)
    assert wasted.ok
    assert "no effect" in wasted.message
    assert engine.player.hp == 17
    assert engine.state is GameState.ROOM_COMPLETE
    assert len(engine.discard_pile()) == 3

    engine.advance_to_next_room()
    assert engine.player_status().used_potion_this_room is False


def test_potion_at_full_hp_still_uses_the_room_potion(stacked_engine):
    engine = stacked_engine("2H", "9S", "7H", "2D")
    engine.stay()
    engine.select_card(0)
    assert engine.player.hp == 20
    assert engine.player.used_potion_this_room
    engine.select_card(1)
    engine.choose_combat(False)
    engine.select_card(2)
    assert engine.player.hp == 11


def test_replacing_weapon_discards_old_one(stacked_engine, card):
    engine = stacked_engine("3D", "5S", "9D", "6S")
    engine.stay()
    engine.select_card(0)
    engine.select_card(1)
    engine.choose_combat(True)
    assert engine.player.weapon_ceiling == 5

    engine.select_card(2)
    assert engine.player.equipped_weapon == card("9D")
    assert engine.player.weapon_ceiling is None
    assert engine.discard_pile()[0] == card("3D")
    assert engine.player_status().weapon_history == []
    assert engine.card_accounting().total == 44


def test_defeat_is_terminal(stacked_engine, card):
    engine = stacked_engine("AS", "AC", "KS", "QS")
    engine.stay()
    engine.select_card(0)
    engine.choose_combat(False)
    assert engine.player.hp == 6
    engine.select_card(1)
    result = engine.choose_combat(False)
    assert result.ok
    assert "defeated" in result.message
    assert engine.state is GameState.GAME_OVER
    assert engine.discard_pile()[0] == card("AC")

    outcome = engine.outcome()
    assert not outcome.won
    assert outcome.final_hp == 0
    assert outcome.rooms_reached == 1
    assert outcome.killed_by == "Ace of Clubs"

    for later in (engine.select_card(2), engine.flee(), engine.advance_to_next_room()):
        assert not later.ok
        assert "game is over" in later.message
    assert engine.card_accounting().total == 44


def test_carry_over_into_short_final_room(stacked_engine, leave_in_deck, card):
    engine = stacked_engine("2H", "3H", "4H", "5H")
    leave_in_deck(engine, "6S", "7S")
    engine.stay()
    for i in range(3):
        engine.select_card(i)
    engine.advance_to_next_room()

    room = engine.room
    assert list(room.cards) == [card("6S"), card("7S"), card("5H")]
    assert room.carried_index == 2
    assert room.is_final
    assert room.required_interactions == 3
    assert not engine.can_flee
    assert engine.card_accounting().total == 44


def test_victory_when_deck_runs_out_with_card_left_over(stacked_engine, leave_in_deck):
    engine = stacked_engine("2H", "3H", "4H", "5H")
    leave_in_deck(engine, "6S", "7S", "8S")
    engine.stay()
    for i in range(3):
        engine.select_card(i)
    engine.advance_to_next_room()

    room = engine.room
    assert room.size == 4 and not room.is_final
    assert engine.deck.is_empty()
    engine.stay()
    engine.select_card(3)
    engine.select_card(0)
    engine.choose_combat(False)
    engine.select_card(1)
    engine.choose_combat(False)
    assert engine.state is GameState.ROOM_COMPLETE
    assert engine.player.hp == 7

    result = engine.advance_to_next_room()
    assert result.ok and "VICTORY" in result.message
    assert engine.won is True
    assert engine.outcome().rooms_reached == 2
    accounting = engine.card_accounting()
    assert accounting.in_play == 0
    assert accounting.total == 44


def test_new_game_replaces_previous(stacked_engine):
    engine = stacked_engine("AS", "AC", "KS", "QS")
    engine.flee()
    result = engine.start_game()
    assert result.ok
    assert engine.player.room_number == 1
    assert engine.flee_count == 0
    assert engine.fled_last_room is False
    assert engine.discard_pile() == []
    assert engine.card_accounting().total == 44


def test_events_are_published():
    bus = EventBus()
    seen = []
    for name in (EVENT_ROOM_ENTERED, EVENT_ROOM_COMPLETE, EVENT_FLED, EVENT_GAME_OVER):
        bus.subscribe(name, lambda payload, name=name: seen.append((name, payload)))
    engine = GameEngine(rng=RandomProvider(11), events=bus)
    engine.start_game()
    engine.flee()
    names = [n for n, _ in seen]
    assert names == [EVENT_ROOM_ENTERED, EVENT_FLED, EVENT_ROOM_ENTERED]
    assert seen[0][1]["room_number"] == 1


def _play_randomly(engine, policy_rng):
    """Drive the engine with random legal commands until the game ends."""
    steps = 0
    weapon = None
    ceiling = None
    while not engine.is_over:
        steps += 1
        assert steps < 1000, "game did not terminate"
        state = engine.state
        if state is GameState.ROOM_DECISION:
            if engine.can_flee and policy_rng.random() < 0.3:
                result = engine.flee()
            else:
                result = engine.stay()
        elif state is GameState.CARD_INTERACTION:
            choices = [v.index for v in engine.room_cards() if not v.resolved]
            result = engine.select_card(choices[policy_rng.randbelow(len(choices))])
        elif state is GameState.COMBAT_CHOICE:
            result = engine.choose_combat(policy_rng.random() < 0.7)
        else:
            assert state is GameState.ROOM_COMPLETE
            result = engine.advance_to_next_room()
        assert result.ok, result.message

        assert engine.card_accounting().total == 44
        p = engine.player
        assert 0 <= p.hp <= p.max_hp
        if p.equipped_weapon is weapon and ceiling is not None:
            assert p.weapon_ceiling is not None and p.weapon_ceiling <= ceiling
        weapon, ceiling = p.equipped_weapon, p.weapon_ceiling
    return engine.outcome()


@pytest.mark.parametrize("seed", range(25))
def test_random_legal_play_keeps_invariants(seed):
    engine = GameEngine(rng=RandomProvider(seed))
    engine.start_game()
    outcome = _play_randomly(engine, RandomProvider(seed + 1000))
    if outcome.won:
        assert engine.deck.is_empty()
        assert outcome.final_hp > 0
    else:
        assert outcome.final_hp == 0
