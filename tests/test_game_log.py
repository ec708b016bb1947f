import json

from scoundrel.engine.log import (
    ACTION,
    CARD_MOVEMENT,
    COMBAT,
    STATE_TRANSITION,
    STATUS_UPDATE,
    WEAPON_CHANGE,
    GameLog,
)


def test_events_are_numbered_and_filterable():
    log = GameLog()
    log.add(ACTION, "first")
    log.add(COMBAT, "second", damage=3)
    log.add(ACTION, "third")

    assert [e.seq for e in log.events()] == [1, 2, 3]
    assert [e.message for e in log.by_type(ACTION)] == ["first", "third"]
    assert log.by_type(COMBAT)[0].data == {"damage": 3}
    assert log.events()[0].data is None
    assert [e.message for e in log.recent(2)] == ["second", "third"]
    assert log.recent(0) == []
    assert len(log) == 3

    log.clear()
    assert len(log) == 0
    assert log.add(ACTION, "again").seq == 1


def test_to_json_is_plain_data():
    log = GameLog()
    log.add(STATUS_UPDATE, "Room 1", hp=20)
    payload = json.loads(log.to_json())
    assert payload == [{"seq": 1, "type": "status-update", "message": "Room 1", "data": {"hp": 20}}]


def test_engine_logs_a_full_room(stacked_engine):
    engine = stacked_engine("3D", "8S", "6H", "JC")
    engine.stay()
    engine.select_card(0)
    engine.select_card(1)
    engine.choose_combat(True)
    engine.select_card(2)

    log = engine.log
    drawn = [e for e in log.by_type(CARD_MOVEMENT) if e.data["reason"] == "drawn"]
    assert len(drawn) == 4
    assert [e.data["reason"] for e in log.by_type(CARD_MOVEMENT)][4:] == [
        "equip-weapon",
        "defeated-in-combat",
        "potion-consumed",
    ]

    fights = log.by_type(COMBAT)
    assert len(fights) == 1
    assert fights[0].data["method"] == "weapon"
    assert fights[0].data["damage"] == 5

    changes = [e.data["change"] for e in log.by_type(WEAPON_CHANGE)]
    assert changes == ["reset", "locked"]

    dests = [e.data["dest"] for e in log.by_type(STATE_TRANSITION)]
    assert dests[0] == "room-decision"
    assert dests[-1] == "room-complete"
    assert "combat-choice" in dests


def test_rejected_commands_are_not_logged(stacked_engine):
    engine = stacked_engine("3D", "8S", "6H", "JC")
    before = len(engine.log)
    engine.select_card(0)
    engine.advance_to_next_room()
    assert len(engine.log) == before


def test_flee_logs_cards_to_deck_bottom(stacked_engine):
    engine = stacked_engine("2S", "3S", "4S", "5S")
    engine.flee()
    fled = [e for e in engine.log.by_type(CARD_MOVEMENT) if e.data["reason"] == "fled"]
    assert len(fled) == 4
    assert {e.data["dest"] for e in fled} == {"deck-bottom"}


def test_new_game_clears_the_log(stacked_engine):
    engine = stacked_engine("2S", "3S", "4S", "5S")
    engine.flee()
    engine.start_game()
    assert engine.log.events()[0].seq == 1
    assert not [e for e in engine.log.events() if e.data and e.data.get("reason") == "fled"]
