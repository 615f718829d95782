"""
Tests for purchases, upgrades and money conservation.
"""

import pytest

from tycoon import economy
from tycoon.exceptions import InvalidActionError
from tycoon.game import GamePhase
from tycoon.money import LogLevel
from tycoon.rules import Intent, IntentKind, apply_intent


def at_action(state, position):
    state.get_player("p1").position = position
    state.phase = GamePhase.ACTION
    return state


def total_money(state):
    return sum(p.money for p in state.players)


def test_buy_property_updates_owner_and_holdings(basic_game):
    p1 = basic_game.get_player("p1")
    economy.buy_property(basic_game, p1, 39)

    assert p1.money == 1100
    assert 39 in p1.properties
    assert basic_game.tile_state(39).owner_id == "p1"


def test_buy_owned_tile_raises(basic_game, give):
    give(basic_game, "p2", 39)
    with pytest.raises(InvalidActionError):
        economy.buy_property(basic_game, basic_game.get_player("p1"), 39)


def test_buy_non_purchasable_raises(basic_game):
    with pytest.raises(InvalidActionError):
        economy.buy_property(basic_game, basic_game.get_player("p1"), 4)


def test_buy_unaffordable_is_rejected(basic_game, scripted):
    at_action(basic_game, 39)
    basic_game.get_player("p1").money = 10

    t = apply_intent(basic_game, Intent(IntentKind.BUY, "p1"), scripted())

    assert not t.accepted
    assert t.state.tile_state(39).owner_id is None
    assert t.state.get_player("p1").money == 10
    assert t.state.phase == GamePhase.ACTION


def test_buy_outside_action_is_rejected(basic_game, scripted):
    basic_game.get_player("p1").position = 39

    t = apply_intent(basic_game, Intent(IntentKind.BUY, "p1"), scripted())

    assert not t.accepted
    assert t.state.tile_state(39).owner_id is None


def test_buy_with_rationale_logs_decision(basic_game, scripted):
    at_action(basic_game, 39)

    t = apply_intent(basic_game, Intent(IntentKind.BUY, "p1", {"rationale": "Boardwalk!"}), scripted())

    assert t.accepted
    assert any(e.message == "Boardwalk!" for e in t.events)


def test_upgrade_with_full_group(basic_game, scripted, give):
    give(basic_game, "p1", 1, 3)

    t = apply_intent(basic_game, Intent(IntentKind.UPGRADE, "p1", {"tileId": 1}), scripted())

    assert t.accepted
    assert t.state.tile_state(1).buildings == 1
    assert t.state.get_player("p1").money == 1450
    assert t.state.phase == GamePhase.ROLLING


def test_upgrade_accepts_bare_tile_id(basic_game, scripted, give):
    give(basic_game, "p1", 1, 3)

    t = apply_intent(basic_game, Intent(IntentKind.UPGRADE, "p1", 3), scripted())

    assert t.accepted
    assert t.state.tile_state(3).buildings == 1


def test_upgrade_without_full_group_is_rejected(basic_game, scripted, give):
    give(basic_game, "p1", 1)

    t = apply_intent(basic_game, Intent(IntentKind.UPGRADE, "p1", {"tileId": 1}), scripted())

    assert not t.accepted
    assert t.state.tile_state(1).buildings == 0
    assert t.state.event_log.entries[-1].level == LogLevel.WARNING


def test_upgrade_at_top_tier_is_rejected(basic_game, scripted, give):
    give(basic_game, "p1", 1, 3)
    basic_game.tile_state(1).buildings = 5

    t = apply_intent(basic_game, Intent(IntentKind.UPGRADE, "p1", {"tileId": 1}), scripted())

    assert not t.accepted
    assert t.state.tile_state(1).buildings == 5


def test_upgrade_unaffordable_is_rejected(basic_game, scripted, give):
    give(basic_game, "p1", 1, 3)
    basic_game.get_player("p1").money = 40

    t = apply_intent(basic_game, Intent(IntentKind.UPGRADE, "p1", {"tileId": 1}), scripted())

    assert not t.accepted
    assert t.state.get_player("p1").money == 40


def test_upgrade_station_is_rejected(basic_game, scripted, give):
    give(basic_game, "p1", 5, 15, 25, 35)

    t = apply_intent(basic_game, Intent(IntentKind.UPGRADE, "p1", {"tileId": 5}), scripted())

    assert not t.accepted


def test_upgrade_unknown_tile_is_silent(basic_game, scripted):
    t = apply_intent(basic_game, Intent(IntentKind.UPGRADE, "p1", {"tileId": 99}), scripted())

    assert not t.accepted
    assert t.state is basic_game


def test_upgrade_by_other_player_is_rejected(basic_game, scripted, give):
    give(basic_game, "p2", 1, 3)

    t = apply_intent(basic_game, Intent(IntentKind.UPGRADE, "p2", {"tileId": 1}), scripted())

    assert not t.accepted
    assert t.state.tile_state(1).buildings == 0


def test_upgrade_while_card_is_shown_is_rejected(basic_game, scripted, give):
    give(basic_game, "p1", 1, 3)
    basic_game.phase = GamePhase.SHOWING_CARD

    t = apply_intent(basic_game, Intent(IntentKind.UPGRADE, "p1", {"tileId": 1}), scripted())

    assert not t.accepted


def test_rent_conserves_money(basic_game, scripted, give):
    give(basic_game, "p2", 6, 8, 9)
    basic_game.tile_state(8).buildings = 2
    basic_game.get_player("p1").position = 5
    before = total_money(basic_game)

    t = apply_intent(basic_game, Intent(IntentKind.ROLL, "p1"), scripted(dice=[(1, 2)]))

    assert t.state.get_player("p1").money == 1500 - 90
    assert total_money(t.state) == before


def test_owner_and_holdings_stay_consistent(basic_game, scripted):
    state = at_action(basic_game, 39)
    state = apply_intent(state, Intent(IntentKind.BUY, "p1"), scripted()).state

    for tile_id, tile in enumerate(state.tiles):
        for player in state.players:
            assert (tile.owner_id == player.player_id) == (tile_id in player.properties)
