"""
Tests specifically for jail mechanics.
"""

from tycoon.game import GamePhase
from tycoon.money import EventType, LogLevel
from tycoon.movement import send_to_jail
from tycoon.rules import Intent, IntentKind, apply_intent


def jail(state, player_id="p1", turns=0):
    player = state.get_player(player_id)
    send_to_jail(state, player, "test")
    player.jail_turns = turns
    state.phase = GamePhase.ROLLING


def test_jailed_double_releases_without_extra_roll(basic_game, scripted):
    jail(basic_game)

    t = apply_intent(basic_game, Intent(IntentKind.ROLL, "p1"), scripted(dice=[(3, 3)]))

    p1 = t.state.get_player("p1")
    assert not p1.in_jail
    assert p1.jail_turns == 0
    assert p1.consecutive_doubles == 0
    assert p1.position == 16
    assert t.state.phase == GamePhase.ACTION
    assert not t.state.waiting_for_doubles

    t = apply_intent(t.state, Intent(IntentKind.DECLINE, "p1"), scripted())
    assert t.state.phase == GamePhase.END_TURN


def test_jailed_non_double_counts_attempt(basic_game, scripted):
    jail(basic_game)

    t = apply_intent(basic_game, Intent(IntentKind.ROLL, "p1"), scripted(dice=[(1, 2)]))

    p1 = t.state.get_player("p1")
    assert p1.in_jail
    assert p1.jail_turns == 1
    assert p1.position == 10
    assert t.state.phase == GamePhase.END_TURN


def test_forced_bail_on_third_failed_attempt(basic_game, scripted):
    """
    After two failed attempts the third non-double forces bail and movement.
    """
    jail(basic_game, turns=2)

    t = apply_intent(basic_game, Intent(IntentKind.ROLL, "p1"), scripted(dice=[(1, 2)]))

    p1 = t.state.get_player("p1")
    assert not p1.in_jail
    assert p1.jail_turns == 0
    assert p1.money == 1450
    assert p1.position == 13
    assert t.state.phase == GamePhase.ACTION
    release = [e for e in t.events if e.event_type == EventType.JAIL_RELEASE]
    assert release and release[0].details["method"] == "forced_bail"


def test_forced_bail_can_bankrupt(basic_game, scripted):
    jail(basic_game, turns=2)
    basic_game.get_player("p1").money = 20

    t = apply_intent(basic_game, Intent(IntentKind.ROLL, "p1"), scripted(dice=[(1, 2)]))

    assert t.state.get_player("p1").is_bankrupt
    assert t.state.phase == GamePhase.GAME_OVER
    assert t.state.winner_id == "p2"


def test_pay_bail(basic_game, scripted):
    jail(basic_game)

    t = apply_intent(basic_game, Intent(IntentKind.PAY_BAIL, "p1"), scripted())

    p1 = t.state.get_player("p1")
    assert t.accepted
    assert not p1.in_jail
    assert p1.money == 1450
    assert t.state.phase == GamePhase.ROLLING


def test_pay_bail_below_fee_is_rejected(basic_game, scripted):
    jail(basic_game)
    basic_game.get_player("p1").money = 30

    t = apply_intent(basic_game, Intent(IntentKind.PAY_BAIL, "p1"), scripted())

    assert not t.accepted
    assert t.state.get_player("p1").in_jail
    assert t.state.get_player("p1").money == 30
    assert t.state.event_log.entries[-1].level == LogLevel.WARNING


def test_pay_bail_when_free_is_rejected(basic_game, scripted):
    t = apply_intent(basic_game, Intent(IntentKind.PAY_BAIL, "p1"), scripted())

    assert not t.accepted
    assert t.state.get_player("p1").money == 1500


def test_go_to_jail_tile_ends_turn_even_on_double(basic_game, scripted):
    basic_game.get_player("p1").position = 28

    t = apply_intent(basic_game, Intent(IntentKind.ROLL, "p1"), scripted(dice=[(1, 1)]))

    p1 = t.state.get_player("p1")
    assert p1.in_jail
    assert p1.position == 10
    assert p1.money == 1500  # no salary on the way to jail
    assert t.state.phase == GamePhase.END_TURN
    assert not t.state.waiting_for_doubles
