"""
Tests for the host/replica pipeline: sequencing, broadcast, card reveal,
automated seats and the in-process relay.
"""

import asyncio

import pytest

from server.relay import Relay
from tycoon.agents.base import DecisionProvider
from tycoon.config import GameConfig
from tycoon.game import GamePhase, create_game
from tycoon.movement import send_to_jail
from tycoon.player import Player
from tycoon.rules import Intent, IntentKind
from tycoon.session import HostSession, IntentResult, ReplicaSession
from tycoon.snapshot import snapshot_message


async def next_matching(queue, predicate, timeout=2.0):
    async def _scan():
        while True:
            msg = await queue.get()
            if predicate(msg):
                return msg

    return await asyncio.wait_for(_scan(), timeout)


@pytest.mark.asyncio
async def test_accepted_intent_bumps_seq_and_broadcasts(basic_game, scripted):
    host = HostSession("g1", basic_game, rng=scripted(dice=[(1, 2)]))
    queue = await host.subscribe()
    await host.start()
    try:
        assert queue.get_nowait()["seq"] == 0

        result = await host.submit(Intent(IntentKind.ROLL, "p1"))

        assert result == IntentResult(True, "", 1)
        msg = await asyncio.wait_for(queue.get(), 1)
        assert msg["seq"] == 1
        assert msg["gameId"] == "g1"
        assert msg["state"]["players"][0]["position"] == 3
        assert msg["state"]["phase"] == "ACTION"
    finally:
        await host.stop()


@pytest.mark.asyncio
async def test_rejection_is_not_broadcast(basic_game, scripted):
    host = HostSession("g1", basic_game, rng=scripted(dice=[(1, 2)]))
    queue = await host.subscribe()
    await host.start()
    try:
        queue.get_nowait()

        result = await host.submit(Intent(IntentKind.ROLL, "p2"))

        assert not result.accepted
        assert result.seq == 0
        assert queue.empty()

        await host.submit(Intent(IntentKind.ROLL, "p1"))
        msg = await asyncio.wait_for(queue.get(), 1)
        assert msg["seq"] == 1
        # The earlier warning rides along with the next broadcast
        assert any(entry["type"] == "warning" for entry in msg["state"]["logs"])
    finally:
        await host.stop()


@pytest.mark.asyncio
async def test_card_reveal_is_scheduled(basic_game, scripted):
    host = HostSession("g1", basic_game, rng=scripted(dice=[(3, 4)], cards=[1]))
    queue = await host.subscribe()
    await host.start()
    try:
        result = await host.submit(Intent(IntentKind.ROLL, "p1"))
        assert result.accepted
        assert host.state.phase in (GamePhase.SHOWING_CARD, GamePhase.END_TURN)

        msg = await next_matching(queue, lambda m: m["seq"] == 2)

        assert msg["state"]["phase"] == "END_TURN"
        assert msg["state"]["currentCard"] is None
        assert msg["state"]["players"][0]["money"] == 1700
    finally:
        await host.stop()


@pytest.mark.asyncio
async def test_stop_cancels_pending_reveal(two_players, scripted):
    state = create_game(GameConfig(card_reveal_delay=30.0), two_players)
    host = HostSession("g1", state, rng=scripted(dice=[(3, 4)], cards=[1]))
    await host.start()

    await host.submit(Intent(IntentKind.ROLL, "p1"))
    await host.stop()

    assert host.seq == 1
    assert host.state.phase == GamePhase.SHOWING_CARD
    assert not host.running


@pytest.mark.asyncio
async def test_automated_seat_plays_its_turn(game_config, scripted):
    players = [Player("p1", "Robo", is_automated=True), Player("p2", "Bob", is_host=True)]
    host = HostSession("g1", create_game(game_config, players), rng=scripted(dice=[(1, 2)]))
    queue = await host.subscribe()
    await host.start()
    try:
        msg = await next_matching(queue, lambda m: m["state"]["currentPlayerId"] == "p2")

        state = msg["state"]
        assert state["tiles"][3]["ownerId"] == "p1"
        assert state["players"][0]["money"] == 1440
        assert any(entry["eventType"] == "decision" for entry in state["logs"])
        assert state["phase"] == "ROLLING"
    finally:
        await host.stop()


@pytest.mark.asyncio
async def test_automated_seat_pays_bail_when_rich(game_config, scripted):
    players = [Player("p1", "Robo", is_automated=True), Player("p2", "Bob", is_host=True)]
    state = create_game(game_config, players)
    send_to_jail(state, state.get_player("p1"), "test")
    state.phase = GamePhase.ROLLING
    host = HostSession("g1", state, rng=scripted(dice=[(1, 2)]))
    queue = await host.subscribe()
    await host.start()
    try:
        msg = await next_matching(queue, lambda m: m["state"]["currentPlayerId"] == "p2")

        releases = [e for e in msg["state"]["logs"] if e["eventType"] == "jail_release"]
        assert releases[0]["details"]["method"] == "bail"
        assert msg["state"]["players"][0]["position"] == 13
        assert msg["state"]["players"][0]["money"] == 1500 - 50 - 140
    finally:
        await host.stop()


class BrokenProvider(DecisionProvider):
    async def decide(self, state, player_id):
        raise RuntimeError("advisor offline")


@pytest.mark.asyncio
async def test_automated_seat_survives_provider_failure(game_config, scripted):
    players = [Player("p1", "Robo", is_automated=True), Player("p2", "Bob", is_host=True)]
    host = HostSession(
        "g1",
        create_game(game_config, players),
        rng=scripted(dice=[(1, 2)]),
        decision_provider=BrokenProvider(),
    )
    queue = await host.subscribe()
    await host.start()
    try:
        msg = await next_matching(queue, lambda m: m["state"]["currentPlayerId"] == "p2")

        # Reserve rule: 1500 > 60 + 100
        assert msg["state"]["tiles"][3]["ownerId"] == "p1"
        assert msg["state"]["phase"] == "ROLLING"
    finally:
        await host.stop()


@pytest.mark.asyncio
async def test_leftover_reveal_timer_does_not_apply_next_card(scripted):
    config = GameConfig(seed=1, card_reveal_delay=0.5, automation_delay=0.0)
    players = [Player("p1", "Alice", is_host=True), Player("p2", "Bob"), Player("p3", "Charlie")]
    host = HostSession("g1", create_game(config, players), rng=scripted(dice=[(3, 4), (3, 4)], cards=[1, 1]))
    await host.start()
    try:
        await host.submit(Intent(IntentKind.ROLL, "p1"))
        assert host.state.phase == GamePhase.SHOWING_CARD
        await asyncio.sleep(0.3)

        assert (await host.submit(Intent(IntentKind.SURRENDER, "p1"))).accepted
        assert (await host.submit(Intent(IntentKind.ROLL, "p2"))).accepted
        assert host.state.phase == GamePhase.SHOWING_CARD

        # p1's timer has fired by now; p2's card must still be on display
        await asyncio.sleep(0.35)
        assert host.state.phase == GamePhase.SHOWING_CARD
        assert host.state.get_player("p2").money == 1500

        await asyncio.sleep(0.4)
        assert host.state.phase == GamePhase.END_TURN
        assert host.state.get_player("p2").money == 1700
    finally:
        await host.stop()


@pytest.mark.asyncio
async def test_stop_cancels_every_pending_reveal(scripted):
    config = GameConfig(seed=1, card_reveal_delay=30.0, automation_delay=0.0)
    players = [Player("p1", "Alice", is_host=True), Player("p2", "Bob"), Player("p3", "Charlie")]
    host = HostSession("g1", create_game(config, players), rng=scripted(dice=[(3, 4), (3, 4)], cards=[1, 1]))
    await host.start()

    await host.submit(Intent(IntentKind.ROLL, "p1"))
    await host.submit(Intent(IntentKind.SURRENDER, "p1"))
    await host.submit(Intent(IntentKind.ROLL, "p2"))
    assert len(host._reveal_tasks) == 2

    await host.stop()

    assert not host._reveal_tasks
    assert host.state.phase == GamePhase.SHOWING_CARD


def test_replica_drops_stale_snapshots(basic_game):
    replica = ReplicaSession("g1", "p2")

    assert replica.adopt(snapshot_message("g1", 2, basic_game))
    assert not replica.adopt(snapshot_message("g1", 1, basic_game))
    assert not replica.adopt(snapshot_message("g1", 2, basic_game))
    assert not replica.adopt(snapshot_message("other", 5, basic_game))
    assert replica.last_seq == 2


def test_replica_keeps_selection_across_snapshots(basic_game):
    replica = ReplicaSession("g1", "p2")
    replica.select_tile(5)

    replica.adopt(snapshot_message("g1", 1, basic_game))

    assert replica.selected_tile_id == 5
    assert replica.state.get_player("p1").money == 1500


@pytest.mark.asyncio
async def test_replica_only_forwards_intents():
    replica = ReplicaSession("g1", "p2")

    result = await replica.submit(Intent(IntentKind.SURRENDER, "p2"))

    assert result is None
    assert replica.outbox.get_nowait() == {"kind": "surrender", "playerId": "p2", "payload": None}
    assert replica.state is None


@pytest.mark.asyncio
async def test_relay_round_trip(basic_game, scripted):
    host = HostSession("g1", basic_game, rng=scripted(dice=[(1, 2)]))
    await host.start()
    relay = Relay(host)
    replica = ReplicaSession("g1", "p1")
    await relay.connect(replica)
    try:
        await asyncio.wait_for(replica.wait_for_seq(0), 1)

        await replica.submit(Intent(IntentKind.ROLL, "p1"))
        state = await asyncio.wait_for(replica.wait_for_seq(1), 1)

        assert state.get_player("p1").position == 3
        assert state.phase == GamePhase.ACTION
        assert host.seq == 1
    finally:
        await relay.close()
        await host.stop()
