"""
Action dispatcher: validates intents and applies them as pure transitions.

`apply_intent` never mutates the state it is given. It returns a
`Transition` carrying the new state and the log entries the step produced.
A rejected intent yields a state that differs from the input only by one
appended warning entry.
"""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from tycoon import economy
from tycoon.exceptions import InvalidActionError
from tycoon.game import GamePhase, GameState
from tycoon.landing import apply_pending_card, finish_move
from tycoon.money import EventType, LogEntry, LogLevel
from tycoon.player import PlayerState
from tycoon.rotation import advance_turn, settle_bankruptcy
from tycoon.turn import take_roll

logger = logging.getLogger(__name__)


class IntentKind(Enum):
    """Kinds of player intents."""

    ROLL = "roll"
    BUY = "buy"
    DECLINE = "decline"
    PAY_BAIL = "pay-bail"
    UPGRADE = "upgrade"
    END_TURN = "end-turn"
    SURRENDER = "surrender"


@dataclass
class Intent:
    """A request from a participant to perform an action."""

    kind: IntentKind
    player_id: str
    payload: Any = None

    @property
    def tile_id(self) -> Optional[int]:
        """Target tile of an upgrade, accepted as a bare int or {"tileId": int}."""
        payload = self.payload
        if isinstance(payload, dict):
            payload = payload.get("tileId", payload.get("tile_id"))
        if isinstance(payload, bool) or not isinstance(payload, int):
            return None
        return payload

    @property
    def rationale(self) -> Optional[str]:
        if isinstance(self.payload, dict):
            return self.payload.get("rationale")
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "playerId": self.player_id, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Intent":
        return cls(IntentKind(data["kind"]), data["playerId"], data.get("payload"))


@dataclass
class Transition:
    """Result of applying one intent."""

    state: GameState
    events: List[LogEntry] = field(default_factory=list)
    accepted: bool = True
    reason: str = ""


def _reject(state: GameState, player_id: Optional[str], reason: str) -> Transition:
    rejected = state.copy()
    entry = rejected.log(EventType.REJECTED, reason, player_id, LogLevel.WARNING)
    logger.debug("Rejected intent from %s: %s", player_id, reason)
    return Transition(rejected, [entry], accepted=False, reason=reason)


def _after_decision(state: GameState) -> None:
    finish_move(state, state.waiting_for_doubles)


def _handle_roll(state: GameState, player: PlayerState, intent: Intent, rng: random.Random) -> None:
    if state.phase != GamePhase.ROLLING:
        raise InvalidActionError(f"Cannot roll during {state.phase.value}.")
    state.waiting_for_doubles = False
    take_roll(state, player, rng)


def _handle_buy(state: GameState, player: PlayerState, intent: Intent, rng: random.Random) -> None:
    if state.phase != GamePhase.ACTION:
        raise InvalidActionError("There is nothing to buy right now.")
    if intent.rationale:
        state.log(EventType.DECISION, intent.rationale, player.player_id, decision="buy")
    economy.buy_property(state, player, player.position)
    _after_decision(state)


def _handle_decline(state: GameState, player: PlayerState, intent: Intent, rng: random.Random) -> None:
    if state.phase != GamePhase.ACTION:
        raise InvalidActionError("There is nothing to decline right now.")
    if intent.rationale:
        state.log(EventType.DECISION, intent.rationale, player.player_id, decision="decline")
    state.log(
        EventType.DECLINE,
        f"{player.name} declines to buy {state.tile_spec(player.position).name}.",
        player.player_id,
        tile_id=player.position,
    )
    _after_decision(state)


def _handle_pay_bail(state: GameState, player: PlayerState, intent: Intent, rng: random.Random) -> None:
    if state.phase != GamePhase.ROLLING:
        raise InvalidActionError("Bail can only be paid before rolling.")
    economy.pay_bail(state, player)


def _handle_upgrade(state: GameState, player: PlayerState, intent: Intent, rng: random.Random) -> None:
    if state.phase == GamePhase.SHOWING_CARD:
        raise InvalidActionError("Wait for the card to be resolved.")
    economy.upgrade_property(state, player, intent.tile_id)


def _handle_end_turn(state: GameState, player: PlayerState, intent: Intent, rng: random.Random) -> None:
    if state.phase != GamePhase.END_TURN:
        raise InvalidActionError(f"Cannot end the turn during {state.phase.value}.")
    advance_turn(state)


_HANDLERS = {
    IntentKind.ROLL: _handle_roll,
    IntentKind.BUY: _handle_buy,
    IntentKind.DECLINE: _handle_decline,
    IntentKind.PAY_BAIL: _handle_pay_bail,
    IntentKind.UPGRADE: _handle_upgrade,
    IntentKind.END_TURN: _handle_end_turn,
}


def apply_intent(state: GameState, intent: Intent, rng: random.Random) -> Transition:
    """
    Validate and apply one intent.

    Args:
        state: Current authoritative state (left untouched)
        intent: The intent to apply
        rng: Random source for dice and card draws

    Returns:
        Transition with the resulting state and the entries it logged
    """
    player = state.get_player(intent.player_id)
    if player is None:
        return Transition(state, [], accepted=False, reason=f"Unknown player {intent.player_id}")

    if intent.kind == IntentKind.UPGRADE and (
        intent.tile_id is None or state.board.find_tile(intent.tile_id) is None
    ):
        return Transition(state, [], accepted=False, reason=f"Unknown tile {intent.payload!r}")

    if state.game_over:
        return _reject(state, player.player_id, "The game is over.")
    if player.is_bankrupt:
        return _reject(state, player.player_id, f"{player.name} is bankrupt.")

    work = state.copy()
    start = len(work.event_log)
    actor = work.get_player(intent.player_id)

    if intent.kind == IntentKind.SURRENDER:
        settle_bankruptcy(work, actor, surrendered=True)
        return Transition(work, work.event_log.since(start))

    if work.get_current_player().player_id != actor.player_id:
        return _reject(state, player.player_id, f"It is not {player.name}'s turn.")

    try:
        _HANDLERS[intent.kind](work, actor, intent, rng)
    except InvalidActionError as e:
        return _reject(state, player.player_id, str(e))

    return Transition(work, work.event_log.since(start))


def reveal_card(state: GameState) -> Transition:
    """Apply the pending card. Host-internal; not a player intent."""
    work = state.copy()
    start = len(work.event_log)
    if not apply_pending_card(work):
        return Transition(state, [], accepted=False, reason="No card pending.")
    return Transition(work, work.event_log.since(start))


def get_legal_intents(state: GameState, player_id: str) -> List[IntentKind]:
    """
    Get the intent kinds a player may currently send.

    Returns:
        List of legal kinds, empty for unknown or bankrupt players
    """
    player = state.get_player(player_id)
    if player is None or player.is_bankrupt or state.game_over:
        return []

    if state.get_current_player().player_id != player_id:
        return [IntentKind.SURRENDER]

    legal: List[IntentKind] = []
    phase = state.phase

    if phase == GamePhase.ROLLING:
        legal.append(IntentKind.ROLL)
        if player.in_jail and player.money >= state.config.bail_fee:
            legal.append(IntentKind.PAY_BAIL)
    elif phase == GamePhase.ACTION:
        if player.money >= state.tile_spec(player.position).price:
            legal.append(IntentKind.BUY)
        legal.append(IntentKind.DECLINE)
    elif phase == GamePhase.END_TURN:
        legal.append(IntentKind.END_TURN)

    if phase != GamePhase.SHOWING_CARD and upgradable_tiles(state, player_id):
        legal.append(IntentKind.UPGRADE)

    legal.append(IntentKind.SURRENDER)
    return legal


def upgradable_tiles(state: GameState, player_id: str) -> List[int]:
    """Tile ids the player could upgrade right now."""
    player = state.get_player(player_id)
    if player is None:
        return []
    return [t for t in sorted(player.properties) if economy.can_upgrade(state, player, t)]
