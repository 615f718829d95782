"""
Landing resolution: what happens when a token comes to rest on a tile.

Card tiles are resolved in two steps. Landing draws the card and parks it on
the state as `pending_card` in the SHOWING_CARD phase; `apply_pending_card`
applies it once the host's display delay has elapsed.
"""

import logging
import random

from tycoon import economy
from tycoon.board import JAIL_POSITION
from tycoon.cards import CardEffect, draw_card
from tycoon.game import GamePhase, GameState
from tycoon.money import EventType, LogLevel
from tycoon.movement import move_steps, move_to, send_to_jail
from tycoon.player import PlayerState
from tycoon.rotation import settle_bankruptcy
from tycoon.spaces import TileType

logger = logging.getLogger(__name__)


def finish_move(state: GameState, is_double: bool) -> None:
    """Set the phase that follows a completed move."""
    if is_double:
        state.phase = GamePhase.ROLLING
        state.waiting_for_doubles = True
    else:
        state.phase = GamePhase.END_TURN
        state.waiting_for_doubles = False


def resolve_landing(state: GameState, player: PlayerState, is_double: bool, rng: random.Random) -> None:
    """
    Resolve the effect of the tile the player now stands on.

    Args:
        state: Working game state
        player: Player who just moved
        is_double: Whether the move came from a double (grants another roll)
        rng: Random source for card draws
    """
    tile_id = player.position
    spec = state.tile_spec(tile_id)
    tile = state.tile_state(tile_id)

    state.log(EventType.LAND, f"{player.name} lands on {spec.name}.", player.player_id, tile_id=tile_id)

    if spec.tile_type == TileType.GO_TO_JAIL:
        send_to_jail(state, player, "landed on Go To Jail")
        return

    if spec.tile_type in (TileType.CHANCE, TileType.COMMUNITY):
        card = draw_card(rng)
        state.pending_card = card
        state.phase = GamePhase.SHOWING_CARD
        state.waiting_for_doubles = is_double
        state.log(
            EventType.CARD_DRAW,
            f"{player.name} draws a card: {card.title}",
            player.player_id,
            card_id=card.card_id,
            effect=card.effect.value,
        )
        return

    if spec.is_purchasable:
        if not tile.is_owned():
            state.phase = GamePhase.ACTION
            state.waiting_for_doubles = is_double
            return
        if economy.pay_rent(state, player, tile_id):
            settle_bankruptcy(state, player)
            return

    elif spec.tile_type == TileType.TAX:
        if economy.pay_tax(state, player, tile_id):
            settle_bankruptcy(state, player)
            return

    finish_move(state, is_double)


def apply_pending_card(state: GameState) -> bool:
    """
    Apply the card parked on the state and clear it.

    Card movement never triggers another landing resolution.

    Returns:
        False when there was no card to apply
    """
    card = state.pending_card
    if card is None or state.phase != GamePhase.SHOWING_CARD:
        return False

    player = state.get_current_player()
    is_double = state.waiting_for_doubles
    state.pending_card = None

    state.log(
        EventType.CARD_EFFECT,
        f"{card.title}: {card.description}",
        player.player_id,
        LogLevel.WARNING if card.effect == CardEffect.GO_TO_JAIL else LogLevel.INFO,
        card_id=card.card_id,
        effect=card.effect.value,
        value=card.value,
    )

    if card.effect == CardEffect.GO_TO_JAIL:
        send_to_jail(state, player, card.title)
        return True

    if card.effect == CardEffect.MONEY:
        if economy.charge(state, player, -card.value):
            settle_bankruptcy(state, player)
            return True

    elif card.effect == CardEffect.MOVE_TO:
        if card.value % len(state.board) == JAIL_POSITION:
            send_to_jail(state, player, card.title)
            return True
        move_to(state, player, card.value)

    elif card.effect == CardEffect.MOVE_STEPS:
        move_steps(state, player, card.value)

    finish_move(state, is_double)
    return True
