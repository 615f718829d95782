"""
Turn engine: dice, jail attempts, speeding and forward movement.
"""

import logging
import random
from typing import Tuple

from tycoon.economy import charge
from tycoon.game import GamePhase, GameState
from tycoon.landing import resolve_landing
from tycoon.money import EventType, LogLevel
from tycoon.movement import move_steps, send_to_jail
from tycoon.player import PlayerState
from tycoon.rotation import settle_bankruptcy

logger = logging.getLogger(__name__)


def roll_dice(state: GameState, rng: random.Random) -> Tuple[int, int]:
    """Roll two six-sided dice and record them on the state."""
    dice = (rng.randint(1, 6), rng.randint(1, 6))
    state.dice = dice
    return dice


def take_roll(state: GameState, player: PlayerState, rng: random.Random) -> None:
    """
    Execute a roll for the current player.

    Jailed players try for doubles instead of moving freely; free players
    move and resolve the tile they land on.
    """
    die1, die2 = roll_dice(state, rng)
    is_double = die1 == die2
    total = die1 + die2

    state.log(
        EventType.DICE_ROLL,
        f"{player.name} rolled {die1} + {die2} = {total}" + (" (double!)" if is_double else ""),
        player.player_id,
        dice=[die1, die2],
        total=total,
        is_double=is_double,
    )

    if player.in_jail:
        _jailed_roll(state, player, total, is_double, rng)
    else:
        _free_roll(state, player, total, is_double, rng)


def _jailed_roll(state: GameState, player: PlayerState, total: int, is_double: bool, rng: random.Random) -> None:
    if is_double:
        player.in_jail = False
        player.jail_turns = 0
        player.consecutive_doubles = 0
        state.log(
            EventType.JAIL_RELEASE,
            f"{player.name} rolled a double and escapes Jail!",
            player.player_id,
            LogLevel.SUCCESS,
            method="doubles",
        )
        move_steps(state, player, total)
        # Escaping on a double does not earn another roll
        resolve_landing(state, player, False, rng)
        return

    if player.jail_turns >= state.config.max_jail_turns - 1:
        fee = state.config.bail_fee
        player.in_jail = False
        player.jail_turns = 0
        player.consecutive_doubles = 0
        insolvent = charge(state, player, fee)
        state.log(
            EventType.JAIL_RELEASE,
            f"{player.name} served their time and pays ${fee} bail.",
            player.player_id,
            LogLevel.WARNING,
            method="forced_bail",
            amount=fee,
            new_balance=player.money,
        )
        if insolvent:
            settle_bankruptcy(state, player)
            return
        move_steps(state, player, total)
        resolve_landing(state, player, False, rng)
        return

    player.jail_turns += 1
    state.phase = GamePhase.END_TURN
    state.waiting_for_doubles = False
    state.log(
        EventType.JAIL_ATTEMPT,
        f"{player.name} stays in Jail (attempt {player.jail_turns}).",
        player.player_id,
        LogLevel.WARNING,
        attempt=player.jail_turns,
    )


def _free_roll(state: GameState, player: PlayerState, total: int, is_double: bool, rng: random.Random) -> None:
    if is_double:
        player.consecutive_doubles += 1
    else:
        player.consecutive_doubles = 0

    if player.consecutive_doubles >= state.config.doubles_limit:
        logger.debug("Player %s rolled %d doubles in a row", player.player_id, player.consecutive_doubles)
        send_to_jail(state, player, "speeding")
        return

    move_steps(state, player, total)
    resolve_landing(state, player, is_double, rng)
