"""
Turn rotation and win detection.
"""

from tycoon.economy import declare_bankruptcy
from tycoon.game import GamePhase, GameState
from tycoon.money import EventType, LogLevel
from tycoon.player import PlayerState


def check_winner(state: GameState) -> bool:
    """
    End the match when at most one player is still solvent.
    Returns True if the game is over.
    """
    if state.phase == GamePhase.GAME_OVER:
        return True

    active = state.get_active_players()
    if len(active) > 1:
        return False

    winner = active[0] if active else None
    state.winner_id = winner.player_id if winner else None
    state.phase = GamePhase.GAME_OVER
    state.waiting_for_doubles = False
    state.pending_card = None
    state.log(
        EventType.GAME_END,
        f"Game over! {winner.name} wins." if winner else "Game over! Nobody is left standing.",
        state.winner_id,
        LogLevel.SUCCESS,
        winner=state.winner_id,
    )
    return True


def advance_turn(state: GameState) -> None:
    """End the current turn and hand it to the next non-bankrupt player."""
    if check_winner(state):
        return

    outgoing = state.get_current_player()
    outgoing.consecutive_doubles = 0

    count = len(state.players)
    next_index = (state.current_player_index + 1) % count
    # Bounded so a board of bankrupt players can never loop forever
    for _ in range(count):
        if not state.players[next_index].is_bankrupt:
            break
        next_index = (next_index + 1) % count

    state.current_player_index = next_index
    state.turn_number += 1
    state.phase = GamePhase.ROLLING
    state.waiting_for_doubles = False
    state.pending_card = None

    if check_winner(state):
        return

    current = state.get_current_player()
    state.log(
        EventType.TURN_START,
        f"It is {current.name}'s turn.",
        current.player_id,
        turn=state.turn_number,
    )


def settle_bankruptcy(state: GameState, player: PlayerState, surrendered: bool = False) -> None:
    """
    Bankrupt a player, then either finish the match or move play along.

    If it was the player's turn, the turn passes immediately; otherwise the
    win condition is re-evaluated in place.
    """
    was_current = state.get_current_player().player_id == player.player_id
    declare_bankruptcy(state, player, surrendered=surrendered)

    if check_winner(state):
        return
    if was_current:
        advance_turn(state)
