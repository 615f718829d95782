"""
Token movement and incarceration.
"""

from tycoon.board import JAIL_POSITION
from tycoon.game import GamePhase, GameState
from tycoon.money import EventType, LogLevel
from tycoon.player import PlayerState


def _collect_salary(state: GameState, player: PlayerState) -> None:
    player.money += state.config.go_salary
    state.log(
        EventType.PASS_GO,
        f"{player.name} passes Start and collects ${state.config.go_salary}.",
        player.player_id,
        LogLevel.SUCCESS,
        amount=state.config.go_salary,
    )


def move_steps(state: GameState, player: PlayerState, steps: int) -> int:
    """
    Move a player by a relative number of steps with wraparound.

    Only a forward wrap (crossing or landing on Start) pays the salary.

    Returns:
        New position
    """
    board_size = len(state.board)
    old_position = player.position
    raw = old_position + steps
    player.position = raw % board_size

    if steps > 0 and raw >= board_size:
        _collect_salary(state, player)

    state.log(
        EventType.MOVE,
        f"{player.name} moves to {state.tile_spec(player.position).name}.",
        player.player_id,
        from_position=old_position,
        to_position=player.position,
        steps=steps,
    )
    return player.position


def move_to(state: GameState, player: PlayerState, target: int) -> int:
    """
    Move a player to an absolute tile, forward around the board.
    Pays the salary when the target lies behind the current position.
    """
    old_position = player.position
    target %= len(state.board)
    if target < old_position:
        _collect_salary(state, player)
    player.position = target

    state.log(
        EventType.MOVE,
        f"{player.name} advances to {state.tile_spec(target).name}.",
        player.player_id,
        from_position=old_position,
        to_position=target,
    )
    return target


def send_to_jail(state: GameState, player: PlayerState, reason: str) -> None:
    """Incarcerate a player without passing Start and end their turn."""
    player.position = JAIL_POSITION
    player.in_jail = True
    player.jail_turns = 0
    player.consecutive_doubles = 0

    state.phase = GamePhase.END_TURN
    state.waiting_for_doubles = False

    state.log(
        EventType.GO_TO_JAIL,
        f"{player.name} goes to Jail ({reason}).",
        player.player_id,
        LogLevel.DANGER,
        reason=reason,
    )
