"""
Game state aggregate.

GameState is the single value threaded through the engine. Transition
functions never touch the caller's instance: they work on `state.copy()`
and hand the copy back.
"""

from enum import Enum
from typing import Any, List, Optional, Tuple

from tycoon.board import STANDARD_BOARD, Board
from tycoon.cards import ChanceCard
from tycoon.config import GameConfig
from tycoon.exceptions import ValidationError
from tycoon.money import EventLog, EventType, LogEntry, LogLevel
from tycoon.player import Player, PlayerState
from tycoon.spaces import TileSpec, TileState


class GamePhase(Enum):
    """Turn phases of a running match."""

    ROLLING = "ROLLING"
    ACTION = "ACTION"
    SHOWING_CARD = "SHOWING_CARD"
    END_TURN = "END_TURN"
    GAME_OVER = "GAME_OVER"


class GameState:
    """
    Represents the complete state of a match.
    Everything a replica needs to render the game lives here.
    """

    def __init__(self, config: GameConfig, players: List[Player], board: Board = STANDARD_BOARD):
        self.config = config
        self.board = board
        self.event_log = EventLog()

        # Turn order is the roster order and never changes
        self.players: List[PlayerState] = [
            PlayerState(p.player_id, p.name, config.starting_cash, p.is_automated) for p in players
        ]
        self.tiles: List[TileState] = [TileState() for _ in board.tiles]

        self.current_player_index = 0
        self.turn_number = 0
        self.dice: Tuple[int, int] = (1, 1)
        self.phase = GamePhase.ROLLING
        self.pending_card: Optional[ChanceCard] = None
        self.waiting_for_doubles = False
        self.winner_id: Optional[str] = None

        self.event_log.log(
            EventType.GAME_START,
            "Game started. Good luck!",
            players=[p.name for p in players],
            starting_cash=config.starting_cash,
            seed=config.seed,
        )

    def copy(self) -> "GameState":
        """Independent copy; static board and config are shared."""
        clone = GameState.__new__(GameState)
        clone.__dict__.update(self.__dict__)
        clone.players = [p.copy() for p in self.players]
        clone.tiles = [TileState(t.owner_id, t.buildings) for t in self.tiles]
        clone.event_log = self.event_log.copy()
        return clone

    @property
    def game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    def get_current_player(self) -> PlayerState:
        """Get the player whose turn it is."""
        return self.players[self.current_player_index % len(self.players)]

    def get_player(self, player_id: str) -> Optional[PlayerState]:
        """Look up a player by id, None when unknown."""
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def get_active_players(self) -> List[PlayerState]:
        """Get all non-bankrupt players."""
        return [p for p in self.players if not p.is_bankrupt]

    def get_winner(self) -> Optional[PlayerState]:
        return self.get_player(self.winner_id) if self.winner_id is not None else None

    def tile_spec(self, tile_id: int) -> TileSpec:
        return self.board.get_tile(tile_id)

    def tile_state(self, tile_id: int) -> TileState:
        return self.tiles[tile_id % len(self.tiles)]

    def log(
        self,
        event_type: EventType,
        message: str,
        player_id: Optional[str] = None,
        level: LogLevel = LogLevel.INFO,
        **details: Any,
    ) -> LogEntry:
        return self.event_log.log(event_type, message, player_id, level, **details)

    def __repr__(self) -> str:
        return (
            f"GameState(turn={self.turn_number}, phase={self.phase.value}, "
            f"current={self.get_current_player().player_id}, winner={self.winner_id})"
        )


def create_game(config: GameConfig, players: List[Player], board: Board = STANDARD_BOARD) -> GameState:
    """
    Create a new game from the agreed roster.

    Args:
        config: Game configuration
        players: Roster in turn order (2-4 players by default)

    Returns:
        Initialized GameState
    """
    if not config.min_players <= len(players) <= config.max_players:
        raise ValidationError(
            f"Game requires {config.min_players}-{config.max_players} players, got {len(players)}"
        )
    ids = [p.player_id for p in players]
    if len(set(ids)) != len(ids):
        raise ValidationError("Player ids must be unique")

    return GameState(config, players, board)
