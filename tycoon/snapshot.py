"""
Full-state snapshot serialization.

The host broadcasts the complete GameState after every accepted step, so a
snapshot carries everything a replica renders: players, every tile with its
static data and ownership overlay, dice, phase, log, pending card and winner.
`load_snapshot` rebuilds a GameState from the dynamic fields.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from tycoon.board import STANDARD_BOARD, Board
from tycoon.cards import ChanceCard
from tycoon.config import GameConfig
from tycoon.game import GamePhase, GameState
from tycoon.money import EventLog, LogEntry
from tycoon.player import PlayerState
from tycoon.spaces import TileState


def _serialize_player(player: PlayerState) -> Dict[str, Any]:
    return {
        "id": player.player_id,
        "name": player.name,
        "isAutomated": player.is_automated,
        "money": player.money,
        "position": player.position,
        "inJail": player.in_jail,
        "jailTurns": player.jail_turns,
        "consecutiveDoubles": player.consecutive_doubles,
        "properties": sorted(player.properties),
        "isBankrupt": player.is_bankrupt,
    }


def serialize_snapshot(state: GameState) -> Dict[str, Any]:
    """Serialize a GameState into a stable JSON dict.

    The snapshot includes:
    - players in turn order with money, position, jail and doubles counters
    - all tiles with static fields plus owner and building count
    - current player index, turn number, dice and phase
    - the complete game log
    - pending card (if any), extra-turn flag and winner
    """
    tiles: List[Dict[str, Any]] = []
    for spec, tile in zip(state.board.tiles, state.tiles):
        tiles.append(
            {
                "id": spec.tile_id,
                "name": spec.name,
                "type": spec.tile_type.value,
                "group": spec.group.value,
                "price": spec.price,
                "rent": list(spec.rent),
                "buildingCost": spec.building_cost,
                "taxAmount": spec.tax_amount,
                "ownerId": tile.owner_id,
                "buildings": tile.buildings,
            }
        )

    winner = state.get_winner()

    return {
        "players": [_serialize_player(p) for p in state.players],
        "currentPlayerIndex": state.current_player_index,
        "currentPlayerId": state.get_current_player().player_id,
        "turnNumber": state.turn_number,
        "tiles": tiles,
        "dice": list(state.dice),
        "phase": state.phase.value,
        "logs": [entry.to_dict() for entry in state.event_log.entries],
        "currentCard": state.pending_card.to_dict() if state.pending_card else None,
        "waitingForDoublesTurn": state.waiting_for_doubles,
        "winnerId": state.winner_id,
        "winner": _serialize_player(winner) if winner else None,
        "config": asdict(state.config),
    }


def snapshot_message(game_id: str, seq: int, state: GameState) -> Dict[str, Any]:
    """Wrap a serialized state in the replication envelope."""
    return {"type": "snapshot", "gameId": game_id, "seq": seq, "state": serialize_snapshot(state)}


def load_snapshot(data: Dict[str, Any], board: Board = STANDARD_BOARD) -> GameState:
    """
    Rebuild a GameState from a serialized snapshot.

    Static tile data always comes from the local board; only ownership and
    building counts are read from the snapshot.
    """
    state = GameState.__new__(GameState)
    state.config = GameConfig(**data.get("config", {}))
    state.board = board

    players: List[PlayerState] = []
    for p in data["players"]:
        player = PlayerState(p["id"], p["name"], p["money"], p.get("isAutomated", False))
        player.position = p["position"]
        player.in_jail = p["inJail"]
        player.jail_turns = p["jailTurns"]
        player.consecutive_doubles = p.get("consecutiveDoubles", 0)
        player.properties = set(p["properties"])
        player.is_bankrupt = p["isBankrupt"]
        players.append(player)
    state.players = players

    tiles = [TileState() for _ in board.tiles]
    for t in data["tiles"]:
        tiles[t["id"]] = TileState(t.get("ownerId"), t.get("buildings", 0))
    state.tiles = tiles

    state.current_player_index = data["currentPlayerIndex"]
    state.turn_number = data.get("turnNumber", 0)
    state.dice = tuple(data["dice"])
    state.phase = GamePhase(data["phase"])
    state.event_log = EventLog([LogEntry.from_dict(e) for e in data.get("logs", [])])
    card = data.get("currentCard")
    state.pending_card = ChanceCard.from_dict(card) if card else None
    state.waiting_for_doubles = data.get("waitingForDoublesTurn", False)
    state.winner_id = data.get("winnerId")
    return state
