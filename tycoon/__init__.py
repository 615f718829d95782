"""Host-authoritative property-trading board game engine."""

from tycoon.board import STANDARD_BOARD, Board
from tycoon.config import GameConfig
from tycoon.game import GamePhase, GameState, create_game
from tycoon.player import Player, PlayerState
from tycoon.rules import Intent, IntentKind, Transition, apply_intent, get_legal_intents, reveal_card
from tycoon.session import HostSession, IntentResult, IntentSubmitter, ReplicaSession
from tycoon.snapshot import load_snapshot, serialize_snapshot, snapshot_message

__all__ = [
    "Board",
    "STANDARD_BOARD",
    "GameConfig",
    "GamePhase",
    "GameState",
    "create_game",
    "Player",
    "PlayerState",
    "Intent",
    "IntentKind",
    "Transition",
    "apply_intent",
    "get_legal_intents",
    "reveal_card",
    "HostSession",
    "IntentResult",
    "IntentSubmitter",
    "ReplicaSession",
    "load_snapshot",
    "serialize_snapshot",
    "snapshot_message",
]
