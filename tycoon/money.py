"""
Game event log.
"""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class EventType(Enum):
    """Types of game events."""

    GAME_START = "game_start"
    TURN_START = "turn_start"
    DICE_ROLL = "dice_roll"
    MOVE = "move"
    PASS_GO = "pass_go"
    LAND = "land"

    PURCHASE = "purchase"
    DECLINE = "decline"
    DECISION = "decision"

    RENT_PAYMENT = "rent_payment"
    TAX_PAYMENT = "tax_payment"

    CARD_DRAW = "card_draw"
    CARD_EFFECT = "card_effect"

    UPGRADE = "upgrade"

    GO_TO_JAIL = "go_to_jail"
    JAIL_ATTEMPT = "jail_attempt"
    JAIL_RELEASE = "jail_release"

    BANKRUPTCY = "bankruptcy"
    SURRENDER = "surrender"
    GAME_END = "game_end"

    REJECTED = "rejected"


class LogLevel(Enum):
    """Display severity of a log entry."""

    INFO = "info"
    SUCCESS = "success"
    DANGER = "danger"
    WARNING = "warning"


@dataclass
class LogEntry:
    """A logged event in the game."""

    event_type: EventType
    message: str
    level: LogLevel = LogLevel.INFO
    player_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    entry_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.entry_id,
            "eventType": self.event_type.value,
            "message": self.message,
            "type": self.level.value,
            "playerId": self.player_id,
            "details": dict(self.details),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        return cls(
            event_type=EventType(data["eventType"]),
            message=data["message"],
            level=LogLevel(data.get("type", "info")),
            player_id=data.get("playerId"),
            details=dict(data.get("details") or {}),
            entry_id=data["id"],
            timestamp=data["timestamp"],
        )

    def __repr__(self) -> str:
        player_str = self.player_id if self.player_id is not None else "System"
        return f"[{player_str}] {self.event_type.value}: {self.message}"


class EventLog:
    """Ordered, append-only game log."""

    def __init__(self, entries: Optional[List[LogEntry]] = None):
        self.entries: List[LogEntry] = list(entries or [])

    def log(
        self,
        event_type: EventType,
        message: str,
        player_id: Optional[str] = None,
        level: LogLevel = LogLevel.INFO,
        **details: Any,
    ) -> LogEntry:
        """Append an entry and return it."""
        entry = LogEntry(event_type, message, level, player_id, details)
        self.entries.append(entry)
        return entry

    def copy(self) -> "EventLog":
        return EventLog(self.entries)

    def since(self, index: int) -> List[LogEntry]:
        return self.entries[index:]

    def __len__(self) -> int:
        return len(self.entries)
