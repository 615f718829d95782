from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tycoon.player import Player
from tycoon.rules import Intent, IntentKind


class RosterEntry(BaseModel):
    """A seat agreed in the lobby."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    is_automated: bool = Field(default=False, alias="isAutomated")
    is_host: bool = Field(default=False, alias="isHost")

    def to_player(self) -> Player:
        return Player(self.id, self.name, is_automated=self.is_automated, is_host=self.is_host)


class CreateGameRequest(BaseModel):
    roster: List[RosterEntry]
    seed: Optional[int] = None


class CreateGameResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    game_id: str = Field(alias="gameId")


class IntentMessage(BaseModel):
    """Wire shape of a player intent."""

    model_config = ConfigDict(populate_by_name=True)

    kind: IntentKind
    player_id: str = Field(alias="playerId")
    payload: Any = None

    def to_intent(self) -> Intent:
        return Intent(self.kind, self.player_id, self.payload)


class IntentResponse(BaseModel):
    accepted: bool
    reason: str = ""
    seq: int


class LegalIntentsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    game_id: str = Field(alias="gameId")
    player_id: str = Field(alias="playerId")
    intents: List[str]
