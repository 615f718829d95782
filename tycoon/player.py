"""
Player state and roster entries.
"""

from dataclasses import dataclass


class PlayerState:
    """Represents the complete state of a player in the game."""

    def __init__(self, player_id: str, name: str, starting_cash: int, is_automated: bool = False):
        self.player_id = player_id
        self.name = name
        self.is_automated = is_automated
        self.money = starting_cash
        self.position = 0
        self.in_jail = False
        self.jail_turns = 0
        self.consecutive_doubles = 0
        self.properties: set[int] = set()
        self.is_bankrupt = False

    def copy(self) -> "PlayerState":
        clone = PlayerState(self.player_id, self.name, self.money, self.is_automated)
        clone.position = self.position
        clone.in_jail = self.in_jail
        clone.jail_turns = self.jail_turns
        clone.consecutive_doubles = self.consecutive_doubles
        clone.properties = set(self.properties)
        clone.is_bankrupt = self.is_bankrupt
        return clone

    def __repr__(self) -> str:
        return (
            f"PlayerState(id='{self.player_id}', name='{self.name}', "
            f"money={self.money}, position={self.position}, bankrupt={self.is_bankrupt})"
        )


@dataclass
class Player:
    """
    Roster entry agreed in the lobby.
    This is the shape handed over by the room directory at game start.
    """

    player_id: str
    name: str
    is_automated: bool = False
    is_host: bool = False
