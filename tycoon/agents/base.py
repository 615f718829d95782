"""Base class for purchase decision providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tycoon.game import GameState


class DecisionAction(Enum):
    BUY = "buy"
    DECLINE = "decline"


@dataclass
class Decision:
    """A purchase decision with a short human-readable rationale."""

    action: DecisionAction
    rationale: str = ""


class DecisionProvider(ABC):
    """
    Abstract base class for automated seat advisors.

    The host consults a provider whenever an automated player stands on an
    unowned tile in the ACTION phase.
    """

    @abstractmethod
    async def decide(self, state: "GameState", player_id: str) -> Decision:
        """
        Decide whether the player buys the tile they stand on.

        Args:
            state: The current game state.
            player_id: The automated player being advised.

        Returns:
            The decision to submit.
        """
        pass

    async def aclose(self) -> None:
        """Release any resources held by the provider."""
