"""Rule-based provider that buys whenever a cash reserve survives the purchase."""

import logging

from tycoon.agents.base import Decision, DecisionAction, DecisionProvider

logger = logging.getLogger(__name__)


class ReserveDecisionProvider(DecisionProvider):
    """
    Buys the current tile if money exceeds price plus a reserve.

    Attributes:
        reserve: Cash the player wants to keep after buying.
    """

    def __init__(self, reserve: int = 100):
        self.reserve = reserve

    def decide_now(self, state, player_id: str) -> Decision:
        """Synchronous decision, also used as the LLM fallback."""
        player = state.get_player(player_id)
        if player is None:
            return Decision(DecisionAction.DECLINE, "Unknown player.")

        spec = state.tile_spec(player.position)
        if player.money > spec.price + self.reserve:
            return Decision(
                DecisionAction.BUY,
                f"Buying {spec.name} for ${spec.price} while keeping over ${self.reserve} in reserve.",
            )
        return Decision(
            DecisionAction.DECLINE,
            f"Declining {spec.name} (${spec.price}) to preserve cash (${player.money} available).",
        )

    async def decide(self, state, player_id: str) -> Decision:
        return self.decide_now(state, player_id)
