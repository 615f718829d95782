"""Decision providers for automated seats."""

from tycoon.agents.base import Decision, DecisionAction, DecisionProvider
from tycoon.agents.llm import LLMDecisionProvider
from tycoon.agents.reserve import ReserveDecisionProvider

__all__ = [
    "Decision",
    "DecisionAction",
    "DecisionProvider",
    "LLMDecisionProvider",
    "ReserveDecisionProvider",
]
