"""
Chance and Community Chest cards.

Both tile types draw from one shared deck. A draw is independent each time:
cards are never removed, so the deck behaves as if reshuffled after every draw.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List


class CardEffect(Enum):
    """Types of card effects."""

    MONEY = "MONEY"
    MOVE_TO = "MOVE_TO"
    MOVE_STEPS = "MOVE_STEPS"
    GO_TO_JAIL = "GO_TO_JAIL"


@dataclass(frozen=True)
class ChanceCard:
    """A drawable card. `value` is signed money, an absolute tile id or a step count."""

    card_id: int
    title: str
    description: str
    effect: CardEffect
    value: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.card_id,
            "title": self.title,
            "description": self.description,
            "effectType": self.effect.value,
            "value": self.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChanceCard":
        return cls(
            card_id=data["id"],
            title=data["title"],
            description=data["description"],
            effect=CardEffect(data["effectType"]),
            value=data.get("value", 0),
        )

    def __repr__(self) -> str:
        return f"ChanceCard('{self.title}')"


CHANCE_CARDS: List[ChanceCard] = [
    ChanceCard(1, "Advance to Start", "Advance to Start and collect your salary.", CardEffect.MOVE_TO, 0),
    ChanceCard(2, "Bank error", "Bank error in your favor. Collect $200.", CardEffect.MONEY, 200),
    ChanceCard(3, "Doctor's fees", "Doctor's fees. Pay $50.", CardEffect.MONEY, -50),
    ChanceCard(4, "Go to Jail", "Go directly to Jail. Do not pass Start.", CardEffect.GO_TO_JAIL, 0),
    ChanceCard(5, "Dividend", "Bank pays you a dividend of $50.", CardEffect.MONEY, 50),
    ChanceCard(6, "Go back", "Go back 3 spaces.", CardEffect.MOVE_STEPS, -3),
    ChanceCard(7, "Trip to Illinois", "Advance to Illinois Avenue.", CardEffect.MOVE_TO, 24),
    ChanceCard(8, "Speeding fine", "Speeding fine. Pay $15.", CardEffect.MONEY, -15),
    ChanceCard(9, "Boardwalk stroll", "Take a walk on the Boardwalk.", CardEffect.MOVE_TO, 39),
    ChanceCard(10, "Building loan", "Your building loan matures. Collect $150.", CardEffect.MONEY, 150),
    ChanceCard(11, "Shortcut", "Advance 5 spaces.", CardEffect.MOVE_STEPS, 5),
    ChanceCard(12, "School fees", "School fees. Pay $150.", CardEffect.MONEY, -150),
    ChanceCard(13, "Reading Railroad", "Take a trip to Reading Railroad.", CardEffect.MOVE_TO, 5),
    ChanceCard(14, "Inheritance", "You inherit $100.", CardEffect.MONEY, 100),
]


def draw_card(rng: random.Random, deck: List[ChanceCard] = CHANCE_CARDS) -> ChanceCard:
    """Draw one card uniformly at random, with replacement."""
    return deck[rng.randrange(len(deck))]
