"""
Game configuration settings.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class GameConfig:
    """Configuration for a single match."""

    starting_cash: int = 1500
    go_salary: int = 200
    bail_fee: int = 50
    station_base_rent: int = 25

    # A jailed player is forced out on the third failed roll
    max_jail_turns: int = 3
    doubles_limit: int = 3
    max_buildings: int = 5

    min_players: int = 2
    max_players: int = 4

    # Seconds a drawn card stays on display before its effect is applied
    card_reveal_delay: float = 2.0
    # Pause between automated seat actions
    automation_delay: float = 1.0
    automated_bail_threshold: int = 500

    seed: Optional[int] = None

    @classmethod
    def from_settings(cls, settings=None, **overrides) -> "GameConfig":
        """Build a config from environment-backed GameSettings."""
        from tycoon.settings import get_game_settings

        settings = settings or get_game_settings()
        values = {
            "starting_cash": settings.starting_cash,
            "go_salary": settings.go_salary,
            "bail_fee": settings.bail_fee,
            "card_reveal_delay": settings.card_reveal_delay_seconds,
            "automation_delay": settings.automation_delay_seconds,
            "seed": settings.seed,
        }
        values.update(overrides)
        return cls(**values)
