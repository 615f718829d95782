"""
Board tile definitions and types.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class TileType(Enum):
    """Types of tiles on the board."""

    START = "start"
    PROPERTY = "property"
    STATION = "station"
    UTILITY = "utility"
    TAX = "tax"
    CHANCE = "chance"
    COMMUNITY = "community"
    JAIL = "jail"
    GO_TO_JAIL = "go_to_jail"
    PARKING = "parking"


class ColorGroup(Enum):
    """Color groups. Stations and utilities form their own groups."""

    BROWN = "brown"
    LIGHT_BLUE = "light_blue"
    PINK = "pink"
    ORANGE = "orange"
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    DARK_BLUE = "dark_blue"
    STATION = "station"
    UTILITY = "utility"
    NONE = "none"


PURCHASABLE_TYPES = (TileType.PROPERTY, TileType.STATION, TileType.UTILITY)


@dataclass(frozen=True)
class TileSpec:
    """Static, read-only configuration of a board tile."""

    tile_id: int
    name: str
    tile_type: TileType
    group: ColorGroup = ColorGroup.NONE
    price: int = 0
    rent: List[int] = field(default_factory=list)  # [base, 1, 2, 3, 4 buildings, hotel]
    building_cost: int = 0
    tax_amount: int = 0

    @property
    def is_purchasable(self) -> bool:
        return self.tile_type in PURCHASABLE_TYPES

    def rent_for(self, buildings: int) -> int:
        """Tier rent for the given building count (0-5)."""
        if not self.rent:
            return 0
        return self.rent[min(buildings, len(self.rent) - 1)]

    def __repr__(self) -> str:
        return f"TileSpec(id={self.tile_id}, name='{self.name}', type={self.tile_type.value})"


@dataclass
class TileState:
    """Mutable ownership/building overlay for a tile."""

    owner_id: Optional[str] = None
    buildings: int = 0

    def is_owned(self) -> bool:
        return self.owner_id is not None

    def has_hotel(self) -> bool:
        """Five buildings is displayed as a hotel."""
        return self.buildings == 5


def property_tile(tile_id: int, name: str, group: ColorGroup, price: int, rent: List[int], building_cost: int) -> TileSpec:
    return TileSpec(tile_id, name, TileType.PROPERTY, group, price, list(rent), building_cost)


def station_tile(tile_id: int, name: str, price: int = 200) -> TileSpec:
    return TileSpec(tile_id, name, TileType.STATION, ColorGroup.STATION, price)


def utility_tile(tile_id: int, name: str, price: int = 150) -> TileSpec:
    return TileSpec(tile_id, name, TileType.UTILITY, ColorGroup.UTILITY, price)


def tax_tile(tile_id: int, name: str, amount: int) -> TileSpec:
    return TileSpec(tile_id, name, TileType.TAX, tax_amount=amount)


def special_tile(tile_id: int, name: str, tile_type: TileType) -> TileSpec:
    return TileSpec(tile_id, name, tile_type)
