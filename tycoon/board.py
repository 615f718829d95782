from typing import Dict, List, Optional

from tycoon.spaces import (
    ColorGroup,
    TileSpec,
    TileType,
    property_tile,
    special_tile,
    station_tile,
    tax_tile,
    utility_tile,
)

BOARD_SIZE = 40
START_POSITION = 0
JAIL_POSITION = 10
GO_TO_JAIL_POSITION = 30


class Board:
    """The 40-tile ring. Read-only; shared by every game."""

    def __init__(self):
        self.tiles: List[TileSpec] = self._create_standard_board()
        self.color_groups: Dict[ColorGroup, List[int]] = self._build_color_groups()

    def _create_standard_board(self) -> List[TileSpec]:
        """Create the standard 40-tile board."""
        return [
            # Bottom row (0-10)
            special_tile(0, "Start", TileType.START),
            property_tile(1, "Mediterranean Avenue", ColorGroup.BROWN, 60, [2, 10, 30, 90, 160, 250], 50),
            special_tile(2, "Community Chest", TileType.COMMUNITY),
            property_tile(3, "Baltic Avenue", ColorGroup.BROWN, 60, [4, 20, 60, 180, 320, 450], 50),
            tax_tile(4, "Income Tax", 200),
            station_tile(5, "Reading Railroad"),
            property_tile(6, "Oriental Avenue", ColorGroup.LIGHT_BLUE, 100, [6, 30, 90, 270, 400, 550], 50),
            special_tile(7, "Chance", TileType.CHANCE),
            property_tile(8, "Vermont Avenue", ColorGroup.LIGHT_BLUE, 100, [6, 30, 90, 270, 400, 550], 50),
            property_tile(9, "Connecticut Avenue", ColorGroup.LIGHT_BLUE, 120, [8, 40, 100, 300, 450, 600], 50),
            special_tile(10, "Jail", TileType.JAIL),
            # Left side (11-20)
            property_tile(11, "St. Charles Place", ColorGroup.PINK, 140, [10, 50, 150, 450, 625, 750], 100),
            utility_tile(12, "Electric Company"),
            property_tile(13, "States Avenue", ColorGroup.PINK, 140, [10, 50, 150, 450, 625, 750], 100),
            property_tile(14, "Virginia Avenue", ColorGroup.PINK, 160, [12, 60, 180, 500, 700, 900], 100),
            station_tile(15, "Pennsylvania Railroad"),
            property_tile(16, "St. James Place", ColorGroup.ORANGE, 180, [14, 70, 200, 550, 750, 950], 100),
            special_tile(17, "Community Chest", TileType.COMMUNITY),
            property_tile(18, "Tennessee Avenue", ColorGroup.ORANGE, 180, [14, 70, 200, 550, 750, 950], 100),
            property_tile(19, "New York Avenue", ColorGroup.ORANGE, 200, [16, 80, 220, 600, 800, 1000], 100),
            special_tile(20, "Free Parking", TileType.PARKING),
            # Top row (21-30)
            property_tile(21, "Kentucky Avenue", ColorGroup.RED, 220, [18, 90, 250, 700, 875, 1050], 150),
            special_tile(22, "Chance", TileType.CHANCE),
            property_tile(23, "Indiana Avenue", ColorGroup.RED, 220, [18, 90, 250, 700, 875, 1050], 150),
            property_tile(24, "Illinois Avenue", ColorGroup.RED, 240, [20, 100, 300, 750, 925, 1100], 150),
            station_tile(25, "B. & O. Railroad"),
            property_tile(26, "Atlantic Avenue", ColorGroup.YELLOW, 260, [22, 110, 330, 800, 975, 1150], 150),
            property_tile(27, "Ventnor Avenue", ColorGroup.YELLOW, 260, [22, 110, 330, 800, 975, 1150], 150),
            utility_tile(28, "Water Works"),
            property_tile(29, "Marvin Gardens", ColorGroup.YELLOW, 280, [24, 120, 360, 850, 1025, 1200], 150),
            special_tile(30, "Go To Jail", TileType.GO_TO_JAIL),
            # Right side (31-39)
            property_tile(31, "Pacific Avenue", ColorGroup.GREEN, 300, [26, 130, 390, 900, 1100, 1275], 200),
            property_tile(32, "North Carolina Avenue", ColorGroup.GREEN, 300, [26, 130, 390, 900, 1100, 1275], 200),
            special_tile(33, "Community Chest", TileType.COMMUNITY),
            property_tile(34, "Pennsylvania Avenue", ColorGroup.GREEN, 320, [28, 150, 450, 1000, 1200, 1400], 200),
            station_tile(35, "Short Line"),
            special_tile(36, "Chance", TileType.CHANCE),
            property_tile(37, "Park Place", ColorGroup.DARK_BLUE, 350, [35, 175, 500, 1100, 1300, 1500], 200),
            tax_tile(38, "Luxury Tax", 100),
            property_tile(39, "Boardwalk", ColorGroup.DARK_BLUE, 400, [50, 200, 600, 1400, 1700, 2000], 200),
        ]

    def _build_color_groups(self) -> Dict[ColorGroup, List[int]]:
        """Build a mapping of groups to tile ids (stations and utilities included)."""
        groups: Dict[ColorGroup, List[int]] = {}
        for tile in self.tiles:
            if tile.group == ColorGroup.NONE:
                continue
            groups.setdefault(tile.group, []).append(tile.tile_id)
        return groups

    def __len__(self) -> int:
        return len(self.tiles)

    def get_tile(self, tile_id: int) -> TileSpec:
        """Get the tile at the given position (wraps around the ring)."""
        return self.tiles[tile_id % BOARD_SIZE]

    def find_tile(self, tile_id: int) -> Optional[TileSpec]:
        """Get a tile by id, or None for an unknown id."""
        if not isinstance(tile_id, int) or not 0 <= tile_id < BOARD_SIZE:
            return None
        return self.tiles[tile_id]

    def get_color_group(self, group: ColorGroup) -> List[int]:
        """Get all tile ids in a group."""
        return self.color_groups.get(group, [])


STANDARD_BOARD = Board()
