"""Shared test fixtures for the game engine tests."""

import pytest

from tycoon.config import GameConfig
from tycoon.game import create_game
from tycoon.player import Player


class ScriptedRandom:
    """
    Stand-in for random.Random that replays scripted dice and card draws.

    Dice are given as pairs; card draws as deck indices.
    """

    def __init__(self, dice=(), cards=()):
        self._dice = [value for pair in dice for value in pair]
        self._cards = list(cards)

    def randint(self, a, b):
        return self._dice.pop(0)

    def randrange(self, n):
        return self._cards.pop(0)


@pytest.fixture
def scripted():
    """Factory for scripted random sources."""
    return ScriptedRandom


@pytest.fixture
def game_config():
    """Default configuration with fixed seed and no host delays."""
    return GameConfig(seed=42, card_reveal_delay=0.0, automation_delay=0.0)


@pytest.fixture
def two_players():
    """Two test players."""
    return [Player("p1", "Alice", is_host=True), Player("p2", "Bob")]


@pytest.fixture
def four_players():
    """Four test players."""
    return [
        Player("p1", "Alice", is_host=True),
        Player("p2", "Bob"),
        Player("p3", "Charlie"),
        Player("p4", "Diana"),
    ]


@pytest.fixture
def basic_game(game_config, two_players):
    """Basic game with two players."""
    return create_game(game_config, two_players)


@pytest.fixture
def four_player_game(game_config, four_players):
    """Game with four players."""
    return create_game(game_config, four_players)


@pytest.fixture
def give():
    """Assign tiles to a player, keeping owner and property set consistent."""

    def _give(state, player_id, *tile_ids, buildings=0):
        player = state.get_player(player_id)
        for tile_id in tile_ids:
            tile = state.tile_state(tile_id)
            tile.owner_id = player_id
            tile.buildings = buildings
            player.properties.add(tile_id)

    return _give
