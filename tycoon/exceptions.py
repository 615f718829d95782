"""
Custom exception hierarchy for the game engine, host session and relay.

Provides typed errors that can be handled consistently across
the engine, the replication layer, and the API layer.
"""


class TycoonError(Exception):
    """Base exception for all game-related errors."""


class GameNotFoundError(TycoonError):
    """Game does not exist."""


class InvalidActionError(TycoonError):
    """Intent is not legal in the current state."""


class DecisionError(TycoonError):
    """Decision provider communication failed."""


class ValidationError(TycoonError):
    """Input validation failed."""
