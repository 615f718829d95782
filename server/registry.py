from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from tycoon.agents import DecisionProvider, LLMDecisionProvider, ReserveDecisionProvider
from tycoon.config import GameConfig
from tycoon.exceptions import GameNotFoundError, ValidationError
from tycoon.game import create_game
from tycoon.player import Player
from tycoon.session import HostSession
from tycoon.settings import get_server_settings

logger = logging.getLogger(__name__)


def default_provider_factory() -> DecisionProvider:
    if get_server_settings().use_llm:
        return LLMDecisionProvider()
    return ReserveDecisionProvider()


class GameRegistry:
    """In-memory registry of running host sessions."""

    def __init__(
        self,
        config_overrides: Optional[Dict[str, Any]] = None,
        provider_factory: Callable[[], DecisionProvider] = default_provider_factory,
    ):
        self._games: Dict[str, HostSession] = {}
        self._lock = asyncio.Lock()
        self.config_overrides = dict(config_overrides or {})
        self.provider_factory = provider_factory

    async def create_game(self, roster: List[Player], seed: Optional[int] = None) -> str:
        hosts = [p for p in roster if p.is_host]
        if len(hosts) != 1:
            raise ValidationError(f"Roster needs exactly one host, got {len(hosts)}")

        overrides = dict(self.config_overrides)
        if seed is not None:
            overrides["seed"] = seed
        config = GameConfig.from_settings(**overrides)
        state = create_game(config, roster)

        game_id = uuid.uuid4().hex[:12]
        session = HostSession(game_id, state, decision_provider=self.provider_factory())
        async with self._lock:
            self._games[game_id] = session

        await session.start()
        logger.info("Created game %s for %s", game_id, ", ".join(p.name for p in roster))
        return game_id

    async def get(self, game_id: str) -> HostSession:
        session = self._games.get(game_id)
        if session is None:
            raise GameNotFoundError(f"Game {game_id} not found")
        return session

    async def stop(self, game_id: str) -> None:
        async with self._lock:
            session = self._games.pop(game_id, None)
        if session is None:
            raise GameNotFoundError(f"Game {game_id} not found")
        await session.stop()

    async def stop_all(self) -> None:
        async with self._lock:
            sessions = list(self._games.values())
            self._games.clear()
        for session in sessions:
            await session.stop()

    def __len__(self) -> int:
        return len(self._games)
