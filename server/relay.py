"""
In-process relay between a host session and its replicas.

The relay only moves messages: host broadcasts go down to every connected
replica, replica intents go up to the host inbox. Messages cross the relay
as JSON text, the same shape they take on a socket.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Dict, List

from tycoon.rules import Intent
from tycoon.session import HostSession, ReplicaSession

logger = logging.getLogger(__name__)


class Relay:
    """Connects ReplicaSessions to one HostSession through queues."""

    def __init__(self, host: HostSession):
        self.host = host
        self._links: Dict[int, List[asyncio.Task]] = {}
        self._queues: Dict[int, asyncio.Queue] = {}

    async def connect(self, replica: ReplicaSession) -> None:
        if replica.game_id != self.host.game_id:
            raise ValueError(f"Replica belongs to game {replica.game_id}, relay serves {self.host.game_id}")
        queue = await self.host.subscribe()
        key = id(replica)
        self._queues[key] = queue
        self._links[key] = [
            asyncio.create_task(self._downlink(queue, replica)),
            asyncio.create_task(self._uplink(replica)),
        ]
        logger.info("Replica %s connected to game %s", replica.player_id, self.host.game_id)

    async def disconnect(self, replica: ReplicaSession) -> None:
        key = id(replica)
        tasks = self._links.pop(key, [])
        queue = self._queues.pop(key, None)
        if queue is not None:
            await self.host.unsubscribe(queue)
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("Replica %s disconnected from game %s", replica.player_id, self.host.game_id)

    async def close(self) -> None:
        for key in list(self._links):
            tasks = self._links.pop(key)
            queue = self._queues.pop(key, None)
            if queue is not None:
                await self.host.unsubscribe(queue)
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _downlink(self, queue: asyncio.Queue, replica: ReplicaSession) -> None:
        while True:
            message = await queue.get()
            await replica.receive(json.loads(json.dumps(message)))

    async def _uplink(self, replica: ReplicaSession) -> None:
        while True:
            raw = await replica.outbox.get()
            try:
                intent = Intent.from_dict(json.loads(json.dumps(raw)))
            except (KeyError, ValueError) as e:
                logger.warning("Dropping malformed intent from %s: %s", replica.player_id, e)
                continue
            # Forwarded without waiting for the verdict
            self.host.submit_nowait(intent)
