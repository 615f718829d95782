"""
Host-authoritative sessions.

`HostSession` is the only writer: one asyncio task drains an inbox queue and
fully validates, applies and broadcasts each message before taking the next.
`ReplicaSession` never runs game logic; it forwards intents through an
outbox queue and adopts the newest snapshot it sees.

Both implement `IntentSubmitter`, so UI code submits intents the same way
whichever side of the wire it runs on.
"""

from __future__ import annotations

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Set

from tycoon.agents.base import DecisionAction, DecisionProvider
from tycoon.agents.reserve import ReserveDecisionProvider
from tycoon.game import GamePhase, GameState
from tycoon.rules import Intent, IntentKind, apply_intent, reveal_card
from tycoon.snapshot import load_snapshot, snapshot_message

logger = logging.getLogger(__name__)


@dataclass
class IntentResult:
    """Outcome of a submitted intent as seen by the host."""

    accepted: bool
    reason: str = ""
    seq: int = 0


class IntentSubmitter(ABC):
    """Common submission interface for host and replica."""

    @abstractmethod
    async def submit(self, intent: Intent) -> Optional[IntentResult]:
        """
        Submit an intent.

        Returns:
            The host's verdict, or None when the intent was only forwarded.
        """
        pass


@dataclass
class _Envelope:
    intent: Optional[Intent]
    future: Optional[asyncio.Future] = None
    # Seq of the step that drew the card; set on reveal envelopes only
    card_token: Optional[int] = None


def _log_task_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Background task %s failed", task.get_name(), exc_info=exc)


class HostSession(IntentSubmitter):
    """Owns the authoritative GameState of one match and runs it asynchronously.

    Responsibilities:
    - Apply inbox messages strictly one at a time
    - Bump the sequence number and broadcast a full snapshot per accepted step
    - Schedule the delayed card reveal
    - Drive automated seats through the decision provider
    """

    def __init__(
        self,
        game_id: str,
        state: GameState,
        rng: Optional[random.Random] = None,
        decision_provider: Optional[DecisionProvider] = None,
    ):
        self.game_id = game_id
        self.state = state
        self.config = state.config
        self.rng = rng or random.Random(state.config.seed)
        self.decision_provider = decision_provider or ReserveDecisionProvider()
        self.seq = 0

        self._inbox: asyncio.Queue = asyncio.Queue()
        self._clients: Set[asyncio.Queue] = set()
        self._stepped = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._reveal_tasks: Set[asyncio.Task] = set()
        self._card_token: Optional[int] = None
        self._automation_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        self._task = asyncio.create_task(self._run_loop())
        self._after_step()
        logger.info("Host session %s started with %d players", self.game_id, len(self.state.players))

    async def stop(self) -> None:
        """Tear down the session. The only place the card reveal is cancelled."""
        tasks = list(self._reveal_tasks)
        tasks += [t for t in (self._automation_task, self._task) if t is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._reveal_tasks.clear()
        self._card_token = None
        self._automation_task = None
        self._task = None
        await self.decision_provider.aclose()
        logger.info("Host session %s stopped at seq %d", self.game_id, self.seq)

    # Submission
    async def submit(self, intent: Intent) -> IntentResult:
        """Queue an intent and wait for the host's verdict."""
        future = asyncio.get_running_loop().create_future()
        await self._inbox.put(_Envelope(intent, future))
        return await future

    def submit_nowait(self, intent: Intent) -> None:
        """Queue an intent without waiting for it to be processed."""
        self._inbox.put_nowait(_Envelope(intent))

    # Subscription management
    def latest_snapshot(self) -> Dict[str, Any]:
        return snapshot_message(self.game_id, self.seq, self.state)

    async def subscribe(self) -> asyncio.Queue:
        q: asyncio.Queue = asyncio.Queue()
        self._clients.add(q)
        await q.put(self.latest_snapshot())
        return q

    async def unsubscribe(self, q: asyncio.Queue) -> None:
        self._clients.discard(q)

    def _broadcast(self, payload: Dict[str, Any]) -> None:
        for q in list(self._clients):
            try:
                q.put_nowait(payload)
            except asyncio.QueueFull:
                # Drop client if it cannot keep up
                self._clients.discard(q)

    # Pipeline
    async def _run_loop(self) -> None:
        while True:
            envelope = await self._inbox.get()
            result = self._process(envelope)
            if envelope.future is not None and not envelope.future.done():
                envelope.future.set_result(result)

    def _process(self, envelope: _Envelope) -> IntentResult:
        if envelope.intent is None:
            if envelope.card_token is None or envelope.card_token != self._card_token:
                logger.debug("Game %s dropped stale card reveal %s", self.game_id, envelope.card_token)
                return IntentResult(False, "Stale card reveal.", self.seq)
            transition = reveal_card(self.state)
            label = "card-reveal"
        else:
            transition = apply_intent(self.state, envelope.intent, self.rng)
            label = f"{envelope.intent.kind.value} from {envelope.intent.player_id}"

        # A rejection still carries its warning entry, which rides along with the next broadcast
        self.state = transition.state

        if not transition.accepted:
            logger.warning("Game %s rejected %s: %s", self.game_id, label, transition.reason)
            return IntentResult(False, transition.reason, self.seq)

        self.seq += 1
        self._stepped.set()
        self._broadcast(self.latest_snapshot())
        logger.info("Game %s applied %s -> seq %d, phase %s", self.game_id, label, self.seq, self.state.phase.value)
        self._after_step()
        return IntentResult(True, "", self.seq)

    def _after_step(self) -> None:
        showing = self.state.phase == GamePhase.SHOWING_CARD and self.state.pending_card is not None
        if not showing or self.state.game_over:
            self._card_token = None
        if self.state.game_over:
            return
        if showing:
            # Other players may act while the card is shown; only a fresh draw gets a timer
            if self._card_token is None:
                self._card_token = self.seq
                task = asyncio.create_task(self._reveal_after_delay(self.seq))
                self._reveal_tasks.add(task)
                task.add_done_callback(self._reveal_tasks.discard)
                task.add_done_callback(_log_task_failure)
            return
        current = self.state.get_current_player()
        if current.is_automated and (self._automation_task is None or self._automation_task.done()):
            self._automation_task = asyncio.create_task(self._drive_automated())
            self._automation_task.add_done_callback(_log_task_failure)

    async def _reveal_after_delay(self, card_token: int) -> None:
        await asyncio.sleep(self.config.card_reveal_delay)
        await self._inbox.put(_Envelope(None, card_token=card_token))

    # Automated seats
    async def _drive_automated(self) -> None:
        while True:
            if self.state.phase == GamePhase.SHOWING_CARD:
                self._stepped.clear()
                await self._stepped.wait()
                continue

            await asyncio.sleep(self.config.automation_delay)
            state = self.state
            if state.game_over:
                return
            player = state.get_current_player()
            if not player.is_automated:
                return
            if state.phase == GamePhase.SHOWING_CARD:
                continue

            intent = await self._choose_automated_intent(state)
            if intent is None:
                return
            result = await self.submit(intent)
            if not result.accepted:
                logger.warning("Automated seat %s stalled: %s", player.player_id, result.reason)
                return

    async def _choose_automated_intent(self, state: GameState) -> Optional[Intent]:
        player = state.get_current_player()
        pid = player.player_id

        if state.phase == GamePhase.ROLLING:
            if player.in_jail and player.money >= self.config.automated_bail_threshold:
                return Intent(IntentKind.PAY_BAIL, pid)
            return Intent(IntentKind.ROLL, pid)

        if state.phase == GamePhase.ACTION:
            try:
                decision = await self.decision_provider.decide(state, pid)
            except Exception as e:
                logger.warning("Decision provider failed for %s, using reserve rule: %s", pid, e)
                decision = ReserveDecisionProvider().decide_now(state, pid)
            kind = IntentKind.BUY if decision.action == DecisionAction.BUY else IntentKind.DECLINE
            return Intent(kind, pid, {"rationale": decision.rationale})

        if state.phase == GamePhase.END_TURN:
            return Intent(IntentKind.END_TURN, pid)

        return None


class ReplicaSession(IntentSubmitter):
    """
    Read-only mirror of a match.

    Intents go into `outbox` for the transport to deliver; snapshots come in
    through `receive`. Local UI state such as the selected tile survives
    snapshot adoption.
    """

    def __init__(self, game_id: str, player_id: Optional[str] = None):
        self.game_id = game_id
        self.player_id = player_id
        self.outbox: asyncio.Queue = asyncio.Queue()
        self.state: Optional[GameState] = None
        self.last_seq = -1
        self.selected_tile_id: Optional[int] = None
        self._updated = asyncio.Condition()

    async def submit(self, intent: Intent) -> None:
        await self.outbox.put(intent.to_dict())
        return None

    def select_tile(self, tile_id: Optional[int]) -> None:
        self.selected_tile_id = tile_id

    def adopt(self, message: Dict[str, Any]) -> bool:
        """
        Adopt a snapshot if it is newer than the last one seen.

        Returns:
            True if the snapshot replaced the local state
        """
        if message.get("type") != "snapshot" or message.get("gameId") != self.game_id:
            return False
        seq = message.get("seq", -1)
        if seq <= self.last_seq:
            logger.debug("Replica %s dropped stale snapshot %d (have %d)", self.player_id, seq, self.last_seq)
            return False
        self.state = load_snapshot(message["state"])
        self.last_seq = seq
        return True

    async def receive(self, message: Dict[str, Any]) -> bool:
        adopted = self.adopt(message)
        if adopted:
            async with self._updated:
                self._updated.notify_all()
        return adopted

    async def wait_for_seq(self, seq: int) -> GameState:
        """Wait until a snapshot with at least the given sequence number arrives."""
        async with self._updated:
            await self._updated.wait_for(lambda: self.last_seq >= seq)
        return self.state


__all__ = [
    "HostSession",
    "IntentResult",
    "IntentSubmitter",
    "ReplicaSession",
]
