from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from tycoon.exceptions import GameNotFoundError, ValidationError
from tycoon.rules import get_legal_intents

from .registry import GameRegistry
from .schemas import (
    CreateGameRequest,
    CreateGameResponse,
    IntentMessage,
    IntentResponse,
    LegalIntentsResponse,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - stop every running game on shutdown."""
    logger.info("Starting relay server")
    yield
    logger.info("Shutting down relay server, stopping %d game(s)", len(registry))
    await registry.stop_all()


app = FastAPI(
    title="Tycoon Relay Server",
    version="0.1.0",
    lifespan=lifespan,
)
registry = GameRegistry()


@app.exception_handler(GameNotFoundError)
async def game_not_found_handler(request: Request, exc: GameNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.post("/games", response_model=CreateGameResponse, response_model_by_alias=True)
async def create_game(req: CreateGameRequest):
    roster = [entry.to_player() for entry in req.roster]
    gid = await registry.create_game(roster, seed=req.seed)
    return CreateGameResponse(game_id=gid)


@app.get("/games/{game_id}/snapshot")
async def get_snapshot(game_id: str):
    session = await registry.get(game_id)
    return session.latest_snapshot()


@app.get("/games/{game_id}/legal_intents", response_model=LegalIntentsResponse, response_model_by_alias=True)
async def legal_intents(game_id: str, player_id: str):
    session = await registry.get(game_id)
    kinds = get_legal_intents(session.state, player_id)
    return LegalIntentsResponse(game_id=game_id, player_id=player_id, intents=[k.value for k in kinds])


@app.post("/games/{game_id}/intents", response_model=IntentResponse)
async def submit_intent(game_id: str, msg: IntentMessage):
    session = await registry.get(game_id)
    result = await session.submit(msg.to_intent())
    return IntentResponse(accepted=result.accepted, reason=result.reason, seq=result.seq)


@app.delete("/games/{game_id}")
async def stop_game(game_id: str):
    await registry.stop(game_id)
    return {"gameId": game_id, "stopped": True}


@app.websocket("/ws/games/{game_id}")
async def ws_game(websocket: WebSocket, game_id: str):
    await websocket.accept()
    try:
        session = await registry.get(game_id)
    except GameNotFoundError:
        await websocket.close(code=4404)
        return

    queue = await session.subscribe()
    logger.info("Client connected to game %s", game_id)

    async def sender():
        while True:
            msg = await queue.get()
            await websocket.send_json(msg)

    sender_task = asyncio.create_task(sender())
    try:
        while True:
            try:
                data = await websocket.receive_text()
            except WebSocketDisconnect:
                break
            try:
                msg = IntentMessage.model_validate_json(data)
            except PydanticValidationError as e:
                await websocket.send_json({"type": "error", "detail": e.errors(include_url=False, include_context=False)})
                continue
            session.submit_nowait(msg.to_intent())
    finally:
        await session.unsubscribe(queue)
        sender_task.cancel()
        logger.info("Client disconnected from game %s", game_id)
