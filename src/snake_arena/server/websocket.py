"""WebSocket handler for spectating matches."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from snake_arena.server.match_manager import MatchManager
from snake_arena.server.models import MatchStatus

logger = logging.getLogger(__name__)

ws_router = APIRouter()


def _get_manager(ws: WebSocket) -> MatchManager:
    return ws.app.state.match_manager


@ws_router.websocket("/matches/{match_id}/spectate")
async def spectate(websocket: WebSocket, match_id: str) -> None:
    """Spectator WebSocket: receive-only state stream, one message per turn."""
    manager = _get_manager(websocket)
    match = manager.get_match(match_id)
    if match is None:
        await websocket.close(code=4004, reason="Match not found.")
        return

    await websocket.accept()
    match.spectators.append(websocket)
    logger.info("Spectator connected to match %s.", match_id)

    # Send the current snapshot so the client can render immediately.
    await websocket.send_text(
        json.dumps(match.state.to_dict(), separators=(",", ":")),
    )
    if match.status is MatchStatus.FINISHED:
        match.spectators.remove(websocket)
        await websocket.close(code=1000, reason="Match finished.")
        return

    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Spectator disconnected from match %s.", match_id)
    finally:
        if websocket in match.spectators:
            match.spectators.remove(websocket)
