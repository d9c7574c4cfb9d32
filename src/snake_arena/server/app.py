"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from snake_arena.server.match_manager import MatchManager
from snake_arena.server.routes import leaderboard_router, router
from snake_arena.server.websocket import ws_router


@asynccontextmanager
async def _lifespan(app: FastAPI):
    app.state.match_manager = MatchManager()
    yield
    await app.state.match_manager.cleanup()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Snake Arena API", version="0.1.0", lifespan=_lifespan,
    )
    app.include_router(router)
    app.include_router(leaderboard_router)
    app.include_router(ws_router)
    return app
