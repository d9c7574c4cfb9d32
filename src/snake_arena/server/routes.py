"""REST API route handlers for match lifecycle management."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from snake_arena.engine import Move
from snake_arena.geometry import Direction
from snake_arena.server.match_manager import MatchManager
from snake_arena.server.models import (
    CreateMatchRequest,
    LabelRequest,
    MatchSummary,
    RatingEntry,
    RunRequest,
    TurnRequest,
)
from snake_arena.state import GameConfig, PlayerSpec

router = APIRouter(prefix="/matches", tags=["matches"])
leaderboard_router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


def _get_manager(request: Request) -> MatchManager:
    return request.app.state.match_manager


@router.post("", status_code=201)
async def create_match(body: CreateMatchRequest, request: Request) -> MatchSummary:
    """Create and initialize a new match."""
    manager = _get_manager(request)
    try:
        config = GameConfig(
            width=body.width,
            height=body.height,
            initial_health=body.initial_health,
            food_spawn_chance=body.food_spawn_chance,
            min_food=body.min_food,
        )
        match = manager.create_match(
            config,
            [PlayerSpec(id=p.id, model=p.model) for p in body.players],
            endpoints={p.id: p.endpoint for p in body.players},
            seed=body.seed,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return match.summary()


@router.get("")
async def list_matches(request: Request) -> list[MatchSummary]:
    """List all retained matches."""
    return _get_manager(request).list_matches()


@router.get("/{match_id}")
async def get_match(match_id: str, request: Request) -> dict:
    """Return a snapshot of the match state."""
    manager = _get_manager(request)
    match = manager.get_match(match_id)
    if match is None:
        raise HTTPException(status_code=404, detail="Match not found.")
    return {
        "match_id": match.match_id,
        "status": match.status.value,
        "state": manager.get_snapshot(match_id).to_dict(),
    }


@router.post("/{match_id}/turn")
async def play_turn(match_id: str, body: TurnRequest, request: Request) -> dict:
    """Resolve one turn with the supplied moves."""
    manager = _get_manager(request)
    moves = [
        Move(
            snake_id=m.snake_id,
            direction=Direction(m.direction),
            reason=m.reason,
            latency_ms=m.latency_ms,
        )
        for m in body.moves
    ]
    try:
        report = await manager.play_turn(match_id, moves)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return report.to_dict()


@router.post("/{match_id}/run", status_code=202)
async def run_match(match_id: str, body: RunRequest, request: Request) -> dict:
    """Start the automatic turn loop."""
    manager = _get_manager(request)
    try:
        manager.start_match(
            match_id,
            turn_delay_ms=body.turn_delay_ms,
            move_timeout_s=body.move_timeout_s,
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"status": "running", "match_id": match_id}


@router.patch("/{match_id}/snakes/{snake_id}")
async def set_label(
    match_id: str, snake_id: str, body: LabelRequest, request: Request,
) -> dict:
    """Override a snake's model label."""
    manager = _get_manager(request)
    try:
        manager.set_agent_label(match_id, snake_id, body.model)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"snake_id": snake_id, "model": body.model}


@leaderboard_router.get("")
async def get_leaderboard(request: Request) -> list[RatingEntry]:
    """Current Elo ratings, best first."""
    board = _get_manager(request).leaderboard
    return [
        RatingEntry(model=model, rating=rating)
        for model, rating in board.standings()
    ]
