"""Pydantic models for API request/response schemas."""

from __future__ import annotations

import enum
from typing import Literal

from pydantic import BaseModel, Field


class MatchStatus(str, enum.Enum):
    """Lifecycle states for a match instance."""

    READY = "ready"
    RUNNING = "running"
    FINISHED = "finished"


class PlayerRequest(BaseModel):
    """One player entering a match."""

    id: str = Field(min_length=1, max_length=64)
    model: str = Field(min_length=1, max_length=128)
    endpoint: str | None = None


class CreateMatchRequest(BaseModel):
    """Request body for POST /matches."""

    width: int = Field(default=7, ge=3, le=50)
    height: int = Field(default=7, ge=3, le=50)
    initial_health: int = Field(default=100, ge=1, le=100)
    food_spawn_chance: float = Field(default=0.15, ge=0.0, le=1.0)
    min_food: int = Field(default=3, ge=0)
    players: list[PlayerRequest] = Field(min_length=1, max_length=8)
    seed: int | None = None


class MoveRequest(BaseModel):
    """A single proposed move."""

    snake_id: str
    direction: Literal["up", "down", "left", "right"]
    reason: str | None = None
    latency_ms: float | None = Field(default=None, ge=0.0)


class TurnRequest(BaseModel):
    """Request body for POST /matches/{match_id}/turn."""

    moves: list[MoveRequest] = Field(default_factory=list)


class RunRequest(BaseModel):
    """Request body for POST /matches/{match_id}/run."""

    turn_delay_ms: int = Field(default=200, ge=0, le=10_000)
    move_timeout_s: float = Field(default=10.0, gt=0.0, le=60.0)


class LabelRequest(BaseModel):
    """Request body for PATCH /matches/{match_id}/snakes/{snake_id}."""

    model: str = Field(min_length=1, max_length=128)


class MatchSummary(BaseModel):
    """Compact match info for list endpoints."""

    match_id: str
    status: MatchStatus
    turn: int
    player_count: int
    alive_count: int
    winner_id: str | None = None


class RatingEntry(BaseModel):
    """One leaderboard row."""

    model: str
    rating: float
