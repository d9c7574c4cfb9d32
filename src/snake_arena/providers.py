"""Move providers and concurrent per-turn move gathering."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

import httpx
import numpy as np

from snake_arena.engine import Move
from snake_arena.geometry import Direction, parse_direction
from snake_arena.snake import Snake
from snake_arena.state import GameState, snapshot

logger = logging.getLogger(__name__)

DEFAULT_MOVE_TIMEOUT = 10.0  # seconds


@dataclass(frozen=True)
class MoveResponse:
    """Raw answer from a provider, validated before it becomes a Move."""

    move: str
    reason: str | None = None


class MoveProvider(Protocol):
    """Anything that can choose a direction for a snake."""

    async def get_move(
        self, state: GameState, snake: Snake,
    ) -> MoveResponse | None: ...


class RandomMoveProvider:
    """Picks a random direction that avoids walls and non-tail bodies."""

    def __init__(self, rng: np.random.Generator | None = None) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()

    async def get_move(
        self, state: GameState, snake: Snake,
    ) -> MoveResponse | None:
        blocked = {
            cell
            for other in state.alive_snakes()
            for cell in other.body[:-1]
        }
        safe = [
            d for d in Direction
            if state.in_bounds(snake.head.shift(d))
            and snake.head.shift(d) not in blocked
        ]
        choices = safe or list(Direction)
        pick = choices[int(self.rng.integers(len(choices)))]
        return MoveResponse(move=pick.value)


class HttpMoveProvider:
    """Requests moves from a remote agent over HTTP.

    The endpoint receives ``{"game_state", "you", "model"}`` and must answer
    with ``{"move": ..., "reason": ...}``.
    """

    def __init__(
        self, url: str, client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self._client = client

    async def get_move(
        self, state: GameState, snake: Snake,
    ) -> MoveResponse | None:
        payload = {
            "game_state": state.to_dict(),
            "you": snake.to_dict(),
            "model": snake.model,
        }
        if self._client is not None:
            resp = await self._client.post(self.url, json=payload)
        else:
            async with httpx.AsyncClient() as client:
                resp = await client.post(self.url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            return None
        return MoveResponse(move=data.get("move"), reason=data.get("reason"))


async def _request_move(
    provider: MoveProvider,
    state: GameState,
    snake: Snake,
    timeout: float,
) -> Move | None:
    """Ask one provider for a move; every failure becomes ``None``."""
    start = time.monotonic()
    try:
        response = await asyncio.wait_for(
            provider.get_move(state, snake), timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning(
            "Move provider for snake %s timed out after %.1fs.",
            snake.id, timeout,
        )
        return None
    except Exception:
        logger.warning(
            "Move provider for snake %s failed.", snake.id, exc_info=True,
        )
        return None
    latency_ms = (time.monotonic() - start) * 1000.0

    if response is None:
        return None
    direction = parse_direction(response.move)
    if direction is None:
        logger.warning(
            "Snake %s returned an invalid move %r.", snake.id, response.move,
        )
        return None
    return Move(
        snake_id=snake.id,
        direction=direction,
        reason=response.reason,
        latency_ms=latency_ms,
    )


async def gather_moves(
    state: GameState,
    providers: Mapping[str, MoveProvider],
    *,
    timeout: float = DEFAULT_MOVE_TIMEOUT,
) -> list[Move]:
    """Collect moves for every living snake concurrently.

    Each provider gets its own timeout and its own copy of the state. A
    snake whose provider is missing, slow, failing or returns garbage is
    simply absent from the result.
    """
    if timeout <= 0:
        raise ValueError("timeout must be positive.")

    view = snapshot(state)
    snakes = [s for s in view.alive_snakes() if s.id in providers]
    # A provider call cancelled from inside shows up here as a result; a
    # cancellation of the caller still propagates out of gather().
    results = await asyncio.gather(
        *(
            _request_move(providers[s.id], view, s, timeout)
            for s in snakes
        ),
        return_exceptions=True,
    )
    moves: list[Move] = []
    for snake, result in zip(snakes, results, strict=True):
        if isinstance(result, BaseException):
            logger.warning(
                "Move request for snake %s was aborted: %r.", snake.id, result,
            )
            continue
        if result is not None:
            moves.append(result)
    return moves
