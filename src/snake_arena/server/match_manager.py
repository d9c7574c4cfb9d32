"""In-memory match registry, turn serialization, and async turn loops."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

import httpx
import numpy as np
from starlette.websockets import WebSocket, WebSocketState

from snake_arena.engine import Move, TurnReport, initialize, resolve
from snake_arena.engine import set_agent_label as _set_agent_label
from snake_arena.food import FoodSpawner
from snake_arena.providers import (
    HttpMoveProvider,
    MoveProvider,
    RandomMoveProvider,
    gather_moves,
)
from snake_arena.rating import Leaderboard, final_ranks
from snake_arena.server.models import MatchStatus, MatchSummary
from snake_arena.state import GameConfig, GameState, PlayerSpec, snapshot

logger = logging.getLogger(__name__)

_MAX_FINISHED_MATCHES = 100


@dataclass
class MatchInstance:
    """All state for a single match."""

    state: GameState
    spawner: FoodSpawner
    endpoints: dict[str, str | None]
    rng: np.random.Generator
    status: MatchStatus = MatchStatus.READY
    spectators: list[WebSocket] = field(default_factory=list)
    created_at: float = field(default_factory=time.monotonic)
    finished_at: float | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    _task: asyncio.Task | None = field(default=None, repr=False)

    @property
    def match_id(self) -> str:
        return self.state.id

    def summary(self) -> MatchSummary:
        return MatchSummary(
            match_id=self.match_id,
            status=self.status,
            turn=self.state.turn,
            player_count=len(self.state.snakes),
            alive_count=len(self.state.alive_snakes()),
            winner_id=self.state.winner_id,
        )


class MatchManager:
    """Central registry managing all match instances."""

    def __init__(self, max_finished_matches: int = _MAX_FINISHED_MATCHES) -> None:
        if max_finished_matches < 0:
            raise ValueError("max_finished_matches must be >= 0.")
        self._matches: dict[str, MatchInstance] = {}
        self._max_finished_matches = max_finished_matches
        self._http_client: httpx.AsyncClient | None = None
        self.leaderboard = Leaderboard()

    def create_match(
        self,
        config: GameConfig,
        players: Sequence[PlayerSpec],
        endpoints: dict[str, str | None] | None = None,
        seed: int | None = None,
    ) -> MatchInstance:
        """Initialize a new game and register it."""
        rng = np.random.default_rng(seed)
        spawner = FoodSpawner(rng)
        state = initialize(config, players, spawner=spawner)
        instance = MatchInstance(
            state=state,
            spawner=spawner,
            endpoints=dict(endpoints or {}),
            rng=rng,
        )
        self._matches[state.id] = instance
        logger.info(
            "Match %s created (players=%d).", state.id, len(players),
        )
        return instance

    def get_match(self, match_id: str) -> MatchInstance | None:
        return self._matches.get(match_id)

    def _require(self, match_id: str) -> MatchInstance:
        match = self._matches.get(match_id)
        if match is None:
            raise KeyError(f"Match {match_id} not found.")
        return match

    def list_matches(self) -> list[MatchSummary]:
        return [m.summary() for m in self._matches.values()]

    def get_snapshot(self, match_id: str) -> GameState:
        return snapshot(self._require(match_id).state)

    def set_agent_label(self, match_id: str, snake_id: str, model: str) -> None:
        """Administrative model-label override; allowed at any time."""
        match = self._require(match_id)
        _set_agent_label(match.state, snake_id, model)
        logger.info(
            "Snake %s in match %s relabelled as '%s'.",
            snake_id, match_id, model,
        )

    async def play_turn(self, match_id: str, moves: Sequence[Move]) -> TurnReport:
        """Resolve one turn with externally supplied moves."""
        match = self._require(match_id)
        if match.status == MatchStatus.RUNNING:
            raise ValueError("Match is running automatically.")
        async with match.lock:
            report = resolve(match.state, moves, spawner=match.spawner)
            if match.state.game_over:
                self._mark_match_finished(match)
        await self._broadcast(match)
        if match.status == MatchStatus.FINISHED:
            await self._close_connections(match)
            self._prune_finished_matches()
        return report

    def _providers_for(self, match: MatchInstance) -> dict[str, MoveProvider]:
        providers: dict[str, MoveProvider] = {}
        for snake in match.state.snakes:
            url = match.endpoints.get(snake.id)
            if url:
                if self._http_client is None:
                    self._http_client = httpx.AsyncClient()
                providers[snake.id] = HttpMoveProvider(url, self._http_client)
            else:
                providers[snake.id] = RandomMoveProvider(match.rng)
        return providers

    def start_match(
        self,
        match_id: str,
        turn_delay_ms: int = 200,
        move_timeout_s: float = 10.0,
    ) -> None:
        """Start the automatic turn loop for a ready match."""
        match = self._require(match_id)
        if match.status != MatchStatus.READY:
            raise ValueError("Match is not in ready state.")
        if match.state.game_over:
            raise ValueError("Match is already over.")

        providers = self._providers_for(match)
        match.status = MatchStatus.RUNNING
        match._task = asyncio.create_task(
            self._turn_loop(match, providers, turn_delay_ms, move_timeout_s),
        )
        logger.info("Match %s started.", match_id)

    async def _turn_loop(
        self,
        match: MatchInstance,
        providers: dict[str, MoveProvider],
        turn_delay_ms: int,
        move_timeout_s: float,
    ) -> None:
        """Gather moves and resolve turns until the game ends."""
        delay = turn_delay_ms / 1000.0
        try:
            while match.status == MatchStatus.RUNNING:
                moves = await gather_moves(
                    match.state, providers, timeout=move_timeout_s,
                )
                async with match.lock:
                    resolve(match.state, moves, spawner=match.spawner)
                    if match.state.game_over:
                        self._mark_match_finished(match)
                await self._broadcast(match)
                if match.status == MatchStatus.RUNNING:
                    await asyncio.sleep(delay)
        except asyncio.CancelledError:
            logger.info("Turn loop cancelled for match %s.", match.match_id)
        except Exception:
            logger.exception("Turn loop error in match %s.", match.match_id)
            self._mark_match_finished(match)
        finally:
            if match.status == MatchStatus.FINISHED:
                await self._close_connections(match)
                self._prune_finished_matches()

    def _mark_match_finished(self, match: MatchInstance) -> None:
        """Transition a match to finished exactly once."""
        if match.status == MatchStatus.FINISHED:
            return
        match.status = MatchStatus.FINISHED
        match.finished_at = time.monotonic()
        if match.state.game_over:
            self.leaderboard.record(final_ranks(match.state))
        logger.info(
            "Match %s finished at turn %d (winner: %s).",
            match.match_id, match.state.turn, match.state.winner_id or "none",
        )

    async def _close_connections(self, match: MatchInstance) -> None:
        """Close any live spectator sockets for a finished match."""
        for ws in list(match.spectators):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.close(code=1000, reason="Match finished.")
            except Exception:
                logger.warning(
                    "Failed closing spectator socket in match %s.",
                    match.match_id,
                )
        match.spectators.clear()

    def _prune_finished_matches(self) -> None:
        """Bound retained finished matches to avoid unbounded growth."""
        finished = [
            m for m in self._matches.values()
            if m.status == MatchStatus.FINISHED
        ]
        overflow = len(finished) - self._max_finished_matches
        if overflow <= 0:
            return

        finished.sort(
            key=lambda m: m.finished_at if m.finished_at is not None else m.created_at,
        )
        for stale in finished[:overflow]:
            self._matches.pop(stale.match_id, None)
        logger.info(
            "Pruned %d finished matches (retaining up to %d).",
            overflow,
            self._max_finished_matches,
        )

    async def _broadcast(self, match: MatchInstance) -> None:
        """Send the current state to every spectator."""
        if not match.spectators:
            return
        payload = json.dumps(match.state.to_dict(), separators=(",", ":"))
        dead: list[WebSocket] = []
        for ws in list(match.spectators):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.send_text(payload)
            except Exception:
                dead.append(ws)

        for ws in dead:
            if ws in match.spectators:
                match.spectators.remove(ws)

    async def cleanup(self) -> None:
        """Cancel all running turn loops and close the HTTP client."""
        tasks = [
            m._task for m in self._matches.values()
            if m._task and not m._task.done()
        ]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
        logger.info("MatchManager cleanup complete.")
