"""Game initialization and simultaneous turn resolution."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from snake_arena.food import FoodSpawner
from snake_arena.geometry import Direction, Point, parse_direction
from snake_arena.snake import EliminationReason, Snake
from snake_arena.state import MAX_HEALTH, GameConfig, GameState, PlayerSpec

logger = logging.getLogger(__name__)

# Health lost by every surviving snake that does not eat.
HEALTH_DECAY = 10

SNAKE_COLORS: tuple[str, ...] = (
    "#FFAF00",
    "#00AD3A",
    "#9440D5",
    "#006FFE",
    "#F12B83",
    "#00A996",
)


@dataclass(frozen=True)
class Move:
    """A proposed move for one snake on one turn."""

    snake_id: str
    direction: Direction
    reason: str | None = None
    latency_ms: float | None = None


@dataclass
class TurnReport:
    """Facts produced by resolving a single turn."""

    turn: int
    eliminations: list[tuple[str, EliminationReason]] = field(
        default_factory=list,
    )
    eaten: list[Point] = field(default_factory=list)
    spawned: list[Point] = field(default_factory=list)
    game_over: bool = False
    winner_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "turn": self.turn,
            "eliminations": [
                {"snake_id": sid, "reason": reason.value}
                for sid, reason in self.eliminations
            ],
            "eaten": [p.to_dict() for p in self.eaten],
            "spawned": [p.to_dict() for p in self.spawned],
            "game_over": self.game_over,
            "winner_id": self.winner_id,
        }


def _start_positions(config: GameConfig) -> list[Point]:
    w, h = config.width, config.height
    return [
        Point(1, 1),
        Point(w - 2, 1),
        Point(1, h - 2),
        Point(w - 2, h - 2),
    ]


def initialize(
    config: GameConfig,
    players: Sequence[PlayerSpec],
    *,
    spawner: FoodSpawner | None = None,
    game_id: str | None = None,
) -> GameState:
    """Create a fresh game with one single-cell snake per player.

    Start cells cycle through the four corners, so more than four players
    may share a cell.
    """
    ids = [p.id for p in players]
    if len(set(ids)) != len(ids):
        raise ValueError("Player ids must be unique.")

    positions = _start_positions(config)
    state = GameState(id=game_id or uuid.uuid4().hex[:12], config=config)
    for index, player in enumerate(players):
        state.snakes.append(
            Snake(
                id=player.id,
                name=f"Snake {index + 1}",
                model=player.model,
                color=SNAKE_COLORS[index % len(SNAKE_COLORS)],
                body=[positions[index % len(positions)]],
                health=config.initial_health,
            )
        )

    spawner = spawner if spawner is not None else FoodSpawner()
    spawner.ensure_food(state, config, allow_bonus=False)
    logger.info(
        "Game %s initialized (%dx%d, players=%d).",
        state.id, config.width, config.height, len(state.snakes),
    )
    return state


def _index_moves(
    moves: Iterable[Move],
) -> tuple[dict[str, Move], dict[str, Direction]]:
    """Keep the first move per snake and its direction if it is valid."""
    submitted: dict[str, Move] = {}
    directions: dict[str, Direction] = {}
    for move in moves:
        if move.snake_id in submitted:
            continue
        submitted[move.snake_id] = move
        direction = parse_direction(move.direction)
        if direction is not None:
            directions[move.snake_id] = direction
    return submitted, directions


def resolve(
    state: GameState,
    moves: Iterable[Move],
    *,
    spawner: FoodSpawner | None = None,
) -> TurnReport:
    """Advance *state* by one turn, moving every living snake at once.

    All projected positions are computed before anything is committed, so
    the order of *moves* never matters. A living snake without a valid move
    is eliminated for timeout. Calling this on a finished game is a no-op.
    """
    if state.game_over:
        return TurnReport(
            turn=state.turn, game_over=True, winner_id=state.winner_id,
        )

    state.turn += 1
    submitted, directions = _index_moves(moves)
    alive = state.alive_snakes()

    # --- projection ---
    next_heads: dict[str, Point] = {}
    eats: dict[str, bool] = {}
    next_bodies: dict[str, list[Point]] = {}
    for snake in alive:
        direction = directions.get(snake.id)
        if direction is None:
            continue
        head = snake.head.shift(direction)
        next_heads[snake.id] = head
        eats[snake.id] = head in state.food
        body = [head, *snake.body]
        if not eats[snake.id]:
            body.pop()
        next_bodies[snake.id] = body

    # --- per-snake collision checks (first reason wins) ---
    reasons: dict[str, EliminationReason] = {}
    for snake in alive:
        head = next_heads.get(snake.id)
        if head is None:
            reasons[snake.id] = EliminationReason.TIMEOUT
        elif not state.in_bounds(head):
            reasons[snake.id] = EliminationReason.OUT_OF_BOUNDS
        elif head in next_bodies[snake.id][1:]:
            reasons[snake.id] = EliminationReason.SELF_COLLISION
        elif any(
            head in body[1:]
            for other_id, body in next_bodies.items()
            if other_id != snake.id
        ):
            reasons[snake.id] = EliminationReason.BODY_COLLISION

    # --- head-to-head among the remaining snakes ---
    contenders: dict[Point, list[Snake]] = defaultdict(list)
    for snake in alive:
        if snake.id not in reasons:
            contenders[next_heads[snake.id]].append(snake)

    for group in contenders.values():
        if len(group) < 2:
            continue
        longest = max(len(s.body) for s in group)
        tied = [s for s in group if len(s.body) == longest]
        for snake in group:
            # Equal-length snakes meeting head-on all die.
            if len(snake.body) < longest or len(tied) > 1:
                reasons[snake.id] = EliminationReason.HEAD_TO_HEAD

    # --- commit ---
    report = TurnReport(turn=state.turn)
    for snake in alive:
        reason = reasons.get(snake.id)
        if reason is not None:
            # Collision deaths keep the pre-turn body.
            snake.eliminate(reason)
            report.eliminations.append((snake.id, reason))
            continue

        snake.body = next_bodies[snake.id]
        if eats[snake.id]:
            snake.health = MAX_HEALTH
            snake.length += 1
            if snake.head not in report.eaten:
                report.eaten.append(snake.head)
        else:
            snake.health = max(snake.health - HEALTH_DECAY, 0)
            if snake.health <= 0:
                snake.eliminate(EliminationReason.STARVATION)
                report.eliminations.append(
                    (snake.id, EliminationReason.STARVATION),
                )

    for snake in state.snakes:
        move = submitted.get(snake.id)
        if move is not None and move.latency_ms is not None:
            snake.latency.append(move.latency_ms)

    for pos in report.eaten:
        state.food.remove(pos)

    spawner = spawner if spawner is not None else FoodSpawner()
    report.spawned = spawner.ensure_food(state, state.config)

    for sid, reason in report.eliminations:
        logger.info(
            "Snake %s eliminated at turn %d in game %s: %s.",
            sid, state.turn, state.id, reason.value,
        )

    _check_game_over(state)
    report.game_over = state.game_over
    report.winner_id = state.winner_id
    return report


def _check_game_over(state: GameState) -> None:
    """End the game once at most one snake is left."""
    remaining = state.alive_snakes()
    if len(remaining) > 1:
        return
    state.game_over = True
    if len(remaining) == 1:
        state.winner_id = remaining[0].id
    logger.info(
        "Game %s over at turn %d; winner: %s.",
        state.id, state.turn, state.winner_id or "none",
    )


def set_agent_label(state: GameState, snake_id: str, model: str) -> None:
    """Replace a snake's model label. Has no effect on play."""
    snake = state.get_snake(snake_id)
    if snake is None:
        raise KeyError(f"Snake {snake_id} not found.")
    snake.model = model


def eliminate(state: GameState, snake_id: str) -> bool:
    """Remove a living snake from play by hand.

    Returns ``True`` if the snake was eliminated by this call. A finished
    game is left untouched.
    """
    snake = state.get_snake(snake_id)
    if snake is None:
        raise KeyError(f"Snake {snake_id} not found.")
    if state.game_over or not snake.alive:
        return False
    snake.eliminate(EliminationReason.MANUAL)
    logger.info(
        "Snake %s eliminated manually in game %s.", snake_id, state.id,
    )
    _check_game_over(state)
    return True
