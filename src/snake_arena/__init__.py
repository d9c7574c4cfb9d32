"""Snake Arena: simultaneous-move battlesnake engine."""

from snake_arena.engine import (
    Move,
    TurnReport,
    eliminate,
    initialize,
    resolve,
    set_agent_label,
)
from snake_arena.food import FoodSpawner
from snake_arena.geometry import Direction, Point, parse_direction
from snake_arena.snake import EliminationReason, Snake, SnakeStatus
from snake_arena.state import GameConfig, GameState, PlayerSpec, snapshot

__all__ = [
    "Direction",
    "EliminationReason",
    "FoodSpawner",
    "GameConfig",
    "GameState",
    "Move",
    "PlayerSpec",
    "Point",
    "Snake",
    "SnakeStatus",
    "TurnReport",
    "eliminate",
    "initialize",
    "parse_direction",
    "resolve",
    "set_agent_label",
    "snapshot",
]
