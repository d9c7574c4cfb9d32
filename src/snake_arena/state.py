"""Game configuration and the authoritative game-state snapshot."""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from snake_arena.geometry import Point
from snake_arena.snake import Snake

logger = logging.getLogger(__name__)

MAX_HEALTH = 100


@dataclass(frozen=True)
class GameConfig:
    """Static rules for one game."""

    width: int = 7
    height: int = 7
    initial_health: int = MAX_HEALTH
    food_spawn_chance: float = 0.15
    min_food: int = 3

    def __post_init__(self) -> None:
        # The corner layout sits one cell in from each edge.
        if self.width < 3 or self.height < 3:
            raise ValueError("width and height must each be at least 3.")
        if not 0 < self.initial_health <= MAX_HEALTH:
            raise ValueError(
                f"initial_health must be in (0, {MAX_HEALTH}]."
            )
        if not 0.0 <= self.food_spawn_chance <= 1.0:
            raise ValueError("food_spawn_chance must be between 0 and 1.")
        if self.min_food < 0:
            raise ValueError("min_food must be >= 0.")

    def to_dict(self) -> dict:
        return asdict(self)

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def load(cls, path: str | Path) -> GameConfig:
        """Load config from a JSON file."""
        return cls(**json.loads(Path(path).read_text()))


@dataclass(frozen=True)
class PlayerSpec:
    """A player entering a game: stable id plus its external model label."""

    id: str
    model: str


@dataclass
class GameState:
    """Everything needed to describe a game at a given turn."""

    id: str
    config: GameConfig
    snakes: list[Snake] = field(default_factory=list)
    food: list[Point] = field(default_factory=list)
    turn: int = 0
    game_over: bool = False
    winner_id: str | None = None

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    def in_bounds(self, point: Point) -> bool:
        """Check whether a coordinate lies on the board."""
        return 0 <= point.x < self.width and 0 <= point.y < self.height

    def get_snake(self, snake_id: str) -> Snake | None:
        for snake in self.snakes:
            if snake.id == snake_id:
                return snake
        return None

    def alive_snakes(self) -> list[Snake]:
        return [s for s in self.snakes if s.alive]

    def to_dict(self) -> dict:
        """Return the full, serializable game state."""
        return {
            "id": self.id,
            "turn": self.turn,
            "width": self.width,
            "height": self.height,
            "snakes": [s.to_dict() for s in self.snakes],
            "food": [p.to_dict() for p in self.food],
            "game_over": self.game_over,
            "winner_id": self.winner_id,
        }


def snapshot(state: GameState) -> GameState:
    """Return a deep copy that shares nothing with *state*."""
    return copy.deepcopy(state)
