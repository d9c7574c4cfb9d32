"""Food spawning logic."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from snake_arena.geometry import Point

if TYPE_CHECKING:
    from snake_arena.state import GameConfig, GameState

logger = logging.getLogger(__name__)

# Random probes per placement before giving up on a crowded board.
MAX_PLACEMENT_ATTEMPTS = 50


class FoodSpawner:
    """Keeps the board stocked with food.

    Uses an injected NumPy RNG so placement is reproducible under a seed.
    """

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        max_attempts: int = MAX_PLACEMENT_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_attempts = max_attempts

    def ensure_food(
        self, state: GameState, config: GameConfig, *, allow_bonus: bool = True,
    ) -> list[Point]:
        """Top food up to ``config.min_food`` and maybe add one extra.

        Returns the list of newly placed positions.
        """
        spawned: list[Point] = []
        while len(state.food) < config.min_food:
            pos = self.place_random(state)
            if pos is None:
                break
            spawned.append(pos)

        if allow_bonus and self.rng.random() < config.food_spawn_chance:
            pos = self.place_random(state)
            if pos is not None:
                spawned.append(pos)

        return spawned

    def place_random(self, state: GameState) -> Point | None:
        """Put one food item on a random vacant cell.

        Dead snakes are not obstacles. Returns ``None`` when no vacant
        cell was hit within the attempt budget.
        """
        for _ in range(self.max_attempts):
            x = int(self.rng.integers(state.width))
            y = int(self.rng.integers(state.height))
            pos = Point(x, y)
            if pos in state.food:
                continue
            if any(s.occupies(pos) for s in state.alive_snakes()):
                continue
            state.food.append(pos)
            return pos

        logger.debug(
            "No vacant cell found after %d attempts in game %s.",
            self.max_attempts,
            state.id,
        )
        return None
