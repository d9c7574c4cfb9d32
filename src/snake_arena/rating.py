"""Final standings and an in-memory pairwise Elo leaderboard."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from snake_arena.state import GameState

logger = logging.getLogger(__name__)

K_FACTOR = 32
INITIAL_RATING = 1200.0


@dataclass(frozen=True)
class Placement:
    """A model's finishing rank in one game. Rank 1 is best."""

    model: str
    rank: int


def final_ranks(state: GameState) -> list[Placement]:
    """Rank snakes: winner 1, other survivors 2, eliminated snakes 3."""
    placements: list[Placement] = []
    for snake in state.snakes:
        if state.winner_id == snake.id:
            rank = 1
        elif not snake.alive:
            rank = 3
        else:
            rank = 2
        placements.append(Placement(model=snake.model, rank=rank))
    return placements


def expected_score(rating_a: float, rating_b: float) -> float:
    """Compute the expected score for player a vs. player b."""
    return 1.0 / (1.0 + 10 ** ((rating_b - rating_a) / 400.0))


class Leaderboard:
    """Elo ratings keyed by model label."""

    def __init__(
        self,
        k_factor: float = K_FACTOR,
        initial_rating: float = INITIAL_RATING,
    ) -> None:
        self.k_factor = k_factor
        self.initial_rating = initial_rating
        self.ratings: dict[str, float] = {}

    def rating(self, model: str) -> float:
        return self.ratings.get(model, self.initial_rating)

    def record(self, placements: Sequence[Placement]) -> dict[str, float]:
        """Apply one game's placements and return the new ratings.

        Every pair of placements is scored as a win, loss, or draw (equal
        ranks). Changes are accumulated against pre-game ratings and then
        applied at once.
        """
        current = [self.rating(p.model) for p in placements]
        deltas = {p.model: 0.0 for p in placements}

        for i in range(len(placements)):
            for j in range(i + 1, len(placements)):
                a, b = placements[i], placements[j]
                if a.rank < b.rank:
                    score_a = 1.0
                elif a.rank > b.rank:
                    score_a = 0.0
                else:
                    score_a = 0.5
                exp_a = expected_score(current[i], current[j])
                exp_b = expected_score(current[j], current[i])
                deltas[a.model] += self.k_factor * (score_a - exp_a)
                deltas[b.model] += self.k_factor * ((1.0 - score_a) - exp_b)

        for placement, rating in zip(placements, current, strict=True):
            self.ratings[placement.model] = float(
                round(rating + deltas[placement.model]),
            )

        logger.info("Recorded results for %d placements.", len(placements))
        return {p.model: self.ratings[p.model] for p in placements}

    def standings(self) -> list[tuple[str, float]]:
        """Return ``(model, rating)`` pairs, best first."""
        return sorted(self.ratings.items(), key=lambda kv: (-kv[1], kv[0]))
