"""Snake (agent) representation."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from snake_arena.geometry import Point


class SnakeStatus(str, enum.Enum):
    """Lifecycle of a snake. ``ELIMINATED`` is terminal."""

    ALIVE = "alive"
    ELIMINATED = "eliminated"


class EliminationReason(str, enum.Enum):
    """Why a snake left the game."""

    SELF_COLLISION = "self-collision"
    BODY_COLLISION = "body-collision"
    HEAD_TO_HEAD = "head-to-head-collision"
    OUT_OF_BOUNDS = "out-of-bounds"
    STARVATION = "starvation"
    TIMEOUT = "timeout"
    MANUAL = "manual"


@dataclass
class Snake:
    """A competing snake.

    The head is ``body[0]``; the tail is ``body[-1]``. ``length`` is the
    score and is tracked separately from ``len(body)``.
    """

    id: str
    name: str
    model: str
    color: str
    body: list[Point]
    health: int
    status: SnakeStatus = SnakeStatus.ALIVE
    elimination_reason: EliminationReason | None = None
    length: int = 1
    latency: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.body:
            raise ValueError("Snake body must contain at least one cell.")

    @property
    def head(self) -> Point:
        """Return the head coordinate."""
        return self.body[0]

    @property
    def alive(self) -> bool:
        return self.status is SnakeStatus.ALIVE

    def occupies(self, point: Point) -> bool:
        """Check whether the snake's body covers *point*."""
        return point in self.body

    def eliminate(self, reason: EliminationReason) -> None:
        """Mark the snake as eliminated. Only the first call has effect."""
        if not self.alive:
            return
        self.status = SnakeStatus.ELIMINATED
        self.elimination_reason = reason
        self.health = 0

    def to_dict(self) -> dict:
        """Serialize snake state to a dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "model": self.model,
            "color": self.color,
            "body": [p.to_dict() for p in self.body],
            "health": self.health,
            "status": self.status.value,
            "elimination_reason": (
                self.elimination_reason.value
                if self.elimination_reason is not None else None
            ),
            "length": self.length,
            "latency": list(self.latency),
        }
