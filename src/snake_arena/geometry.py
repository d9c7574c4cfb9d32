"""Board coordinates and movement directions."""

from __future__ import annotations

import enum
from typing import NamedTuple


class Point(NamedTuple):
    """Integer board coordinate. ``y`` grows downwards."""

    x: int
    y: int

    def shift(self, direction: Direction) -> Point:
        dx, dy = direction.delta
        return Point(self.x + dx, self.y + dy)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


class Direction(str, enum.Enum):
    """Cardinal movement directions."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def delta(self) -> tuple[int, int]:
        """Return the ``(dx, dy)`` step for this direction."""
        return _DELTAS[self]


_DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


def parse_direction(value: object) -> Direction | None:
    """Map a raw provider value onto a :class:`Direction`.

    Returns ``None`` for anything that is not one of the four direction
    names (case-insensitive), so callers can treat it as a missing move.
    """
    if isinstance(value, Direction):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Direction(value.strip().lower())
    except ValueError:
        return None
