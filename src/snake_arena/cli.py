"""Command-line match simulator for Snake Arena."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snake-arena",
        description="Snake Arena local simulation tools.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    sim_p = sub.add_parser(
        "simulate", help="Play one match between random movers.",
    )
    sim_p.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON game config (overrides size flags).",
    )
    sim_p.add_argument("--players", type=_positive_int, default=4)
    sim_p.add_argument("--width", type=int, default=None)
    sim_p.add_argument("--height", type=int, default=None)
    sim_p.add_argument("--seed", type=int, default=None)
    sim_p.add_argument("--max-turns", type=int, default=500)

    return parser


async def _simulate(args: argparse.Namespace) -> int:
    import numpy as np

    from snake_arena.engine import initialize, resolve
    from snake_arena.food import FoodSpawner
    from snake_arena.providers import RandomMoveProvider, gather_moves
    from snake_arena.rating import final_ranks
    from snake_arena.state import GameConfig, PlayerSpec

    config = GameConfig.load(args.config) if args.config else GameConfig()
    overrides = {
        k: v for k, v in (("width", args.width), ("height", args.height))
        if v is not None
    }
    if overrides:
        d = config.to_dict()
        d.update(overrides)
        config = GameConfig(**d)

    rng = np.random.default_rng(args.seed)
    spawner = FoodSpawner(rng)
    players = [
        PlayerSpec(id=f"snake-{i + 1}", model="random")
        for i in range(args.players)
    ]
    state = initialize(config, players, spawner=spawner)
    provider = RandomMoveProvider(rng)
    providers = {p.id: provider for p in players}

    while not state.game_over and state.turn < args.max_turns:
        moves = await gather_moves(state, providers)
        resolve(state, moves, spawner=spawner)

    print(f"Game {state.id} ended after {state.turn} turns.")  # noqa: T201
    for snake, placement in zip(state.snakes, final_ranks(state), strict=True):
        reason = (
            snake.elimination_reason.value
            if snake.elimination_reason is not None else "-"
        )
        print(  # noqa: T201
            f"  #{placement.rank} {snake.id} length={snake.length} "
            f"status={snake.status.value} reason={reason}"
        )
    print(f"Winner: {state.winner_id or 'none'}")  # noqa: T201
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``snake-arena`` CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "simulate": lambda a: asyncio.run(_simulate(a)),
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
