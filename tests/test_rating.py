"""Tests for final ranks and the Elo leaderboard."""

import pytest

from snake_arena.geometry import Point
from snake_arena.rating import (
    INITIAL_RATING,
    Leaderboard,
    Placement,
    expected_score,
    final_ranks,
)
from snake_arena.snake import EliminationReason, Snake
from snake_arena.state import GameConfig, GameState


def _snake(sid):
    return Snake(
        id=sid, name=sid, model=f"model-{sid}", color="#000",
        body=[Point(0, 0)], health=100,
    )


class TestFinalRanks:
    def test_winner_first_eliminated_last(self):
        a, b, c = _snake("a"), _snake("b"), _snake("c")
        b.eliminate(EliminationReason.TIMEOUT)
        c.eliminate(EliminationReason.STARVATION)
        state = GameState(
            id="r", config=GameConfig(), snakes=[a, b, c],
            game_over=True, winner_id="a",
        )
        assert final_ranks(state) == [
            Placement("model-a", 1),
            Placement("model-b", 3),
            Placement("model-c", 3),
        ]

    def test_unfinished_survivors_rank_second(self):
        state = GameState(
            id="r", config=GameConfig(), snakes=[_snake("a"), _snake("b")],
        )
        assert [p.rank for p in final_ranks(state)] == [2, 2]


class TestExpectedScore:
    def test_equal_ratings(self):
        assert expected_score(1500, 1500) == pytest.approx(0.5)

    def test_symmetry(self):
        assert expected_score(1600, 1400) + expected_score(1400, 1600) == (
            pytest.approx(1.0)
        )


class TestLeaderboard:
    def test_unknown_model_starts_at_initial_rating(self):
        assert Leaderboard().rating("nobody") == INITIAL_RATING

    def test_win_and_loss(self):
        board = Leaderboard()
        result = board.record([Placement("w", 1), Placement("l", 3)])
        assert result == {"w": 1216.0, "l": 1184.0}

    def test_draw_between_equals_changes_nothing(self):
        board = Leaderboard()
        board.record([Placement("a", 3), Placement("b", 3)])
        assert board.rating("a") == INITIAL_RATING
        assert board.rating("b") == INITIAL_RATING

    def test_four_player_game_is_zero_sum(self):
        board = Leaderboard()
        board.record([
            Placement("a", 1),
            Placement("b", 3),
            Placement("c", 3),
            Placement("d", 3),
        ])
        assert board.rating("a") == 1248.0
        assert sum(board.ratings.values()) == pytest.approx(4 * INITIAL_RATING)

    def test_standings_sorted_best_first(self):
        board = Leaderboard()
        board.record([Placement("w", 1), Placement("l", 3)])
        board.record([Placement("x", 2), Placement("l", 3)])
        names = [model for model, _ in board.standings()]
        assert names[0] == "w"
        assert names[-1] == "l"
