"""Tests for the snake-arena CLI."""

import pytest

from snake_arena.cli import _build_parser, main
from snake_arena.state import GameConfig


class TestParser:
    def test_simulate_defaults(self):
        args = _build_parser().parse_args(["simulate"])
        assert args.players == 4
        assert args.width is None
        assert args.max_turns == 500

    def test_simulate_flags(self):
        args = _build_parser().parse_args(
            ["simulate", "--players", "2", "--width", "11", "--seed", "3"],
        )
        assert args.players == 2
        assert args.width == 11
        assert args.seed == 3


class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "simulate" in capsys.readouterr().out

    def test_simulate_runs_to_completion(self, capsys):
        assert main(["simulate", "--players", "3", "--seed", "5"]) == 0
        out = capsys.readouterr().out
        assert "Winner:" in out
        assert out.count("snake-") >= 3

    def test_simulate_respects_turn_cap(self, capsys):
        assert main(["simulate", "--seed", "1", "--max-turns", "1"]) == 0
        assert "after 1 turns" in capsys.readouterr().out

    def test_simulate_from_config(self, tmp_path, capsys):
        path = tmp_path / "cfg.json"
        GameConfig(width=9, height=9, min_food=1).save(path)
        assert main(["simulate", "--config", str(path), "--seed", "2"]) == 0
        assert "Winner:" in capsys.readouterr().out

    def test_invalid_player_count(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["simulate", "--players", "0"])
        assert exc_info.value.code == 2
        err = capsys.readouterr().err
        assert "usage:" in err
        assert "--players" in err
