from __future__ import annotations

from chess_ai.cli.main import main, selfplay
from chess_ai.config import EngineConfig
from chess_ai.engine.game import Game
from chess_ai.search.agents import Agent


def test_selfplay_random_agents(capsys) -> None:
    game = Game.new()
    played = selfplay(game, Agent.RANDOM, Agent.RANDOM, EngineConfig(seed=5), plies=6)
    assert 0 < len(played) <= 6
    assert len(game.history) == len(played)
    out = capsys.readouterr().out
    assert "result:" in out


def test_selfplay_stops_at_mate() -> None:
    game = Game.from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
    config = EngineConfig(max_depth=2, use_book=False)
    played = selfplay(game, Agent.MINIMAX, Agent.RANDOM, config, plies=10)
    assert played == ["Ra8#"]
    assert game.is_over()


def test_main_selfplay_command(capsys) -> None:
    argv = ["--seed", "2", "--no-book", "selfplay", "--plies", "2"]
    main(argv + ["--white", "random", "--black", "random"])
    assert "result:" in capsys.readouterr().out
