from __future__ import annotations

import pytest

from chess_ai.config import EngineConfig
from chess_ai.engine.board import Board
from chess_ai.engine.move import move_to_uci
from chess_ai.eval import CHECKMATE_VALUE
from chess_ai.search.agents import Agent
from chess_ai.search.service import SearchService


WHITE_MATES = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"
BLACK_MATES = "r5k1/8/8/8/8/8/5PPP/6K1 b - - 0 1"


@pytest.mark.parametrize("depth", [1, 2, 3])
def test_finds_back_rank_mate_for_white(depth: int) -> None:
    res = SearchService(time_budget_ms=60_000).search(Board.from_fen(WHITE_MATES), depth=depth)
    assert move_to_uci(res.best_move) == "a1a8"
    assert res.score >= CHECKMATE_VALUE


@pytest.mark.parametrize("depth", [1, 2, 3])
def test_finds_back_rank_mate_for_black(depth: int) -> None:
    res = SearchService(time_budget_ms=60_000).search(Board.from_fen(BLACK_MATES), depth=depth)
    assert move_to_uci(res.best_move) == "a8a1"
    assert res.score <= -CHECKMATE_VALUE


def test_mate_found_stops_deepening() -> None:
    res = SearchService(time_budget_ms=60_000).search(Board.from_fen(WHITE_MATES), depth=6)
    assert res.depth == 1
    assert not res.timed_out


def test_minimax_agent_plays_mate() -> None:
    config = EngineConfig(max_depth=2, use_book=False, seed=1)
    move = Agent.MINIMAX.get_move(Board.from_fen(WHITE_MATES), config)
    assert move is not None and move_to_uci(move) == "a1a8"


def test_mate_scores_are_not_cached() -> None:
    res = SearchService(time_budget_ms=60_000).search(Board.from_fen(WHITE_MATES), depth=1)
    assert res.score == CHECKMATE_VALUE
    assert res.tt_stores == 0
    assert res.tt_size == 0
