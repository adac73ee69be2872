from __future__ import annotations

from chess_ai.assets.book import build_book
from chess_ai.assets.book.builder import RawOpening
from chess_ai.config import EngineConfig
from chess_ai.engine.board import Board
from chess_ai.engine.move import move_to_uci, parse_uci
from chess_ai.search.agents import AGENTS, Agent
from chess_ai.search.service import FORCED_SCORE, SearchService


HANGING_QUEEN = "4k3/8/8/8/3q4/8/3R4/4K3 w - - 0 1"


def test_every_agent_is_registered() -> None:
    assert set(AGENTS) == set(Agent)
    assert Agent("minimax") is Agent.MINIMAX


def test_random_agent_is_legal_and_seeded() -> None:
    b = Board.startpos()
    config = EngineConfig(seed=7)
    move = Agent.RANDOM.get_move(b, config)
    assert move in b.legal_moves(b.turn)
    assert Agent.RANDOM.get_move(b, config) == move


def test_control_agent_never_moves() -> None:
    assert Agent.CONTROL.get_move(Board.startpos()) is None


def test_minimax_takes_free_queen() -> None:
    config = EngineConfig(max_depth=2, use_book=False)
    move = Agent.MINIMAX.get_move(Board.from_fen(HANGING_QUEEN), config)
    assert move_to_uci(move) == "d2d4"


def test_antimax_avoids_best_move() -> None:
    b = Board.from_fen(HANGING_QUEEN)
    config = EngineConfig(max_depth=1)
    move = Agent.ANTIMAX.get_move(b, config)
    assert move in b.legal_moves(b.turn)
    assert move_to_uci(move) != "d2d4"


def test_book_move_short_circuits_search() -> None:
    book = build_book([RawOpening(name="Sicilian Defense", code="B20", moves=["e4", "c5"])])
    b = Board.startpos()
    b.move_piece(*parse_uci("e2e4"))
    res = SearchService(book, time_budget_ms=60_000).search(b, depth=4)
    assert move_to_uci(res.best_move) == "c7c5"
    assert res.score == FORCED_SCORE
    assert res.from_book
    assert res.book_name == "Sicilian Defense"
    assert res.nodes == 1


def test_minimax_agent_uses_bundled_book_at_start() -> None:
    b = Board.startpos()
    move = Agent.MINIMAX.get_move(b, EngineConfig(max_depth=1, seed=3))
    assert move in b.legal_moves(b.turn)
