from __future__ import annotations

import pytest

from chess_ai.engine.board import Board
from chess_ai.search.service import SearchService


@pytest.mark.parametrize(
    "fen,depth",
    [
        ("4k3/4p3/8/8/8/8/3P4/R3K3 w Q - 0 1", 3),
        ("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1", 2),
        ("4k3/8/8/3q4/4P3/8/8/4K3 b - - 0 1", 3),
    ],
)
def test_pruning_and_table_do_not_change_the_result(fen: str, depth: int) -> None:
    b = Board.from_fen(fen)
    fast = SearchService(time_budget_ms=120_000).search(b, depth=depth)
    full = SearchService(time_budget_ms=120_000).search(
        b, depth=depth, prune=False, use_tt=False
    )
    assert fast.score == full.score
    assert fast.best_move == full.best_move
    assert fast.nodes <= full.nodes
    assert full.tt_probes == 0


def test_table_alone_keeps_minimax_score() -> None:
    b = Board.from_fen("4k3/4p3/8/8/8/8/3P4/R3K3 w Q - 0 1")
    with_tt = SearchService(time_budget_ms=120_000).search(b, depth=3, prune=False)
    plain = SearchService(time_budget_ms=120_000).search(b, depth=3, prune=False, use_tt=False)
    assert with_tt.score == plain.score
