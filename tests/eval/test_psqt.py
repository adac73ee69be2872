from __future__ import annotations

from chess_ai.engine.board import Board
from chess_ai.engine.game import Game
from chess_ai.engine.location import Location
from chess_ai.engine.move import parse_uci
from chess_ai.engine.piece import Color, PieceKind
from chess_ai.eval import (
    CHECK_VALUE,
    CHECKMATE_VALUE,
    DRAW_VALUE,
    PIECE_VALUES,
    evaluate,
    square_value,
)


def test_startpos_is_balanced() -> None:
    assert evaluate(Board.startpos()) == 0


def test_knight_centralization_scores_higher() -> None:
    # Pawns keep the material sufficient; only the knight square differs
    fen_center = "4k3/p7/8/8/3N4/8/P7/4K3 w - - 0 1"
    fen_rim = "4k3/p7/8/8/8/8/P7/N3K3 w - - 0 1"
    assert evaluate(Game.from_fen(fen_center).board) > evaluate(Game.from_fen(fen_rim).board)


def _mirror_and_swap_colors(fen: str) -> str:
    # Mirror ranks and swap piece colors; keep castling/ep as '-' for simplicity
    board, stm, _castling, _ep, halfmove, fullmove = fen.split()
    ranks = [r.swapcase() for r in reversed(board.split("/"))]
    new_stm = "b" if stm == "w" else "w"
    return f"{'/'.join(ranks)} {new_stm} - - {halfmove} {fullmove}"


def test_eval_mirror_swap_negates_score() -> None:
    for fen in (
        "4k3/8/8/2n5/3B4/8/8/4K3 w - - 0 1",
        "r1bqkb1r/pppp1ppp/2n2n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4",
    ):
        sc = evaluate(Board.from_fen(fen))
        sc_m = evaluate(Board.from_fen(_mirror_and_swap_colors(fen)))
        assert sc_m == -sc


def test_black_reads_tables_mirrored() -> None:
    e2 = Location.from_notation("e2")
    e7 = Location.from_notation("e7")
    assert square_value(PieceKind.PAWN, Color.WHITE, e2) == square_value(
        PieceKind.PAWN, Color.BLACK, e7
    )


def test_king_table_switches_in_endgame() -> None:
    g1 = Location.from_notation("g1")
    assert square_value(PieceKind.KING, Color.WHITE, g1, endgame=False) == 30
    assert square_value(PieceKind.KING, Color.WHITE, g1, endgame=True) == -30


def test_checkmate_and_draw_scores() -> None:
    b = Board.startpos()
    for uci in ("f2f3", "e7e5", "g2g4", "d8h4"):
        b.move_piece(*parse_uci(uci))
    assert evaluate(b) == -CHECKMATE_VALUE
    assert b.score == -CHECKMATE_VALUE

    stalemate = Board.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert evaluate(stalemate) == DRAW_VALUE
    bare = Board.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    assert evaluate(bare) == DRAW_VALUE


def _static_sum(b: Board) -> int:
    total = 0
    for p in b.pieces():
        v = PIECE_VALUES[p.kind] + square_value(p.kind, p.color, p.pos, b.endgame)
        total += v if p.color is Color.WHITE else -v
    return total


def test_check_penalizes_checked_side() -> None:
    white_checked = Board.from_fen("4k3/8/8/8/8/8/4r3/4K3 w - - 0 1")
    assert evaluate(white_checked) == _static_sum(white_checked) - CHECK_VALUE
    black_checked = Board.from_fen("4k3/4R3/8/8/8/8/8/4K3 b - - 0 1")
    assert evaluate(black_checked) == _static_sum(black_checked) + CHECK_VALUE
