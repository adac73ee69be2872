from __future__ import annotations

from chess_ai.engine.board import Board, EnPassant
from chess_ai.engine.location import Location
from chess_ai.engine.move import move_to_uci, parse_uci
from chess_ai.engine.piece import Color, PieceKind


def _moves(b: Board) -> set:
    return {move_to_uci(m) for m in b.legal_moves(b.turn)}


def test_white_captures_en_passant() -> None:
    b = Board.from_fen("4k3/8/8/3Pp3/8/8/8/4K3 w - e6 0 1")
    assert "d5e6" in _moves(b)
    captured = b.move_piece(*parse_uci("d5e6"))
    assert captured is True
    assert b.get(Location.from_notation("e5")) is None
    pawn = b.get(Location.from_notation("e6"))
    assert pawn is not None and pawn.kind is PieceKind.PAWN and pawn.color is Color.WHITE
    assert b.en_passant is None


def test_black_captures_en_passant() -> None:
    b = Board.from_fen("4k3/8/8/8/3pP3/8/8/4K3 b - e3 0 1")
    assert "d4e3" in _moves(b)
    b.move_piece(*parse_uci("d4e3"))
    assert b.get(Location.from_notation("e4")) is None
    assert b.to_fen() == "4k3/8/8/8/8/4p3/8/4K3 w - - 0 2"


def test_double_push_sets_target_and_expires() -> None:
    b = Board.from_fen("4k3/4p3/8/3P4/8/8/8/4K3 b - - 0 1")
    b.move_piece(*parse_uci("e7e5"))
    assert b.en_passant == EnPassant(Location.from_notation("e6"), Color.BLACK)
    assert "d5e6" in _moves(b)

    b.move_piece(*parse_uci("e1d1"))
    b.move_piece(*parse_uci("e8d7"))
    assert b.en_passant is None
    assert "d5e6" not in _moves(b)


def test_en_passant_exposing_king_on_rank_is_illegal() -> None:
    b = Board.from_fen("8/8/8/K2Pp2r/8/8/8/4k3 w - e6 0 1")
    moves = _moves(b)
    assert "d5e6" not in moves
    assert "d5d6" in moves


def test_en_passant_file_is_part_of_fen() -> None:
    b = Board.startpos()
    b.move_piece(*parse_uci("d2d4"))
    assert b.to_fen().split()[3] == "d3"
