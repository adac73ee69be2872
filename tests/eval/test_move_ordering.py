from __future__ import annotations

from chess_ai.engine.board import Board
from chess_ai.engine.location import Location
from chess_ai.engine.move import move_to_uci, parse_uci
from chess_ai.engine.piece import Color
from chess_ai.eval import EARLY_QUEEN_PENALTY, PROMOTION_VALUE, move_value


def _value(b: Board, uci: str) -> int:
    frm, to = parse_uci(uci)
    return move_value(b, frm, to)


def test_promotion_dominates() -> None:
    white = Board.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    assert _value(white, "e7e8") == PROMOTION_VALUE
    assert move_to_uci(white.sorted_moves(Color.WHITE)[0]) == "e7e8"

    black = Board.from_fen("4k3/8/8/8/8/8/3p4/K7 b - - 0 1")
    assert _value(black, "d2d1") == -PROMOTION_VALUE
    assert move_to_uci(black.sorted_moves(Color.BLACK)[0]) == "d2d1"


def test_winning_capture_ordered_first() -> None:
    b = Board.from_fen("4k3/8/8/3q4/4P3/8/8/4K3 w - - 0 1")
    assert move_to_uci(b.sorted_moves(Color.WHITE)[0]) == "e4d5"


def test_sort_direction_follows_side() -> None:
    b = Board.startpos()
    values = [move_value(b, f, t) for f, t in b.sorted_moves(Color.WHITE)]
    assert values == sorted(values, reverse=True)

    b.move_piece(*parse_uci("e2e4"))
    values = [move_value(b, f, t) for f, t in b.sorted_moves(Color.BLACK)]
    assert values == sorted(values)

    flipped = [move_value(b, f, t) for f, t in b.sorted_moves(Color.BLACK, maximizing=True)]
    assert flipped == sorted(flipped, reverse=True)


def test_sorted_moves_is_a_permutation_of_legal_moves() -> None:
    b = Board.from_fen("r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1")
    assert sorted(map(move_to_uci, b.sorted_moves(Color.WHITE))) == sorted(
        map(move_to_uci, b.legal_moves(Color.WHITE))
    )


def test_castle_bonus_and_king_walk_penalty() -> None:
    b = Board.from_fen("rnbqk2r/8/8/8/8/8/8/RNBQK2R w KQkq - 0 1")
    assert not b.endgame
    assert _value(b, "e1g1") > 0
    assert _value(b, "e1f1") < 0


def test_early_queen_sortie_is_penalized() -> None:
    b = Board.startpos()
    b.move_piece(*parse_uci("e2e4"))
    b.move_piece(*parse_uci("e7e5"))
    assert _value(b, "d1h5") == -EARLY_QUEEN_PENALTY


def test_empty_square_has_no_value() -> None:
    b = Board.startpos()
    assert move_value(b, Location.from_notation("e4"), Location.from_notation("e5")) == 0
