from __future__ import annotations

import pytest

from chess_ai.engine.board import Board
from chess_ai.engine.move import move_to_uci, parse_uci
from chess_ai.engine.notation import parse_san, to_san


def _san(fen: str, san: str) -> str:
    return move_to_uci(parse_san(Board.from_fen(fen), san))


def test_pawn_and_piece_moves() -> None:
    b = Board.startpos()
    assert move_to_uci(parse_san(b, "e4")) == "e2e4"
    assert move_to_uci(parse_san(b, "Nf3")) == "g1f3"
    b.move_piece(*parse_uci("e2e4"))
    b.move_piece(*parse_uci("d7d5"))
    assert move_to_uci(parse_san(b, "exd5")) == "e4d5"


def test_file_and_rank_disambiguation() -> None:
    knights = "4k3/8/8/8/8/5N2/8/1N2K3 w - - 0 1"
    assert _san(knights, "Nbd2") == "b1d2"
    assert _san(knights, "Nfd2") == "f3d2"
    with pytest.raises(ValueError):
        _san(knights, "Nd2")

    rooks = "4k3/8/8/R7/8/8/8/R3K3 w - - 0 1"
    assert _san(rooks, "R1a3") == "a1a3"
    assert _san(rooks, "R5a3") == "a5a3"


def test_castling_tokens() -> None:
    fen = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"
    assert _san(fen, "O-O") == "e1g1"
    assert _san(fen, "0-0-0") == "e1c1"
    with pytest.raises(ValueError):
        _san("4k3/8/8/8/8/8/8/R3K2R w - - 0 1", "O-O")


def test_promotion_requires_queen_suffix() -> None:
    fen = "k7/4P3/8/8/8/8/8/4K3 w - - 0 1"
    assert _san(fen, "e8=Q+") == "e7e8"
    assert _san(fen, "e8Q") == "e7e8"
    with pytest.raises(ValueError):
        _san(fen, "e8")


@pytest.mark.parametrize("token", ["", "Zz9", "e9", "Nxx3", "e5"])
def test_invalid_or_illegal_tokens_raise(token: str) -> None:
    with pytest.raises(ValueError):
        parse_san(Board.startpos(), token)


def test_to_san() -> None:
    b = Board.startpos()
    assert to_san(b, parse_uci("g1f3")) == "Nf3"
    for uci in ("f2f3", "e7e5", "g2g4"):
        b.move_piece(*parse_uci(uci))
    assert to_san(b, parse_uci("d8h4")) == "Qh4#"
    rooks = Board.from_fen("4k3/8/8/R7/8/8/8/R3K3 w - - 0 1")
    assert to_san(rooks, parse_uci("a1a3")) == "R1a3"
    assert to_san(rooks, parse_uci("a5a8")) == "Ra8+"
