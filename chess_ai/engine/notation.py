"""Standard algebraic notation (SAN) for opening databases and move logs."""

from __future__ import annotations

import re
from typing import List

from .board import Board
from .location import FILES, RANKS, Location, square
from .move import Move
from .piece import PieceKind


_SAN_RE = re.compile(r"^([NBRQK])?([a-h])?([1-8])?(x)?([a-h][1-8])(=?Q)?$")

_LETTER_TO_KIND = {
    "N": PieceKind.KNIGHT,
    "B": PieceKind.BISHOP,
    "R": PieceKind.ROOK,
    "Q": PieceKind.QUEEN,
    "K": PieceKind.KING,
}
_KIND_TO_LETTER = {v: k for k, v in _LETTER_TO_KIND.items()}


def parse_san(board: Board, san: str) -> Move:
    """Resolve a SAN token against the legal moves of the side to move.

    Supports pawn pushes and captures (``e4``, ``exd5``), piece moves with
    optional file/rank disambiguation (``Nbd7``, ``R1e2``, ``Qh4xe1``),
    castling (``O-O``, ``O-O-O``, also written with zeros), queen promotion
    (``e8=Q``) and trailing ``+``, ``#``, ``!`` or ``?`` annotations.

    Raises:
        ValueError: If the token is malformed, matches no legal move, or is
            ambiguous.
    """
    token = san.strip().rstrip("+#!?")
    if not token:
        raise ValueError(f"invalid SAN: {san!r}")
    color = board.turn
    legal = board.legal_moves(color)

    if token.replace("0", "O") in ("O-O", "O-O-O"):
        row = color.back_row
        to_x = 6 if token.replace("0", "O") == "O-O" else 2
        move = (square(4, row), square(to_x, row))
        king = board.get(move[0])
        if king is None or king.kind is not PieceKind.KING or move not in legal:
            raise ValueError(f"illegal castle: {san!r}")
        return move

    m = _SAN_RE.match(token)
    if m is None:
        raise ValueError(f"invalid SAN: {san!r}")
    letter, from_file, from_rank, _, dest, promo = m.groups()
    kind = _LETTER_TO_KIND[letter] if letter else PieceKind.PAWN
    to = Location.from_notation(dest)

    candidates: List[Move] = []
    for frm, target in legal:
        if target != to:
            continue
        piece = board.get(frm)
        if piece is None or piece.kind is not kind:
            continue
        if from_file is not None and FILES[frm.x] != from_file:
            continue
        if from_rank is not None and RANKS[frm.y] != from_rank:
            continue
        if kind is PieceKind.KING and abs(target.x - frm.x) == 2:
            continue
        candidates.append((frm, target))

    if not candidates:
        raise ValueError(f"illegal move: {san!r}")
    if len(candidates) > 1:
        raise ValueError(f"ambiguous move: {san!r}")
    move = candidates[0]
    is_promotion = kind is PieceKind.PAWN and to.y == color.promotion_row
    if bool(promo) != is_promotion:
        raise ValueError(f"invalid promotion: {san!r}")
    return move


def to_san(board: Board, move: Move) -> str:
    """Render a legal move of the side to move in SAN."""
    frm, to = move
    piece = board.get(frm)
    if piece is None:
        raise ValueError(f"no piece on {frm.to_notation()}")

    if piece.kind is PieceKind.KING and abs(to.x - frm.x) == 2:
        san = "O-O" if to.x == 6 else "O-O-O"
    else:
        capture = board.get(to) is not None or (
            piece.kind is PieceKind.PAWN and frm.x != to.x
        )
        dest = to.to_notation()
        if piece.kind is PieceKind.PAWN:
            san = f"{FILES[frm.x]}x{dest}" if capture else dest
            if to.y == piece.color.promotion_row:
                san += "=Q"
        else:
            san = (
                _KIND_TO_LETTER[piece.kind]
                + _disambiguation(board, move)
                + ("x" if capture else "")
                + dest
            )

    after = board.clone()
    after.move_piece(frm, to)
    if after.checked[after.turn]:
        san += "#" if not after.legal_moves(after.turn) else "+"
    return san


def _disambiguation(board: Board, move: Move) -> str:
    frm, to = move
    kind = board.get(frm).kind
    rivals = [
        f
        for f, t in board.legal_moves(board.turn)
        if t == to and f != frm and board.get(f).kind is kind
    ]
    if not rivals:
        return ""
    if all(f.x != frm.x for f in rivals):
        return FILES[frm.x]
    if all(f.y != frm.y for f in rivals):
        return RANKS[frm.y]
    return frm.to_notation()
