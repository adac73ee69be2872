from __future__ import annotations

from typing import Dict

from .board import Board
from .move import move_to_uci


def perft(board: Board, depth: int) -> int:
    """Count leaf nodes of the legal move tree below ``board``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth == 1 returns the number of legal moves (bulk counting).
    - depth > 1 returns the sum over all legal children of perft(depth-1).

    Raises:
        ValueError: If ``depth`` is negative.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    moves = board.legal_moves(board.turn)
    if depth == 1:
        return len(moves)
    nodes = 0
    for frm, to in moves:
        child = board.clone()
        child.move_piece(frm, to, recompute_stalemate=False)
        nodes += perft(child, depth - 1)
    return nodes


def perft_divide(board: Board, depth: int) -> Dict[str, int]:
    """Per-root-move node counts, keyed by coordinate move text."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for frm, to in board.legal_moves(board.turn):
        child = board.clone()
        child.move_piece(frm, to, recompute_stalemate=False)
        out[move_to_uci((frm, to))] = perft(child, depth - 1)
    return out
