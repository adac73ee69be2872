"""Static evaluation and move-ordering heuristics.

Pure, deterministic, and side-effect free. Scores are in centipawns and
positive values favor White.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Final, List

from chess_ai.engine.location import Location
from chess_ai.engine.piece import Color, PieceKind
from chess_ai.engine.state import StateKind

if TYPE_CHECKING:  # pragma: no cover
    from chess_ai.engine.board import Board


# Material values in centipawns
P_VAL: Final = 100
N_VAL: Final = 320
B_VAL: Final = 330
R_VAL: Final = 500
Q_VAL: Final = 900
K_VAL: Final = 20000

CHECK_VALUE: Final = 50
CHECKMATE_VALUE: Final = 1_000_000
DRAW_VALUE: Final = 0

# Move ordering
PROMOTION_VALUE: Final = 2**31 - 1
EARLY_QUEEN_PENALTY: Final = 30
KING_WALK_PENALTY: Final = 40
CASTLE_BONUS: Final = 60

PIECE_VALUES: Final[Dict[PieceKind, int]] = {
    PieceKind.PAWN: P_VAL,
    PieceKind.KNIGHT: N_VAL,
    PieceKind.BISHOP: B_VAL,
    PieceKind.ROOK: R_VAL,
    PieceKind.QUEEN: Q_VAL,
    PieceKind.KING: K_VAL,
}

# Tables are written from White's side with row 0 = rank 8, matching
# Location.y; Black reads them mirrored vertically.
PSQT_P: Final = [
    [0, 0, 0, 0, 0, 0, 0, 0],
    [50, 50, 50, 50, 50, 50, 50, 50],
    [10, 10, 20, 30, 30, 20, 10, 10],
    [5, 5, 10, 25, 25, 10, 5, 5],
    [0, 0, 0, 20, 20, 0, 0, 0],
    [5, -5, -10, 0, 0, -10, -5, 5],
    [5, 10, 10, -20, -20, 10, 10, 5],
    [0, 0, 0, 0, 0, 0, 0, 0],
]

PSQT_N: Final = [
    [-50, -40, -30, -30, -30, -30, -40, -50],
    [-40, -20, 0, 0, 0, 0, -20, -40],
    [-30, 0, 10, 15, 15, 10, 0, -30],
    [-30, 5, 15, 20, 20, 15, 5, -30],
    [-30, 0, 15, 20, 20, 15, 0, -30],
    [-30, 5, 10, 15, 15, 10, 5, -30],
    [-40, -20, 0, 5, 5, 0, -20, -40],
    [-50, -40, -30, -30, -30, -30, -40, -50],
]

PSQT_B: Final = [
    [-20, -10, -10, -10, -10, -10, -10, -20],
    [-10, 0, 0, 0, 0, 0, 0, -10],
    [-10, 0, 5, 10, 10, 5, 0, -10],
    [-10, 5, 5, 10, 10, 5, 5, -10],
    [-10, 0, 10, 10, 10, 10, 0, -10],
    [-10, 10, 10, 10, 10, 10, 10, -10],
    [-10, 5, 0, 0, 0, 0, 5, -10],
    [-20, -10, -10, -10, -10, -10, -10, -20],
]

PSQT_R: Final = [
    [0, 0, 0, 0, 0, 0, 0, 0],
    [5, 10, 10, 10, 10, 10, 10, 5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [0, 0, 0, 5, 5, 0, 0, 0],
]

PSQT_Q: Final = [
    [-20, -10, -10, -5, -5, -10, -10, -20],
    [-10, 0, 0, 0, 0, 0, 0, -10],
    [-10, 0, 5, 5, 5, 5, 0, -10],
    [-5, 0, 5, 5, 5, 5, 0, -5],
    [0, 0, 5, 5, 5, 5, 0, -5],
    [-10, 5, 5, 5, 5, 5, 0, -10],
    [-10, 0, 5, 0, 0, 0, 0, -10],
    [-20, -10, -10, -5, -5, -10, -10, -20],
]

PSQT_K: Final = [
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-20, -30, -30, -40, -40, -30, -30, -20],
    [-10, -20, -20, -20, -20, -20, -20, -10],
    [20, 20, 0, 0, 0, 0, 20, 20],
    [20, 30, 10, 0, 0, 10, 30, 20],
]

PSQT_K_EG: Final = [
    [-50, -40, -30, -20, -20, -30, -40, -50],
    [-30, -20, -10, 0, 0, -10, -20, -30],
    [-30, -10, 20, 30, 30, 20, -10, -30],
    [-30, -10, 30, 40, 40, 30, -10, -30],
    [-30, -10, 30, 40, 40, 30, -10, -30],
    [-30, -10, 20, 30, 30, 20, -10, -30],
    [-30, -30, 0, 0, 0, 0, -30, -30],
    [-50, -30, -30, -30, -30, -30, -30, -50],
]

_TABLES: Final[Dict[PieceKind, List[List[int]]]] = {
    PieceKind.PAWN: PSQT_P,
    PieceKind.KNIGHT: PSQT_N,
    PieceKind.BISHOP: PSQT_B,
    PieceKind.ROOK: PSQT_R,
    PieceKind.QUEEN: PSQT_Q,
    PieceKind.KING: PSQT_K,
}


def square_value(kind: PieceKind, color: Color, loc: Location, endgame: bool = False) -> int:
    """Piece-square table value of ``kind`` on ``loc`` from ``color``'s side."""
    if kind is PieceKind.KING and endgame:
        table = PSQT_K_EG
    else:
        table = _TABLES[kind]
    y = loc.y if color is Color.WHITE else 7 - loc.y
    return table[y][loc.x]


def evaluate(board: "Board") -> int:
    """Static evaluation of ``board``.

    Args:
        board (Board): Position whose ``state`` and ``endgame`` flag are
            already up to date.

    Returns:
        int: Centipawn score, positive favors White. Checkmate returns
        ``CHECKMATE_VALUE`` in favor of the mating side; stalemate and draws
        return ``DRAW_VALUE``.
    """
    state = board.state
    if state.kind is StateKind.CHECKMATE:
        return -CHECKMATE_VALUE if state.color is Color.WHITE else CHECKMATE_VALUE
    if state.kind in (StateKind.STALEMATE, StateKind.DRAW):
        return DRAW_VALUE

    total = 0
    endgame = board.endgame
    for row in board.grid:
        for piece in row:
            if piece is None:
                continue
            v = PIECE_VALUES[piece.kind] + square_value(piece.kind, piece.color, piece.pos, endgame)
            total += v if piece.color is Color.WHITE else -v

    if state.kind is StateKind.CHECK:
        total += -CHECK_VALUE if state.color is Color.WHITE else CHECK_VALUE
    return total


def move_value(board: "Board", frm: Location, to: Location) -> int:
    """Ordering heuristic for the move ``frm -> to``, signed from White's side.

    Promotions get ``PROMOTION_VALUE``. Other moves score the piece-square
    gain plus, for captures, the captured value minus the mover's value.
    Early queen sorties and king walks outside the endgame are penalized;
    castling gets a bonus.
    """
    piece = board.get(frm)
    if piece is None:
        return 0
    sign = 1 if piece.color is Color.WHITE else -1
    if piece.kind is PieceKind.PAWN and to.y == piece.color.promotion_row:
        return sign * PROMOTION_VALUE

    endgame = board.endgame
    value = square_value(piece.kind, piece.color, to, endgame) - square_value(
        piece.kind, piece.color, frm, endgame
    )
    target = board.get(to)
    if target is not None:
        value += PIECE_VALUES[target.kind] - PIECE_VALUES[piece.kind]

    if piece.kind is PieceKind.QUEEN and _undeveloped_minors(board, piece.color) >= 2:
        value -= EARLY_QUEEN_PENALTY
    elif piece.kind is PieceKind.KING:
        if abs(to.x - frm.x) == 2:
            value += CASTLE_BONUS
        elif not endgame:
            value -= KING_WALK_PENALTY
    return sign * value


def _undeveloped_minors(board: "Board", color: Color) -> int:
    row = board.grid[color.back_row]
    return sum(
        1
        for p in row
        if p is not None
        and p.color is color
        and p.kind in (PieceKind.KNIGHT, PieceKind.BISHOP)
    )
