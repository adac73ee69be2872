from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Tuple

from .piece import Color, PieceKind

if TYPE_CHECKING:  # pragma: no cover
    from .board import Board


MASK64 = 0xFFFFFFFFFFFFFFFF

PIECE_INDEX: Dict[Tuple[PieceKind, Color], int] = {
    (kind, color): ci * 6 + ki
    for ci, color in enumerate((Color.WHITE, Color.BLACK))
    for ki, kind in enumerate(PieceKind)
}


class _SplitMix64:
    def __init__(self, seed: int) -> None:
        self.state = seed & MASK64

    def next(self) -> int:
        self.state = (self.state + 0x9E3779B97F4A7C15) & MASK64
        z = self.state
        z = (z ^ (z >> 30)) * 0xBF58476D1CE4E5B9 & MASK64
        z = (z ^ (z >> 27)) * 0x94D049BB133111EB & MASK64
        z = z ^ (z >> 31)
        return z & MASK64


class Zobrist:
    """Random keys for position hashing.

    Table layout:
    - piece_square[12][64]: white P N B R Q K then black, square index y * 8 + x
    - castling[4]: white queenside, white kingside, black queenside, black kingside
    - ep_file[8]: files a..h

    The side to move is not hashed; transposition tables key on
    ``(hash, turn)``.
    """

    piece_square: List[List[int]]
    castling: List[int]
    ep_file: List[int]

    def __init__(self, seed: int = 0xC0FFEE_F00D_DEAD) -> None:
        prng = _SplitMix64(seed)
        self.piece_square = [[prng.next() for _ in range(64)] for _ in range(12)]
        self.castling = [prng.next() for _ in range(4)]
        self.ep_file = [prng.next() for _ in range(8)]


ZOBRIST = Zobrist()


def compute_hash(board: "Board") -> int:
    """Hash the piece placement, castling rights and en-passant file of ``board``.

    Equal placement, rights and en-passant file always give the same value,
    independent of how the position was reached.
    """
    h = 0
    for y, row in enumerate(board.grid):
        for x, piece in enumerate(row):
            if piece is not None:
                h ^= ZOBRIST.piece_square[PIECE_INDEX[(piece.kind, piece.color)]][y * 8 + x]
    for ci, color in enumerate((Color.WHITE, Color.BLACK)):
        queenside, kingside = board.castle_rights[color]
        if queenside:
            h ^= ZOBRIST.castling[ci * 2]
        if kingside:
            h ^= ZOBRIST.castling[ci * 2 + 1]
    if board.en_passant is not None:
        h ^= ZOBRIST.ep_file[board.en_passant.target.x]
    return h & MASK64
