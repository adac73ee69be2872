from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple

from .location import Location, square

if TYPE_CHECKING:  # pragma: no cover
    from .board import Board


class Color(Enum):
    WHITE = "w"
    BLACK = "b"

    def other(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def forward(self) -> int:
        """Row delta of a single pawn push."""
        return -1 if self is Color.WHITE else 1

    @property
    def pawn_row(self) -> int:
        return 6 if self is Color.WHITE else 1

    @property
    def back_row(self) -> int:
        return 7 if self is Color.WHITE else 0

    @property
    def promotion_row(self) -> int:
        return 0 if self is Color.WHITE else 7


class PieceKind(Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"


KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (1, 2),
    (2, 1),
    (2, -1),
    (1, -2),
    (-1, -2),
    (-2, -1),
    (-2, 1),
    (-1, 2),
)
KING_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 1),
    (-1, 0),
    (-1, -1),
    (0, -1),
    (1, -1),
)
ORTHOGONAL: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
DIAGONAL: Tuple[Tuple[int, int], ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))


@dataclass(frozen=True)
class Piece:
    """A colored piece standing on ``pos``.

    Pieces are immutable; moving one places a new instance with the updated
    position on the destination square.
    """

    kind: PieceKind
    color: Color
    pos: Location

    def moved_to(self, loc: Location, kind: Optional[PieceKind] = None) -> "Piece":
        return Piece(kind or self.kind, self.color, loc)

    def symbol(self) -> str:
        ch = self.kind.value
        return ch.upper() if self.color is Color.WHITE else ch

    @classmethod
    def from_symbol(cls, ch: str, pos: Location) -> "Piece":
        try:
            kind = PieceKind(ch.lower())
        except ValueError:
            raise ValueError(f"invalid piece in FEN: {ch!r}") from None
        return cls(kind, Color.WHITE if ch.isupper() else Color.BLACK, pos)

    def pseudo_moves(self, board: "Board") -> List[Location]:
        """Destinations reachable under this piece's movement rules.

        Own-king safety is not checked here except for king steps, which skip
        squares the opponent attacks. Castling destinations are included when
        the castle is currently available.
        """
        return _MOVE_GENERATORS[self.kind](self, board)

    def attacks(self, board: "Board") -> List[Location]:
        """Squares this piece attacks, including squares held by own pieces."""
        return _ATTACK_GENERATORS[self.kind](self, board)


def _step_targets(p: Piece, offsets: Tuple[Tuple[int, int], ...]) -> List[Location]:
    out: List[Location] = []
    for dx, dy in offsets:
        loc, off = p.pos.move_by(dx, dy)
        if not off:
            out.append(loc)
    return out


def _ray_targets(
    p: Piece, board: "Board", directions: Tuple[Tuple[int, int], ...], captures_own: bool
) -> List[Location]:
    out: List[Location] = []
    for dx, dy in directions:
        x, y = p.pos.x + dx, p.pos.y + dy
        while 0 <= x < 8 and 0 <= y < 8:
            loc = square(x, y)
            occ = board.get(loc)
            if occ is None:
                out.append(loc)
            else:
                if captures_own or occ.color is not p.color:
                    out.append(loc)
                break
            x += dx
            y += dy
    return out


def _pawn_attacks(p: Piece, board: "Board") -> List[Location]:
    return _step_targets(p, ((-1, p.color.forward), (1, p.color.forward)))


def _pawn_moves(p: Piece, board: "Board") -> List[Location]:
    out: List[Location] = []
    fwd = p.color.forward
    one, off = p.pos.move_by(0, fwd)
    if not off and board.get(one) is None:
        out.append(one)
        if p.pos.y == p.color.pawn_row:
            two, _ = p.pos.move_by(0, 2 * fwd)
            if board.get(two) is None:
                out.append(two)
    ep = board.en_passant
    for loc in _pawn_attacks(p, board):
        occ = board.get(loc)
        if occ is not None:
            if occ.color is not p.color:
                out.append(loc)
        elif ep is not None and ep.target == loc and ep.color is not p.color:
            out.append(loc)
    return out


def _knight_attacks(p: Piece, board: "Board") -> List[Location]:
    return _step_targets(p, KNIGHT_OFFSETS)


def _knight_moves(p: Piece, board: "Board") -> List[Location]:
    return [loc for loc in _step_targets(p, KNIGHT_OFFSETS) if not _own(board, loc, p.color)]


def _bishop_attacks(p: Piece, board: "Board") -> List[Location]:
    return _ray_targets(p, board, DIAGONAL, True)


def _bishop_moves(p: Piece, board: "Board") -> List[Location]:
    return _ray_targets(p, board, DIAGONAL, False)


def _rook_attacks(p: Piece, board: "Board") -> List[Location]:
    return _ray_targets(p, board, ORTHOGONAL, True)


def _rook_moves(p: Piece, board: "Board") -> List[Location]:
    return _ray_targets(p, board, ORTHOGONAL, False)


def _queen_attacks(p: Piece, board: "Board") -> List[Location]:
    return _ray_targets(p, board, ORTHOGONAL + DIAGONAL, True)


def _queen_moves(p: Piece, board: "Board") -> List[Location]:
    return _ray_targets(p, board, ORTHOGONAL + DIAGONAL, False)


def _king_attacks(p: Piece, board: "Board") -> List[Location]:
    return _step_targets(p, KING_OFFSETS)


def _king_moves(p: Piece, board: "Board") -> List[Location]:
    enemy = board.attacked_by[p.color.other()]
    out = [
        loc
        for loc in _step_targets(p, KING_OFFSETS)
        if not _own(board, loc, p.color) and loc not in enemy
    ]
    out.extend(_castle_targets(p, board, enemy))
    return out


def _castle_targets(p: Piece, board: "Board", enemy) -> List[Location]:
    row = p.color.back_row
    if p.pos != square(4, row) or board.checked[p.color]:
        return []
    queenside, kingside = board.castle_rights[p.color]
    out: List[Location] = []
    if kingside and _home_rook(board, square(7, row), p.color):
        path = (square(5, row), square(6, row))
        if all(board.get(s) is None and s not in enemy for s in path):
            out.append(square(6, row))
    if queenside and _home_rook(board, square(0, row), p.color):
        between = (square(3, row), square(2, row), square(1, row))
        if all(board.get(s) is None for s in between) and all(
            s not in enemy for s in between[:2]
        ):
            out.append(square(2, row))
    return out


def _home_rook(board: "Board", loc: Location, color: Color) -> bool:
    occ = board.get(loc)
    return occ is not None and occ.kind is PieceKind.ROOK and occ.color is color


def _own(board: "Board", loc: Location, color: Color) -> bool:
    occ = board.get(loc)
    return occ is not None and occ.color is color


_MOVE_GENERATORS: Dict[PieceKind, Callable[[Piece, "Board"], List[Location]]] = {
    PieceKind.PAWN: _pawn_moves,
    PieceKind.KNIGHT: _knight_moves,
    PieceKind.BISHOP: _bishop_moves,
    PieceKind.ROOK: _rook_moves,
    PieceKind.QUEEN: _queen_moves,
    PieceKind.KING: _king_moves,
}

_ATTACK_GENERATORS: Dict[PieceKind, Callable[[Piece, "Board"], List[Location]]] = {
    PieceKind.PAWN: _pawn_attacks,
    PieceKind.KNIGHT: _knight_attacks,
    PieceKind.BISHOP: _bishop_attacks,
    PieceKind.ROOK: _rook_attacks,
    PieceKind.QUEEN: _queen_attacks,
    PieceKind.KING: _king_attacks,
}
