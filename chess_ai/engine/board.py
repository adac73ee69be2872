from __future__ import annotations

import copy
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, FrozenSet, List, Optional, Tuple

from .location import Location, square
from .move import Move
from .piece import DIAGONAL, KING_OFFSETS, KNIGHT_OFFSETS, ORTHOGONAL, Color, Piece, PieceKind
from .state import BoardState
from .zobrist import compute_hash
from ..eval import evaluate, move_value


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

# Half-moves without a capture or pawn move before the game is drawn.
FIFTY_MOVE_LIMIT = 50
# Number of recent position hashes kept for repetition detection.
HISTORY_CAP = 24

_ROOK_LIKE = (PieceKind.ROOK, PieceKind.QUEEN)
_BISHOP_LIKE = (PieceKind.BISHOP, PieceKind.QUEEN)
_MINORS = (PieceKind.KNIGHT, PieceKind.BISHOP)

Grid = List[List[Optional[Piece]]]


@dataclass(frozen=True)
class EnPassant:
    """Square skipped by a pawn double step and the color of that pawn."""

    target: Location
    color: Color


def _empty_grid() -> Grid:
    return [[None] * 8 for _ in range(8)]


def _full_rights() -> Dict[Color, Tuple[bool, bool]]:
    return {Color.WHITE: (True, True), Color.BLACK: (True, True)}


@dataclass
class Board:
    """Mutable chess position with cached derived state.

    Notes:
    - ``grid[y][x]`` holds the piece on ``Location(x, y)``; row 0 is rank 8.
    - ``castle_rights[color]`` is ``(queenside, kingside)``.
    - Every mutation goes through ``move_piece`` (or ``set``) and ends with
      ``update()``, which refreshes attacks, check flags, pins, the state,
      the endgame flag and the score in that order.
    """

    grid: Grid = field(default_factory=_empty_grid)
    turn: Color = Color.WHITE
    castle_rights: Dict[Color, Tuple[bool, bool]] = field(default_factory=_full_rights)
    en_passant: Optional[EnPassant] = None
    half_moves: int = 0
    fifty_move_counter: int = 0
    position_history: Deque[int] = field(
        default_factory=lambda: deque(maxlen=HISTORY_CAP), repr=False
    )

    # Derived state, recomputed by update()
    state: BoardState = field(default_factory=BoardState.normal)
    score: int = 0
    endgame: bool = False
    hash: int = 0
    attacked_by: Dict[Color, FrozenSet[Location]] = field(default_factory=dict, repr=False)
    checked: Dict[Color, bool] = field(default_factory=dict, repr=False)
    pinned_or_blocking: FrozenSet[Location] = field(default_factory=frozenset, repr=False)
    _kings: Dict[Color, Optional[Location]] = field(default_factory=dict, repr=False)
    _legal: Dict[Color, Optional[List[Move]]] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self.hash = compute_hash(self)
        self.position_history.append(self.hash)
        self.update()

    # ------------------------------------------------------------------
    # Construction and position strings
    # ------------------------------------------------------------------
    @classmethod
    def startpos(cls) -> "Board":
        """Create a board set up in the standard starting position."""
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth-Edwards Notation (FEN) string.

        Args:
            fen (str): Six space-separated fields: placement, side to move,
                castling rights, en-passant target, halfmove clock and
                fullmove number.

        Returns:
            Board: Board with all derived state computed.

        Raises:
            ValueError: If any field is malformed, a rank does not describe
                exactly 8 squares, or either side does not have exactly one
                king.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        grid = _empty_grid()
        kings = {Color.WHITE: 0, Color.BLACK: 0}
        for y, rank in enumerate(ranks):
            x = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    x += n
                else:
                    if x >= 8:
                        raise ValueError("too many squares in FEN rank")
                    piece = Piece.from_symbol(ch, square(x, y))
                    if piece.kind is PieceKind.KING:
                        kings[piece.color] += 1
                    grid[y][x] = piece
                    x += 1
            if x != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")
        if kings[Color.WHITE] != 1 or kings[Color.BLACK] != 1:
            raise ValueError("FEN must contain exactly one king per side")

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")
        turn = Color(stm)

        if castling != "-" and (
            any(c not in "KQkq" for c in castling) or len(set(castling)) != len(castling)
        ):
            raise ValueError("invalid castling rights")
        rights = {
            Color.WHITE: ("Q" in castling, "K" in castling),
            Color.BLACK: ("q" in castling, "k" in castling),
        }

        en_passant = None
        if ep != "-":
            target = Location.from_notation(ep)
            if ep[1] not in ("3", "6"):
                raise ValueError("invalid en passant square")
            en_passant = EnPassant(target, Color.WHITE if ep[1] == "3" else Color.BLACK)

        try:
            clock = int(halfmove)
            number = int(fullmove)
        except ValueError:
            raise ValueError("invalid move counters in FEN") from None
        if clock < 0 or number < 1:
            raise ValueError("invalid move counters in FEN")
        half_moves = (number - 1) * 2 + (1 if turn is Color.BLACK else 0)

        return cls(
            grid=grid,
            turn=turn,
            castle_rights=rights,
            en_passant=en_passant,
            half_moves=half_moves,
            fifty_move_counter=half_moves - clock,
        )

    from_position_string = from_fen

    def to_fen(self) -> str:
        """Serialize the position to FEN.

        The halfmove clock is the number of half-moves since the last capture
        or pawn move; the fullmove number is derived from ``half_moves``.
        """
        rows: List[str] = []
        for row in self.grid:
            out = ""
            empty = 0
            for piece in row:
                if piece is None:
                    empty += 1
                    continue
                if empty:
                    out += str(empty)
                    empty = 0
                out += piece.symbol()
            if empty:
                out += str(empty)
            rows.append(out)

        castling = ""
        wq, wk = self.castle_rights[Color.WHITE]
        bq, bk = self.castle_rights[Color.BLACK]
        for flag, ch in ((wk, "K"), (wq, "Q"), (bk, "k"), (bq, "q")):
            if flag:
                castling += ch
        ep = self.en_passant.target.to_notation() if self.en_passant else "-"
        clock = self.half_moves - self.fifty_move_counter
        placement = "/".join(rows)
        return f"{placement} {self.turn.value} {castling or '-'} {ep} {clock} {self.full_moves()}"

    to_position_string = to_fen

    def clone(self) -> "Board":
        """Independent copy; mutating the copy never affects ``self``."""
        b = copy.copy(self)
        b.grid = [row[:] for row in self.grid]
        b.castle_rights = dict(self.castle_rights)
        b.position_history = deque(self.position_history, maxlen=HISTORY_CAP)
        b._legal = dict(self._legal)
        return b

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get(self, loc: Location) -> Optional[Piece]:
        return self.grid[loc.y][loc.x]

    def set(self, loc: Location, piece: Optional[Piece]) -> None:
        """Place (or clear) a piece and refresh all derived state."""
        self.grid[loc.y][loc.x] = piece.moved_to(loc) if piece is not None else None
        self.hash = compute_hash(self)
        self.update()

    def pieces(self, color: Optional[Color] = None) -> List[Piece]:
        return [
            p
            for row in self.grid
            for p in row
            if p is not None and (color is None or p.color is color)
        ]

    def king_location(self, color: Color) -> Optional[Location]:
        return self._kings.get(color)

    def full_moves(self) -> int:
        return self.half_moves // 2 + 1

    def is_over(self) -> bool:
        return self.state.is_over()

    def in_check(self, color: Optional[Color] = None) -> bool:
        return self.checked[color or self.turn]

    # ------------------------------------------------------------------
    # Move generation
    # ------------------------------------------------------------------
    def legal_moves(self, color: Color) -> List[Move]:
        """Legal moves for ``color``.

        A pseudo-legal move is re-checked on a scratch grid when the mover is
        in check, is the king, stands on a pin line, or captures en passant.
        All other moves cannot expose the own king and are accepted directly.

        Returns:
            List[Move]: Fresh list of ``(from, to)`` pairs; the result is cached
            until the next mutation.
        """
        cached = self._legal.get(color)
        if cached is not None:
            return list(cached)
        in_check = self.checked[color]
        ep = self.en_passant
        moves: List[Move] = []
        for piece in self.pieces(color):
            frm = piece.pos
            risky = in_check or piece.kind is PieceKind.KING or frm in self.pinned_or_blocking
            for to in piece.pseudo_moves(self):
                if (
                    risky
                    or (piece.kind is PieceKind.PAWN and ep is not None and to == ep.target)
                ) and not self._leaves_king_safe(frm, to, color):
                    continue
                moves.append((frm, to))
        self._legal[color] = moves
        return list(moves)

    def sorted_moves(self, color: Color, maximizing: Optional[bool] = None) -> List[Move]:
        """Legal moves of ``color`` ordered best-first for the search.

        Move values are signed from White's point of view, so the list is
        sorted descending for a maximizing side and ascending otherwise.
        ``maximizing`` defaults to ``color is Color.WHITE``.
        """
        if maximizing is None:
            maximizing = color is Color.WHITE
        moves = self.legal_moves(color)
        moves.sort(key=lambda m: move_value(self, m[0], m[1]), reverse=maximizing)
        return moves

    def is_legal(self, move: Move) -> bool:
        piece = self.get(move[0])
        if piece is None:
            return False
        return move in self.legal_moves(piece.color)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def move_piece(self, frm: Location, to: Location, recompute_stalemate: bool = True) -> bool:
        """Apply a move and refresh all derived state.

        The move is assumed legal; use ``legal_moves`` or ``Game.apply_move``
        to validate user input first. Handles castling rook relocation,
        en-passant capture, queen promotion, castling-right loss, counters
        and repetition history.

        Args:
            frm (Location): Square of the moving piece.
            to (Location): Destination square.
            recompute_stalemate (bool): When ``False``, the side to move's
                legal moves are only generated if it is in check, so
                stalemate goes undetected. Used by the search at leaves.

        Returns:
            bool: ``True`` if a piece was captured.

        Raises:
            ValueError: If ``frm`` is empty.
        """
        piece = self.get(frm)
        if piece is None:
            raise ValueError(f"no piece on {frm.to_notation()}")
        color = piece.color
        target = self.get(to)
        captured = target is not None
        prev_ep = self.en_passant
        self.en_passant = None
        kind = piece.kind

        if kind is PieceKind.KING:
            self.castle_rights[color] = (False, False)
            if abs(to.x - frm.x) == 2:
                rook_from, rook_to = (7, 5) if to.x > frm.x else (0, 3)
                rook = self.grid[frm.y][rook_from]
                self.grid[frm.y][rook_from] = None
                if rook is not None:
                    self.grid[frm.y][rook_to] = rook.moved_to(square(rook_to, frm.y))
        elif kind is PieceKind.ROOK:
            self._revoke_corner(frm, color)
        elif kind is PieceKind.PAWN:
            if target is None and frm.x != to.x and prev_ep is not None and to == prev_ep.target:
                self.grid[frm.y][to.x] = None
                captured = True
            if abs(to.y - frm.y) == 2:
                self.en_passant = EnPassant(square(frm.x, (frm.y + to.y) // 2), color)
            if to.y == color.promotion_row:
                kind = PieceKind.QUEEN

        if target is not None and target.kind is PieceKind.ROOK:
            self._revoke_corner(to, target.color)

        self.grid[to.y][to.x] = piece.moved_to(to, kind)
        self.grid[frm.y][frm.x] = None

        self.turn = self.turn.other()
        self.half_moves += 1
        if captured or piece.kind is PieceKind.PAWN:
            self.fifty_move_counter = self.half_moves
        self.hash = compute_hash(self)
        self.position_history.append(self.hash)
        self.update(recompute_stalemate)
        return captured

    def _revoke_corner(self, loc: Location, color: Color) -> None:
        if loc.y != color.back_row:
            return
        queenside, kingside = self.castle_rights[color]
        if loc.x == 0:
            self.castle_rights[color] = (False, kingside)
        elif loc.x == 7:
            self.castle_rights[color] = (queenside, False)

    def update(self, recompute_stalemate: bool = True) -> None:
        """Recompute attacks, checks, pins, state, endgame flag and score."""
        self._kings = {c: self._find_king(c) for c in Color}
        self.attacked_by = {c: self._compute_attacks(c) for c in Color}
        self.checked = {
            c: self._kings[c] is None or self._kings[c] in self.attacked_by[c.other()]
            for c in Color
        }
        self.pinned_or_blocking = self._compute_pins()
        self._legal = {}
        self.state = self.detect_state(recompute_stalemate)
        self.endgame = self._is_endgame()
        self.score = evaluate(self)

    def detect_state(self, recompute_stalemate: bool = True) -> BoardState:
        """Classify the position.

        Draw conditions take priority over check and mate: the fifty-move
        rule, threefold repetition, then insufficient material.
        """
        if self.half_moves - self.fifty_move_counter >= FIFTY_MOVE_LIMIT:
            return BoardState.draw()
        if self.position_history.count(self.hash) >= 3:
            return BoardState.draw()
        if self._insufficient_material():
            return BoardState.draw()

        # A board edited with ``set`` may have lost a king; that side has lost.
        missing = [c for c in Color if self._kings[c] is None]
        if len(missing) == 2:
            return BoardState.draw()
        if missing:
            return BoardState.checkmate(missing[0])

        white, black = self.checked[Color.WHITE], self.checked[Color.BLACK]
        assert not (white and black), "both kings are in check"
        if white or black:
            color = Color.WHITE if white else Color.BLACK
            if not self.legal_moves(color):
                return BoardState.checkmate(color)
            return BoardState.check(color)
        if recompute_stalemate and not self.legal_moves(self.turn):
            return BoardState.stalemate()
        return BoardState.normal()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _find_king(self, color: Color) -> Optional[Location]:
        for row in self.grid:
            for p in row:
                if p is not None and p.kind is PieceKind.KING and p.color is color:
                    return p.pos
        return None

    def _compute_attacks(self, color: Color) -> FrozenSet[Location]:
        attacked = set()
        for p in self.pieces(color):
            attacked.update(p.attacks(self))
        return frozenset(attacked)

    def _compute_pins(self) -> FrozenSet[Location]:
        """Own pieces standing alone between their king and an enemy slider."""
        pins = set()
        for color, king in self._kings.items():
            if king is None:
                continue
            for directions, sliders in ((ORTHOGONAL, _ROOK_LIKE), (DIAGONAL, _BISHOP_LIKE)):
                for dx, dy in directions:
                    blocker: Optional[Location] = None
                    x, y = king.x + dx, king.y + dy
                    while 0 <= x < 8 and 0 <= y < 8:
                        p = self.grid[y][x]
                        if p is not None:
                            if p.color is color:
                                if blocker is not None:
                                    break
                                blocker = p.pos
                            else:
                                if blocker is not None and p.kind in sliders:
                                    pins.add(blocker)
                                break
                        x += dx
                        y += dy
        return frozenset(pins)

    def _leaves_king_safe(self, frm: Location, to: Location, color: Color) -> bool:
        grid = [row[:] for row in self.grid]
        piece = grid[frm.y][frm.x]
        if piece is None:
            return False
        if piece.kind is PieceKind.PAWN and frm.x != to.x and grid[to.y][to.x] is None:
            grid[frm.y][to.x] = None
        if piece.kind is PieceKind.KING and abs(to.x - frm.x) == 2:
            rook_from, rook_to = (7, 5) if to.x > frm.x else (0, 3)
            grid[frm.y][rook_to] = grid[frm.y][rook_from]
            grid[frm.y][rook_from] = None
        grid[to.y][to.x] = piece
        grid[frm.y][frm.x] = None
        king = to if piece.kind is PieceKind.KING else self._kings.get(color)
        if king is None:
            return False
        return not self._is_attacked(king, color.other(), grid)

    def _is_attacked(self, loc: Location, by: Color, grid: Optional[Grid] = None) -> bool:
        """Return True if any piece of ``by`` attacks ``loc`` on ``grid``."""
        g = grid if grid is not None else self.grid
        x, y = loc.x, loc.y

        py = y - by.forward
        if 0 <= py < 8:
            for px in (x - 1, x + 1):
                if 0 <= px < 8:
                    p = g[py][px]
                    if p is not None and p.color is by and p.kind is PieceKind.PAWN:
                        return True

        for offsets, kind in ((KNIGHT_OFFSETS, PieceKind.KNIGHT), (KING_OFFSETS, PieceKind.KING)):
            for dx, dy in offsets:
                nx, ny = x + dx, y + dy
                if 0 <= nx < 8 and 0 <= ny < 8:
                    p = g[ny][nx]
                    if p is not None and p.color is by and p.kind is kind:
                        return True

        for directions, sliders in ((ORTHOGONAL, _ROOK_LIKE), (DIAGONAL, _BISHOP_LIKE)):
            for dx, dy in directions:
                nx, ny = x + dx, y + dy
                while 0 <= nx < 8 and 0 <= ny < 8:
                    p = g[ny][nx]
                    if p is not None:
                        if p.color is by and p.kind in sliders:
                            return True
                        break
                    nx += dx
                    ny += dy
        return False

    def _insufficient_material(self) -> bool:
        minors: List[Piece] = []
        for p in self.pieces():
            if p.kind is PieceKind.KING:
                continue
            if p.kind not in _MINORS:
                return False
            minors.append(p)
        if len(minors) <= 1:
            return True
        # Only bishops, all on squares of one color
        return all(p.kind is PieceKind.BISHOP for p in minors) and (
            len({p.pos.is_light() for p in minors}) == 1
        )

    def _is_endgame(self) -> bool:
        queens = minors = 0
        for p in self.pieces():
            if p.kind is PieceKind.QUEEN:
                queens += 1
            elif p.kind in _MINORS:
                minors += 1
        return queens == 0 or minors <= queens

    def __str__(self) -> str:
        lines = []
        for y, row in enumerate(self.grid):
            cells = " ".join(p.symbol() if p is not None else "." for p in row)
            lines.append(f"{8 - y} {cells}")
        lines.append("  a b c d e f g h")
        return "\n".join(lines)
