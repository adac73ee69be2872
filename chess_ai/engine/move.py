from __future__ import annotations

from typing import Tuple

from .location import Location


# A move is an ordered (from, to) pair. Promotion is implicit: a pawn that
# reaches the last row always becomes a queen.
Move = Tuple[Location, Location]


def move_to_uci(move: Move) -> str:
    frm, to = move
    return frm.to_notation() + to.to_notation()


def parse_uci(uci: str) -> Move:
    """Parse coordinate move text (``"e2e4"``, ``"e7e8q"``).

    A trailing ``q`` promotion suffix is accepted; any other promotion piece is
    rejected because pawns only ever promote to queens.

    Raises:
        ValueError: On malformed text.
    """
    if not isinstance(uci, str) or len(uci) not in (4, 5):
        raise ValueError("invalid UCI move length")
    if len(uci) == 5 and uci[4] != "q":
        raise ValueError(f"unsupported promotion piece: {uci[4]!r}")
    return Location.from_notation(uci[0:2]), Location.from_notation(uci[2:4])
