"""Compile named opening lines into a hash-keyed ``OpeningBook``."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Union

from ...engine.board import Board
from ...engine.notation import parse_san
from .json_book import OpeningBook


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawOpening:
    name: str
    code: str
    moves: Sequence[str]


def split_moves(moves: Union[str, Sequence[str]]) -> List[str]:
    """Tokenize a move list, dropping move numbers and game results.

    Accepts ``"1.e4 e5 2.Nf3"``, ``"1 e4 e5 2 Nf3"`` or an already split list.
    """
    tokens = moves.split() if isinstance(moves, str) else list(moves)
    out: List[str] = []
    for tok in tokens:
        tok = tok.strip()
        if "." in tok:
            tok = tok.rsplit(".", 1)[1]
        if not tok or tok.isdigit() or tok in ("1-0", "0-1", "1/2-1/2", "*"):
            continue
        out.append(tok)
    return out


def load_raw_openings(path: str) -> List[RawOpening]:
    """Read a JSON list of ``{"name", "code", "moves"}`` objects.

    Raises:
        ValueError: If the file is not a list of such objects.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("opening database must be a JSON list")
    out: List[RawOpening] = []
    for item in data:
        if not isinstance(item, dict) or "name" not in item or "moves" not in item:
            raise ValueError(f"invalid opening record: {item!r}")
        out.append(
            RawOpening(
                name=str(item["name"]),
                code=str(item.get("code", "")),
                moves=split_moves(item["moves"]),
            )
        )
    return out


def parse_eco_text(text: str) -> List[RawOpening]:
    """Parse the two-line ECO listing format.

    Each opening is a header line ``"<code>\\t<name>"`` followed by a line of
    numbered moves. Blank lines are ignored.
    """
    lines = [ln for ln in text.replace("\r\n", "\n").split("\n") if ln.strip()]
    if len(lines) % 2:
        raise ValueError("ECO listing must alternate header and move lines")
    out: List[RawOpening] = []
    for header, moves in zip(lines[0::2], lines[1::2]):
        code, sep, name = header.partition("\t")
        if not sep:
            raise ValueError(f"invalid ECO header: {header!r}")
        out.append(RawOpening(name=name.strip(), code=code.strip(), moves=split_moves(moves)))
    return out


def build_book(openings: Iterable[RawOpening], strict: bool = True) -> OpeningBook:
    """Replay each opening from the start position and record its moves.

    Every prefix position of every line gets the next move and the opening
    name as a continuation.

    Args:
        openings: Named SAN move sequences.
        strict: Raise on the first unplayable move. When ``False`` the rest of
            that line is skipped with a warning and the positions recorded so
            far are kept.

    Raises:
        ValueError: In strict mode, if a move cannot be resolved.
    """
    book = OpeningBook()
    count = 0
    for opening in openings:
        board = Board.startpos()
        for san in opening.moves:
            try:
                move = parse_san(board, san)
            except ValueError as e:
                if strict:
                    raise ValueError(f"{opening.code} {opening.name}: {e}") from e
                logger.warning("skipping rest of opening %r: %s", opening.name, e)
                break
            book.add(board.hash, move, opening.name)
            board.move_piece(move[0], move[1])
        count += 1
    logger.debug("built opening book", extra={"openings": count, "positions": len(book)})
    return book
