from __future__ import annotations

import json
import logging
import os
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ...engine.board import Board
from ...engine.move import Move, move_to_uci, parse_uci


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookEntry:
    move: Move
    name: str


class OpeningBook:
    """Opening book keyed by position hash.

    File format: a JSON object mapping the decimal position hash to a list of
    continuations, e.g. ``{"1234": [{"move": "e2e4", "name": "King's Pawn"}]}``.

    Notes:
    - Only continuations that are legal in the queried position are offered.
    - Selection is uniform over the listed continuations; a continuation
      recorded by several openings is listed once per opening.
    """

    def __init__(self, entries: Optional[Dict[int, List[BookEntry]]] = None) -> None:
        self._index: Dict[int, List[BookEntry]] = entries if entries is not None else {}

    @classmethod
    def load(cls, path: str) -> "OpeningBook":
        """Read a book written by ``save``.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
            ValueError: If the file is not a hash-to-continuations mapping.
        """
        if not os.path.exists(path):
            raise FileNotFoundError(path)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("invalid book format")
        index: Dict[int, List[BookEntry]] = {}
        for key, moves in data.items():
            if not isinstance(moves, list):
                raise ValueError("invalid book format")
            try:
                h = int(key)
                index[h] = [_entry_from_json(m) for m in moves]
            except (TypeError, KeyError, ValueError) as e:
                raise ValueError(f"invalid book entry for {key!r}: {e}") from e
        logger.info("loaded opening book", extra={"path": path, "positions": len(index)})
        return cls(index)

    def save(self, path: str) -> None:
        data = {
            str(h): [{"move": move_to_uci(e.move), "name": e.name} for e in entries]
            for h, entries in self._index.items()
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=1, sort_keys=True)

    def add(self, position_hash: int, move: Move, name: str) -> None:
        entries = self._index.setdefault(position_hash, [])
        entry = BookEntry(move, name)
        if entry not in entries:
            entries.append(entry)

    def entries(self, board: Board) -> List[BookEntry]:
        """Recorded continuations of ``board`` that are legal for the side to move."""
        entries = self._index.get(board.hash)
        if not entries:
            return []
        legal = set(board.legal_moves(board.turn))
        return [e for e in entries if e.move in legal]

    def find_move(self, board: Board, rng: Optional[random.Random] = None) -> Optional[BookEntry]:
        candidates = self.entries(board)
        if not candidates:
            return None
        return (rng or random).choice(candidates)

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, position_hash: int) -> bool:
        return position_hash in self._index


def _entry_from_json(raw: Any) -> BookEntry:
    return BookEntry(parse_uci(raw["move"]), str(raw.get("name", "")))
