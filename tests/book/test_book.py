from __future__ import annotations

import json
import random

import pytest

from chess_ai.assets.book import (
    BUNDLED_OPENINGS,
    OpeningBook,
    build_book,
    default_book,
    load_raw_openings,
    open_book,
)
from chess_ai.assets.book.builder import RawOpening, parse_eco_text, split_moves
from chess_ai.engine.board import Board
from chess_ai.engine.move import move_to_uci, parse_uci


SICILIAN = RawOpening(name="Sicilian Defense", code="B20", moves=["e4", "c5"])


def test_split_moves_drops_numbers_and_results() -> None:
    assert split_moves("1.e4 e5 2.Nf3 Nc6 1-0") == ["e4", "e5", "Nf3", "Nc6"]
    assert split_moves("1 d4 d5 2 c4") == ["d4", "d5", "c4"]
    assert split_moves(["e4", "c5"]) == ["e4", "c5"]


def test_parse_eco_text() -> None:
    text = "B20\tSicilian Defense\n1.e4 c5\n\nC20\tKing's Pawn Game\n1.e4 e5\n"
    openings = parse_eco_text(text)
    assert [o.code for o in openings] == ["B20", "C20"]
    assert openings[0].name == "Sicilian Defense"
    assert list(openings[1].moves) == ["e4", "e5"]
    with pytest.raises(ValueError):
        parse_eco_text("B20 Sicilian Defense\n1.e4 c5")


def test_book_hit_after_first_move() -> None:
    book = build_book([SICILIAN])
    b = Board.startpos()
    first = book.find_move(b)
    assert first is not None and move_to_uci(first.move) == "e2e4"

    b.move_piece(*parse_uci("e2e4"))
    entry = book.find_move(b, random.Random(0))
    assert entry is not None
    assert move_to_uci(entry.move) == "c7c5"
    assert entry.name == "Sicilian Defense"

    b.move_piece(*parse_uci("c7c5"))
    assert book.find_move(b) is None


def test_shared_prefix_lists_each_opening() -> None:
    kings_pawn = RawOpening(name="King's Pawn", code="B00", moves=["e4"])
    book = build_book([SICILIAN, kings_pawn])
    names = {e.name for e in book.entries(Board.startpos())}
    assert names == {"Sicilian Defense", "King's Pawn"}


def test_illegal_entries_are_filtered() -> None:
    book = OpeningBook()
    b = Board.startpos()
    book.add(b.hash, parse_uci("e2e5"), "bogus")
    assert b.hash in book
    assert book.entries(b) == []
    assert book.find_move(b) is None


def test_strict_build_rejects_bad_lines() -> None:
    bad = RawOpening(name="Broken", code="X00", moves=["e4", "e4"])
    with pytest.raises(ValueError):
        build_book([bad])
    lenient = build_book([bad], strict=False)
    assert len(lenient) == 1


def test_save_and_load(tmp_path) -> None:
    path = tmp_path / "book.json"
    build_book([SICILIAN]).save(str(path))
    loaded = OpeningBook.load(str(path))
    assert len(loaded) == 2
    b = Board.startpos()
    b.move_piece(*parse_uci("e2e4"))
    entry = loaded.find_move(b)
    assert entry is not None and move_to_uci(entry.move) == "c7c5"


def test_load_errors(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        OpeningBook.load(str(tmp_path / "missing.json"))
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps(["not", "a", "book"]), encoding="utf-8")
    with pytest.raises(ValueError):
        OpeningBook.load(str(bad))
    broken = tmp_path / "broken.json"
    broken.write_text(json.dumps({"12": [{"move": "zz"}]}), encoding="utf-8")
    with pytest.raises(ValueError):
        OpeningBook.load(str(broken))


def test_open_book_accepts_raw_openings(tmp_path) -> None:
    raw = tmp_path / "openings.json"
    raw.write_text(
        json.dumps([{"name": "Sicilian Defense", "code": "B20", "moves": "1.e4 c5"}]),
        encoding="utf-8",
    )
    book = open_book(str(raw))
    assert book is not None and len(book) == 2
    assert open_book(None) is None


def test_bundled_openings_replay_cleanly() -> None:
    openings = load_raw_openings(BUNDLED_OPENINGS)
    assert len(openings) > 50
    book = build_book(openings)
    assert len(book) > 30
    assert default_book() is default_book()
    start = {move_to_uci(e.move) for e in default_book().entries(Board.startpos())}
    assert {"e2e4", "d2d4", "c2c4", "g1f3"} <= start
