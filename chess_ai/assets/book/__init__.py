from __future__ import annotations

import functools
import os
from typing import Optional

from .builder import build_book, load_raw_openings
from .json_book import BookEntry, OpeningBook


BUNDLED_OPENINGS = os.path.join(os.path.dirname(__file__), "openings.json")


def open_book(path: Optional[str]) -> Optional[OpeningBook]:
    """Load a prebuilt book, or compile a raw opening list.

    A JSON object is read as a hash-keyed book; a JSON list is read as raw
    openings and replayed.
    """
    if not path:
        return None
    with open(path, "r", encoding="utf-8") as f:
        head = f.read(64).lstrip()
    if head.startswith("["):
        return build_book(load_raw_openings(path))
    return OpeningBook.load(path)


@functools.lru_cache(maxsize=None)
def default_book(path: Optional[str] = None) -> OpeningBook:
    """Process-wide read-only book, built from the bundled openings by default."""
    if path:
        book = open_book(path)
        assert book is not None
        return book
    return build_book(load_raw_openings(BUNDLED_OPENINGS), strict=False)


__all__ = [
    "BUNDLED_OPENINGS",
    "BookEntry",
    "OpeningBook",
    "build_book",
    "default_book",
    "load_raw_openings",
    "open_book",
]
