#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import logging
import os
import sys

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from chess_ai.assets.book import BUNDLED_OPENINGS, build_book, load_raw_openings
from chess_ai.assets.book.builder import parse_eco_text


def main() -> None:
    parser = argparse.ArgumentParser(description="Compile named openings into a hash-keyed book")
    parser.add_argument(
        "--input",
        default=BUNDLED_OPENINGS,
        help="JSON list of {name, code, moves}, or an ECO text listing with --eco",
    )
    parser.add_argument("--eco", action="store_true", help="Input is a tab-separated ECO listing")
    parser.add_argument("--output", required=True, help="Destination JSON book")
    parser.add_argument(
        "--lenient", action="store_true", help="Skip unplayable lines instead of failing"
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    if args.eco:
        with open(args.input, "r", encoding="utf-8") as f:
            openings = parse_eco_text(f.read())
    else:
        openings = load_raw_openings(args.input)
    book = build_book(openings, strict=not args.lenient)
    book.save(args.output)
    print(f"openings={len(openings)} positions={len(book)} output={args.output}")


if __name__ == "__main__":
    main()
