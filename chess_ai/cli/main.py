from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import uvicorn

from chess_ai.config import EngineConfig
from chess_ai.engine.board import STARTPOS_FEN
from chess_ai.engine.game import Game
from chess_ai.engine.notation import to_san
from chess_ai.engine.piece import Color
from chess_ai.search.agents import Agent


logger = logging.getLogger(__name__)

AGENT_CHOICES = [a.value for a in Agent if a is not Agent.CONTROL]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chess-ai", description="Chess engine service and tools")
    parser.add_argument("--time-budget-ms", type=int, default=None, help="Search time budget")
    parser.add_argument("--max-depth", type=int, default=None, help="Iterative-deepening depth cap")
    parser.add_argument("--book", type=str, default=None, help="Opening book or raw opening list")
    parser.add_argument("--no-book", action="store_true", help="Disable the opening book")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP game service")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)

    play = sub.add_parser("selfplay", help="Let two agents play each other")
    play.add_argument("--white", choices=AGENT_CHOICES, default=Agent.MINIMAX.value)
    play.add_argument("--black", choices=AGENT_CHOICES, default=Agent.RANDOM.value)
    play.add_argument("--plies", type=int, default=200, help="Stop after this many half-moves")
    play.add_argument("--fen", type=str, default=STARTPOS_FEN)
    return parser


def _config(args: argparse.Namespace) -> EngineConfig:
    config = EngineConfig.from_env()
    overrides = {}
    if args.time_budget_ms is not None:
        overrides["time_budget_ms"] = args.time_budget_ms
    if args.max_depth is not None:
        overrides["max_depth"] = args.max_depth
    if args.book is not None:
        overrides["book_path"] = args.book
    if args.no_book:
        overrides["use_book"] = False
    if args.seed is not None:
        overrides["seed"] = args.seed
    return EngineConfig(**{**config.model_dump(), **overrides})


def selfplay(game: Game, white: Agent, black: Agent, config: EngineConfig, plies: int) -> List[str]:
    """Play agents against each other; returns the moves in SAN."""
    played: List[str] = []
    while not game.is_over() and len(played) < plies:
        agent = white if game.turn is Color.WHITE else black
        move = agent.get_move(game.board, config)
        if move is None:
            break
        san = to_san(game.board, move)
        game.apply_move(move)
        played.append(san)
        print(f"{len(played):3d}. {san}")
        print(game.board)
    print(f"result: {game.state} after {len(played)} plies")
    print(game.to_fen())
    return played


def main(argv: Optional[List[str]] = None) -> None:
    args = _build_parser().parse_args(argv)
    config = _config(args)
    if args.command == "selfplay":
        logging.basicConfig(level=logging.INFO)
        selfplay(Game.from_fen(args.fen), Agent(args.white), Agent(args.black), config, args.plies)
        return

    from chess_ai.protocol.http.app import create_app

    host = getattr(args, "host", "0.0.0.0")
    port = getattr(args, "port", 8000)
    uvicorn.run(create_app(config), host=host, port=port)


if __name__ == "__main__":
    main()
