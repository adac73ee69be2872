from __future__ import annotations

import random
from enum import Enum
from typing import Callable, Dict, Optional

from chess_ai.assets.book import default_book
from chess_ai.config import EngineConfig
from chess_ai.engine.board import Board
from chess_ai.engine.move import Move
from chess_ai.engine.piece import Color

from .service import SearchService


def random_agent(board: Board, config: EngineConfig) -> Optional[Move]:
    """Uniformly random legal move for the side to move."""
    if board.is_over():
        return None
    moves = board.legal_moves(board.turn)
    if not moves:
        return None
    return random.Random(config.seed).choice(moves)


def minimax_agent(board: Board, config: EngineConfig) -> Optional[Move]:
    """Best move by alpha-beta search, taking book moves when available."""
    book = default_book(config.book_path) if config.use_book else None
    service = SearchService(
        book,
        time_budget_ms=config.time_budget_ms,
        max_depth=config.max_depth,
        rng=random.Random(config.seed),
    )
    return service.search(board).best_move


def antimax_agent(board: Board, config: EngineConfig) -> Optional[Move]:
    """Same search with the objective flipped: plays the worst move it finds."""
    service = SearchService(
        time_budget_ms=config.time_budget_ms,
        max_depth=config.max_depth,
    )
    return service.search(board, maximizing=board.turn is not Color.WHITE).best_move


def control_agent(board: Board, config: EngineConfig) -> Optional[Move]:
    """Never moves; the user drives this side."""
    return None


class Agent(Enum):
    RANDOM = "random"
    MINIMAX = "minimax"
    ANTIMAX = "antimax"
    CONTROL = "control"

    def get_move(self, board: Board, config: Optional[EngineConfig] = None) -> Optional[Move]:
        return AGENTS[self](board, config or EngineConfig())


AGENTS: Dict[Agent, Callable[[Board, EngineConfig], Optional[Move]]] = {
    Agent.RANDOM: random_agent,
    Agent.MINIMAX: minimax_agent,
    Agent.ANTIMAX: antimax_agent,
    Agent.CONTROL: control_agent,
}
