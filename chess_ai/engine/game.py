from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .board import Board
from .move import Move, move_to_uci
from .piece import Color
from .state import BoardState


@dataclass
class Game:
    """A board plus the snapshots needed for takeback.

    Responsibility: validate moves coming from outside the engine, refuse play
    once the game is over, and restore earlier positions on undo.
    """

    board: Board
    history: List[Tuple[Board, Move]] = field(default_factory=list)

    @classmethod
    def new(cls) -> "Game":
        return cls(board=Board.startpos())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(board=Board.from_fen(fen))

    def to_fen(self) -> str:
        return self.board.to_fen()

    @property
    def turn(self) -> Color:
        return self.board.turn

    @property
    def state(self) -> BoardState:
        return self.board.state

    def is_over(self) -> bool:
        return self.board.is_over()

    def legal_moves(self) -> List[Move]:
        return self.board.legal_moves(self.board.turn)

    def apply_move(self, move: Move) -> bool:
        """Play ``move`` for the side to move.

        Returns:
            bool: ``True`` if the move captured a piece.

        Raises:
            ValueError: If the game is over or ``move`` is not legal.
        """
        if self.board.is_over():
            raise ValueError("game is over")
        if move not in self.board.legal_moves(self.board.turn):
            raise ValueError("illegal move")
        snapshot = self.board.clone()
        captured = self.board.move_piece(move[0], move[1])
        self.history.append((snapshot, move))
        return captured

    def undo_move(self, plies: int = 1) -> None:
        """Take back the last ``plies`` half-moves."""
        if plies < 1 or plies > len(self.history):
            raise ValueError("no moves to undo")
        board = self.board
        for _ in range(plies):
            board, _ = self.history.pop()
        self.board = board

    def reset(self) -> None:
        self.board = Board.startpos()
        self.history.clear()

    def last_move(self) -> Optional[Move]:
        return self.history[-1][1] if self.history else None

    def move_history_uci(self) -> List[str]:
        return [move_to_uci(m) for _, m in self.history]
