from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .piece import Color


class StateKind(Enum):
    NORMAL = "normal"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"


@dataclass(frozen=True)
class BoardState:
    """Game status of a position.

    ``color`` names the side that is checked or mated and is ``None`` for the
    colorless states.
    """

    kind: StateKind
    color: Optional[Color] = None

    @classmethod
    def normal(cls) -> "BoardState":
        return cls(StateKind.NORMAL)

    @classmethod
    def check(cls, color: Color) -> "BoardState":
        return cls(StateKind.CHECK, color)

    @classmethod
    def checkmate(cls, color: Color) -> "BoardState":
        return cls(StateKind.CHECKMATE, color)

    @classmethod
    def stalemate(cls) -> "BoardState":
        return cls(StateKind.STALEMATE)

    @classmethod
    def draw(cls) -> "BoardState":
        return cls(StateKind.DRAW)

    def is_over(self) -> bool:
        return self.kind in (StateKind.CHECKMATE, StateKind.STALEMATE, StateKind.DRAW)

    def __str__(self) -> str:
        if self.color is None:
            return self.kind.value
        return f"{self.kind.value}({self.color.value})"
