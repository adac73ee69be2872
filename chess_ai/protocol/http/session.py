from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from ...config import EngineConfig
from ...engine.game import Game
from ...search.agents import Agent
from ...search.worker import AgentWorker


@dataclass
class GameSession:
    """A game plus the agent that plays the side the user hands over."""

    game: Game
    agent: Agent = Agent.MINIMAX
    worker: AgentWorker = field(default_factory=AgentWorker)


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Retrieve existing sessions by `game_id`
    - Replace the game of a session
    - Delete sessions
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, GameSession] = {}
        self.config = config or EngineConfig()

    def create(self, game: Optional[Game] = None) -> str:
        """Create a new game session and return its `game_id`."""
        gid = str(uuid.uuid4())
        session = GameSession(game=game or Game.new(), worker=AgentWorker(self.config))
        with self._lock:
            self._sessions[gid] = session
        return gid

    def get(self, game_id: str) -> Optional[GameSession]:
        with self._lock:
            return self._sessions.get(game_id)

    def set_game(self, game_id: str, game: Game) -> None:
        with self._lock:
            if game_id not in self._sessions:
                raise KeyError(game_id)
            self._sessions[game_id].game = game

    def delete(self, game_id: str) -> None:
        with self._lock:
            self._sessions.pop(game_id, None)
