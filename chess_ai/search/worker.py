from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import wait as futures_wait
from typing import Optional

from chess_ai.config import EngineConfig
from chess_ai.engine.board import Board
from chess_ai.engine.move import Move

from .agents import Agent


logger = logging.getLogger(__name__)


class AgentWorker:
    """Runs one agent search at a time on a background thread.

    The caller hands over a board snapshot and gets a ``Future`` that resolves
    to the chosen move (or ``None``). The worker never sees the caller's board.
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()
        self._lock = threading.Lock()
        self._future: Optional["Future[Optional[Move]]"] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._future is not None and not self._future.done()

    def submit(self, board: Board, agent: Agent) -> "Future[Optional[Move]]":
        """Start ``agent`` on a clone of ``board``.

        Raises:
            RuntimeError: If a previous search has not finished yet.
        """
        snapshot = board.clone()
        with self._lock:
            if self._future is not None and not self._future.done():
                raise RuntimeError("search already running")
            future: "Future[Optional[Move]]" = Future()
            future.set_running_or_notify_cancel()
            self._future = future
            self._thread = threading.Thread(
                target=self._run, args=(future, snapshot, agent), name="agent-search", daemon=True
            )
            self._thread.start()
        return future

    def _run(self, future: "Future[Optional[Move]]", board: Board, agent: Agent) -> None:
        logger.debug("agent %s searching", agent.value)
        try:
            move = agent.get_move(board, self.config)
        except Exception as e:
            logger.exception("agent %s failed", agent.value)
            future.set_exception(e)
            return
        future.set_result(move)

    def take_result(self) -> Optional["Future[Optional[Move]]"]:
        """Return the finished future and clear it, or ``None`` if none is ready."""
        with self._lock:
            future = self._future
            if future is None or not future.done():
                return None
            self._future = None
            return future

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the pending search finishes; ``True`` if nothing is running."""
        with self._lock:
            future = self._future
        if future is None:
            return True
        done, _ = futures_wait([future], timeout=timeout)
        return bool(done)

    def join(self, timeout: Optional[float] = None) -> None:
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
