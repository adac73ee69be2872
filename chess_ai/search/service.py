from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from chess_ai.assets.book import OpeningBook
from chess_ai.engine.board import Board
from chess_ai.engine.move import Move, move_to_uci
from chess_ai.engine.piece import Color
from chess_ai.engine.state import StateKind
from chess_ai.eval import CHECKMATE_VALUE


logger = logging.getLogger(__name__)

INF = 10_000_000
# Returned by the root when the book supplies the move; ends the search.
FORCED_SCORE = 2**31 - 1
# Returned up the tree when the time budget runs out mid-pass.
TIMEOUT_SCORE = -(2**31)

DEFAULT_TIME_BUDGET_MS = 4000
DEFAULT_MAX_DEPTH = 8


class SearchState(Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    DONE = "done"


class Bound(Enum):
    EXACT = "exact"
    LOWER = "lower"
    UPPER = "upper"


@dataclass
class TTEntry:
    depth: int
    score: int
    best: Optional[Move]
    flag: Bound


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: Optional[int]
    depth: int
    nodes: int
    tt_probes: int
    tt_hits: int
    tt_stores: int
    tt_size: int
    time_ms: int
    timed_out: bool
    iters: List[Dict[str, int]] = field(default_factory=list)
    book_name: Optional[str] = None

    @property
    def from_book(self) -> bool:
        return self.book_name is not None


class SearchService:
    """Alpha-beta minimax with iterative deepening and a transposition table.

    The service walks Idle -> Searching -> Done for each call. Every call works
    on its own clone of the board and gets a fresh transposition table, so the
    caller's board is never touched and nothing carries over between searches.
    """

    def __init__(
        self,
        book: Optional[OpeningBook] = None,
        *,
        time_budget_ms: int = DEFAULT_TIME_BUDGET_MS,
        max_depth: int = DEFAULT_MAX_DEPTH,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.book = book
        self.time_budget_ms = time_budget_ms
        self.max_depth = max_depth
        self.rng = rng or random.Random()
        self.state = SearchState.IDLE

    def search(
        self,
        board: Board,
        depth: Optional[int] = None,
        movetime_ms: Optional[int] = None,
        *,
        maximizing: Optional[bool] = None,
        prune: bool = True,
        use_tt: bool = True,
        on_iter: Optional[Callable[[Dict[str, int]], None]] = None,
    ) -> SearchResult:
        """Search ``board`` and return the best move of the last completed depth.

        Args:
            board (Board): Position to search; it is cloned, never mutated.
            depth (Optional[int]): Deepest iteration to run (defaults to
                ``max_depth``).
            movetime_ms (Optional[int]): Time budget for this call (defaults
                to ``time_budget_ms``). Checked between node expansions.
            maximizing (Optional[bool]): Whether the side to move maximizes the
                White-positive score. Defaults to ``board.turn is WHITE``;
                passing the opposite plays the weakest moves instead.
            prune (bool): Enable alpha-beta cutoffs.
            use_tt (bool): Enable the transposition table.
            on_iter: Called with the stats of each completed iteration.

        Returns:
            SearchResult: ``best_move`` is ``None`` only when the game is
            already over at the root.

        Raises:
            RuntimeError: If this service is already searching.
        """
        if self.state is SearchState.SEARCHING:
            raise RuntimeError("search already running")
        self.state = SearchState.SEARCHING
        try:
            return self._search(board, depth, movetime_ms, maximizing, prune, use_tt, on_iter)
        finally:
            self.state = SearchState.DONE

    def _search(
        self,
        board: Board,
        depth: Optional[int],
        movetime_ms: Optional[int],
        maximizing: Optional[bool],
        prune: bool,
        use_tt: bool,
        on_iter: Optional[Callable[[Dict[str, int]], None]],
    ) -> SearchResult:
        start = time.perf_counter()
        budget_ms = movetime_ms if movetime_ms is not None else self.time_budget_ms
        deadline = start + budget_ms / 1000.0
        max_depth = depth if depth is not None else self.max_depth
        root = board.clone()
        root_max = (root.turn is Color.WHITE) if maximizing is None else maximizing
        book = self.book
        rng = self.rng

        nodes = 0
        tt_probes = 0
        tt_hits = 0
        tt_stores = 0
        completed = 0
        tt: Dict[Tuple[int, Color], TTEntry] = {}
        book_name: Optional[str] = None

        def elapsed_ms() -> int:
            return int((time.perf_counter() - start) * 1000)

        def out_of_time() -> bool:
            # Depth 1 always completes so there is a move to return.
            return completed > 0 and time.perf_counter() >= deadline

        def probe(
            key: Tuple[int, Color], alpha: int, beta: int, d: int
        ) -> Optional[Tuple[int, Optional[Move]]]:
            nonlocal tt_probes, tt_hits
            tt_probes += 1
            e = tt.get(key)
            if e is None or e.depth < d:
                return None
            if (
                e.flag is Bound.EXACT
                or (e.flag is Bound.LOWER and e.score >= beta)
                or (e.flag is Bound.UPPER and e.score <= alpha)
            ):
                tt_hits += 1
                return e.score, e.best
            return None

        def store(
            key: Tuple[int, Color],
            d: int,
            score: int,
            alpha_orig: int,
            beta_orig: int,
            best: Optional[Move],
        ) -> None:
            nonlocal tt_stores
            prev = tt.get(key)
            if prev is not None and prev.depth > d:
                return
            if not prune:
                flag = Bound.EXACT
            elif score <= alpha_orig:
                flag = Bound.UPPER
            elif score >= beta_orig:
                flag = Bound.LOWER
            else:
                flag = Bound.EXACT
            tt[key] = TTEntry(d, score, best, flag)
            tt_stores += 1

        def leaf(node: Board, d: int) -> int:
            score = node.score
            if node.state.kind is StateKind.CHECKMATE:
                # Prefer quicker mates: more remaining depth means fewer plies played
                score += d if score > 0 else -d
            return score

        def minimax(
            node: Board, is_max: bool, d: int, alpha: int, beta: int, ply: int
        ) -> Tuple[int, Optional[Move]]:
            nonlocal nodes, book_name
            nodes += 1
            if d == 0 or node.is_over():
                return leaf(node, d), None

            if ply == 0 and book is not None:
                entry = book.find_move(node, rng)
                if entry is not None:
                    book_name = entry.name
                    return FORCED_SCORE, entry.move

            key = (node.hash, node.turn)
            if use_tt:
                hit = probe(key, alpha, beta, d)
                if hit is not None:
                    return hit

            if out_of_time():
                return TIMEOUT_SCORE, None

            alpha_orig, beta_orig = alpha, beta
            best = -INF if is_max else INF
            best_move: Optional[Move] = None
            for frm, to in node.sorted_moves(node.turn, is_max):
                child = node.clone()
                child.move_piece(frm, to, d > 1)
                score, _ = minimax(child, not is_max, d - 1, alpha, beta, ply + 1)
                if score == TIMEOUT_SCORE:
                    return TIMEOUT_SCORE, None
                if score == FORCED_SCORE:
                    return FORCED_SCORE, (frm, to)
                if is_max:
                    if score > best:
                        best, best_move = score, (frm, to)
                    alpha = max(alpha, score)
                else:
                    if score < best:
                        best, best_move = score, (frm, to)
                    beta = min(beta, score)
                if prune and alpha >= beta:
                    break
                if out_of_time():
                    return TIMEOUT_SCORE, None

            if best_move is None:
                return node.score, None
            # Mate scores carry a remaining-depth bonus and repeated positions
            # depend on the path, so neither is valid at another node.
            if (
                use_tt
                and abs(best) < CHECKMATE_VALUE
                and node.position_history.count(node.hash) < 2
            ):
                store(key, d, best, alpha_orig, beta_orig, best_move)
            return best, best_move

        best_move: Optional[Move] = None
        best_score: Optional[int] = None
        timed_out = False
        iters: List[Dict[str, int]] = []

        def result(move: Optional[Move], score: Optional[int], timed_out: bool) -> SearchResult:
            return SearchResult(
                best_move=move,
                score=score,
                depth=completed,
                nodes=nodes,
                tt_probes=tt_probes,
                tt_hits=tt_hits,
                tt_stores=tt_stores,
                tt_size=len(tt),
                time_ms=elapsed_ms(),
                timed_out=timed_out,
                iters=iters,
                book_name=book_name,
            )

        if root.is_over() or not root.legal_moves(root.turn):
            logger.debug("search skipped: game over (%s)", root.state)
            return result(None, None, False)

        for d in range(1, max_depth + 1):
            score, move = minimax(root, root_max, d, -INF, INF, 0)
            if score == TIMEOUT_SCORE:
                timed_out = True
                logger.debug("search timed out during depth %d after %d ms", d, elapsed_ms())
                break
            if score == FORCED_SCORE:
                best_move, best_score = move, FORCED_SCORE
                logger.debug("book move %s (%s)", move_to_uci(move), book_name)
                break
            best_move, best_score, completed = move, score, d
            info = {"depth": d, "score": score, "nodes": nodes, "time_ms": elapsed_ms()}
            iters.append(info)
            logger.debug("depth %d score %d nodes %d time %d ms", d, score, nodes, info["time_ms"])
            if on_iter is not None:
                on_iter(info)
            if abs(score) >= CHECKMATE_VALUE:
                break
            if time.perf_counter() >= deadline:
                timed_out = True
                break

        return result(best_move, best_score, timed_out)
