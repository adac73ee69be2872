from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import GameSession, InMemorySessionStore
from ...assets.book import default_book
from ...config import EngineConfig
from ...engine.game import Game
from ...engine.move import Move, move_to_uci, parse_uci
from ...engine.perft import perft as perft_nodes
from ...search.agents import Agent
from ...search.service import SearchService


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="Start position; standard if omitted")
    agent: Agent = Agent.MINIMAX


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Coordinate move, e.g. e2e4")


class UndoRequest(BaseModel):
    plies: int = Field(default=1, ge=1)


class AgentRequest(BaseModel):
    agent: Agent


class SearchRequest(BaseModel):
    depth: Optional[int] = Field(default=None, ge=1, le=64)
    movetime_ms: Optional[int] = Field(default=None, ge=1)
    use_book: bool = False


class PerftRequest(BaseModel):
    fen: str
    depth: int = Field(default=1, ge=0, le=6)


class GameState(BaseModel):
    game_id: str
    fen: str
    turn: str
    state: str
    state_color: Optional[str]
    legal_moves: List[str]
    in_check: bool
    is_over: bool
    score: int
    last_move: Optional[str]
    move_history: List[str]
    agent: Agent
    searching: bool


class AgentMoveStatus(BaseModel):
    status: str
    move: Optional[str] = None
    game: Optional[GameState] = None


def create_app(config: Optional[EngineConfig] = None) -> FastAPI:
    app = FastAPI(title="Chess AI API", version="0.1.0")
    config = config or EngineConfig.from_env()

    logging.basicConfig(level=logging.INFO)

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore(config)

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        req = req or CreateGameRequest()
        game = _load_game(req.fen) if req.fen else Game.new()
        game_id = store.create(game)
        session = _require_session(store, game_id)
        session.agent = req.agent
        logger.info("game created", extra={"game_id": game_id, "agent": req.agent.value})
        return CreateGameResponse(game_id=game_id, fen=session.game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _game_state(game_id, _require_session(store, game_id))

    @app.delete("/api/games/{game_id}", status_code=204)
    async def delete_game(game_id: str) -> Response:
        session = _require_idle_session(store, game_id)
        store.delete(game_id)
        logger.info("game deleted", extra={"game_id": game_id, "plies": len(session.game.history)})
        return Response(status_code=204)

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        session = _require_idle_session(store, game_id)
        store.set_game(game_id, _load_game(req.fen))
        return _game_state(game_id, session)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        session = _require_idle_session(store, game_id)
        try:
            move = parse_uci(req.move)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        _apply(session.game, move)
        return _game_state(game_id, session)

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str, req: Optional[UndoRequest] = None) -> GameState:
        session = _require_idle_session(store, game_id)
        try:
            session.game.undo_move((req or UndoRequest()).plies)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _game_state(game_id, session)

    @app.post("/api/games/{game_id}/reset", response_model=GameState)
    async def reset(game_id: str) -> GameState:
        session = _require_idle_session(store, game_id)
        session.game.reset()
        return _game_state(game_id, session)

    @app.post("/api/games/{game_id}/agent", response_model=GameState)
    async def select_agent(game_id: str, req: AgentRequest) -> GameState:
        session = _require_session(store, game_id)
        session.agent = req.agent
        return _game_state(game_id, session)

    @app.post("/api/games/{game_id}/agent-move", response_model=AgentMoveStatus, status_code=202)
    async def start_agent_move(game_id: str) -> AgentMoveStatus:
        session = _require_session(store, game_id)
        if session.game.is_over():
            raise HTTPException(status_code=409, detail="game is over")
        try:
            session.worker.submit(session.game.board, session.agent)
        except RuntimeError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return AgentMoveStatus(status="searching")

    @app.get("/api/games/{game_id}/agent-move", response_model=AgentMoveStatus)
    async def poll_agent_move(game_id: str, wait_ms: int = 0) -> AgentMoveStatus:
        session = _require_session(store, game_id)
        if wait_ms > 0:
            await run_in_threadpool(session.worker.wait, wait_ms / 1000.0)
        future = session.worker.take_result()
        if future is None:
            status = "searching" if session.worker.busy else "idle"
            return AgentMoveStatus(status=status)
        move = future.result()
        if move is None:
            return AgentMoveStatus(status="done", game=_game_state(game_id, session))
        try:
            session.game.apply_move(move)
        except ValueError:
            # Position changed while the agent was thinking
            raise HTTPException(status_code=409, detail="agent move no longer legal")
        return AgentMoveStatus(
            status="done", move=move_to_uci(move), game=_game_state(game_id, session)
        )

    @app.post("/api/games/{game_id}/search")
    def search(game_id: str, req: SearchRequest) -> Dict[str, Any]:
        session = _require_session(store, game_id)
        book = default_book(config.book_path) if req.use_book and config.use_book else None
        service = SearchService(
            book, time_budget_ms=config.time_budget_ms, max_depth=config.max_depth
        )
        res = service.search(session.game.board, depth=req.depth, movetime_ms=req.movetime_ms)
        return {
            "best_move": move_to_uci(res.best_move) if res.best_move else None,
            "score": res.score,
            "depth": res.depth,
            "nodes": res.nodes,
            "time_ms": res.time_ms,
            "timed_out": res.timed_out,
            "book": res.book_name,
            "tt_hits": res.tt_hits,
        }

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, Any]:
        game = _load_game(req.fen)
        return {"nodes": perft_nodes(game.board, req.depth)}

    return app


def _load_game(fen: str) -> Game:
    try:
        return Game.from_fen(fen)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"invalid FEN: {e}")


def _apply(game: Game, move: Move) -> None:
    if game.is_over():
        raise HTTPException(status_code=409, detail="game is over")
    try:
        game.apply_move(move)
    except ValueError:
        raise HTTPException(status_code=400, detail="illegal move")


def _require_session(store: InMemorySessionStore, game_id: str) -> GameSession:
    session = store.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="game not found")
    return session


def _require_idle_session(store: InMemorySessionStore, game_id: str) -> GameSession:
    session = _require_session(store, game_id)
    if session.worker.busy:
        raise HTTPException(status_code=409, detail="agent is thinking")
    return session


def _game_state(game_id: str, session: GameSession) -> GameState:
    game = session.game
    board = game.board
    history = game.move_history_uci()
    return GameState(
        game_id=game_id,
        fen=board.to_fen(),
        turn=board.turn.value,
        state=board.state.kind.value,
        state_color=board.state.color.value if board.state.color else None,
        legal_moves=[] if board.is_over() else [move_to_uci(m) for m in game.legal_moves()],
        in_check=board.in_check(),
        is_over=board.is_over(),
        score=board.score,
        last_move=history[-1] if history else None,
        move_history=history,
        agent=session.agent,
        searching=session.worker.busy,
    )


# Default app for non-factory servers
app = create_app()
