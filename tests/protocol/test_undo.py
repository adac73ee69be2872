from __future__ import annotations

from fastapi.testclient import TestClient

from chess_ai.config import EngineConfig
from chess_ai.engine.board import STARTPOS_FEN
from chess_ai.protocol.http.app import create_app


def test_undo_restores_previous_positions() -> None:
    client = TestClient(create_app(EngineConfig(use_book=False)))
    game_id = client.post("/api/games").json()["game_id"]
    for mv in ("e2e4", "e7e5", "g1f3"):
        assert client.post(f"/api/games/{game_id}/move", json={"move": mv}).status_code == 200

    r = client.post(f"/api/games/{game_id}/undo")
    assert r.status_code == 200
    assert r.json()["move_history"] == ["e2e4", "e7e5"]
    assert r.json()["turn"] == "w"

    r2 = client.post(f"/api/games/{game_id}/undo", json={"plies": 2})
    assert r2.json()["fen"] == STARTPOS_FEN


def test_undo_without_history_is_bad_request() -> None:
    client = TestClient(create_app(EngineConfig(use_book=False)))
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/undo")
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "no moves to undo"

    r_bad = client.post(f"/api/games/{game_id}/undo", json={"plies": 0})
    assert r_bad.status_code == 422
