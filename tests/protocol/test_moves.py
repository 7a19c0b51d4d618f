from __future__ import annotations

from fastapi.testclient import TestClient

from src.protocol.http.app import create_app


def _client() -> TestClient:
    return TestClient(create_app())


def _new_game(client: TestClient, **settings) -> str:
    return client.post("/api/games", json=settings or None).json()["game_id"]


def test_human_move_gets_ai_reply() -> None:
    client = _client()
    game_id = _new_game(client, difficulty=1)

    r = client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})
    assert r.status_code == 200
    body = r.json()
    assert body["applied"] is True
    assert body["move"] == "e2e4"
    assert body["ai_move"] is not None
    state = body["state"]
    assert state["move_history"][0] == "e2e4"
    assert state["move_history"][1] == body["ai_move"]
    assert state["current_player"] == "white"


def test_move_without_ai_flips_side() -> None:
    client = _client()
    game_id = _new_game(client, ai_enabled=False)

    r = client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})
    assert r.status_code == 200
    body = r.json()
    assert body["ai_move"] is None
    assert body["state"]["current_player"] == "black"
    assert body["state"]["last_move"] == "e2e4"
    assert " e3 " in body["state"]["fen"]


def test_illegal_move_is_rejected() -> None:
    client = _client()
    game_id = _new_game(client)

    r = client.post(f"/api/games/{game_id}/move", json={"move": "e2e5"})
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "illegal move"

    r_bad = client.post(f"/api/games/{game_id}/move", json={"move": "e2"})
    assert r_bad.status_code == 400
    assert r_bad.json()["error"]["code"] == "bad_request"


def test_move_on_ai_turn_conflicts() -> None:
    client = _client()
    game_id = _new_game(client, ai_enabled=False)
    client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})
    client.post(f"/api/games/{game_id}/settings", json={"ai_enabled": True})

    r = client.post(f"/api/games/{game_id}/move", json={"move": "e7e5"})
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "conflict"

    r_ai = client.post(f"/api/games/{game_id}/ai-move")
    assert r_ai.status_code == 200
    assert r_ai.json()["applied"] is True
    assert r_ai.json()["state"]["current_player"] == "white"


def test_move_after_checkmate_conflicts() -> None:
    client = _client()
    game_id = _new_game(client, ai_enabled=False)
    for uci in ("f2f3", "e7e5", "g2g4", "d8h4"):
        assert client.post(f"/api/games/{game_id}/move", json={"move": uci}).status_code == 200

    state = client.get(f"/api/games/{game_id}/state").json()
    assert state["game_over"] is True
    assert state["in_check"] is True
    assert state["result"] == {"status": "checkmate", "winner": "black"}
    assert state["legal_moves"] == []

    r = client.post(f"/api/games/{game_id}/move", json={"move": "a2a3"})
    assert r.status_code == 409


def test_perft_endpoint() -> None:
    client = _client()
    r = client.post("/api/perft", json={"depth": 2})
    assert r.status_code == 200
    assert r.json() == {"nodes": 400}

    r_fen = client.post("/api/perft", json={"fen": "4k3/8/8/8/8/8/8/4K3 w - - 0 1", "depth": 1})
    assert r_fen.json() == {"nodes": 5}

    assert client.post("/api/perft", json={"depth": 9}).status_code == 422
    r_null = client.post("/api/perft", json={"depth": None})
    assert r_null.status_code == 422
    assert r_null.json()["error"]["code"] == "unprocessable_entity"
    assert client.post("/api/perft", json={"fen": "bogus", "depth": 1}).status_code == 400
