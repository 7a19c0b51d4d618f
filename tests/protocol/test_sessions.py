from __future__ import annotations

from fastapi.testclient import TestClient

from src.engine.board import STARTPOS_FEN
from src.protocol.http.app import create_app
from src.protocol.http.session import InMemorySessionStore


def _client() -> TestClient:
    return TestClient(create_app())


def test_create_game_and_get_state() -> None:
    client = _client()
    r = client.post("/api/games")
    assert r.status_code == 200
    body = r.json()
    assert "game_id" in body and isinstance(body["game_id"], str) and body["game_id"]
    game_id = body["game_id"]
    assert body["state"]["fen"] == STARTPOS_FEN

    # Fetch state
    r2 = client.get(f"/api/games/{game_id}/state")
    assert r2.status_code == 200
    state = r2.json()
    assert state["game_id"] == game_id
    assert state["current_player"] == "white"
    assert len(state["legal_moves"]) == 20
    assert state["board"][0][0] == "r" and state["board"][7][4] == "K"
    assert state["captured"] == {"white": [], "black": []}
    assert state["result"] == {"status": "none", "winner": None}
    assert state["ai_enabled"] is True and state["ai_color"] == "black"
    assert state["difficulty"] == 2


def test_create_game_with_settings() -> None:
    client = _client()
    r = client.post("/api/games", json={"ai_enabled": False, "difficulty": 3})
    assert r.status_code == 200
    state = r.json()["state"]
    assert state["ai_enabled"] is False
    assert state["difficulty"] == 3


def test_get_state_unknown_id_404() -> None:
    client = _client()
    r = client.get("/api/games/does-not-exist/state")
    assert r.status_code == 404
    body = r.json()
    assert "error" in body
    assert body["error"]["code"] == "not_found"


def test_legal_destinations_for_square() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r = client.get(f"/api/games/{game_id}/moves/g1")
    assert r.status_code == 200
    assert r.json() == {"square": "g1", "destinations": ["f3", "h3"]}

    r_empty = client.get(f"/api/games/{game_id}/moves/e4")
    assert r_empty.json()["destinations"] == []


def test_bad_square_is_bad_request() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    r = client.get(f"/api/games/{game_id}/moves/z9")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"


def test_settings_update_and_validation() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r = client.post(f"/api/games/{game_id}/settings", json={"difficulty": 1})
    assert r.status_code == 200
    assert r.json()["difficulty"] == 1

    r_bad = client.post(f"/api/games/{game_id}/settings", json={"difficulty": 4})
    assert r_bad.status_code == 422
    err = r_bad.json()["error"]
    assert err["code"] == "unprocessable_entity"
    assert err["field_errors"]


def test_new_game_keeps_settings_and_resets_board() -> None:
    client = _client()
    game_id = client.post("/api/games", json={"ai_enabled": False, "difficulty": 1}).json()[
        "game_id"
    ]
    client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})

    r = client.post(f"/api/games/{game_id}/new")
    assert r.status_code == 200
    state = r.json()
    assert state["game_id"] == game_id
    assert state["fen"] == STARTPOS_FEN
    assert state["move_history"] == []
    assert state["ai_enabled"] is False and state["difficulty"] == 1


def test_session_store_roundtrip() -> None:
    store = InMemorySessionStore()
    gid = store.create()
    assert len(store) == 1
    assert store.get(gid) is not None
    store.delete(gid)
    assert store.get(gid) is None
    assert len(store) == 0
