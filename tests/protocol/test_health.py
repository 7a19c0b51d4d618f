from __future__ import annotations

from fastapi.testclient import TestClient

from src.protocol.http.app import create_app
from src.protocol.http.logging_middleware import REQUEST_ID_HEADER


def test_healthz_ok_with_generated_request_id() -> None:
    client = TestClient(create_app())
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert r.headers[REQUEST_ID_HEADER]


def test_request_ids_differ_between_requests() -> None:
    client = TestClient(create_app())
    first = client.get("/healthz").headers[REQUEST_ID_HEADER]
    second = client.get("/healthz").headers[REQUEST_ID_HEADER]
    assert first != second
