# tests/test_webapp.py

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from chronosync.storage import LocalStore
from chronosync.sync import USER_MESSAGE
from chronosync.webapp import create_app


@pytest.fixture()
def client(store) -> TestClient:
    return TestClient(create_app(store))


def test_health(client) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.text == "ok"


def test_login_and_logout(client) -> None:
    assert client.get("/api/user").json() == {"user": None}
    assert client.post("/api/login", json={"name": " alice "}).json() == {"user": "alice"}
    assert client.get("/api/user").json() == {"user": "alice"}
    assert client.post("/api/login", json={"name": " "}).status_code == 400
    assert client.post("/api/logout").json() == {"user": None}


def test_export_and_import_between_stores(tmp_path, client, store, rich_snapshot) -> None:
    store.replace(rich_snapshot)
    r = client.post("/api/sync/export", json={"password": "pw"})
    assert r.status_code == 200
    code = r.json()["code"]

    other = LocalStore(tmp_path / "other")
    r = TestClient(create_app(other)).post("/api/sync/import", json={"code": code, "password": "pw"})
    assert r.status_code == 200
    assert r.json() == {"user": "Zoë", "tasks": 2, "tags": 2}
    assert other.snapshot() == rich_snapshot


def test_export_errors(client, store, snapshot) -> None:
    assert client.post("/api/sync/export", json={"password": "pw"}).status_code == 409
    store.replace(snapshot)
    assert client.post("/api/sync/export", json={"password": ""}).status_code == 400


@pytest.mark.parametrize("code", ["not-a-valid-code", "a.b.c"])
def test_import_failures_share_one_message(client, code) -> None:
    r = client.post("/api/sync/import", json={"code": code, "password": "pw"})
    assert r.status_code == 400
    assert r.json() == {"detail": USER_MESSAGE}


def test_import_wrong_password(client, store, snapshot) -> None:
    store.replace(snapshot)
    code = client.post("/api/sync/export", json={"password": "pw"}).json()["code"]
    r = client.post("/api/sync/import", json={"code": code, "password": "other"})
    assert r.status_code == 400
    assert r.json() == {"detail": USER_MESSAGE}
    assert store.snapshot() == snapshot


def test_import_requires_code_and_password(client) -> None:
    assert client.post("/api/sync/import", json={"code": " ", "password": "pw"}).status_code == 400
    assert client.post("/api/sync/import", json={"code": "a.b.c", "password": ""}).status_code == 400
