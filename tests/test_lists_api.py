# EntryList test scripts
from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from el_platform.config_base import storage_path
from el_platform.engine import JsonFileBackend, ListStore


def _client() -> TestClient:
    from api import register

    app = FastAPI()
    register(app)
    return TestClient(app)


def _store() -> ListStore:
    return ListStore(JsonFileBackend(storage_path()))


def test_lists_crud(config_base) -> None:
    store = _store()
    store.remember_user("Netflix", "alice")
    store.save("Netflix", "alice", "localHide", {"1": "A"})
    client = _client()

    r = client.get("/api/lists/Netflix")
    assert r.status_code == 200
    assert r.json() == {"site": "Netflix", "user": "alice", "lists": {"localHide": 1}, "ok": True}

    r = client.put("/api/lists/Netflix/nfMyList", json={"entries": {"11": "One", "12": "Two"}})
    assert r.status_code == 200
    assert r.json()["size"] == 2

    r = client.get("/api/lists/Netflix/nfMyList")
    assert r.json()["entries"] == {"11": "One", "12": "Two"}
    assert _store().load("Netflix", "alice")["nfMyList"] == {"11": "One", "12": "Two"}

    r = client.delete("/api/lists/Netflix/localHide")
    assert r.json()["deleted"] == "localHide"
    assert client.get("/api/lists/Netflix/localHide").status_code == 404

    r = client.delete("/api/lists/Netflix")
    assert r.json()["deleted"] == ["nfMyList"]
    assert client.get("/api/lists/Netflix").json()["lists"] == {}


def test_explicit_user_query(config_base) -> None:
    _store().save("IMDb", "bob", "Visti", {"Movie": "Movie"})
    client = _client()
    r = client.get("/api/lists/IMDb", params={"user": "bob"})
    assert r.json()["lists"] == {"Visti": 1}
    assert client.get("/api/lists/IMDb/Visti", params={"user": "bob"}).json()["entries"] == {"Movie": "Movie"}


def test_unknown_user_is_404(config_base) -> None:
    client = _client()
    r = client.get("/api/lists/YouTube")
    assert r.status_code == 404
    assert r.json()["ok"] is False

    assert client.get("/api/lists/YouTube/user").status_code == 404
    assert client.put("/api/lists/YouTube/x", json={"entries": {}}).status_code == 404


def test_remembered_user_endpoint(config_base) -> None:
    _store().remember_user("IMDb", "bob", "ur1")
    r = _client().get("/api/lists/IMDb/user")
    assert r.json() == {"site": "IMDb", "user": "bob", "payload": "ur1", "ok": True}


def test_bad_body_rejected(config_base) -> None:
    _store().remember_user("Netflix", "alice")
    r = _client().put("/api/lists/Netflix/x", json={"entries": ["not", "a", "map"]})
    assert r.status_code == 422
