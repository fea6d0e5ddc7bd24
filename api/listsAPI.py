# /api/listsAPI.py
# EntryList - List management API (stored lists per site and user)
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from _logging import log as BASE_LOG

__all__ = ["router", "ListBody"]

router = APIRouter(prefix="/api/lists", tags=["lists"])

log = BASE_LOG.child("API")


class ListBody(BaseModel):
    entries: dict[str, str] = Field(default_factory=dict)


def _env():
    from el_platform.config_base import load_config, storage_path
    from el_platform.engine import JsonFileBackend, ListStore

    cfg = load_config()
    return ListStore(JsonFileBackend(storage_path(cfg)))


def _ok(payload: dict[str, Any], *, status_code: int = 200) -> JSONResponse:
    payload.setdefault("ok", True)
    return JSONResponse(payload, status_code=status_code)


def _err(msg: str, *, status_code: int = 400, extra: dict[str, Any] | None = None) -> JSONResponse:
    payload: dict[str, Any] = {"ok": False, "error": msg}
    if extra:
        payload.update(extra)
    return JSONResponse(payload, status_code=status_code)


def _user(store: Any, site: str, user: str | None) -> str | None:
    u = (user or "").strip()
    if u:
        return u
    return store.recall_user(site)[0]


@router.get("/{site}/user")
def api_lists_user(site: str) -> JSONResponse:
    store = _env()
    user, payload = store.recall_user(site)
    if not user:
        return _err(f"no user known for {site}", status_code=404)
    return _ok({"site": site, "user": user, "payload": payload})


@router.get("/{site}")
def api_lists_index(site: str, user: str | None = Query(None)) -> JSONResponse:
    store = _env()
    u = _user(store, site, user)
    if not u:
        return _err(f"no user known for {site}", status_code=404)
    lists = store.load(site, u)
    return _ok({"site": site, "user": u, "lists": {name: len(body) for name, body in lists.items()}})


@router.get("/{site}/{name}")
def api_lists_read(site: str, name: str, user: str | None = Query(None)) -> JSONResponse:
    store = _env()
    u = _user(store, site, user)
    if not u:
        return _err(f"no user known for {site}", status_code=404)
    lists = store.load(site, u)
    if name not in lists:
        return _err(f"list '{name}' not found", status_code=404)
    return _ok({"site": site, "user": u, "name": name, "entries": lists[name]})


@router.put("/{site}/{name}")
def api_lists_write(site: str, name: str, body: ListBody, user: str | None = Query(None)) -> JSONResponse:
    store = _env()
    u = _user(store, site, user)
    if not u:
        return _err(f"no user known for {site}", status_code=404)
    if not store.save(site, u, name, body.entries).result():
        return _err(f"cannot save list '{name}'", status_code=500)
    log.info(f"list '{name}' of {site}/{u} replaced ({len(body.entries)} entries)")
    return _ok({"site": site, "user": u, "name": name, "size": len(body.entries)})


@router.delete("/{site}/{name}")
def api_lists_delete(site: str, name: str, user: str | None = Query(None)) -> JSONResponse:
    store = _env()
    u = _user(store, site, user)
    if not u:
        return _err(f"no user known for {site}", status_code=404)
    if not store.delete_one(site, u, name).result():
        return _err(f"cannot delete list '{name}'", status_code=500)
    return _ok({"site": site, "user": u, "deleted": name})


@router.delete("/{site}")
def api_lists_delete_all(site: str, user: str | None = Query(None)) -> JSONResponse:
    store = _env()
    u = _user(store, site, user)
    if not u:
        return _err(f"no user known for {site}", status_code=404)
    names = store.list_names(site, u)
    if not store.delete_all(site, u).result():
        return _err(f"cannot delete lists of {site}", status_code=500)
    return _ok({"site": site, "user": u, "deleted": names})
