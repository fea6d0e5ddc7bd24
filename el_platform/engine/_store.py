# el_platform/engine/_store.py
# persistent list store: named lists and the list index per (site, user).
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from concurrent.futures import Executor, Future
from typing import Any

from _logging import log as BASE_LOG

from ._kv import ValueBackend

STORAGE_SEP = "-"

log = BASE_LOG.child("STORE")


def _part(value: str) -> str:
    # site and user may contain the separator; list names are the last segment
    return value.replace("%", "%25").replace(STORAGE_SEP, "%2D")


# standardized names for storage keys
def list_ident(site: str, user: str) -> str:
    return f"{STORAGE_SEP}{_part(site)}{STORAGE_SEP}{_part(user)}"


def list_prefix(site: str, user: str) -> str:
    return f"List{list_ident(site, user)}{STORAGE_SEP}"


def index_key(site: str, user: str) -> str:
    return f"Lists{list_ident(site, user)}"


def list_key(site: str, user: str, list_name: str) -> str:
    return f"{list_prefix(site, user)}{list_name}"


def last_user_key(site: str) -> str:
    return f"{_part(site)}{STORAGE_SEP}lastUser"


def last_payload_key(site: str) -> str:
    return f"{_part(site)}{STORAGE_SEP}lastUserPayload"


class ListStore:
    """
    Named lists per (site, user) on top of a string key/value backend.

    Every list body is a JSON object (id -> display name) under its own key,
    and a JSON array under the index key names the lists that exist. The index
    is rebuilt from a key prefix scan whenever it is missing, malformed or
    disagrees with the stored bodies in either direction. Read and parse
    errors are logged and treated as absence; nothing here raises to the
    caller.

    Writes return a Future resolving to True/False. With an executor the write
    runs there (use a single worker to keep writes ordered), otherwise inline.
    """

    def __init__(self, backend: ValueBackend, *, executor: Executor | None = None) -> None:
        self.backend = backend
        self.executor = executor

    # ── low level ──────────────────────────────────────────────────────────
    def _read(self, key: str) -> Any:
        try:
            raw = self.backend.get(key)
        except Exception as e:
            log.error(f"cannot read '{key}': {e}")
            return None
        if raw is None or raw == "":
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            log.error(f"error loading saved value '{key}': {e}")
            return None

    def _write(self, key: str, value: Any) -> None:
        self.backend.set(key, json.dumps(value, ensure_ascii=False))

    def _submit(self, what: str, fn: Callable[[], None]) -> Future:
        def _run() -> bool:
            try:
                fn()
                return True
            except Exception as e:
                log.error(f"{what} failed: {e}")
                return False

        if self.executor is not None:
            try:
                return self.executor.submit(_run)
            except RuntimeError as e:
                log.warn(f"{what}: executor unavailable ({e}), writing inline")
                self.executor = None
        fut: Future = Future()
        fut.set_result(_run())
        return fut

    # ── list index ─────────────────────────────────────────────────────────
    def _scan(self, site: str, user: str) -> list[str] | None:
        prefix = list_prefix(site, user)
        try:
            keys = self.backend.keys()
        except Exception as e:
            log.error(f"cannot list stored keys: {e}")
            return None
        return [k[len(prefix):] for k in keys if k.startswith(prefix)]

    def _regenerate_index(self, site: str, user: str, order: list[str] | None = None) -> list[str]:
        found = self._scan(site, user) or []
        known = order or []
        names = [n for n in known if n in found] + [n for n in found if n not in known]
        try:
            self._write(index_key(site, user), names)
        except Exception as e:
            log.error(f"cannot save regenerated list index for {site}/{user}: {e}")
        log.debug(f"list index regenerated for {site}/{user}: {names}")
        return names

    def list_names(self, site: str, user: str) -> list[str]:
        names = self._read(index_key(site, user))
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            return self._regenerate_index(site, user)
        return names

    # ── public API ─────────────────────────────────────────────────────────
    def load(self, site: str, user: str) -> dict[str, dict[str, str]]:
        names = self.list_names(site, user)
        found = self._scan(site, user)
        if found is not None and set(found) != set(names):
            log.warn(f"list index of {site}/{user} out of sync with stored lists, regenerating")
            names = self._regenerate_index(site, user, names)

        lists: dict[str, dict[str, str]] = {}
        for name in names:
            body = self._read(list_key(site, user, name))
            if isinstance(body, dict):
                lists[name] = {str(k): str(v) for k, v in body.items()}
            else:
                log.warn(f"list '{name}' of {site}/{user} cannot be loaded, dropped")
        return lists

    def save(self, site: str, user: str, list_name: str, entries: Mapping[str, str]) -> Future:
        body = dict(entries)

        def _do() -> None:
            names = self.list_names(site, user)
            if list_name not in names:
                names.append(list_name)
                self._write(index_key(site, user), names)
            self._write(list_key(site, user, list_name), body)

        return self._submit(f"save list '{list_name}' ({site}/{user})", _do)

    def delete_one(self, site: str, user: str, list_name: str) -> Future:
        def _do() -> None:
            names = self.list_names(site, user)
            if list_name in names:
                names.remove(list_name)
                self._write(index_key(site, user), names)
            self.backend.delete(list_key(site, user, list_name))

        return self._submit(f"delete list '{list_name}' ({site}/{user})", _do)

    def delete_all(self, site: str, user: str) -> Future:
        def _do() -> None:
            names = self.list_names(site, user)
            self.backend.delete(index_key(site, user))
            for name in names:
                self.backend.delete(list_key(site, user, name))

        return self._submit(f"delete all lists ({site}/{user})", _do)

    def remember_user(self, site: str, user: str, payload: Any = None) -> None:
        try:
            self.backend.set(last_user_key(site), user)
            if payload:
                self._write(last_payload_key(site), payload)
            else:
                self.backend.delete(last_payload_key(site))
        except Exception as e:
            log.error(f"cannot remember user for {site}: {e}")

    def recall_user(self, site: str) -> tuple[str | None, Any]:
        try:
            user = self.backend.get(last_user_key(site))
        except Exception as e:
            log.error(f"cannot recall user for {site}: {e}")
            return None, None
        return (user or None), self._read(last_payload_key(site))
