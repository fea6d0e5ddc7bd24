# el_platform/engine/_kv.py
# key/value backends behind the list store.
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Protocol

from ..config_base import _write_json_atomic


class ValueBackend(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...
    def keys(self) -> list[str]: ...


class MemoryBackend:
    """Dict-backed store, used by tests and one-shot runs."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self.data.keys())


class JsonFileBackend:
    """
    All keys in one JSON object on disk. Values are the raw strings handed to
    set(); the file is rewritten atomically on every change.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data: dict[str, str] | None = None

    def _loaded(self) -> dict[str, str]:
        if self._data is None:
            data: Any = {}
            if self.path.exists():
                try:
                    data = json.loads(self.path.read_text("utf-8"))
                except Exception:
                    data = {}
            self._data = {str(k): v for k, v in data.items()} if isinstance(data, dict) else {}
        return self._data

    def _flush(self) -> None:
        _write_json_atomic(self.path, dict(self._loaded()))

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._loaded().get(key, default)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._loaded()[key] = value
            self._flush()

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._loaded()
            if key in data:
                del data[key]
                self._flush()

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._loaded().keys())
