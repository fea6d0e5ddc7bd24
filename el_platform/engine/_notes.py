# el_platform/engine/_notes.py
# side tables for per-handle state (entry annotations, toggle bindings).
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import weakref
from collections.abc import Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class HandleTable(Generic[T]):
    """
    Maps foreign handles to state by object identity, so handles with custom
    __eq__/__hash__ (parsed DOM nodes) are safe keys. Weak-referenceable
    handles drop their state when collected; others are pinned.
    """

    def __init__(self, factory: Callable[[], T] | None = None) -> None:
        self._factory = factory
        self._values: dict[int, T] = {}
        self._refs: dict[int, Any] = {}

    def _drop(self, key: int) -> None:
        self._values.pop(key, None)
        self._refs.pop(key, None)

    def get(self, handle: Any) -> T | None:
        return self._values.get(id(handle))

    def set(self, handle: Any, value: T) -> T:
        key = id(handle)
        if key not in self._refs:
            try:
                self._refs[key] = weakref.ref(handle, lambda _r, k=key: self._drop(k))
            except TypeError:
                self._refs[key] = handle
        self._values[key] = value
        return value

    def setdefault(self, handle: Any) -> T:
        found = self.get(handle)
        if found is not None:
            return found
        if self._factory is None:
            raise KeyError("no default factory")
        return self.set(handle, self._factory())

    def clear(self) -> None:
        self._values.clear()
        self._refs.clear()

    def __len__(self) -> int:
        return len(self._values)
