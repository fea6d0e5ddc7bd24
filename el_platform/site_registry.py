# el_platform/site_registry.py
# site adapter discovery.
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import importlib
import pkgutil
from collections.abc import Iterator
from types import ModuleType
from typing import Any

from _logging import log as BASE_LOG

log = BASE_LOG.child("SITES")


def _iter_site_modules() -> Iterator[ModuleType]:
    import providers.sites as sitepkg  # namespace package

    for m in pkgutil.iter_modules(list(sitepkg.__path__)):
        if not m.name.startswith("_mod_") or m.name == "_mod_common":
            continue
        try:
            yield importlib.import_module(f"providers.sites.{m.name}")
        except Exception as e:
            log.error(f"load_failed {m.name}: {e}")


def _resolve_adapter(mod: ModuleType) -> Any:
    obj = getattr(mod, "ADAPTER", None)
    if obj is None or not isinstance(getattr(obj, "name", None), str):
        return None
    if getattr(obj, "role", None) not in ("target", "source"):
        return None
    return obj


def load_site_adapters() -> dict[str, Any]:
    """Adapter classes by upper-cased site name (NETFLIX, YOUTUBE, IMDB)."""
    out: dict[str, Any] = {}
    for mod in _iter_site_modules():
        adapter = _resolve_adapter(mod)
        if adapter is not None:
            out[adapter.name.upper()] = adapter
    return out
