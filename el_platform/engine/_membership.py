# el_platform/engine/_membership.py
# membership aggregation across registered contexts.
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from collections.abc import Iterable

from ._context import Context
from ._types import SEP, Identity


def qualified_name(ctx_name: str, list_name: str) -> str:
    return f"{ctx_name}{SEP}{list_name}"


def aggregate(contexts: Iterable[Context], tt: Identity) -> set[str]:
    found: set[str] = set()
    for ctx in contexts:
        for list_name, entries in ctx.lists.items():
            if ctx.test_membership(tt, entries):
                found.add(qualified_name(ctx.name, list_name))
    return found
