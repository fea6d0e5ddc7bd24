# el_platform/engine/_toggle.py
# user driven add/remove of an entry in one list of the target.
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from typing import Any

from _logging import log as BASE_LOG

from ._context import Context
from ._notes import HandleTable
from ._reconcile import extract_identity
from ._store import ListStore
from ._types import NEGATED, NO_USER, EntryState

log = BASE_LOG.child("TOGGLE")


def _closest(node: Any, selector: str) -> Any:
    css = getattr(node, "css", None)
    if css is not None and callable(getattr(css, "closest", None)):
        return css.closest(selector)
    fn = getattr(node, "closest", None)
    if callable(fn):
        return fn(selector)
    return None


def find_entry(node: Any, how_to_find_entry: int | str) -> Any:
    """
    Entry owning a control: an int walks that many parents up, a string is a
    CSS selector for the nearest matching ancestor (the node included).
    """
    if isinstance(how_to_find_entry, int) or str(how_to_find_entry).strip().isdigit():
        for _ in range(int(how_to_find_entry)):
            if node is None:
                break
            node = getattr(node, "parent", None)
        return node
    return _closest(node, str(how_to_find_entry))


def toggle_entry(
    entry: Any,
    target: Context,
    store: ListStore,
    notes: HandleTable[EntryState],
    toggle_list: str,
    toggle_type: Any,
) -> Any:
    """
    Flip the entry's membership in toggle_list, apply or reverse the effect
    and persist the list. Returns the decision now recorded on the entry, or
    None when no identity could be extracted.
    """
    if entry is None:
        log.warn(f"{target.name}: toggle without an entry, ignored")
        return None
    tt = extract_identity(target, entry)
    if tt is None:
        return None

    entries = target.lists.setdefault(toggle_list, {})
    state = notes.setdefault(entry)
    if tt.id in entries:
        del entries[tt.id]
        reverse = target.capability("reverse_effect")
        if reverse:
            reverse(entry, tt, toggle_type)
        state.processing_type = f"{NEGATED}{toggle_type}"
    else:
        entries[tt.id] = tt.name
        target.ops.apply_effect(entry, tt, toggle_type)
        state.processing_type = toggle_type

    store.save(target.name, target.user or NO_USER, toggle_list, entries)
    log.debug(f"{target.name}: '{tt.name}' toggled in '{toggle_list}' -> {state.processing_type}")
    return state.processing_type
