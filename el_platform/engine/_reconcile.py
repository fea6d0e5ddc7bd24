# el_platform/engine/_reconcile.py
# reconciliation pass over the entries of the target page.
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from _logging import log as BASE_LOG

from ._context import Context
from ._membership import aggregate
from ._notes import HandleTable
from ._types import EntryState, Identity

log = BASE_LOG.child("RECONCILE")


def extract_identity(target: Context, entry: Any) -> Identity | None:
    fn = target.capability("extract_identity")
    if not fn:
        return None
    tt = Identity.coerce(fn(entry))
    if tt is None:
        log.error(f"{target.name}: could not determine id for entry {entry!r:.120}")
    return tt


def process_one_entry(
    entry: Any,
    target: Context,
    contexts: Sequence[Context],
    notes: HandleTable[EntryState],
) -> bool:
    """Returns True when the entry reached the processed state in this call."""
    state = notes.get(entry)
    if state is not None and (state.processed or state.invalid):
        return False

    is_valid = target.capability("is_valid_entry")
    if is_valid and not is_valid(entry):
        return False

    tt: Identity | None = None
    if target.capability("extract_identity"):
        tt = extract_identity(target, entry)
        if tt is None:
            return False

    state = notes.setdefault(entry)
    mutate = target.capability("mutate_entry")
    if mutate and not state.mutated:
        state.mutated = True
        mutate(entry)

    membership = aggregate(contexts, tt) if tt is not None else set()

    decide = target.capability("decide")
    decision = decide(membership, tt, entry) if decide else len(membership) > 0

    if decision:
        target.ops.apply_effect(entry, tt, decision)
        state.processing_type = decision

    state.processed = True
    return True


def process_all_entries(
    target: Context,
    contexts: Sequence[Context],
    notes: HandleTable[EntryState],
) -> int:
    entries = target.ops.enumerate_entries()
    if not entries:
        return 0
    done = 0
    for entry in list(entries):
        try:
            if process_one_entry(entry, target, contexts, notes):
                done += 1
        except Exception as e:
            log.error(f"{target.name}: entry {entry!r:.120} failed, retried next pass: {e}")
    if done:
        log.debug(f"{target.name}: {done} new entries processed")
    return done
