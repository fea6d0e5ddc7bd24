# el_platform/engine/facade.py
# entry list engine facade: registration, passes, toggles and list helpers.
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from collections.abc import Mapping
from typing import Any, Callable

from _logging import log as BASE_LOG

from ..config_base import load_config, storage_path
from ._context import Context
from ._kv import JsonFileBackend
from ._membership import qualified_name
from ._notes import HandleTable
from ._reconcile import process_all_entries
from ._scheduler import PassHandle
from ._store import ListStore
from ._toggle import find_entry, toggle_entry
from ._types import (
    DEFAULT_LIST,
    DEFAULT_TYPE,
    NO_USER,
    ClickEvent,
    EngineError,
    EntryState,
    Role,
    ToggleBinding,
)

__all__ = ["Engine"]

log = BASE_LOG.child("ENGINE")


@dataclass
class Engine:
    """
    One engine per page session. Register the target, then the sources, then
    start(). All passes and toggles run under one lock, so adapters never see
    concurrent callbacks.
    """

    config: Mapping[str, Any] | None = None
    store: ListStore | None = None

    target: Context | None = field(init=False, default=None)
    contexts: list[Context] = field(init=False, default_factory=list)
    registered: dict[str, Context] = field(init=False, default_factory=dict)
    is_entry_page: bool = field(init=False, default=False)
    failed_init: bool = field(init=False, default=False)
    handle: PassHandle | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        self.cfg: dict[str, Any] = dict(self.config if self.config is not None else load_config())
        eng = dict(self.cfg.get("engine") or {})
        self.default_interval_ms = int(eng.get("default_interval_ms", 1000))
        self.min_interval_ms = int(eng.get("min_interval_ms", 100))

        self._executor: ThreadPoolExecutor | None = None
        store = self.store
        if store is None:
            st = dict(self.cfg.get("storage") or {})
            if st.get("async_writes"):
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="EntryListStore")
            store = ListStore(JsonFileBackend(storage_path(self.cfg)), executor=self._executor)
        self.store = store
        self._store: ListStore = store

        self.notes: HandleTable[EntryState] = HandleTable(EntryState)
        self.bindings: HandleTable[ToggleBinding] = HandleTable()
        self.actions: HandleTable[Callable[[], Any]] = HandleTable()
        self._lock = threading.RLock()

    # ── registration ───────────────────────────────────────────────────────
    def _reset(self) -> None:
        if self.handle:
            self.handle.cancel()
            self.handle = None
        self.target = None
        self.contexts = []
        self.registered = {}
        self.is_entry_page = False
        self.failed_init = True

    def _page_setup(self, ctx: Context) -> None:
        try:
            ctx.run_page_setup(self.is_entry_page)
        except Exception as e:
            log.error(f"{ctx.name}: page setup failed: {e}")

    def register_target(self, ops: Any) -> bool:
        """Validate and set up the target. Any failure aborts the whole run."""
        with self._lock:
            self._reset()
            try:
                ctx = Context(ops, Role.TARGET)
                is_entry = ctx.capability("is_entry_page")
                self.is_entry_page = bool(is_entry()) if is_entry else True
                ctx.compute_page_type()

                if self.is_entry_page or ctx.page_type:
                    ctx.resolve_logged_user(self._store)
                if self.is_entry_page:
                    ctx.load_lists(self._store)
            except EngineError as e:
                log.error(f"{e}, aborting")
                self.is_entry_page = False
                return False

            self.target = ctx
            self.contexts = [ctx]
            self.registered[ctx.name] = ctx
            self.failed_init = False
            self._page_setup(ctx)
            log.info(f"target '{ctx.name}' registered (user={ctx.user}, entry_page={self.is_entry_page})")
            return True

    def register_source(self, ops: Any) -> bool:
        """Add a source. Failures only drop this source."""
        with self._lock:
            if self.target is None:
                log.error("target context is not registered, aborting register_source")
                return False
            ctx: Context | None = None
            try:
                ctx = Context(ops, Role.SOURCE)
                if ctx.name in self.registered:
                    raise EngineError(f"context '{ctx.name}' is already registered")
                ctx.compute_page_type()
                if ctx.page_type:
                    ctx.resolve_logged_user(self._store)
                    self.registered[ctx.name] = ctx
                    self._page_setup(ctx)

                if not self.is_entry_page:
                    return True

                # TODO: on a page that is both an entry page and a special page
                # of the source, decide whether the logged user should win over
                # the mapped one.
                ctx.resolve_remote_user(self.target, self._store)
                ctx.load_lists(self._store)
            except EngineError as e:
                log.error(f"{e}, source skipped")
                if ctx is not None and self.registered.get(ctx.name) is ctx:
                    del self.registered[ctx.name]
                return False

            self.registered[ctx.name] = ctx
            self.contexts.append(ctx)
            log.info(f"source '{ctx.name}' registered (user={ctx.user}, lists={len(ctx.lists)})")
            return True

    def context(self, name: str) -> Context | None:
        return self.registered.get(name)

    def _ctx(self, ctx: Context | str | None) -> Context:
        if isinstance(ctx, Context):
            return ctx
        found = self.target if ctx is None else self.context(ctx)
        if found is None:
            raise EngineError(f"unknown context {ctx!r}")
        return found

    # ── passes ─────────────────────────────────────────────────────────────
    def process_all_entries(self) -> int:
        with self._lock:
            if self.target is None or not self.is_entry_page:
                return 0
            return process_all_entries(self.target, self.contexts, self.notes)

    def _interval(self, target: Context) -> int | None:
        declared = target.interval
        if declared is None:
            return self.default_interval_ms
        if declared < self.min_interval_ms:
            return None
        return int(declared)

    def start(self, ops: Any = None) -> PassHandle | None:
        """
        One immediate pass, then re-scans on a timer. Passing the target here
        registers it first (single-site scripts). Returns the cancellation
        handle, or None when there is nothing to scan.
        """
        if ops is not None:
            if self.target is not None:
                log.warn("start called after register_target, ignoring context argument")
            elif not self.register_target(ops):
                return None
        if self.failed_init or self.target is None or not self.is_entry_page:
            return None

        if self.handle:
            self.handle.cancel()
        self.process_all_entries()
        self.handle = PassHandle(self.process_all_entries, self._interval(self.target)).start()
        return self.handle

    def stop(self) -> None:
        if self.handle:
            self.handle.cancel()
            self.handle = None
        if self._executor:
            self._executor.shutdown(wait=True)
            if self._store.executor is self._executor:
                self._store.executor = None
            self._executor = None

    # ── toggles ────────────────────────────────────────────────────────────
    def add_toggle_event_on_click(
        self,
        control: Any,
        how_to_find_entry: int | str,
        toggle_list: str | None = None,
        toggle_type: Any = None,
    ) -> ToggleBinding:
        if toggle_type is not None and not toggle_type:
            raise ValueError("toggle_type cannot be a falsy value")
        if self.target is not None and not self.target.capability("reverse_effect"):
            log.warn(f"{self.target.name}: toggle added but the target has no reverse_effect")
        binding = ToggleBinding(
            how_to_find_entry=how_to_find_entry,
            toggle_list=DEFAULT_LIST if toggle_list is None else toggle_list,
            toggle_type=DEFAULT_TYPE if toggle_type is None else toggle_type,
        )
        self.bindings.set(control, binding)
        listen = getattr(control, "add_event_listener", None)
        if callable(listen):
            listen("click", self.handle_toggle_event)
        return binding

    def handle_toggle_event(self, event: ClickEvent) -> Any:
        event.stop_propagation()
        event.prevent_default()
        control = event.current_target if event.current_target is not None else event.target
        binding = self.bindings.get(control)
        if binding is None:
            log.warn("click on a control without toggle binding, ignored")
            return None
        entry = find_entry(control, binding.how_to_find_entry)
        return self.toggle_entry(entry, binding.toggle_list, binding.toggle_type)

    def click(self, control: Any) -> Any:
        event = ClickEvent(target=control, current_target=control)
        if self.actions.get(control) is not None:
            return self.handle_action_event(event)
        return self.handle_toggle_event(event)

    # ── page buttons ───────────────────────────────────────────────────────
    def add_action_on_click(self, control: Any, action: Callable[[], Any]) -> None:
        """Bind a page-level button (refresh, clear) to an adapter action."""
        self.actions.set(control, action)
        listen = getattr(control, "add_event_listener", None)
        if callable(listen):
            listen("click", self.handle_action_event)

    def handle_action_event(self, event: ClickEvent) -> Any:
        event.stop_propagation()
        event.prevent_default()
        control = event.current_target if event.current_target is not None else event.target
        action = self.actions.get(control)
        if action is None:
            log.warn("click on a control without action, ignored")
            return None
        try:
            return action()
        except Exception as e:
            log.error(f"page action failed: {e}")
            return None

    def toggle_entry(self, entry: Any, toggle_list: str = DEFAULT_LIST, toggle_type: Any = DEFAULT_TYPE) -> Any:
        with self._lock:
            if self.target is None:
                log.error("toggle before a target was registered, ignored")
                return None
            return toggle_entry(entry, self.target, self._store, self.notes, toggle_list, toggle_type)

    # ── entry helpers ──────────────────────────────────────────────────────
    def mark_invalid(self, entry: Any) -> bool:
        """Skip entry on every later pass. Returns False: `return ok or engine.mark_invalid(e)`."""
        self.notes.setdefault(entry).invalid = True
        return False

    def entry_state(self, entry: Any) -> EntryState | None:
        return self.notes.get(entry)

    def ln(self, list_name: str, ctx: Context | str | None = None) -> str:
        """List name as seen by decide()."""
        if isinstance(ctx, Context):
            name = ctx.name
        elif isinstance(ctx, str):
            name = ctx
        else:
            name = self.target.name if self.target else ""
        return qualified_name(name, list_name)

    # ── list helpers ───────────────────────────────────────────────────────
    def save_list(self, entries: Mapping[str, str], list_name: str, ctx: Context | str | None = None) -> Future:
        c = self._ctx(ctx)
        with self._lock:
            c.lists[list_name] = dict(entries)
        return self._store.save(c.name, c.user or NO_USER, list_name, entries)

    def delete_list(self, list_name: str, ctx: Context | str | None = None) -> Future:
        c = self._ctx(ctx)
        with self._lock:
            c.lists.pop(list_name, None)
        return self._store.delete_one(c.name, c.user or NO_USER, list_name)

    def delete_all_lists(self, ctx: Context | str | None = None) -> Future:
        c = self._ctx(ctx)
        with self._lock:
            c.lists.clear()
        return self._store.delete_all(c.name, c.user or NO_USER)
