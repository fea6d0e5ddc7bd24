# el_platform/engine/_context.py
# site contexts: capability validation and user resolution.
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from dataclasses import dataclass, field
from collections.abc import Mapping
from types import SimpleNamespace
from typing import Any

from _logging import log as BASE_LOG

from ._store import ListStore
from ._types import (
    NO_USER,
    SOURCE_OPTIONAL,
    SOURCE_REQUIRED,
    TARGET_OPTIONAL,
    TARGET_REQUIRED,
    ContextError,
    Identity,
    MembershipTest,
    Role,
    UserInfo,
    UserResolutionError,
)

log = BASE_LOG.child("CONTEXT")


def new_context(name: str) -> SimpleNamespace:
    """Empty capability bag for script-style adapters."""
    return SimpleNamespace(name=name)


def in_list_default(tt: Identity, entries: Mapping[str, str]) -> bool:
    return tt.id in entries


def _capability(ops: Any, attr: str) -> Any:
    return getattr(ops, attr, None)


def validate(ops: Any, role: Role) -> None:
    required = TARGET_REQUIRED if role is Role.TARGET else SOURCE_REQUIRED
    optional = TARGET_OPTIONAL if role is Role.TARGET else SOURCE_OPTIONAL
    problems: list[str] = []

    name = _capability(ops, "name")
    if not isinstance(name, str) or not name:
        problems.append("'name' must be a non-empty string")
    for attr in required:
        if not callable(_capability(ops, attr)):
            problems.append(f"'{attr}' is mandatory and must be callable")
    for attr in optional:
        val = _capability(ops, attr)
        if val is not None and not callable(val):
            problems.append(f"'{attr}' must be callable")
    if role is Role.TARGET:
        interval = _capability(ops, "interval")
        if interval is not None and (isinstance(interval, bool) or not isinstance(interval, (int, float))):
            problems.append("'interval' must be a number")

    if problems:
        raise ContextError(f"invalid {role.value} context {name!r}: " + "; ".join(problems))


@dataclass
class Context:
    ops: Any
    role: Role
    name: str = ""
    user: str | None = None
    user_payload: Any = None
    page_type: Any = None
    lists: dict[str, dict[str, str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate(self.ops, self.role)
        self.name = self.ops.name

    def capability(self, attr: str) -> Any:
        return _capability(self.ops, attr)

    @property
    def interval(self) -> Any:
        return self.capability("interval")

    def test_membership(self, tt: Identity, entries: Mapping[str, str]) -> bool:
        fn: MembershipTest | None = self.capability("test_membership")
        return bool((fn or in_list_default)(tt, entries))

    def compute_page_type(self) -> Any:
        fn = self.capability("get_page_type")
        self.page_type = fn() if fn else None
        return self.page_type

    def run_page_setup(self, is_entry_page: bool) -> None:
        fn = self.capability("on_page_setup")
        if self.page_type and fn:
            fn(self.page_type, is_entry_page)

    # ── users ──────────────────────────────────────────────────────────────
    def resolve_logged_user(self, store: ListStore) -> str:
        """
        User currently logged on the site, remembered for later runs. Falls
        back to the last remembered user when the page does not tell.
        """
        get_user = self.capability("get_user")
        if not get_user:
            self.user, self.user_payload = NO_USER, None
            return self.user

        info = UserInfo.coerce(get_user())
        if info.name:
            store.remember_user(self.name, info.name, info.payload)
            self.user, self.user_payload = info.name, info.payload
        else:
            log.warn(f"{self.name}: user not logged in (or couldn't get user info)")
            self.user, self.user_payload = store.recall_user(self.name)
            log.info(f"{self.name}: using last user: {self.user}")
        if not self.user:
            raise UserResolutionError(f"{self.name}: no user is defined")
        return self.user

    def resolve_remote_user(self, target: "Context", store: ListStore) -> str:
        """
        User of this source matching the target's user. Without a mapping the
        last remembered user is taken whatever the target user is.
        """
        mapper = self.capability("map_user_from_target")
        if mapper:
            info = UserInfo.coerce(mapper(target.name, target.user))
            self.user, self.user_payload = info.name, info.payload
            if not self.user:
                raise UserResolutionError(
                    f"{self.name}: cannot find user corresponding to '{target.user}' on {target.name}"
                )
        else:
            self.user, self.user_payload = store.recall_user(self.name)
            if not self.user:
                raise UserResolutionError(f"{self.name}: no remote user is defined")
        return self.user

    def load_lists(self, store: ListStore) -> dict[str, dict[str, str]]:
        self.lists = store.load(self.name, self.user or NO_USER)
        return self.lists
