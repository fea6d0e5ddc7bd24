# el_platform/engine/_types.py
# types, protocols and errors for the entry list engine.
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Callable, Protocol

# Qualified list names are "<context>|<list>"
SEP = "|"
# Sentinel user for sites without a user concept
NO_USER = "_"
# List and processing type used when a toggle control does not name one
DEFAULT_LIST = "_DEF_"
DEFAULT_TYPE = "_DEF_"
# Prefix of the decision recorded after a toggle removed an entry
NEGATED = "-"


class Role(Enum):
    TARGET = "target"
    SOURCE = "source"


@dataclass(frozen=True)
class Identity:
    id: str
    name: str

    @classmethod
    def coerce(cls, raw: Any) -> "Identity | None":
        if raw is None:
            return None
        if isinstance(raw, Identity):
            return raw if raw.id else None
        if isinstance(raw, Mapping):
            ident, name = raw.get("id"), raw.get("name")
        else:
            ident, name = getattr(raw, "id", None), getattr(raw, "name", None)
        if ident is None or str(ident) == "":
            return None
        return cls(str(ident), str(name) if name is not None else str(ident))


@dataclass
class EntryState:
    processed: bool = False
    invalid: bool = False
    mutated: bool = False
    processing_type: Any = None


@dataclass
class ToggleBinding:
    how_to_find_entry: int | str
    toggle_list: str = DEFAULT_LIST
    toggle_type: Any = DEFAULT_TYPE


@dataclass
class ClickEvent:
    target: Any
    current_target: Any = None
    propagation_stopped: bool = False
    default_prevented: bool = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    def prevent_default(self) -> None:
        self.default_prevented = True


@dataclass
class UserInfo:
    name: str | None
    payload: Any = None

    @classmethod
    def coerce(cls, raw: Any) -> "UserInfo":
        if raw is None or raw == "":
            return cls(None)
        if isinstance(raw, str):
            return cls(raw)
        if isinstance(raw, Mapping):
            return cls(raw.get("name") or None, raw.get("payload"))
        return cls(getattr(raw, "name", None) or None, getattr(raw, "payload", None))


# Errors

class EngineError(RuntimeError): ...
class ContextError(EngineError): ...
class UserResolutionError(EngineError): ...


# Capability contracts. Only `name` and the methods listed in
# TARGET_REQUIRED / SOURCE_REQUIRED are mandatory; the rest are optional and
# checked for callability at registration.

class TargetOps(Protocol):
    name: str

    def enumerate_entries(self) -> Iterable[Any] | None: ...

    def apply_effect(self, entry: Any, tt: Identity | None, decision: Any) -> None: ...


class SourceOps(Protocol):
    name: str


TARGET_REQUIRED: tuple[str, ...] = ("enumerate_entries", "apply_effect")
TARGET_OPTIONAL: tuple[str, ...] = (
    "is_entry_page",
    "get_page_type",
    "is_valid_entry",
    "on_page_setup",
    "extract_identity",
    "mutate_entry",
    "reverse_effect",
    "decide",
    "test_membership",
    "get_user",
)
SOURCE_REQUIRED: tuple[str, ...] = ()
SOURCE_OPTIONAL: tuple[str, ...] = (
    "get_user",
    "map_user_from_target",
    "get_page_type",
    "on_page_setup",
    "test_membership",
)

MembershipTest = Callable[[Identity, Mapping[str, str]], bool]
