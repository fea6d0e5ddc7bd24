# Public surface of the entry list engine package.
from ._context import Context, new_context
from ._kv import JsonFileBackend, MemoryBackend
from ._membership import aggregate, qualified_name
from ._scheduler import PassHandle
from ._store import ListStore
from ._types import (
    DEFAULT_LIST,
    DEFAULT_TYPE,
    NEGATED,
    NO_USER,
    SEP,
    ClickEvent,
    ContextError,
    EngineError,
    EntryState,
    Identity,
    Role,
    UserResolutionError,
)
from .facade import Engine

__all__ = [
    "Engine",
    "Context",
    "new_context",
    "ListStore",
    "MemoryBackend",
    "JsonFileBackend",
    "PassHandle",
    "Identity",
    "Role",
    "ClickEvent",
    "EntryState",
    "EngineError",
    "ContextError",
    "UserResolutionError",
    "aggregate",
    "qualified_name",
    "SEP",
    "NO_USER",
    "NEGATED",
    "DEFAULT_LIST",
    "DEFAULT_TYPE",
]
