# EntryList test scripts
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from el_platform.config_base import DEFAULT_CFG  # noqa: E402
from el_platform.engine import Engine, Identity, ListStore, MemoryBackend  # noqa: E402


@pytest.fixture(autouse=True)
def _quiet_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EL_LOG_LEVEL", "off")


@pytest.fixture()
def config_base(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("CONFIG_BASE", str(tmp_path))
    return tmp_path


class Card:
    """Stand-in for a DOM entry."""

    def __init__(self, ident: str | None, title: str | None = None, *, valid: bool = True) -> None:
        self.ident = ident
        self.title = title or ident or ""
        self.valid = valid
        self.parent: Any = None
        self.mutations = 0


class FakeTarget:
    name = "Site"

    def __init__(self, cards: list[Card] | None = None, *, user: Any = "alice", interval: Any = None) -> None:
        self.cards = list(cards or [])
        self.user = user
        self.interval = interval
        self.applied: list[tuple[str | None, Any]] = []
        self.reversed: list[tuple[str | None, Any]] = []

    def get_user(self) -> Any:
        return self.user

    def enumerate_entries(self) -> list[Card]:
        return self.cards

    def is_valid_entry(self, entry: Card) -> bool:
        return entry.valid

    def extract_identity(self, entry: Card) -> Identity | None:
        return Identity(entry.ident, entry.title) if entry.ident else None

    def mutate_entry(self, entry: Card) -> None:
        entry.mutations += 1

    def apply_effect(self, entry: Card, tt: Identity | None, decision: Any) -> None:
        self.applied.append((tt.id if tt else None, decision))

    def reverse_effect(self, entry: Card, tt: Identity | None, decision: Any) -> None:
        self.reversed.append((tt.id if tt else None, decision))


class FakeSource:
    def __init__(self, name: str = "IMDb", *, user: Any = None, mapped: Any = None) -> None:
        self.name = name
        if user is not None:
            self.get_user = lambda: user
        if mapped is not None:
            self.map_user_from_target = lambda target_name, target_user: mapped


class CountingBackend(MemoryBackend):
    def __init__(self) -> None:
        super().__init__()
        self.writes: list[str] = []

    def set(self, key: str, value: str) -> None:
        self.writes.append(key)
        super().set(key, value)


@pytest.fixture()
def backend() -> CountingBackend:
    return CountingBackend()


@pytest.fixture()
def store(backend: CountingBackend) -> ListStore:
    return ListStore(backend)


@pytest.fixture()
def engine(store: ListStore):
    eng = Engine(config=DEFAULT_CFG, store=store)
    yield eng
    eng.stop()
