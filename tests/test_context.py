# EntryList test scripts
from __future__ import annotations

from types import SimpleNamespace

import pytest

from conftest import FakeSource, FakeTarget
from el_platform.engine import NO_USER, Context, ContextError, Role, new_context


def test_target_requires_mandatory_capabilities() -> None:
    with pytest.raises(ContextError, match="enumerate_entries"):
        Context(SimpleNamespace(name="X", apply_effect=lambda *a: None), Role.TARGET)
    with pytest.raises(ContextError, match="name"):
        Context(SimpleNamespace(enumerate_entries=list, apply_effect=lambda *a: None), Role.TARGET)


def test_optional_capabilities_must_be_callable() -> None:
    ops = SimpleNamespace(name="X", enumerate_entries=list, apply_effect=lambda *a: None, decide="W")
    with pytest.raises(ContextError, match="decide"):
        Context(ops, Role.TARGET)

    ops = SimpleNamespace(name="X", enumerate_entries=list, apply_effect=lambda *a: None, interval="fast")
    with pytest.raises(ContextError, match="interval"):
        Context(ops, Role.TARGET)


def test_source_only_needs_a_name() -> None:
    ctx = Context(new_context("IMDb"), Role.SOURCE)
    assert ctx.name == "IMDb"
    with pytest.raises(ContextError):
        Context(new_context(""), Role.SOURCE)


def test_invalid_target_aborts_registration(engine) -> None:
    assert engine.register_target(SimpleNamespace(name="X")) is False
    assert engine.failed_init is True
    assert engine.target is None
    assert engine.start() is None


def test_target_user_is_remembered(engine, store) -> None:
    target = FakeTarget(user={"name": "alice", "payload": {"profile": 2}})
    assert engine.register_target(target)
    assert engine.target.user == "alice"
    assert engine.target.user_payload == {"profile": 2}
    assert store.recall_user("Site") == ("alice", {"profile": 2})


def test_target_falls_back_to_last_user(engine, store) -> None:
    store.remember_user("Site", "bob")
    assert engine.register_target(FakeTarget(user=None))
    assert engine.target.user == "bob"


def test_target_without_any_user_fails_closed(engine) -> None:
    assert engine.register_target(FakeTarget(user=None)) is False
    assert engine.target is None
    assert engine.is_entry_page is False


def test_target_without_user_concept_uses_sentinel(engine, store) -> None:
    target = new_context("YouTube")
    target.enumerate_entries = list
    target.apply_effect = lambda *a: None
    assert engine.register_target(target)
    assert engine.target.user == NO_USER

    engine.save_list({"v1": "Video"}, "seen")
    assert store.load("YouTube", NO_USER) == {"seen": {"v1": "Video"}}


def test_target_lists_loaded_at_registration(engine, store) -> None:
    store.save("Site", "alice", "localHide", {"1": "A"})
    engine.register_target(FakeTarget())
    assert engine.target.lists == {"localHide": {"1": "A"}}


def test_source_uses_mapped_user(engine, store) -> None:
    store.save("IMDb", "imdb-alice", "Your Watchlist", {"Movie": "Movie"})
    engine.register_target(FakeTarget())
    assert engine.register_source(FakeSource(mapped="imdb-alice"))
    src = engine.context("IMDb")
    assert src.user == "imdb-alice"
    assert src.lists == {"Your Watchlist": {"Movie": "Movie"}}
    assert [c.name for c in engine.contexts] == ["Site", "IMDb"]


def test_source_without_mapper_uses_last_user(engine, store) -> None:
    store.remember_user("IMDb", "bob", "ur1")
    engine.register_target(FakeTarget())
    assert engine.register_source(FakeSource())
    assert engine.context("IMDb").user == "bob"
    assert engine.context("IMDb").user_payload == "ur1"


def test_source_requires_target(engine) -> None:
    assert engine.register_source(FakeSource()) is False


def test_duplicate_source_name_rejected(engine, store) -> None:
    store.remember_user("IMDb", "bob")
    engine.register_target(FakeTarget())
    assert engine.register_source(FakeSource())
    assert engine.register_source(FakeSource()) is False
    assert len(engine.contexts) == 2


def test_source_page_setup_runs_on_special_page(engine) -> None:
    calls = []
    src = FakeSource(user="bob")
    src.get_page_type = lambda: 1
    src.on_page_setup = lambda page_type, is_entry: calls.append((page_type, is_entry))

    target = FakeTarget()
    target.is_entry_page = lambda: False
    engine.register_target(target)

    assert engine.register_source(src)
    assert calls == [(1, False)]
    assert engine.context("IMDb").user == "bob"
    # not an entry page: no lists, not part of reconciliation
    assert [c.name for c in engine.contexts] == ["Site"]
