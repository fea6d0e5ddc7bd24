# EntryList test scripts
from __future__ import annotations

from conftest import FakeSource, FakeTarget
from el_platform.engine import Context, Identity, Role, aggregate, new_context, qualified_name


def _ctx(name: str, lists: dict[str, dict[str, str]], **caps) -> Context:
    ops = new_context(name)
    for k, v in caps.items():
        setattr(ops, k, v)
    ctx = Context(ops, Role.SOURCE)
    ctx.lists = lists
    return ctx


def test_qualified_name() -> None:
    assert qualified_name("IMDb", "Your Watchlist") == "IMDb|Your Watchlist"


def test_aggregate_collects_every_matching_list() -> None:
    tt = Identity("70136140", "Movie")
    netflix = _ctx("Netflix", {"localHide": {"70136140": "Movie"}, "nfMyList": {}})
    imdb = _ctx("IMDb", {"Your Watchlist": {"70136140": "Movie"}, "tbd": {"1": "x"}})

    assert aggregate([netflix, imdb], tt) == {"Netflix|localHide", "IMDb|Your Watchlist"}
    assert aggregate([], tt) == set()


def test_aggregate_uses_context_membership_test() -> None:
    by_name = _ctx(
        "IMDb",
        {"Visti": {"Movie": "Movie"}, "no": {"70136140": ""}},
        test_membership=lambda tt, entries: bool(entries.get(tt.name)),
    )
    assert aggregate([by_name], Identity("70136140", "Movie")) == {"IMDb|Visti"}


def test_aggregate_reflects_in_memory_state() -> None:
    tt = Identity("1", "A")
    ctx = _ctx("S", {"a": {}})
    assert aggregate([ctx], tt) == set()
    ctx.lists["a"]["1"] = "A"
    assert aggregate([ctx], tt) == {"S|a"}


def test_engine_ln_defaults_to_target(engine, store) -> None:
    store.remember_user("IMDb", "bob")
    engine.register_target(FakeTarget())
    engine.register_source(FakeSource())
    assert engine.ln("localHide") == "Site|localHide"
    assert engine.ln("Your Watchlist", "IMDb") == "IMDb|Your Watchlist"
    assert engine.ln("tbd", engine.context("IMDb")) == "IMDb|tbd"
