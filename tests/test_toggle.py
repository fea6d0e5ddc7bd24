# EntryList test scripts
from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from conftest import Card, FakeTarget
from el_platform.engine import DEFAULT_LIST, DEFAULT_TYPE, ClickEvent, Identity
from el_platform.engine._store import list_key
from el_platform.engine._toggle import find_entry


def test_toggle_in_and_out_of_local_hide(engine, store, backend) -> None:
    card = Card("70136140", "Movie")
    target = FakeTarget([card])
    engine.register_target(target)
    engine.process_all_entries()
    before = dict(engine.target.lists)
    backend.writes.clear()

    assert engine.toggle_entry(card, "localHide", "H") == "H"
    assert engine.target.lists["localHide"] == {"70136140": "Movie"}
    assert store.load("Site", "alice")["localHide"] == {"70136140": "Movie"}

    assert engine.toggle_entry(card, "localHide", "H") == "-H"
    assert engine.target.lists["localHide"] == {}
    assert store.load("Site", "alice")["localHide"] == {}

    assert target.applied == [("70136140", "H")]
    assert target.reversed == [("70136140", "H")]
    assert backend.writes.count(list_key("Site", "alice", "localHide")) == 2
    assert {k: v for k, v in engine.target.lists.items() if v} == before


def test_toggle_defaults(engine) -> None:
    card = Card("1")
    target = FakeTarget([card])
    engine.register_target(target)
    assert engine.toggle_entry(card) == DEFAULT_TYPE
    assert DEFAULT_LIST in engine.target.lists
    assert engine.entry_state(card).processing_type == DEFAULT_TYPE


def test_toggle_without_identity_changes_nothing(engine, backend) -> None:
    card = Card(None)
    target = FakeTarget([card])
    engine.register_target(target)
    backend.writes.clear()

    assert engine.toggle_entry(card, "localHide", "H") is None
    assert engine.toggle_entry(None, "localHide", "H") is None
    assert target.applied == []
    assert "localHide" not in engine.target.lists
    assert backend.writes == []


def test_toggled_list_is_seen_by_later_passes(engine) -> None:
    a = Card("1")
    target = FakeTarget([a])
    engine.register_target(target)
    engine.process_all_entries()
    engine.toggle_entry(a, "localHide", "H")

    target.cards.append(Card("1"))
    engine.process_all_entries()
    assert target.applied == [("1", "H"), ("1", True)]
    # the toggled entry itself is not reconciled again
    assert engine.entry_state(a).processing_type == "H"
    assert a.mutations == 1


def test_falsy_toggle_type_rejected(engine) -> None:
    engine.register_target(FakeTarget())
    with pytest.raises(ValueError):
        engine.add_toggle_event_on_click(object(), 1, "localHide", "")


HTML = """
<div class="row">
  <div class="title-card" id="e1">
    <a href="/watch/70136140">x</a>
    <div class="wrap"><a class="btn" id="b1">H</a></div>
    <span class="inner"><a class="btn" id="b2">H</a></span>
  </div>
</div>
"""


def test_find_entry_by_levels_and_selector() -> None:
    doc = BeautifulSoup(HTML, "html.parser")
    b1 = doc.select_one("#b1")
    b2 = doc.select_one("#b2")
    entry = doc.select_one("#e1")

    assert find_entry(b1, 2) is entry
    assert find_entry(b1, "2") is entry
    assert find_entry(b2, ".title-card") is entry
    assert find_entry(entry, ".title-card") is entry
    assert find_entry(b1, 0) is b1


class DomTarget(FakeTarget):
    def extract_identity(self, entry):
        a = entry.select_one("a[href]")
        return Identity(a["href"].rsplit("/", 1)[-1], entry["id"]) if a else None


def test_click_on_bound_control(engine) -> None:
    doc = BeautifulSoup(HTML, "html.parser")
    target = DomTarget()
    engine.register_target(target)
    b1 = doc.select_one("#b1")
    engine.add_toggle_event_on_click(b1, 2, "localHide", "H")

    assert engine.click(b1) == "H"
    assert engine.target.lists["localHide"] == {"70136140": "e1"}

    event = ClickEvent(target=b1, current_target=b1)
    assert engine.handle_toggle_event(event) == "-H"
    assert event.propagation_stopped and event.default_prevented
    assert target.applied == [("70136140", "H")]
    assert target.reversed == [("70136140", "H")]


def test_click_on_unbound_control_is_ignored(engine) -> None:
    engine.register_target(DomTarget())
    assert engine.click(object()) is None


def test_control_with_listener_gets_handler(engine) -> None:
    engine.register_target(FakeTarget())

    class Control:
        def __init__(self):
            self.listeners = {}

        def add_event_listener(self, event, handler):
            self.listeners[event] = handler

    ctl = Control()
    binding = engine.add_toggle_event_on_click(ctl, ".title-card")
    assert ctl.listeners["click"] == engine.handle_toggle_event
    assert binding.toggle_list == DEFAULT_LIST
    assert binding.toggle_type == DEFAULT_TYPE


def test_page_action_buttons(engine) -> None:
    engine.register_target(FakeTarget())
    doc = BeautifulSoup("<div><button id='ok'></button><button id='boom'></button></div>", "html.parser")
    ok, boom = doc.select_one("#ok"), doc.select_one("#boom")
    calls = []

    def fail():
        raise RuntimeError("network down")

    engine.add_action_on_click(ok, lambda: calls.append("ok") or "done")
    engine.add_action_on_click(boom, fail)

    assert engine.click(ok) == "done"
    assert calls == ["ok"]
    assert engine.click(boom) is None

    event = ClickEvent(target=ok, current_target=ok)
    engine.handle_action_event(event)
    assert event.propagation_stopped and event.default_prevented
    assert calls == ["ok", "ok"]
