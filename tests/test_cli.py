# EntryList test scripts
from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

import entrylist
from el_platform.config_base import storage_path
from el_platform.engine import JsonFileBackend, ListStore

PAGE = """
<html><body>
<div class="account-menu-item"><div class="account-dropdown-button">
  <a aria-label="Alice - Account &amp; Settings">Alice</a>
</div></div>
<div class="mainView"><div class="lolomoRow" data-list-context="genre">
  <div class="slider-item" id="s1"><div class="title-card"><a href="/watch/1">x</a><p class="fallback-text">One</p></div></div>
  <div class="slider-item" id="s2"><div class="title-card"><a href="/watch/2">x</a><p class="fallback-text">Two</p></div></div>
</div></div>
</body></html>
"""


def test_annotate_netflix_snapshot(config_base, tmp_path) -> None:
    store = ListStore(JsonFileBackend(storage_path()))
    store.save("Netflix", "Alice", "localHide", {"2": "Two"})

    src = tmp_path / "in.html"
    dst = tmp_path / "out.html"
    src.write_text(PAGE, "utf-8")

    rc = entrylist.main(["annotate", "--site", "netflix", "--url", "https://www.netflix.com/browse", str(src), str(dst)])
    assert rc == 0

    out = dst.read_text("utf-8")
    assert out.count("entrylist-nf-hide-button") == 2
    assert out.count("NHT-triangle") == 1
    assert 'title="Hidden"' in out


def test_unknown_site_exits(config_base, tmp_path) -> None:
    src = tmp_path / "in.html"
    src.write_text("<html></html>", "utf-8")
    with pytest.raises(SystemExit, match="unknown target site"):
        entrylist.main(["annotate", "--site", "nope", str(src), str(tmp_path / "out.html")])


def test_create_app_mounts_lists_api(config_base) -> None:
    store = ListStore(JsonFileBackend(storage_path()))
    store.remember_user("Netflix", "Alice")
    store.save("Netflix", "Alice", "localHide", {"2": "Two"})

    client = TestClient(entrylist.create_app())
    r = client.get("/api/lists/Netflix")
    assert r.status_code == 200
    assert r.json()["lists"] == {"localHide": 1}
    assert client.get("/api/lists/Netflix/localHide").json()["entries"] == {"2": "Two"}


def test_config_file_overrides_defaults(config_base) -> None:
    from el_platform.config_base import load_config

    (config_base / "config.json").write_text(json.dumps({"engine": {"min_interval_ms": "250"}, "storage": {"file": "x.json"}}), "utf-8")
    cfg = load_config()
    assert cfg["engine"]["min_interval_ms"] == 250
    assert cfg["engine"]["default_interval_ms"] == 1000
    assert storage_path(cfg) == config_base / "x.json"
