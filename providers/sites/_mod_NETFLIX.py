# /providers/sites/_mod_NETFLIX.py
# EntryList NETFLIX module
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import re
from typing import Any, Mapping

from bs4.element import Tag

from _logging import log as BASE_LOG
from el_platform.engine import Engine, Identity

from ._page import Page, closest, get_style, new_tag, set_style

__VERSION__ = "1.7.0"
__all__ = ["NetflixSite", "ADAPTER", "HIDE_TYPES", "is_hidden"]

log = BASE_LOG.child("NETFLIX")

# Lists on the Netflix side
LIST_HIDE = "localHide"
LIST_NF_MY = "nfMyList"
# Lists on the IMDb side
LIST_NO = "no"
LIST_SEEN = "Visti"
LIST_TBD = "tbd"
LIST_WATCH = "Your Watchlist"

NF_LIST_PAGE = 2
MY_LIST_URL = "https://www.netflix.com/browse/my-list"

HIDE_BUTTON_STYLE_NAME = "entrylist-nf-hide-button"
TRIANGLE_STYLE_NAME = "entrylist-netflix-triangle"
TRIANGLE_CLASS = "NHT-triangle"

HIDE_TYPES: dict[str, dict[str, Any]] = {
    "H": {"name": "Hidden", "colour": "white"},
    "D": {"name": "Disliked", "colour": "black"},
    "W": {"name": "Watchlist", "colour": "darkgoldenrod", "visible": True},
    "T": {"name": "TBD", "colour": "Maroon", "visible": True},
    "S": {"name": "Watched", "colour": "seagreen"},
    "N": {"name": "NO", "colour": "darkgrey"},
    "M": {"name": "My list", "colour": "yellow"},
    "MISSING": {"name": "Hide type not known", "colour": "red"},
}

_USER_RX = re.compile(r"^(.+) - Account & Settings$")
_IMDB_RX = re.compile(r"www\.imdb\.com/")


class NetflixSite:
    """Netflix browse pages as target; IMDb lists and local lists decide what to hide."""

    name = "Netflix"
    role = "target"
    sources = ("IMDB",)

    def __init__(
        self,
        engine: Engine,
        page: Page,
        cfg: Mapping[str, Any] | None = None,
        *,
        imdb_name: str = "IMDb",
    ) -> None:
        self.engine = engine
        self.page = page
        self.imdb_name = imdb_name
        nf = dict((cfg or engine.cfg).get("netflix") or {})
        self.refresh_on_page = bool(nf.get("refresh_my_list_on_page", True))

    # ── context ────────────────────────────────────────────────────────────
    def get_user(self) -> str | None:
        a = self.page.select_one("div.account-menu-item div.account-dropdown-button > a")
        label = a.get("aria-label") if a is not None else None
        m = _USER_RX.match(str(label or ""))
        return m.group(1) if m else None

    def is_entry_page(self) -> bool:
        return not _IMDB_RX.search(self.page.url)

    def get_page_type(self) -> int | None:
        return NF_LIST_PAGE if self.page.url == MY_LIST_URL else None

    def enumerate_entries(self) -> list[Tag]:
        return self.page.select(".title-card")

    def mutate_entry(self, entry: Tag) -> None:
        b = new_tag(self.page, "a", classes=["nf-svg-button", "simpleround"], text="H", title="Hide/show this title")
        d = new_tag(self.page, "div", classes=["nf-svg-button-wrapper", HIDE_BUTTON_STYLE_NAME])
        d.append(b)
        self.engine.add_toggle_event_on_click(b, 2, LIST_HIDE, "H")
        entry.append(d)

    def extract_identity(self, entry: Tag) -> Identity | None:
        ident = ""
        for a in entry.find_all("a", href=True):
            href = str(a["href"])
            idx = href.find("/watch/")
            if idx == -1:
                continue
            for ch in href[idx + len("/watch/"):]:
                if ch in "/?&":
                    break
                ident += ch
            break
        if not ident:
            return None

        title_el = entry.select_one(".fallback-text")
        title = title_el.get_text() if title_el is not None else ""
        if not title:
            log.error(f"cannot find title for entry with id {ident} on URL {self.page.url}")
        else:
            title = title.replace("’", "'")
        return Identity(ident, title or ident)

    def decide(self, membership: set[str], tt: Identity | None, entry: Tag) -> str | None:
        ln = self.engine.ln
        kind: str | None = None
        if "is-disliked" in (entry.get("class") or []):
            kind = "D"
        elif ln(LIST_WATCH, self.imdb_name) in membership:
            kind = "W"
        elif ln(LIST_TBD, self.imdb_name) in membership:
            kind = "T"
        elif ln(LIST_SEEN, self.imdb_name) in membership:
            kind = "S"
        elif ln(LIST_NO, self.imdb_name) in membership:
            kind = "N"
        elif ln(LIST_HIDE) in membership:
            kind = "H"

        if ln(LIST_NF_MY) in membership and kind in (None, "W", "T") and self.get_page_type() != NF_LIST_PAGE:
            row = closest(entry, "div.lolomoRow")
            if row is None or row.get("data-list-context") not in ("queue", "continueWatching"):
                kind = "M"
        return kind

    def apply_effect(self, entry: Tag, tt: Identity | None, decision: Any) -> None:
        kind = decision if decision in HIDE_TYPES else "MISSING"
        ht = HIDE_TYPES[kind]
        holder = entry.parent or entry
        triangle = new_tag(self.page, "div", classes=[TRIANGLE_CLASS, TRIANGLE_STYLE_NAME], title=ht["name"])
        set_style(triangle, "border-right-color", ht["colour"])
        holder.append(triangle)
        if not ht.get("visible"):
            set_style(holder, "opacity", ".1")

    def reverse_effect(self, entry: Tag, tt: Identity | None, decision: Any) -> None:
        holder = entry.parent or entry
        set_style(holder, "opacity", "1")
        triangle = holder.select_one(f".{TRIANGLE_CLASS}")
        if triangle is not None:
            triangle.decompose()

    def on_page_setup(self, page_type: Any, is_entry_page: bool) -> None:
        main = self.page.select_one(".mainView")
        if main is None:
            log.error('could not find "main <div>" to insert buttons')
            return
        div = new_tag(self.page, "div", classes=["entrylist-buttons"])
        load = new_tag(self.page, "button", text="Load My List data", title="Reload information from 'My List'")
        clear = new_tag(self.page, "button", text="Clear My List data", title="Empty the data from 'My List'")
        self.engine.add_action_on_click(load, self.refresh_my_list)
        self.engine.add_action_on_click(clear, self.clear_my_list)
        div.append(load)
        div.append(clear)
        main.append(div)
        if self.refresh_on_page:
            self.refresh_my_list()

    # ── My List ────────────────────────────────────────────────────────────
    def clear_my_list(self) -> None:
        self.engine.delete_list(LIST_NF_MY)

    def refresh_my_list(self) -> bool:
        """Rebuild the 'My List' data from the gallery of the My List page."""
        self.clear_my_list()
        gallery = self.page.select_one("div.mainView div.gallery")
        if gallery is None:
            log.error("cannot load 'My List': gallery not found")
            return False

        entries: dict[str, str] = {}
        for card in gallery.select(".title-card"):
            tt = self.extract_identity(card)
            if tt is not None:
                entries[tt.id] = tt.name
        self.engine.save_list(entries, LIST_NF_MY)
        log.info(f"'My List' loaded: {len(entries)} titles")
        return True


def is_hidden(entry: Tag) -> bool:
    holder = entry.parent or entry
    return get_style(holder, "opacity") == ".1"


ADAPTER = NetflixSite
