# /providers/sites/_mod_IMDB.py
# EntryList IMDB module
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from _logging import log as BASE_LOG
from el_platform.engine import Engine, Identity

from ._mod_common import build_session, csv_header, parse_csv, request_with_retries
from ._page import Page, new_tag

__VERSION__ = "1.7.0"
__all__ = ["IMDbSource", "IMDbConfig", "IMDbError", "ADAPTER", "parse_list"]

log = BASE_LOG.child("IMDB")

LIST_WATCH = "Your Watchlist"
LIST_RATING = "Your ratings"
LIST_CHECKIN = "Your check-ins"

WATCHLIST = "watchlist"
RATINGLIST = "ratings"
CHECKINS = "checkins"

TITLES = "Titles"
PEOPLE = "People"
IMAGES = "Images"

IMDB_LIST_PAGE = 1

_LIST_PAGE_RX = re.compile(r"\.imdb\..{2,3}/user/[^/]+/lists")
_UR_RX = re.compile(r"\.imdb\..{2,3}/.*/(ur[0-9]+)")


@dataclass
class IMDbConfig:
    base_url: str = "https://www.imdb.com"
    timeout: float = 15.0
    max_retries: int = 3
    user_agent: str = "EntryList"

    @classmethod
    def from_cfg(cls, cfg: Mapping[str, Any] | None) -> "IMDbConfig":
        im = dict((cfg or {}).get("imdb") or {})
        return cls(
            base_url=str(im.get("base_url") or cls.base_url).rstrip("/"),
            timeout=float(im.get("timeout", cls.timeout)),
            max_retries=int(im.get("max_retries", cls.max_retries)),
            user_agent=str(im.get("user_agent") or cls.user_agent),
        )


class IMDbError(RuntimeError):
    pass


def parse_list(text: str, list_type: str, where: str = "") -> dict[str, str]:
    """Title -> title map from an IMDb CSV export."""
    if (text or "").lstrip().startswith("<!DOCTYPE html"):
        raise IMDbError("received HTML instead of CSV file")
    if list_type != TITLES:
        raise IMDbError(f"downloaded list of unmanaged type {list_type}, discarded")

    rows = parse_csv(text)
    header = csv_header(rows)
    # keyed by title, entries are matched by name
    id_idx = header.get("Title")
    name_idx = header.get("Title")
    if id_idx is None or name_idx is None:
        raise IMDbError("no 'Title' column in CSV file")

    out: dict[str, str] = {}
    for i, row in enumerate(rows[1:], start=1):
        ident = row[id_idx] if id_idx < len(row) else ""
        name = row[name_idx] if name_idx < len(row) else ""
        if ident == "":
            log.error(f"parse {where}: no id found at row {i}")
            continue
        if ident in out:
            log.error(f"parse {where}: duplicate id {ident} found at row {i}")
            continue
        out[ident] = name
    return out


class IMDbSource:
    """IMDb lists as a source. Titles are matched by name."""

    name = "IMDb"
    role = "source"

    def __init__(
        self,
        engine: Engine,
        page: Page,
        cfg: Mapping[str, Any] | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.engine = engine
        self.page = page
        self.cfg = IMDbConfig.from_cfg(cfg if cfg is not None else engine.cfg)
        self.session = session or build_session("IMDB", user_agent=self.cfg.user_agent)

    # ── context ────────────────────────────────────────────────────────────
    def get_user(self) -> dict[str, Any] | None:
        account = self.page.select_one("#nbusername")
        if account is None:
            return None
        user = account.get_text().strip()

        href = urljoin(self.page.url or self.cfg.base_url, str(account.get("href") or ""))
        m = _UR_RX.search(href)
        ur = m.group(1) if m else None
        if not ur:
            log.error(f"cannot retrieve the ur id for user: {user}")
        return {"name": user, "payload": ur}

    def get_page_type(self) -> int | None:
        return IMDB_LIST_PAGE if _LIST_PAGE_RX.search(self.page.url) else None

    def on_page_setup(self, page_type: Any, is_entry_page: bool) -> None:
        h1 = self.page.select_one("#main h1")
        if h1 is None:
            log.error("could not find element to insert buttons")
            return
        div = new_tag(self.page, "div", classes=["aux-content-widget-2"])
        refresh = new_tag(self.page, "button", classes=["btn"], text="NF - Refresh highlight data",
                          title="Reload information from lists - might take a few seconds")
        clear = new_tag(self.page, "button", classes=["btn"], text="NF - Clear highlight data",
                        title="Remove list data")
        self.engine.add_action_on_click(refresh, self.refresh_lists)
        self.engine.add_action_on_click(clear, self.clear_lists)
        div.append(refresh)
        div.append(clear)
        h1.append(div)

    def test_membership(self, tt: Identity, entries: Mapping[str, str]) -> bool:
        return bool(entries.get(tt.name))

    # ── lists ──────────────────────────────────────────────────────────────
    def _user_id(self) -> str:
        ctx = self.engine.context(self.name)
        ur = ctx.user_payload if ctx is not None else None
        if not ur:
            raise IMDbError("no IMDb user id (ur...) known")
        return str(ur)

    def _get(self, url: str, what: str) -> requests.Response:
        try:
            r = request_with_retries(
                self.session, "GET", url, timeout=self.cfg.timeout, max_retries=self.cfg.max_retries
            )
        except requests.RequestException as e:
            raise IMDbError(f"{what}: {e}") from e
        if r.status_code >= 400:
            raise IMDbError(f"{what}: HTTP {r.status_code}")
        return r

    def lists_page(self) -> BeautifulSoup:
        if _LIST_PAGE_RX.search(self.page.url):
            return self.page.document
        log.info("not in the IMDb list page, downloading it")
        url = f"{self.cfg.base_url}/user/{self._user_id()}/lists"
        return BeautifulSoup(self._get(url, "get IMDb list page").text, "html.parser")

    def lists_from_page(self, document: BeautifulSoup) -> list[dict[str, str]]:
        lists: list[dict[str, str]] = []
        for el in document.select(".user-list"):
            name_el = el.select_one(".list-name")
            if name_el is not None:
                name = name_el.get_text().strip()
            else:
                log.error(f"error reading name of list {el.get('id')}")
                name = str(el.get("id") or "")
            lists.append({"name": name, "id": str(el.get("id") or ""), "type": str(el.get("data-list-type") or "")})
        lists.append({"name": LIST_WATCH, "id": WATCHLIST, "type": TITLES})
        lists.append({"name": LIST_RATING, "id": RATINGLIST, "type": TITLES})
        lists.append({"name": LIST_CHECKIN, "id": CHECKINS, "type": TITLES})
        return lists

    def title_lists(self) -> list[dict[str, str]]:
        return [x for x in self.lists_from_page(self.lists_page()) if x["type"] == TITLES]

    def export_url(self, list_id: str) -> str:
        base = self.cfg.base_url
        if list_id in (WATCHLIST, CHECKINS):
            # watchlist and check-ins only expose their ls id on their own page
            r = self._get(f"{base}/user/{self._user_id()}/{list_id}", "get list page")
            meta = BeautifulSoup(r.text, "html.parser").select_one('meta[property="pageId"]')
            ls_id = meta.get("content") if meta is not None else None
            if not ls_id:
                raise IMDbError("cannot get list id")
            return f"{base}/list/{ls_id}/export"
        if list_id == RATINGLIST:
            return f"{base}/user/{self._user_id()}/{list_id}/export"
        return f"{base}/list/{list_id}/export"

    def download_list(self, list_id: str, list_type: str) -> dict[str, str]:
        url = self.export_url(list_id)
        r = self._get(url, "download")
        return parse_list(r.text, list_type, url)

    def clear_lists(self) -> None:
        self.engine.delete_all_lists(self.name)

    def refresh_lists(self) -> dict[str, Any]:
        """
        Download every title list of the user and replace the stored ones.
        Returns a summary: ok, message, per-list outcomes.
        """
        try:
            lists = self.title_lists()
        except IMDbError as e:
            log.error(f"cannot get IMDb lists: {e}")
            return {"ok": False, "message": f"Error - It was not possible to download the IMDb lists: {e}", "lists": []}

        self.clear_lists()
        outcomes: list[dict[str, Any]] = []
        for lst in lists:
            try:
                data = self.download_list(lst["id"], lst["type"])
                self.engine.save_list(data, lst["name"], self.name)
                outcomes.append({"name": lst["name"], "ok": True, "size": len(data)})
            except IMDbError as e:
                outcomes.append({"name": lst["name"], "ok": False, "error": f"list '{lst['name']}' - {e}"})

        failed = [o["error"] for o in outcomes if not o["ok"]]
        if not failed:
            msg, ok = "Loading complete!", True
        elif len(failed) < len(outcomes):
            msg, ok = "Done, but with errors:" + "".join(f"\n * {f}" for f in failed), True
            log.error(f"errors in list download: {failed}")
        else:
            msg, ok = "Error - It was not possible to download the IMDb lists:" + "".join(f"\n * {f}" for f in failed), False
            log.error(msg)
        return {"ok": ok, "message": msg, "lists": outcomes}


ADAPTER = IMDbSource
