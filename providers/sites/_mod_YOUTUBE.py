# /providers/sites/_mod_YOUTUBE.py
# EntryList YOUTUBE module
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from typing import Any, Mapping

from bs4.element import Tag

from el_platform.engine import Engine, Identity

from ._page import Page, get_style, set_style

__VERSION__ = "1.4.0"
__all__ = ["YouTubeSite", "ADAPTER"]


class YouTubeSite:
    """Dims fully watched videos. No user, no lists: the progress bar decides."""

    name = "YouTube"
    role = "target"
    sources: tuple[str, ...] = ()

    def __init__(self, engine: Engine, page: Page, cfg: Mapping[str, Any] | None = None) -> None:
        self.engine = engine
        self.page = page

    def enumerate_entries(self) -> list[Tag]:
        return self.page.select("a#thumbnail")

    def is_valid_entry(self, entry: Tag) -> bool:
        st = entry.select_one("#overlays")
        return bool(st is not None and st.decode_contents())

    def decide(self, membership: set[str], tt: Identity | None, entry: Tag) -> bool:
        st = entry.select_one("#overlays #progress")
        return st is not None and get_style(st, "width") == "100%"

    def apply_effect(self, entry: Tag, tt: Identity | None, decision: Any) -> None:
        set_style(entry, "opacity", ".1")


ADAPTER = YouTubeSite
