# /providers/sites/_page.py
# EntryList page helpers: parsed documents, inline styles, ancestor lookup
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__ = ["Page", "load_page", "get_style", "set_style", "closest", "new_tag"]


@dataclass
class Page:
    url: str
    document: BeautifulSoup

    def select(self, selector: str) -> list[Tag]:
        return list(self.document.select(selector))

    def select_one(self, selector: str) -> Tag | None:
        return self.document.select_one(selector)

    def html(self) -> str:
        return str(self.document)


def load_page(html: str, url: str = "") -> Page:
    return Page(url=url, document=BeautifulSoup(html or "", "html.parser"))


def _parse_style(raw: Any) -> dict[str, str]:
    out: dict[str, str] = {}
    for part in str(raw or "").split(";"):
        if ":" not in part:
            continue
        k, v = part.split(":", 1)
        k = k.strip().lower()
        if k:
            out[k] = v.strip()
    return out


def get_style(tag: Tag | None, prop: str) -> str | None:
    if tag is None:
        return None
    return _parse_style(tag.get("style")).get(prop.lower())


def set_style(tag: Tag, prop: str, value: str | None) -> None:
    st = _parse_style(tag.get("style"))
    if value is None or value == "":
        st.pop(prop.lower(), None)
    else:
        st[prop.lower()] = str(value)
    if st:
        tag["style"] = "; ".join(f"{k}: {v}" for k, v in st.items())
    elif "style" in tag.attrs:
        del tag["style"]


def closest(node: Tag | None, selector: str) -> Tag | None:
    """Nearest ancestor (node included) matching a CSS selector."""
    if node is None:
        return None
    return node.css.closest(selector)


def new_tag(page: Page, name: str, *, classes: list[str] | None = None, text: str | None = None, **attrs: Any) -> Tag:
    tag = page.document.new_tag(name)
    if classes:
        tag["class"] = list(classes)
    for k, v in attrs.items():
        tag[k.replace("_", "-")] = v
    if text is not None:
        tag.string = text
    return tag
