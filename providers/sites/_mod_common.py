# /providers/sites/_mod_common.py
# EntryList common site module: HTTP session, retries, CSV
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import csv
import io
import os
import time
from typing import Any, Callable, Mapping
from urllib.parse import urlparse

import requests

from _logging import log as BASE_LOG

__VERSION__ = "0.2.0"
__all__ = [
    "HitSession",
    "build_session",
    "request_with_retries",
    "parse_csv",
    "csv_header",
]

FeatureLabelFn = Callable[[str, str, Mapping[str, Any]], str]

log = BASE_LOG.child("HTTP")


def default_feature_label(method: str, url: str, kw: Mapping[str, Any]) -> str:
    p = urlparse(url)
    segs = [s for s in (p.path or "/").split("/") if s]
    head = "/".join(segs[:3]) or "unknown"
    return head.lower()


class HitSession(requests.Session):
    def __init__(
        self,
        provider: str,
        feature_label: FeatureLabelFn | None = None,
        emit_hits: bool | None = None,
        user_agent: str | None = None,
    ):
        super().__init__()
        self._provider = provider
        self._label = feature_label or default_feature_label
        self._emit_hits = bool(os.getenv("EL_API_HITS")) if emit_hits is None else bool(emit_hits)
        if user_agent:
            self.headers["User-Agent"] = user_agent

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:  # type: ignore[override]
        try:
            return super().request(method, url, **kwargs)
        finally:
            if self._emit_hits:
                try:
                    feature = self._label(method.upper(), url, kwargs)
                except Exception:
                    feature = "unknown"
                log.debug(f"api:hit provider={self._provider} feature={feature}")


def build_session(
    provider: str,
    *,
    feature_label: FeatureLabelFn | None = None,
    emit_hits: bool | None = None,
    user_agent: str | None = None,
) -> HitSession:
    return HitSession(provider, feature_label, emit_hits, user_agent)


def request_with_retries(
    session: requests.Session,
    method: str,
    url: str,
    *,
    timeout: float = 10.0,
    max_retries: int = 3,
    retry_on: tuple[int, ...] = (429, 500, 502, 503, 504),
    backoff_base: float = 0.5,
    **kwargs: Any,
) -> requests.Response:
    last: Any = None
    for i in range(max(1, int(max_retries))):
        try:
            resp = session.request(method, url, timeout=timeout, **kwargs)
            if resp.status_code in retry_on and i < max_retries - 1:
                wait = backoff_base * (2**i)
                if resp.status_code == 429:
                    try:
                        wait = max(wait, float(resp.headers.get("Retry-After") or 0))
                    except ValueError:
                        pass
                log.debug(f"{method} {url} -> {resp.status_code}, retry in {wait:.1f}s")
                time.sleep(wait)
                last = resp
                continue
            return resp
        except requests.RequestException as e:
            last = e
            if i < max_retries - 1:
                time.sleep(backoff_base * (2**i))
            else:
                break
    if isinstance(last, requests.Response):
        return last
    raise requests.RequestException(f"request failed after retries: {method} {url}")


def parse_csv(text: str) -> list[list[str]]:
    """Rows of a CSV document, header included; blank lines dropped."""
    reader = csv.reader(io.StringIO(text or "", newline=""))
    return [row for row in reader if row and any(c.strip() for c in row)]


def csv_header(rows: list[list[str]]) -> dict[str, int]:
    """Column name -> index, from the first row."""
    if not rows:
        return {}
    return {name.strip(): i for i, name in enumerate(rows[0])}
