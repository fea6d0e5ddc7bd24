# /entrylist.py
# EntryList - list based highlighting of titles on streaming sites
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import uvicorn
from fastapi import FastAPI

from _logging import log as BASE_LOG
from api import register as register_api
from el_platform.config_base import CONFIG_BASE, load_config, storage_path
from el_platform.engine import Engine
from el_platform.site_registry import load_site_adapters
from providers.sites._page import Page, load_page

log = BASE_LOG.child("MAIN")


def create_app() -> FastAPI:
    app = FastAPI(title="EntryList")
    register_api(app)
    return app


def build_engine(site: str, page: Page, cfg: dict[str, Any] | None = None) -> Engine:
    """Engine with the site as target and its declared sources registered."""
    adapters = load_site_adapters()
    cls = adapters.get(site.upper())
    if cls is None or cls.role != "target":
        raise SystemExit(f"unknown target site '{site}' (known: {', '.join(sorted(adapters))})")

    engine = Engine(config=cfg)
    if not engine.register_target(cls(engine, page)):
        raise SystemExit(f"cannot set up {cls.name} on {page.url or 'page'}")
    for src in getattr(cls, "sources", ()):
        src_cls = adapters.get(src)
        if src_cls is None:
            log.warn(f"source {src} not available")
            continue
        engine.register_source(src_cls(engine, page))
    return engine


def annotate(site: str, url: str, src: Path, dst: Path) -> int:
    page = load_page(src.read_text("utf-8"), url)
    engine = build_engine(site, page)
    try:
        done = engine.process_all_entries()
    finally:
        engine.stop()
    dst.write_text(page.html(), "utf-8")
    log.info(f"{done} entries processed, written to {dst}")
    return 0


def imdb_refresh(url: str, src: Path) -> int:
    page = load_page(src.read_text("utf-8"), url)
    engine = build_engine("NETFLIX", page)
    try:
        ctx = engine.context("IMDb")
        if ctx is None:
            log.error("IMDb user not available on this page")
            return 1
        summary = ctx.ops.refresh_lists()
    finally:
        engine.stop()
    print(json.dumps(summary, indent=2, ensure_ascii=False))
    return 0 if summary.get("ok") else 1


# Entry point
def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="entrylist", description="Entry list reconciliation for streaming sites")
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("serve", help="run the list management API")
    s.add_argument("--host")
    s.add_argument("--port", type=int)

    a = sub.add_parser("annotate", help="run one reconciliation pass over an HTML snapshot")
    a.add_argument("--site", required=True, help="target site (NETFLIX, YOUTUBE)")
    a.add_argument("--url", default="", help="URL the snapshot was taken from")
    a.add_argument("src", type=Path)
    a.add_argument("dst", type=Path)

    r = sub.add_parser("imdb-refresh", help="download the IMDb lists of the user logged on an IMDb page")
    r.add_argument("--url", required=True, help="URL the snapshot was taken from")
    r.add_argument("src", type=Path)

    args = p.parse_args(argv)

    if args.cmd == "annotate":
        return annotate(args.site, args.url, args.src, args.dst)
    if args.cmd == "imdb-refresh":
        return imdb_refresh(args.url, args.src)

    cfg = load_config()
    api = dict(cfg.get("api") or {})
    host = args.host or str(api.get("host") or "127.0.0.1")
    port = args.port or int(api.get("port") or 8788)
    debug = bool((cfg.get("runtime") or {}).get("debug"))

    print("\nEntryList API running:")
    print(f"  Local:   http://{host}:{port}")
    print(f"  Config:  {CONFIG_BASE() / 'config.json'} (JSON)")
    print(f"  Lists:   {storage_path(cfg)}\n")

    uvicorn.run(create_app(), host=host, port=port, log_level=("debug" if debug else "warning"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
