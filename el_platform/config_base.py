# el_platform/config_base.py
# EntryList - configuration file handling
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import copy
import json
import os
import secrets
import threading
import time
from pathlib import Path
from typing import Any, Dict

# ------------------------------------------------------------
# Base dir resolution
# ------------------------------------------------------------
def CONFIG_BASE() -> Path:
    """
    Determine the base directory for config and storage files.

    Priority:
      1) $CONFIG_BASE if set
      2) /config (when running in container that mounts /config)
      3) Project root (one level up from this package)
    """
    env = os.getenv("CONFIG_BASE")
    if env:
        return Path(env)

    if Path("/app").exists():
        return Path("/config")

    return Path(__file__).resolve().parents[1]


# Default config structure
DEFAULT_CFG: Dict[str, Any] = {
    # --- Engine --------------------------------------------------------------
    "engine": {
        "default_interval_ms": 1000,                    # Re-scan period when the target does not declare one
        "min_interval_ms": 100,                         # Below this the page is scanned once only (0 disables re-scan)
    },

    # --- Storage -------------------------------------------------------------
    "storage": {
        "file": "lists.json",                           # Key/value file, relative to CONFIG_BASE unless absolute
        "async_writes": False,                          # Run list writes on a single background worker
    },

    # --- Sites ---------------------------------------------------------------
    "imdb": {
        "base_url": "https://www.imdb.com",
        "timeout": 15.0,                                # HTTP timeout (seconds)
        "max_retries": 3,                               # Retry budget for 429/5xx
        "user_agent": "EntryList",
    },

    "netflix": {
        "refresh_my_list_on_page": True,                # Rebuild 'My List' data whenever the My List page is scanned
    },

    # --- API -----------------------------------------------------------------
    "api": {
        "host": "127.0.0.1",
        "port": 8788,
    },

    # --- Runtime / Diagnostics ----------------------------------------------
    "runtime": {
        "debug": False,
    },
}


# ------------------------------------------------------------
# Helpers: paths, IO, merging
# ------------------------------------------------------------
def _cfg_file() -> Path:
    return CONFIG_BASE() / "config.json"


def config_path() -> Path:
    return _cfg_file()


def storage_path(cfg: Dict[str, Any] | None = None) -> Path:
    st = dict((cfg or load_config()).get("storage") or {})
    p = Path(str(st.get("file") or "lists.json"))
    return p if p.is_absolute() else CONFIG_BASE() / p


def _read_json(p: Path) -> Dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def _write_json_atomic(p: Path, data: Dict[str, Any]) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    suffix = f".{time.time_ns()}.{os.getpid()}.{threading.get_ident()}.{secrets.token_hex(4)}.tmp"
    tmp = p.with_suffix(suffix)

    with tmp.open("w", encoding="utf-8", newline="\n") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
    tmp.replace(p)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _normalize_engine(eng: Dict[str, Any]) -> Dict[str, Any]:
    v = dict(eng or {})
    for key, fallback in (("default_interval_ms", 1000), ("min_interval_ms", 100)):
        try:
            v[key] = max(0, int(v.get(key, fallback)))
        except (TypeError, ValueError):
            v[key] = fallback
    return v


# ------------------------------------------------------------
# Public API
# ------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """
    Read config.json merged over the defaults
    """
    p = _cfg_file()
    user_cfg: Dict[str, Any] = {}
    if p.exists():
        try:
            user_cfg = _read_json(p)
        except Exception:
            user_cfg = {}

    cfg = _deep_merge(DEFAULT_CFG, user_cfg)
    cfg["engine"] = _normalize_engine(cfg.get("engine") or {})
    return cfg


def save_config(cfg: Dict[str, Any]) -> None:
    """
    Write to config.json
    """
    data = dict(cfg or {})
    if isinstance(data.get("engine"), dict):
        data["engine"] = _normalize_engine(data["engine"])
    _write_json_atomic(_cfg_file(), data)
