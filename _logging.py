# _logging.py
# A simple structured logger with colored console output.
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations
import sys, datetime, os, threading, time
from typing import Any, Optional, TextIO, Dict

RESET = "\033[0m"
DIM = "\033[90m"
RED = "\033[91m"
YELLOW = "\033[33m"
BLUE = "\033[94m"

LEVELS = {"off": 99, "silent": 60, "error": 40, "warn": 30, "info": 20, "debug": 10}

# ── runtime debug gate (reads runtime.debug from config, cached briefly) ────
_DEBUG_CACHE: Optional[bool] = None
_DEBUG_TS: float = 0.0


def _debug_enabled() -> bool:
    global _DEBUG_CACHE, _DEBUG_TS
    if (os.getenv("EL_DEBUG") or "").strip().lower() in ("1", "true", "yes", "on"):
        return True
    now = time.time()
    if _DEBUG_CACHE is None or (now - _DEBUG_TS) > 5.0:
        try:
            from el_platform.config_base import load_config
            rt = load_config().get("runtime") or {}
            _DEBUG_CACHE = bool(rt.get("debug"))
        except Exception:
            _DEBUG_CACHE = False
        _DEBUG_TS = now
    return bool(_DEBUG_CACHE)


def _env_level(default: str = "info") -> str:
    v = (os.getenv("EL_LOG_LEVEL") or "").strip().lower()
    return v if v in LEVELS else default


class Logger:
    def __init__(
        self,
        stream: TextIO = sys.stdout,
        level: str = "info",
        use_color: bool = True,
        show_time: bool = True,
        time_fmt: str = "%Y-%m-%d %H:%M:%S",
        tag_color_map: Optional[dict[str, str]] = None,
        *,
        _context: Optional[Dict[str, Any]] = None,
        _name: Optional[str] = None,
        _lock: Optional[threading.Lock] = None,
    ):
        self.stream = stream
        self.level_no = LEVELS.get(level, 20)
        self.use_color = use_color and not os.getenv("NO_COLOR")
        self.show_time = show_time
        self.time_fmt = time_fmt
        self.tag_color_map = tag_color_map or {
            "DEBUG": YELLOW,
            "INFO": BLUE,
            "WARN": YELLOW,
            "ERROR": RED,
        }
        self._context: Dict[str, Any] = dict(_context or {})
        if _name:
            self._context.setdefault("module", _name)
        self._lock = _lock or threading.Lock()
        self._parent: Optional["Logger"] = None

    # Context
    def bind(self, **ctx: Any) -> "Logger":
        new_ctx = dict(self._context); new_ctx.update(ctx)
        child = Logger(
            stream=self.stream,
            level=self.level_name,
            use_color=self.use_color,
            show_time=self.show_time,
            time_fmt=self.time_fmt,
            tag_color_map=dict(self.tag_color_map),
            _context=new_ctx,
            _name=new_ctx.get("module"),
            _lock=self._lock,
        )
        child._parent = self
        return child

    def child(self, name: str) -> "Logger":
        return self.bind(module=name)

    @property
    def level_name(self) -> str:
        for k, v in LEVELS.items():
            if v == self.level_no:
                return k
        return "info"

    def _effective_level(self) -> int:
        if self._parent is not None:
            return max(self.level_no, self._parent._effective_level())
        return self.level_no

    # Formatting
    def _fmt_text(self, display_level: str, *parts: Any) -> str:
        # "[MODULE] Level message"
        mod = (self._context.get("module") or "").strip()
        msg = " ".join(str(p) for p in parts)

        col = self.tag_color_map.get(display_level) if self.use_color else None
        lvl_disp = f"{col}{display_level}{RESET}" if col else display_level
        head = f"[{mod}]" if mod else ""
        line = f"{head} {lvl_disp} {msg}".strip()

        if self.show_time:
            ts = datetime.datetime.now().strftime(self.time_fmt)
            prefix = f"{DIM}[{ts}]{RESET}" if self.use_color else f"[{ts}]"
            return f"{prefix} {line}"
        return line

    def _emit(self, severity: str, display_level: str, *parts: Any) -> None:
        sev_no = LEVELS.get(severity, LEVELS["info"])
        threshold = max(self._effective_level(), LEVELS.get(_env_level(self.level_name), 20))
        if threshold >= LEVELS["off"]:
            return
        if severity == "debug":
            if not _debug_enabled():
                return
        elif threshold > sev_no:
            return
        s = self._fmt_text(display_level, *parts)
        with self._lock:
            self.stream.write(s + "\n")
            self.stream.flush()

    # Public API
    def debug(self, *parts: Any) -> None:
        self._emit("debug", "DEBUG", *parts)

    def info(self, *parts: Any) -> None:
        self._emit("info", "INFO", *parts)

    def warn(self, *parts: Any) -> None:
        self._emit("warn", "WARN", *parts)

    def error(self, *parts: Any) -> None:
        self._emit("error", "ERROR", *parts)


# default instance
log = Logger()

__all__ = ["Logger", "log", "LEVELS", "RESET", "DIM", "RED", "YELLOW", "BLUE"]
