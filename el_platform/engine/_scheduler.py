# el_platform/engine/_scheduler.py
# recurring reconciliation passes on a background thread.
# Copyright (c) 2025-2026 CrossWatch / Cenodude (https://github.com/cenodude/CrossWatch)
from __future__ import annotations

import threading
from typing import Callable

from _logging import log as BASE_LOG

log = BASE_LOG.child("SCHEDULER")


class PassHandle:
    """
    Returned by Engine.start(). Owns the re-scan thread, if any; cancel()
    stops it and waits for a running pass to finish.
    """

    def __init__(self, run_pass: Callable[[], object], interval_ms: int | None) -> None:
        self.run_pass = run_pass
        self.interval_ms = interval_ms
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.passes = 0

    @property
    def recurring(self) -> bool:
        return self.interval_ms is not None

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def start(self) -> "PassHandle":
        if not self.recurring or self.running:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="EntryListPasses", daemon=True)
        self._thread.start()
        log.debug(f"re-scan every {self.interval_ms} ms")
        return self

    def _loop(self) -> None:
        delay = (self.interval_ms or 0) / 1000.0
        while not self._stop.wait(delay):
            try:
                self.run_pass()
                self.passes += 1
            except Exception as e:
                log.error(f"reconciliation pass failed: {e}")

    def cancel(self) -> None:
        self._stop.set()
        t = self._thread
        if t and t.is_alive() and t is not threading.current_thread():
            t.join(timeout=3.0)
        self._thread = None
