from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import Callable

_LOGGER = logging.getLogger("daybook.timers")


class PeriodicTask:
    """
    Runs `callback` on a daemon thread every `interval` until stopped.

    The next run is scheduled after the previous one returns, so a slow run
    delays the following tick instead of overlapping it. `stop()` sets the
    stop event and joins the thread; once it returns no further run starts.
    """

    def __init__(
        self,
        callback: Callable[[], object],
        interval: timedelta,
        name: str,
        run_immediately: bool = False,
    ) -> None:
        if interval.total_seconds() <= 0:
            raise ValueError("interval must be positive")
        self._callback = callback
        self._interval = interval.total_seconds()
        self._run_immediately = run_immediately
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._loop, name=name, daemon=True)
        self._thread.start()

    @property
    def interval(self) -> timedelta:
        return timedelta(seconds=self._interval)

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def stop(self) -> None:
        self._stop_event.set()
        if threading.current_thread() is not self._thread:
            self._thread.join()

    def _loop(self) -> None:
        if self._run_immediately and not self._stop_event.is_set():
            self._run_once()
        while not self._stop_event.wait(self._interval):
            self._run_once()

    def _run_once(self) -> None:
        try:
            self._callback()
        except Exception:
            _LOGGER.exception("Periodic task %s failed; will retry next tick.", self._thread.name)
