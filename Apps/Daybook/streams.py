from __future__ import annotations

import datetime
import logging
import os
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, TextIO, Tuple

from . import storage
from .timers import PeriodicTask

_LOGGER = logging.getLogger("daybook.streams")

PAST_STREAMS_INTERVAL = datetime.timedelta(hours=2)


class LoggerClosedError(RuntimeError):
    """Raised when writing through a logger or pool that has been closed."""


class DatedStreamPool:
    """
    One append-only text stream per calendar date, under <directory>/<YYYY-MM-DD>.log.

    Streams are opened lazily on the first append for their date and are
    closed by a background sweep once the date is in the past. Every access
    to the stream mapping and every write goes through a single lock.
    """

    def __init__(
        self,
        directory: str | os.PathLike,
        clock: Optional[Callable[[], datetime.datetime]] = None,
        encoding: str = "utf-8",
        sweep_interval: Optional[datetime.timedelta] = PAST_STREAMS_INTERVAL,
    ) -> None:
        self._dir = Path(directory).resolve()
        self._clock = clock or datetime.datetime.now
        self._encoding = encoding
        self._streams: Dict[datetime.date, TextIO] = {}
        self._lock = threading.Lock()
        self._closed = False
        self.terminator = "\n"
        self._sweeper: Optional[PeriodicTask] = None
        if sweep_interval is not None:
            self._sweeper = PeriodicTask(
                self.sweep_past_dates,
                sweep_interval,
                name="DaybookPastStreamsSweeper",
            )

    @property
    def directory(self) -> Path:
        return self._dir

    def append(self, timestamp: datetime.datetime, line: str) -> None:
        """
        Write `line` plus a newline to the file for `timestamp`'s date and
        flush it. OSError from creating the directory or opening/writing the
        file propagates; a stream that failed to write stays open.
        """
        with self._lock:
            if self._closed:
                raise LoggerClosedError("Cannot append to a closed stream pool.")
            stream = self._ensure_stream(timestamp.date())
            stream.write(line + self.terminator)
            stream.flush()

    def open_paths(self) -> Set[Path]:
        with self._lock:
            return {storage.path_for(self._dir, day) for day in self._streams}

    def sweep_past_dates(self) -> int:
        """Close every stream whose date is strictly before today. Returns how many were closed."""
        today = self._clock().date()
        with self._lock:
            past = [day for day in self._streams if day < today]
            failures = _close_streams([(day, self._streams.pop(day)) for day in past])
        _log_close_failures(failures)
        if past:
            _LOGGER.debug("Closed %d past stream(s): %s", len(past), ", ".join(map(str, sorted(past))))
        return len(past)

    def close(self) -> None:
        """
        Stop the sweeper and close every stream. Safe to call more than once.
        A stream whose final flush fails is still released; the failure is logged.
        """
        if self._sweeper is not None:
            self._sweeper.stop()
        with self._lock:
            self._closed = True
            failures = _close_streams(list(self._streams.items()))
            self._streams.clear()
        _log_close_failures(failures)

    def _ensure_stream(self, day: datetime.date) -> TextIO:
        stream = self._streams.get(day)
        if stream is not None:
            return stream

        self._dir.mkdir(parents=True, exist_ok=True)
        target = storage.path_for(self._dir, day)
        stream = open(target, "a", encoding=self._encoding)
        self._streams[day] = stream
        return stream


def _close_streams(items: List[Tuple[datetime.date, TextIO]]) -> List[Tuple[datetime.date, OSError]]:
    failures = []
    for day, stream in items:
        try:
            stream.close()
        except OSError as exc:
            failures.append((day, exc))
    return failures


def _log_close_failures(failures: List[Tuple[datetime.date, OSError]]) -> None:
    for day, exc in failures:
        _LOGGER.warning("Stream for %s failed to flush on close", day, exc_info=exc)
