from __future__ import annotations

import datetime
import logging
import os
import threading
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Set

from . import storage
from .timers import PeriodicTask

_LOGGER = logging.getLogger("daybook.cleaner")


class OpenPathsSource(Protocol):
    def open_paths(self) -> Set[Path]: ...


class RetentionCleaner:
    """
    Periodically deletes files directly inside `directory` whose creation time
    is at least `threshold` old, skipping every path the stream pool has open.

    The open-paths snapshot is taken at the start of each sweep and is not
    coordinated with the pool's lock. A file reopened by the pool after the
    snapshot but before the deletion can still be removed; this only happens
    when the reopen coincides with a date rollover and is accepted.
    """

    def __init__(
        self,
        directory: str | os.PathLike,
        streams: OpenPathsSource,
        threshold: datetime.timedelta,
        interval: datetime.timedelta,
        clock: Optional[Callable[[], datetime.datetime]] = None,
        start: bool = True,
    ) -> None:
        self._dir = Path(directory).resolve()
        self._streams = streams
        self._threshold = threshold
        self._interval = interval
        self._clock = clock or datetime.datetime.now
        self._clean_lock = threading.Lock()
        self._task: Optional[PeriodicTask] = None
        if start:
            self._task = PeriodicTask(
                self.sweep,
                interval,
                name="DaybookRetentionCleaner",
                run_immediately=True,
            )

    @property
    def threshold(self) -> datetime.timedelta:
        return self._threshold

    @property
    def interval(self) -> datetime.timedelta:
        return self._interval

    def sweep(self) -> int:
        """Delete expired, closed files once. Returns the number of files deleted."""
        with self._clean_lock:
            if not self._dir.is_dir():
                return 0

            live = self._streams.open_paths()
            now = self._clock()
            deleted: List[Path] = []

            for path in storage.list_files(self._dir):
                if path in live:
                    continue
                try:
                    age = now - storage.creation_time(path)
                    if age < self._threshold:
                        continue
                    path.unlink()
                except FileNotFoundError:
                    continue
                except OSError:
                    _LOGGER.warning("Could not delete expired log file %s", path, exc_info=True)
                    continue
                _LOGGER.debug("Deleted expired log file %s (age %s)", path.name, age)
                deleted.append(path)

        if deleted:
            _LOGGER.info("Retention sweep removed %d file(s) from %s", len(deleted), self._dir)
        return len(deleted)

    def close(self) -> None:
        """Stop the periodic sweep without running a final one. Safe to call more than once."""
        if self._task is not None:
            self._task.stop()
