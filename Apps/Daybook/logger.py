from __future__ import annotations

import datetime
import enum
import os
import threading
import traceback
from pathlib import Path
from typing import Callable, Iterable, Optional, Set, Union

from . import storage
from .cleaner import RetentionCleaner
from .config import DEFAULT_DATE_TIME_FORMAT, LogConfig, sweep_interval
from .streams import PAST_STREAMS_INTERVAL, DatedStreamPool, LoggerClosedError

__all__ = ["L", "LoggerClosedError"]

_DEFAULT_LABEL_WIDTH = 5

Label = Union[str, enum.Enum]


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _normalize(label: str) -> str:
    return label.strip().upper()


def _render(content: object, args: tuple) -> str:
    if args:
        return str(content).format(*args)
    if isinstance(content, BaseException):
        return traceback.format_exception_only(type(content), content)[-1].rstrip("\n")
    return str(content)


class L:
    """
    Appends "<timestamp> <LABEL> <padding><content>" lines to one file per day.

    Labels are upper-cased and padded to the longest label seen so far, so the
    content column lines up. When `enabled_labels` is given, lines with any
    other label are dropped silently. When `delete_old_files` is given, files
    in the directory older than that are deleted in the background.

    Close the logger (or use it as a context manager) to release the open
    files and stop the background sweeps; logging afterwards raises
    LoggerClosedError.
    """

    def __init__(
        self,
        use_utc_time: bool = False,
        delete_old_files: Optional[datetime.timedelta] = None,
        date_time_format: str = DEFAULT_DATE_TIME_FORMAT,
        directory: str | os.PathLike | None = None,
        enabled_labels: Iterable[Label] = (),
        clock: Optional[Callable[[], datetime.datetime]] = None,
        background: bool = True,
    ) -> None:
        self._use_utc_time = use_utc_time
        self._clock = clock or (_utc_now if use_utc_time else datetime.datetime.now)
        self._date_time_format = date_time_format
        self._enabled_labels = frozenset(_normalize(self._label_text(l)) for l in enabled_labels)
        self._longest_label = max(map(len, self._enabled_labels), default=_DEFAULT_LABEL_WIDTH)
        self._lock = threading.Lock()
        self._closed = False

        target = directory if directory is not None else storage.default_directory()
        self._streams = DatedStreamPool(
            target,
            clock=self._clock,
            sweep_interval=PAST_STREAMS_INTERVAL if background else None,
        )
        self._cleaner: Optional[RetentionCleaner] = None
        if delete_old_files is not None:
            self._cleaner = RetentionCleaner(
                self._streams.directory,
                self._streams,
                delete_old_files,
                sweep_interval(delete_old_files),
                start=background,
            )

    @classmethod
    def from_config(
        cls,
        cfg: LogConfig,
        clock: Optional[Callable[[], datetime.datetime]] = None,
        background: bool = True,
    ) -> "L":
        return cls(
            use_utc_time=cfg.use_utc_time,
            delete_old_files=cfg.delete_old_files,
            date_time_format=cfg.date_time_format,
            directory=cfg.directory,
            enabled_labels=cfg.enabled_labels,
            clock=clock,
            background=background,
        )

    def __enter__(self) -> "L":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def directory(self) -> Path:
        return self._streams.directory

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def retention_enabled(self) -> bool:
        return self._cleaner is not None

    def log(self, label: Label, content: object, *args: object) -> bool:
        """
        Format and append one line. Returns False when the label is not enabled.
        OSError from the file system propagates to the caller.
        """
        if label is None:
            raise TypeError("label must not be None")
        if content is None:
            raise TypeError("content must not be None")

        text = _normalize(self._label_text(label))
        if self._enabled_labels and text not in self._enabled_labels:
            return False

        now = self._clock()
        body = _render(content, args)

        with self._lock:
            if self._closed:
                raise LoggerClosedError("Cannot log through a closed logger.")
            self._longest_label = max(self._longest_label, len(text))
            padding = " " * (self._longest_label - len(text))
            line = f"{now.strftime(self._date_time_format)} {text} {padding}{body}"
            self._streams.append(now, line)
        return True

    def debug(self, content: object, *args: object) -> bool:
        return self.log("DEBUG", content, *args)

    def info(self, content: object, *args: object) -> bool:
        return self.log("INFO", content, *args)

    def warn(self, content: object, *args: object) -> bool:
        return self.log("WARN", content, *args)

    def error(self, content: object, *args: object) -> bool:
        return self.log("ERROR", content, *args)

    def fatal(self, content: object, *args: object) -> bool:
        return self.log("FATAL", content, *args)

    def open_paths(self) -> Set[Path]:
        return self._streams.open_paths()

    def close_past_streams(self) -> int:
        with self._lock:
            if self._closed:
                raise LoggerClosedError("Cannot sweep a closed logger.")
        return self._streams.sweep_past_dates()

    def sweep_now(self) -> Optional[int]:
        """Run one retention sweep right away. None when retention is disabled."""
        with self._lock:
            if self._closed:
                raise LoggerClosedError("Cannot sweep a closed logger.")
        if self._cleaner is None:
            return None
        return self._cleaner.sweep()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        # Outside the lock: a sweep thread may be logging through this instance.
        # Cleaner first so no sweep sees an empty open-paths set.
        if self._cleaner is not None:
            self._cleaner.close()
        self._streams.close()

    @staticmethod
    def _label_text(label: Label) -> str:
        if isinstance(label, enum.Enum):
            return label.name
        return str(label)
