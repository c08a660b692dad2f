from __future__ import annotations
from pathlib import Path
from datetime import date, datetime
import os
import sys

_LOGS_DIR_NAME = "logs"
_SUFFIX = ".log"


def _install_root() -> Path:
    """
    Determine where the host process is running from. When frozen (PyInstaller),
    this is the directory containing the executable; otherwise fall back to
    the current working directory.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path.cwd()


def default_directory() -> Path:
    """
    Location of the log files when none is configured: a "logs" directory
    under the install root. Nothing is created here; the stream pool creates
    the directory on first use.
    """
    return _install_root() / _LOGS_DIR_NAME


def filename_for(day: date) -> str:
    return f"{day:%Y-%m-%d}{_SUFFIX}"


def path_for(directory: str | os.PathLike, day: date) -> Path:
    """
    Absolute path of the file holding the lines for `day`:
      <directory>/<YYYY-MM-DD>.log
    """
    return Path(directory) / filename_for(day)


def list_files(directory: str | os.PathLike) -> list[Path]:
    """
    Regular files directly inside `directory`. A missing directory yields an
    empty list.
    """
    root = Path(directory)
    if not root.is_dir():
        return []
    files = []
    with os.scandir(root) as entries:
        for entry in entries:
            if entry.is_file(follow_symlinks=False):
                files.append(root / entry.name)
    return files


def creation_time(path: str | os.PathLike) -> datetime:
    """
    Filesystem creation time of `path` as a naive local datetime.
    Uses st_birthtime where the platform reports it and st_ctime otherwise.
    On Linux st_ctime is the inode change time, which every append moves
    forward: the age of a daily file then counts from its last write, so it
    expires up to a day later than its creation date suggests.
    """
    st = os.stat(path)
    ts = getattr(st, "st_birthtime", None)
    if ts is None:
        ts = st.st_ctime
    return datetime.fromtimestamp(ts)
