from __future__ import annotations

import configparser
import logging
import os
import sys
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional, Tuple

from . import storage

_LOGGER = logging.getLogger("daybook.config")

MIN_SWEEP_INTERVAL = timedelta(seconds=5)
MAX_SWEEP_INTERVAL = timedelta(hours=8)
DEFAULT_DATE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
_INI_NAME = "Daybook.ini"
_DISABLED = {"", "off", "none", "never"}


def _find_config_ini() -> Optional[Path]:
    """
    Search order:
      1) $DAYBOOK_INI.
      2) Next to the running binary/module.
      3) ../../Configs/Daybook.ini when running from source.
    Returns None when no file exists; defaults apply in that case.
    """
    from_env = os.getenv("DAYBOOK_INI")
    if from_env:
        return Path(from_env)

    if getattr(sys, "frozen", False):
        base_dir = Path(sys.executable).resolve().parent
    else:
        base_dir = Path(__file__).resolve().parent

    local_ini = base_dir / _INI_NAME
    if local_ini.exists():
        return local_ini

    dev_root = Path(__file__).resolve().parents[2]
    dev_ini = dev_root / "Configs" / _INI_NAME
    if dev_ini.exists():
        return dev_ini

    return None


def _parse_duration(raw: str) -> timedelta:
    s = raw.strip().lower()
    try:
        if s.endswith("ms"):
            return timedelta(milliseconds=int(s[:-2]))
        if s.endswith("s"):
            return timedelta(seconds=int(s[:-1]))
        if s.endswith("m"):
            return timedelta(minutes=int(s[:-1]))
        if s.endswith("h"):
            return timedelta(hours=int(s[:-1]))
        if s.endswith("d"):
            return timedelta(days=int(s[:-1]))
        return timedelta(seconds=int(s))
    except ValueError:
        raise ValueError(f"Invalid duration {raw!r}; expected e.g. 500ms, 30s, 15m, 8h, 10d") from None


def sweep_interval(threshold: timedelta) -> timedelta:
    """Retention sweep period: a fifth of the threshold, kept within [5s, 8h]."""
    interval = threshold / 5
    if interval < MIN_SWEEP_INTERVAL:
        return MIN_SWEEP_INTERVAL
    if interval > MAX_SWEEP_INTERVAL:
        return MAX_SWEEP_INTERVAL
    return interval


@dataclass(frozen=True)
class LogConfig:
    directory: Path
    use_utc_time: bool = False
    delete_old_files: Optional[timedelta] = None
    date_time_format: str = DEFAULT_DATE_TIME_FORMAT
    enabled_labels: Tuple[str, ...] = ()
    bind_host: str = "127.0.0.1"
    bind_port: int = 8080
    auth_token: str = ""
    source_path: Optional[Path] = None

    @property
    def cleanup_interval(self) -> Optional[timedelta]:
        if self.delete_old_files is None:
            return None
        return sweep_interval(self.delete_old_files)


def load_config(path: str | os.PathLike | None = None) -> LogConfig:
    """
    Read [daybook] and [admin] from `path`, or from the first INI found by
    the default search order. Missing files fall back to defaults unless the
    path was given explicitly.
    """
    if path is not None:
        config_path: Optional[Path] = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        config_path = _find_config_ini()

    parser = configparser.ConfigParser(interpolation=None)
    if config_path is not None:
        parser.read(config_path, encoding="utf-8")
        _LOGGER.debug("Loaded configuration from %s", config_path)
    if not parser.has_section("daybook"):
        parser.add_section("daybook")
    if not parser.has_section("admin"):
        parser.add_section("admin")
    sect = parser["daybook"]
    admin = parser["admin"]

    raw_dir = sect.get("directory", "").strip()
    if raw_dir:
        directory = Path(raw_dir)
        if not directory.is_absolute() and config_path is not None:
            directory = config_path.resolve().parent / directory
    else:
        directory = storage.default_directory()

    raw_retention = sect.get("delete_old_files", "").strip()
    delete_old_files = None if raw_retention.lower() in _DISABLED else _parse_duration(raw_retention)

    labels = tuple(
        label.strip().upper()
        for label in sect.get("enabled_labels", "").split(",")
        if label.strip()
    )

    return LogConfig(
        directory=directory,
        use_utc_time=sect.getboolean("use_utc_time", fallback=False),
        delete_old_files=delete_old_files,
        date_time_format=sect.get("date_time_format", DEFAULT_DATE_TIME_FORMAT),
        enabled_labels=labels,
        bind_host=admin.get("bind_host", "127.0.0.1").strip() or "127.0.0.1",
        bind_port=admin.getint("bind_port", fallback=8080),
        auth_token=admin.get("auth_token", "").strip(),
        source_path=config_path,
    )


def require_auth_token(cfg: LogConfig) -> str:
    if not cfg.auth_token:
        where = cfg.source_path or _INI_NAME
        raise ValueError(f"[admin].auth_token must be set in {where}")
    return cfg.auth_token
