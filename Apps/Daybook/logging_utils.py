from __future__ import annotations

import logging
from typing import Any, Dict

from .logger import L

_LEVEL_LABELS = {
    "WARNING": "WARN",
    "CRITICAL": "FATAL",
}


class DaybookHandler(logging.Handler):
    """
    Forwards stdlib logging records into an L instance.
    The record's level becomes the label (WARNING -> WARN, CRITICAL -> FATAL),
    the formatted record becomes the content; L supplies the timestamp.
    """

    def __init__(self, logger: L, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._logger = logger
        self.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        if self._logger.closed:
            return
        try:
            msg = self.format(record)
            label = _LEVEL_LABELS.get(record.levelname, record.levelname)
            self._logger.log(label, msg)
        except Exception:
            self.handleError(record)


class DropAccess200(logging.Filter):
    """Suppress uvicorn access logs ending with HTTP 200."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        if record.name == "uvicorn.access" and msg.rstrip().endswith(" 200"):
            return False
        return True


def build_log_config(console: bool = True, level: str = "INFO") -> Dict[str, Any]:
    """dictConfig for the command line: diagnostics go to stderr."""
    formatter_standard = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    handlers: Dict[str, Any] = {}
    handler_names = []
    if console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stderr",
            "level": level,
            "filters": ["drop_200"],
        }
        handler_names.append("console")
    else:
        handlers["null"] = {"class": "logging.NullHandler"}
        handler_names.append("null")

    loggers = {
        "": {"handlers": handler_names, "level": level},
        "uvicorn": {"handlers": handler_names, "level": level, "propagate": False},
        "uvicorn.error": {"handlers": handler_names, "level": level, "propagate": False},
        "uvicorn.access": {"handlers": handler_names, "level": "WARNING", "propagate": False},
        "daybook": {"handlers": handler_names, "level": level, "propagate": False},
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": formatter_standard},
        },
        "handlers": handlers,
        "filters": {
            "drop_200": {"()": DropAccess200},
        },
        "loggers": loggers,
    }
