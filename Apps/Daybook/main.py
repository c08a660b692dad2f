# Command line for Daybook: append a line, run a retention sweep, or host the admin API
from __future__ import annotations

import logging
import logging.config
import sys
from pathlib import Path
from typing import List, Optional, Sequence

if __package__ in (None, ""):  # running as a script: ensure Apps/ is on sys.path
    sys.path.append(str(Path(__file__).resolve().parents[1]))

import uvicorn
from Daybook import config
from Daybook.logger import L
from Daybook.logging_utils import DaybookHandler, build_log_config
from Daybook.server import create_app

_LOGGER = logging.getLogger("daybook.main")

USAGE = """\
usage: python -m Daybook.main [--config PATH] <command> [args]

commands:
  log LABEL MESSAGE...   append one line
  clean                  delete expired files once (needs delete_old_files)
  serve                  keep the logger open and host the admin API
"""


def _usage_error(message: str) -> int:
    sys.stderr.write(f"error: {message}\n{USAGE}")
    return 2


def _build_server(log: L, cfg: config.LogConfig) -> uvicorn.Server:
    log_config = build_log_config(console=sys.stderr.isatty())
    uv_config = uvicorn.Config(
        create_app(log, config.require_auth_token(cfg)),
        host=cfg.bind_host,
        port=cfg.bind_port,
        log_config=log_config,
        log_level="info",
        loop="asyncio",
        lifespan="on",
    )
    return uvicorn.Server(uv_config)


def run_log(cfg: config.LogConfig, args: List[str]) -> int:
    if len(args) < 2:
        return _usage_error("log needs a LABEL and a MESSAGE")
    label, message = args[0], " ".join(args[1:])
    with L.from_config(cfg, background=False) as log:
        written = log.log(label, message)
    if not written:
        _LOGGER.warning("Label %s is not enabled; nothing written.", label.strip().upper())
    return 0


def run_clean(cfg: config.LogConfig) -> int:
    if cfg.delete_old_files is None:
        return _usage_error("clean needs [daybook].delete_old_files to be set")
    with L.from_config(cfg, background=False) as log:
        deleted = log.sweep_now()
    print(deleted)
    return 0


def run_server(cfg: config.LogConfig) -> int:
    config.require_auth_token(cfg)
    with L.from_config(cfg) as log:
        # uvicorn applies its dictConfig on construction, which resets handlers
        server = _build_server(log, cfg)
        handler = DaybookHandler(log, level=logging.INFO)
        diagnostics = logging.getLogger("daybook")
        diagnostics.addHandler(handler)
        _LOGGER.info(
            "Daybook admin on %s:%s; writing under %s",
            cfg.bind_host,
            cfg.bind_port,
            log.directory,
        )
        try:
            server.run()
        except KeyboardInterrupt:
            _LOGGER.info("Daybook stopped via keyboard interrupt.")
        finally:
            diagnostics.removeHandler(handler)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    config_path: Optional[str] = None
    if args and args[0] == "--config":
        if len(args) < 2:
            return _usage_error("--config needs a PATH")
        config_path = args[1]
        args = args[2:]

    if not args:
        return _usage_error("missing command")

    logging.config.dictConfig(build_log_config(console=True, level="WARNING"))
    cfg = config.load_config(config_path)

    cmd = args[0].lower()
    if cmd == "log":
        return run_log(cfg, args[1:])
    if cmd == "clean":
        return run_clean(cfg)
    if cmd == "serve":
        return run_server(cfg)
    return _usage_error(f"unknown command {args[0]!r}")


if __name__ == "__main__":
    sys.exit(main())
