import logging

import pytest

from Daybook.logger import L
from Daybook.logging_utils import DaybookHandler, DropAccess200, build_log_config
from conftest import read_lines


@pytest.fixture
def bridged(log_dir, clock):
    log = L(directory=log_dir, clock=clock, background=False)
    handler = DaybookHandler(log)
    target = logging.getLogger("tests.bridge")
    target.setLevel(logging.DEBUG)
    target.addHandler(handler)
    target.propagate = False
    yield log, target
    target.removeHandler(handler)
    target.propagate = True
    log.close()


def test_records_become_labelled_lines(bridged, log_dir):
    log, target = bridged
    target.info("started %s", "ok")
    target.warning("careful")
    target.critical("down")

    assert read_lines(log_dir / "2024-01-01.log") == [
        "2024-01-01 10:00:00 INFO  tests.bridge: started ok",
        "2024-01-01 10:00:00 WARN  tests.bridge: careful",
        "2024-01-01 10:00:00 FATAL tests.bridge: down",
    ]


def test_records_after_close_are_dropped(bridged, log_dir):
    log, target = bridged
    target.info("kept")
    log.close()
    target.error("dropped")
    assert read_lines(log_dir / "2024-01-01.log") == ["2024-01-01 10:00:00 INFO  tests.bridge: kept"]


def test_write_errors_go_to_handle_error(log_dir, clock, monkeypatch):
    log = L(directory=log_dir, clock=clock, background=False)
    handler = DaybookHandler(log)
    seen = []
    monkeypatch.setattr(handler, "handleError", seen.append)

    def broken(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(log, "log", broken)
    record = logging.LogRecord("tests.bridge", logging.ERROR, __file__, 1, "boom", None, None)
    handler.emit(record)
    log.close()
    assert seen == [record]


def test_drop_access_200_filter():
    f = DropAccess200()
    ok = logging.LogRecord("uvicorn.access", logging.INFO, __file__, 1, "GET /health 200", None, None)
    missing = logging.LogRecord("uvicorn.access", logging.INFO, __file__, 1, "GET /nope 404", None, None)
    other = logging.LogRecord("daybook.server", logging.INFO, __file__, 1, "status 200", None, None)
    assert f.filter(ok) is False
    assert f.filter(missing) is True
    assert f.filter(other) is True


def test_build_log_config_is_accepted_by_dict_config():
    for console in (True, False):
        cfg = build_log_config(console=console)
        assert cfg["loggers"]["uvicorn.access"]["level"] == "WARNING"
        assert ("console" in cfg["handlers"]) is console
        assert cfg["loggers"]["daybook"]["propagate"] is False
        assert cfg["filters"]["drop_200"]["()"] is DropAccess200
