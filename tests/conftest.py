"""Shared pytest configuration and fixtures for the Daybook test suite."""

import datetime
import sys
from pathlib import Path

import pytest

# Ensure Apps/ is in the path for imports
APPS_ROOT = Path(__file__).parent.parent / "Apps"
if str(APPS_ROOT) not in sys.path:
    sys.path.insert(0, str(APPS_ROOT))


class FakeClock:
    """Callable clock whose current instant is set by the test."""

    def __init__(self, now: datetime.datetime) -> None:
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += datetime.timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime.datetime(2024, 1, 1, 10, 0, 0))


@pytest.fixture
def log_dir(tmp_path) -> Path:
    """Log directory that does not exist yet."""
    return tmp_path / "logs"


def read_lines(path: Path) -> list:
    with open(path, encoding="utf-8") as f:
        return f.read().splitlines()
