"""Shared fixtures for podfeed tests."""

import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from podfeed.testing import RecordingStorageBackend

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo setup_logging so caplog sees podfeed records in every test."""
    yield
    logger = logging.getLogger("podfeed")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding file1.mp3 (6 bytes)."""
    return FIXTURES_DIR / "dir1"


@pytest.fixture
def build_time() -> datetime:
    return datetime(2026, 10, 19, 15, 42, 7, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock(build_time: datetime):
    return lambda: build_time


@pytest.fixture
def backend() -> RecordingStorageBackend:
    return RecordingStorageBackend()


@pytest.fixture
def sample_config_dict() -> dict:
    return {
        "version": "1",
        "log_level": "INFO",
        "feed": {"title": "Feed Title 1", "output": "feed.xml"},
        "publish": {"region": "eu-west-1", "container": "bucket1", "retry_attempts": 2},
    }


@pytest.fixture
def audio_files(tmp_path: Path) -> list[Path]:
    """Three small mp3 files, in episode order."""
    paths = []
    for index, name in enumerate(["file1.mp3", "file2.mp3", "file3.mp3"], start=1):
        path = tmp_path / "media" / name
        path.parent.mkdir(exist_ok=True)
        path.write_bytes(b"x" * index)
        paths.append(path)
    return paths
