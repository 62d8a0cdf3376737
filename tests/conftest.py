"""
-------
conftest.py
-------
Shared pytest fixtures: fake encoders and generator settings.
"""

import logging
import threading
from pathlib import Path

import pytest

from qrbatch.config import Settings
from qrbatch.generator import BatchGenerator


# -----------------------------------------------------------------------------
# Fake encoders
# -----------------------------------------------------------------------------
class RecordingEncoder:
    """Writes a small fake PNG and records every call under a lock."""

    def __init__(self, content: bytes = b"\x89PNG fake"):
        self.content = content
        self.calls = []
        self._lock = threading.Lock()

    @property
    def attempts(self) -> int:
        with self._lock:
            return len(self.calls)

    def __call__(self, payload, error_correction, pixel_size, destination):
        with self._lock:
            self.calls.append((payload, error_correction, pixel_size, Path(destination)))
        Path(destination).write_bytes(self.content)


class FailingEncoder(RecordingEncoder):
    def __call__(self, payload, error_correction, pixel_size, destination):
        with self._lock:
            self.calls.append((payload, error_correction, pixel_size, Path(destination)))
        raise RuntimeError("encoder exploded")


class BlockingEncoder(RecordingEncoder):
    """Signals `started` on first call, then waits for `release`."""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def __call__(self, payload, error_correction, pixel_size, destination):
        self.started.set()
        assert self.release.wait(timeout=10), "test never released the encoder"
        super().__call__(payload, error_correction, pixel_size, destination)


@pytest.fixture
def encoder():
    return RecordingEncoder()


@pytest.fixture
def failing_encoder():
    return FailingEncoder()


@pytest.fixture
def blocking_encoder():
    return BlockingEncoder()


# -----------------------------------------------------------------------------
# Settings / generator
# -----------------------------------------------------------------------------
@pytest.fixture
def settings() -> Settings:
    """Settings independent of the caller's environment and .env file."""
    return Settings(_env_file=None, worker_count=4, pixel_size=256, error_correction="M")


@pytest.fixture
def generator(settings, encoder) -> BatchGenerator:
    return BatchGenerator(settings, encoder=encoder)


@pytest.fixture
def out_dir(tmp_path) -> Path:
    return tmp_path / "out"


@pytest.fixture(autouse=True)
def reset_qrbatch_logging():
    """Drop handlers installed by configure_logging so they don't outlive capsys."""
    yield
    for name in ("qrbatch", "qrbatch.test", "qrbatch.test2"):
        logger = logging.getLogger(name)
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
