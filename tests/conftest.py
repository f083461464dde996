"""Pytest configuration and fixtures for the recent_upload tests."""

import os
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from recent_upload.services.log_service import LogService


class RecordingUploader:
    """Uploader double that records every call and can fail selected keys."""

    def __init__(self, fail_keys: set[str] | None = None, delay: float = 0.0) -> None:
        self.fail_keys = fail_keys or set()
        self.delay = delay
        self.calls: list[tuple[str, Path]] = []
        self._lock = threading.Lock()

    def __call__(self, key: str, path: Path) -> dict[str, Any]:
        if self.delay:
            threading.Event().wait(self.delay)
        with self._lock:
            self.calls.append((key, Path(path)))
        if key in self.fail_keys:
            return {"success": False, "key": key, "error": "simulated failure"}
        return {"success": True, "key": key, "error": None}

    @property
    def keys(self) -> list[str]:
        with self._lock:
            return sorted(key for key, _ in self.calls)


def set_age(path: Path, days: float, now: datetime) -> None:
    """Set the modification time of ``path`` to ``days`` before ``now``."""
    stamp = (now - timedelta(days=days)).timestamp()
    os.utime(path, (stamp, stamp))


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant for threshold computations."""
    return datetime.now(UTC)


@pytest.fixture
def make_file(now: datetime) -> Callable[..., Path]:
    """Return a helper creating a file with a given age in days."""

    def _make(path: Path, age_days: float = 0.0, content: bytes = b"data") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        set_age(path, age_days, now)
        return path

    return _make


@pytest.fixture
def uploader() -> RecordingUploader:
    """Uploader double that succeeds for every key."""
    return RecordingUploader()


@pytest.fixture
def log_service() -> LogService:
    """Log service without a JSONL directory."""
    return LogService()


@pytest.fixture
def mock_settings_env() -> dict[str, str]:
    """Return environment values overriding every setting."""
    return {
        "RECENT_UPLOAD_MAX_WORKERS": "4",
        "RECENT_UPLOAD_POLL_INTERVAL": "0.05",
        "RECENT_UPLOAD_AWS_REGION": "us-west-2",
        "RECENT_UPLOAD_ENDPOINT_URL": "http://localhost:9000",
        "RECENT_UPLOAD_LOG_DIR": "/tmp/recent-upload-logs",
        "RECENT_UPLOAD_LOG_LEVEL": "debug",
        "RECENT_UPLOAD_ECHO_SECRET": "true",
        "RECENT_UPLOAD_CHECK_BUCKET": "yes",
    }
