"""Shared utility functions for app services."""

from datetime import UTC, datetime, timedelta
from pathlib import Path, PurePath


def format_file_size(size_bytes: int) -> str:
    """Format a file size in bytes to a human-readable string.

    Args:
        size_bytes: Size in bytes

    Returns:
        Human-readable size string (e.g., "1.5 GB")
    """
    size_float = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if abs(size_float) < 1024.0:
            return f"{size_float:.1f} {unit}"
        size_float = size_float / 1024.0
    return f"{size_float:.1f} PB"


def compute_threshold(days_ago: int, now: datetime | None = None) -> datetime:
    """Return the instant files must be modified after to qualify for upload.

    Args:
        days_ago: Recency window in days (>= 0)
        now: Reference instant, defaults to the current UTC time

    Returns:
        Timezone-aware UTC datetime
    """
    if days_ago < 0:
        raise ValueError(f"days_ago must be >= 0, got {days_ago}")
    if now is None:
        now = datetime.now(UTC)
    return now - timedelta(days=days_ago)


def qualifies(last_modified: datetime, threshold: datetime) -> bool:
    """True iff ``last_modified`` is strictly after ``threshold``."""
    return last_modified > threshold


def destination_key(base_path: str | PurePath, file_path: str | PurePath) -> str:
    """Derive the object key for a file below the base directory.

    The base-directory prefix and the separator after it are removed, and the
    remainder is returned with ``/`` separators.

    Args:
        base_path: Absolute key-derivation root
        file_path: Absolute path of a file inside ``base_path``

    Returns:
        Relative key such as ``sub/c.jpg``

    Raises:
        ValueError: If ``file_path`` is not under ``base_path``
    """
    relative = Path(file_path).relative_to(Path(base_path))
    key = relative.as_posix()
    if key in ("", "."):
        raise ValueError(f"{file_path} is the base directory itself, not a file below it")
    return key
