"""Event logging service for upload runs.

Every event is emitted as a plain line through the standard logging module.
When a log directory is configured, events are also appended as one JSON
object per line to hive-partitioned daily .jsonl files.
DuckDB-compatible: SELECT * FROM read_json_auto('logs/json/**/events.jsonl', hive_partitioning=true)
"""

import json
import logging
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger("recent_upload")

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class LogService:
    """Structured event log with thread-safe file writes."""

    def __init__(self, log_directory: Path | None = None) -> None:
        """Initialize the log service.

        Args:
            log_directory: Root of the JSONL event log, or None to only emit
                through the logging module
        """
        self.log_directory = log_directory
        self._write_lock = threading.Lock()
        self._write_failed = False

    @staticmethod
    def _get_hive_dir(root: Path, subdir: str, dt: datetime) -> Path:
        """Build a hive-partitioned directory path and create it.

        Args:
            root: Root of the event log
            subdir: Top-level subdirectory ('json')
            dt: Datetime to partition by

        Returns:
            Path like logs/json/year=2026/month=02/day=08/
        """
        hive_dir = (
            root
            / subdir
            / f"year={dt.year:04d}"
            / f"month={dt.month:02d}"
            / f"day={dt.day:02d}"
        )
        hive_dir.mkdir(parents=True, exist_ok=True)
        return hive_dir

    def _get_current_log_file(self, root: Path, now: datetime) -> Path:
        """Get the path to today's events log file (hive-partitioned)."""
        return self._get_hive_dir(root, "json", now) / "events.jsonl"

    def log(
        self,
        level: str,
        category: str,
        event: str,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Emit a log entry.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR)
            category: Event category (app, scan, upload, pool)
            event: Machine-readable event name (snake_case)
            message: Human-readable message
            metadata: Optional additional data
        """
        level = level.upper()
        logger.log(_LEVELS.get(level, logging.INFO), message)

        root = self.log_directory
        if root is None:
            return

        now = datetime.now(UTC)
        entry: dict[str, Any] = {
            "timestamp": now.isoformat(),
            "level": level,
            "category": category,
            "event": event,
            "message": message,
            "thread": threading.current_thread().name,
        }
        if metadata:
            entry["metadata"] = metadata

        line = json.dumps(entry, default=str)

        # Event file errors are reported once, then ignored.
        with self._write_lock:
            try:
                log_file = self._get_current_log_file(root, now)
                with open(log_file, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
            except OSError as e:
                if not self._write_failed:
                    self._write_failed = True
                    logger.warning("Cannot write event log under %s: %s", root, e)

    def debug(
        self,
        category: str,
        event: str,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Log a DEBUG-level event."""
        self.log("DEBUG", category, event, message, metadata)

    def info(
        self,
        category: str,
        event: str,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Log an INFO-level event."""
        self.log("INFO", category, event, message, metadata)

    def warning(
        self,
        category: str,
        event: str,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Log a WARNING-level event."""
        self.log("WARNING", category, event, message, metadata)

    def error(
        self,
        category: str,
        event: str,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Log an ERROR-level event."""
        self.log("ERROR", category, event, message, metadata)
