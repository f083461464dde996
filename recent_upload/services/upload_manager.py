"""Upload manager: walks the directory tree and dispatches uploads to S3."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from recent_upload.config import DEFAULT_POLL_INTERVAL, UploadJob
from recent_upload.services import scanner
from recent_upload.services.dispatcher import WorkDispatcher, await_quiescence
from recent_upload.services.log_service import LogService
from recent_upload.services.utils import destination_key, format_file_size, qualifies

logger = logging.getLogger(__name__)

# Blocking remote call: (destination key, source path) -> result dict with
# at least "success" and "error".
Uploader = Callable[[str, Path], dict[str, Any]]


class UploadManager:
    """Runs one upload job over a bounded worker pool.

    Each directory is one task: it lists the directory, submits a task per
    sub-directory, and uploads qualifying files synchronously on its worker.
    """

    def __init__(
        self,
        job: UploadJob,
        uploader: Uploader,
        log_service: LogService | None = None,
        dispatcher: WorkDispatcher | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.job = job
        self.uploader = uploader
        self.log = log_service or LogService()
        self.dispatcher = dispatcher or WorkDispatcher(job.max_workers)
        self.poll_interval = poll_interval

    def enqueue_directory(self, directory: Path) -> None:
        """Submit a directory-processing task."""
        self.dispatcher.submit(self.process_directory, directory)

    def process_directory(self, directory: Path) -> None:
        """Scan one directory, fan out its sub-directories, upload its recent files."""
        try:
            listing = scanner.scan_directory(directory)
        except OSError as e:
            self.log.error(
                "scan",
                "directory_scan_failed",
                f"Cannot list {directory}: {e}",
                {"directory": str(directory), "error": str(e)},
            )
            return

        for subdirectory in listing.directories:
            self.enqueue_directory(subdirectory)

        for path in listing.files:
            self.check_date_and_upload(path)

    def check_date_and_upload(self, path: Path) -> None:
        """Upload ``path`` if it was modified after the job threshold."""
        try:
            candidate = scanner.read_candidate(path)
        except OSError as e:
            self.log.error(
                "scan",
                "file_stat_failed",
                f"Cannot read modification time of {path}: {e}",
                {"path": str(path), "error": str(e)},
            )
            return

        if not qualifies(candidate.last_modified, self.job.threshold):
            return

        try:
            key = destination_key(self.job.base_path, path)
        except ValueError as e:
            self.log.error(
                "upload",
                "destination_key_failed",
                f"Cannot derive a key for {path}: {e}",
                {"path": str(path), "error": str(e)},
            )
            return

        self.upload(candidate, key)

    def upload(self, candidate: scanner.FileCandidate, key: str) -> None:
        """Perform the blocking upload of one file and log the outcome."""
        self.log.info(
            "upload",
            "file_upload_started",
            f"Upload [{candidate.path}] to [{key}]",
            {
                "path": str(candidate.path),
                "key": key,
                "bucket": self.job.bucket,
                "file_size": candidate.size,
            },
        )

        try:
            result = self.uploader(key, candidate.path)
        except Exception as e:
            logger.debug("Uploader raised for %s", candidate.path, exc_info=True)
            result = {"success": False, "error": str(e)}

        if result.get("success"):
            self.log.info(
                "upload",
                "file_upload_completed",
                f"Uploaded {key} ({format_file_size(candidate.size)})",
                {
                    "key": key,
                    "file_size": candidate.size,
                    "duration_seconds": result.get("duration_seconds"),
                },
            )
        else:
            error = result.get("error") or "Unknown error"
            self.log.error(
                "upload",
                "file_upload_failed",
                f"Failed to upload {candidate.path} to {key}: {error}",
                {"path": str(candidate.path), "key": key, "error": error},
            )

    def log_pool_state(self, active: int, queued: int) -> None:
        self.log.info("pool", "pool_state", f"Active threads : {active}", {"active": active})
        self.log.info("pool", "pool_state", f"Queue size : {queued}", {"queued": queued})

    def run(self) -> None:
        """Seed the start directory, wait for quiescence, then shut the pool down."""
        self.log.info(
            "app",
            "traversal_started",
            f"Uploading files modified after {self.job.threshold.isoformat()} "
            f"from {self.job.start_path} to bucket {self.job.bucket}",
            {
                "base_path": str(self.job.base_path),
                "start_path": str(self.job.start_path),
                "threshold": self.job.threshold.isoformat(),
                "bucket": self.job.bucket,
                "max_workers": self.dispatcher.max_workers,
            },
        )

        self.enqueue_directory(self.job.start_path)
        await_quiescence(self.dispatcher, self.poll_interval, self.log_pool_state)
        self.dispatcher.shutdown()

        self.log.info("app", "traversal_completed", "Traversal complete")
