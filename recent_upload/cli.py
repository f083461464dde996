"""Command-line entry point.

Usage: recent-upload DAYS_AGO AWS_IDENTIFIER AWS_SECRET BUCKET BASE_PATH [SUBFOLDER]
"""

import logging
import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass

from recent_upload.config import (
    Credentials,
    Settings,
    UploadJob,
    build_upload_job,
    get_package_version,
    load_settings,
)
from recent_upload.services import s3_service
from recent_upload.services.log_service import LogService
from recent_upload.services.upload_manager import UploadManager

LOG_FORMAT = "%(threadName)s : %(message)s"
SECRET_MASK = "********"
ARG_COUNTS = (5, 6)

USAGE_LINES = [
    "You must have 5 or 6 params : ",
    "daysAgo (Integer)",
    "awsIdentifier",
    "awsPassword",
    "awsBucketName",
    "absolutePathToUpload",
    "subfolder (optional)",
    "Example : recent-upload 5 awsIdentifier awsPassword awsBucketName "
    "/home/user/toUpload subFolder/wanted",
]

ARG_LABELS = [
    "daysAgo (Integer)",
    "awsIdentifier",
    "awsPassword",
    "awsBucketName",
    "absolutePathToUpload",
    "subfolder (optional)",
]


class UsageError(ValueError):
    """Invalid command-line arguments."""


@dataclass(frozen=True)
class Arguments:
    """Parsed positional arguments."""

    days_ago: int
    credentials: Credentials
    bucket: str
    base_path: str
    subfolder: str | None = None


def parse_args(argv: Sequence[str]) -> Arguments:
    """Validate the positional arguments, without touching the filesystem.

    Raises:
        UsageError: If the count or the days value is invalid
    """
    if len(argv) not in ARG_COUNTS:
        raise UsageError(f"You must have 5 or 6 params, got {len(argv)}")

    try:
        days_ago = int(argv[0])
    except ValueError:
        raise UsageError(f"daysAgo must be an integer, got {argv[0]!r}") from None
    if days_ago < 0:
        raise UsageError(f"daysAgo must be >= 0, got {days_ago}")

    return Arguments(
        days_ago=days_ago,
        credentials=Credentials(access_key_id=argv[1], secret_access_key=argv[2]),
        bucket=argv[3],
        base_path=argv[4],
        subfolder=argv[5] if len(argv) == 6 else None,
    )


def echo_args(argv: Sequence[str], echo_secret: bool = False) -> list[str]:
    """Build the lines echoing every received argument.

    The secret is masked unless ``echo_secret`` is set.
    """
    lines = []
    for index, label in enumerate(ARG_LABELS):
        if index >= len(argv):
            value = "(none)"
        elif index == 2 and not echo_secret:
            value = SECRET_MASK
        else:
            value = argv[index]
        lines.append(f"{label} {value}")
    return lines


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        force=True,
    )


def prepare_job(args: Arguments, settings: Settings) -> UploadJob:
    """Build the UploadJob and check the base path is a directory.

    Raises:
        UsageError: If the base path does not exist or is not a directory
    """
    job = build_upload_job(
        days_ago=args.days_ago,
        bucket=args.bucket,
        base_path=args.base_path,
        subfolder=args.subfolder,
        max_workers=settings.max_workers,
    )
    if not job.base_path.is_dir():
        raise UsageError(f"Base path {job.base_path} is not a directory")
    return job


def run(argv: Sequence[str], settings: Settings | None = None) -> int:
    """Run an upload job for ``argv`` and return the process exit status."""
    if settings is None:
        try:
            settings = load_settings()
        except ValueError as e:
            configure_logging()
            logging.getLogger(__name__).error("Invalid configuration: %s", e)
            return 1

    configure_logging(settings.log_level)
    log = LogService(settings.log_directory)

    if len(argv) not in ARG_COUNTS:
        for line in USAGE_LINES:
            log.error("app", "usage", line)
        log.error(
            "app",
            "invalid_arguments",
            f"You must have 5 or 6 params, got {len(argv)}",
            {"argument_count": len(argv)},
        )
        return 1

    for line in echo_args(argv, settings.echo_secret):
        log.info("app", "argument", line)

    try:
        args = parse_args(argv)
        job = prepare_job(args, settings)
    except ValueError as e:
        log.error("app", "invalid_arguments", str(e))
        return 1

    log.info(
        "app",
        "app_started",
        f"recent-upload v{get_package_version()} (pid {os.getpid()})",
        {"version": get_package_version(), "max_workers": settings.max_workers},
    )

    try:
        client = s3_service.create_s3_client(
            args.credentials,
            region=settings.aws_region,
            endpoint_url=settings.endpoint_url,
            max_pool_connections=max(10, settings.max_workers),
        )
    except ValueError as e:
        log.error("app", "client_setup_failed", f"Cannot create S3 client: {e}")
        return 1

    if settings.check_bucket:
        access = s3_service.validate_bucket_access(client, job.bucket)
        if not access["success"]:
            log.error("app", "bucket_unavailable", access["error"], {"bucket": job.bucket})
            return 1

    manager = UploadManager(
        job,
        s3_service.BucketUploader(client, job.bucket),
        log_service=log,
        poll_interval=settings.poll_interval_seconds,
    )
    manager.run()
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Console script entry point."""
    sys.exit(run(sys.argv[1:] if argv is None else argv))


if __name__ == "__main__":
    main()
