"""Configuration management for recent_upload"""

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from recent_upload.services.utils import compute_threshold

# Base directory for the project
BASE_DIR = Path(__file__).resolve().parent.parent

PYPROJECT_FILE = BASE_DIR / "pyproject.toml"

# Environment variable names for configuration
ENV_MAX_WORKERS = "RECENT_UPLOAD_MAX_WORKERS"
ENV_POLL_INTERVAL = "RECENT_UPLOAD_POLL_INTERVAL"
ENV_AWS_REGION = "RECENT_UPLOAD_AWS_REGION"
ENV_ENDPOINT_URL = "RECENT_UPLOAD_ENDPOINT_URL"
ENV_LOG_DIR = "RECENT_UPLOAD_LOG_DIR"
ENV_LOG_LEVEL = "RECENT_UPLOAD_LOG_LEVEL"
ENV_ECHO_SECRET = "RECENT_UPLOAD_ECHO_SECRET"
ENV_CHECK_BUCKET = "RECENT_UPLOAD_CHECK_BUCKET"

DEFAULT_MAX_WORKERS = 20
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_AWS_REGION = "us-east-1"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def get_package_version() -> str:
    """Get the package version from pyproject.toml."""
    try:
        with open(PYPROJECT_FILE, "rb") as f:
            pyproject = tomllib.load(f)
        return str(pyproject.get("project", {}).get("version", "0.0.0"))
    except Exception:
        return "0.0.0"


@dataclass(frozen=True)
class Settings:
    """Ambient tunables. Functional inputs come from the command line."""

    max_workers: int = DEFAULT_MAX_WORKERS
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL
    aws_region: str = DEFAULT_AWS_REGION
    endpoint_url: str = ""
    log_directory: Path | None = None
    log_level: str = "INFO"
    echo_secret: bool = False
    check_bucket: bool = False


@dataclass(frozen=True)
class Credentials:
    """Object store access pair."""

    access_key_id: str
    secret_access_key: str = field(repr=False)


@dataclass(frozen=True)
class UploadJob:
    """Process-wide job description, built once at startup and shared read-only."""

    base_path: Path
    start_path: Path
    threshold: datetime
    bucket: str
    max_workers: int = DEFAULT_MAX_WORKERS


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _parse_int(name: str, value: str, minimum: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if parsed < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {parsed}")
    return parsed


def _parse_float(name: str, value: str) -> float:
    try:
        parsed = float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if parsed <= 0:
        raise ValueError(f"{name} must be positive, got {parsed}")
    return parsed


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Load settings from the environment.

    When ``environ`` is omitted, a ``.env`` file in the working directory is
    loaded first and ``os.environ`` is read. Unset variables keep their
    defaults.

    Raises:
        ValueError: If a variable holds a value of the wrong type
    """
    if environ is None:
        load_dotenv(Path.cwd() / ".env")
        environ = os.environ

    settings = Settings()
    overrides: dict[str, object] = {}

    if (value := environ.get(ENV_MAX_WORKERS)) is not None:
        overrides["max_workers"] = _parse_int(ENV_MAX_WORKERS, value, minimum=1)
    if (value := environ.get(ENV_POLL_INTERVAL)) is not None:
        overrides["poll_interval_seconds"] = _parse_float(ENV_POLL_INTERVAL, value)
    if value := environ.get(ENV_AWS_REGION):
        overrides["aws_region"] = value
    if value := environ.get(ENV_ENDPOINT_URL):
        overrides["endpoint_url"] = value
    if value := environ.get(ENV_LOG_DIR):
        overrides["log_directory"] = Path(value).expanduser()
    if value := environ.get(ENV_LOG_LEVEL):
        overrides["log_level"] = value.upper()
    if (value := environ.get(ENV_ECHO_SECRET)) is not None:
        overrides["echo_secret"] = _parse_bool(ENV_ECHO_SECRET, value)
    if (value := environ.get(ENV_CHECK_BUCKET)) is not None:
        overrides["check_bucket"] = _parse_bool(ENV_CHECK_BUCKET, value)

    if not overrides:
        return settings
    return replace(settings, **overrides)  # type: ignore[arg-type]


def resolve_start_path(base_path: Path, subfolder: str | None) -> Path:
    """Return the directory the traversal starts from.

    Leading and trailing slashes are stripped from ``subfolder``; an empty
    subfolder means the base path itself.

    Raises:
        ValueError: If the subfolder would leave the base path
    """
    if subfolder is None:
        return base_path
    cleaned = subfolder.strip("/")
    if not cleaned:
        return base_path
    if ".." in Path(cleaned).parts:
        raise ValueError(f"Subfolder {subfolder!r} must stay inside {base_path}")
    return base_path / cleaned


def build_upload_job(
    days_ago: int,
    bucket: str,
    base_path: str | Path,
    subfolder: str | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    now: datetime | None = None,
) -> UploadJob:
    """Create the UploadJob for a run.

    The recency threshold is computed here, once; it is not re-evaluated
    while the traversal runs.
    """
    base = Path(os.path.abspath(base_path))
    return UploadJob(
        base_path=base,
        start_path=resolve_start_path(base, subfolder),
        threshold=compute_threshold(days_ago, now),
        bucket=bucket,
        max_workers=max_workers,
    )
