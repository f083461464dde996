"""Filesystem scanning for the directory traversal."""

import logging
import os
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class DirectoryListing:
    """Immediate children of one directory, split by kind."""

    path: Path
    directories: list[Path] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)


@dataclass
class FileCandidate:
    """A file and its modification time, read while a directory is processed."""

    path: Path
    last_modified: datetime
    size: int


def scan_directory(path: Path) -> DirectoryListing:
    """List the immediate sub-directories and regular files of ``path``.

    Symlinked directories are not descended into, which keeps link cycles out
    of the traversal. Symlinks pointing at regular files are listed as files.
    Sockets, FIFOs and dangling links are ignored.

    Args:
        path: Directory to list

    Returns:
        DirectoryListing for ``path``

    Raises:
        OSError: If the directory cannot be listed
    """
    listing = DirectoryListing(path=path)
    with os.scandir(path) as entries:
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    listing.directories.append(Path(entry.path))
                elif entry.is_file():
                    listing.files.append(Path(entry.path))
                elif entry.is_symlink():
                    logger.debug("Not following symlink %s", entry.path)
            except OSError:
                logger.debug("Skipping unreadable entry %s", entry.path, exc_info=True)
    return listing


def read_candidate(path: Path) -> FileCandidate:
    """Stat ``path`` and return it as a FileCandidate.

    Raises:
        OSError: If the file vanished or cannot be read
    """
    stat = path.stat()
    return FileCandidate(
        path=path,
        last_modified=datetime.fromtimestamp(stat.st_mtime, UTC),
        size=stat.st_size,
    )
