"""Target enumeration.

Turns a target path into the ordered list of :class:`FileEntry` objects that
defines how the content stream is concatenated. Directory entries are sorted
by name at every level so the same tree always yields the same order and
therefore the same piece hashes.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from maketorrent.models import FileEntry
from maketorrent.utils.exceptions import FileSystemError, TorrentError
from maketorrent.utils.logging_config import get_logger


def collect_files(
    root: str | Path,
    logger: logging.Logger | None = None,
) -> list[FileEntry]:
    """Collect the files of a target with their sizes.

    Args:
        root: Target file or directory
        logger: Logger for per-file diagnostics

    Returns:
        Ordered file entries. A single file yields one entry named after its
        basename; a directory yields every regular file below it with a path
        relative to ``root``.

    Raises:
        TorrentError: If ``root`` does not exist or is not a file/directory,
            or a file name is not valid UTF-8
        FileSystemError: If any directory listing or stat call fails

    """
    log = logger or get_logger(__name__)
    root = Path(root)

    try:
        if root.is_file():
            length = root.stat().st_size
            single = _file_entry(root.name, length, root)
            log.info("Adding %s (%d bytes)", single.path, length)
            return [single]
        is_dir = root.is_dir()
    except OSError as e:
        msg = f"Cannot stat target {root}: {e}"
        raise FileSystemError(msg) from e

    if not is_dir:
        if not root.exists():
            msg = f"Target file or directory does not exist: {root}"
        else:
            msg = f"Target is neither a file nor a directory: {root}"
        raise TorrentError(msg)

    files: list[FileEntry] = []
    _walk(root, (), files, log)
    log.debug("Number of files: %d", len(files))
    return files


def _walk(
    directory: Path,
    prefix: tuple[str, ...],
    files: list[FileEntry],
    log: logging.Logger,
) -> None:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        msg = f"Cannot list directory {directory}: {e}"
        raise FileSystemError(msg) from e

    for entry in entries:
        parts = (*prefix, entry.name)
        try:
            if entry.is_dir(follow_symlinks=False):
                _walk(Path(entry.path), parts, files, log)
            elif entry.is_file():
                length = entry.stat().st_size
                file_entry = _file_entry("/".join(parts), length, entry.path)
                log.info("Adding %s (%d bytes)", file_entry.path, length)
                files.append(file_entry)
            else:
                log.debug("Skipping non-regular entry %s", entry.path)
        except OSError as e:
            msg = f"Cannot stat {entry.path}: {e}"
            raise FileSystemError(msg) from e


def total_length(files: list[FileEntry]) -> int:
    """Sum of all file lengths."""
    return sum(f.length for f in files)


def _file_entry(relative: str, length: int, source: str | Path) -> FileEntry:
    """Build an entry, rejecting names the metainfo cannot carry."""
    try:
        return FileEntry(path=relative, length=length)
    except PydanticValidationError as e:
        msg = f"File name is not valid UTF-8: {os.fsencode(source)!r}"
        raise TorrentError(msg) from e
