"""Exception hierarchy for maketorrent.

Every failure raised by the creation pipeline derives from
:class:`MakeTorrentError` so the CLI can report it in one place.
"""

from __future__ import annotations

from typing import Any


class MakeTorrentError(Exception):
    """Base exception for all maketorrent errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize maketorrent error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ValidationError(MakeTorrentError):
    """Data validation errors."""


class ConfigurationError(ValidationError):
    """Configuration validation errors."""


class TorrentError(ValidationError):
    """Torrent metainfo errors."""


class BencodeError(ValidationError):
    """Bencode encoding/decoding errors."""


class DiskError(MakeTorrentError):
    """Disk I/O related errors."""


class FileSystemError(DiskError):
    """File system operation errors."""


class HashingError(MakeTorrentError):
    """Piece hashing invariant violations."""
