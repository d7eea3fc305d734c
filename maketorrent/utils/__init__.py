"""Shared utilities and infrastructure.

This module contains common utilities used throughout the application.
"""

from __future__ import annotations

from maketorrent.utils.exceptions import (
    BencodeError,
    ConfigurationError,
    DiskError,
    FileSystemError,
    HashingError,
    MakeTorrentError,
    TorrentError,
    ValidationError,
)
from maketorrent.utils.logging_config import get_logger, setup_logging

__all__ = [
    # Exceptions
    "BencodeError",
    "ConfigurationError",
    "DiskError",
    "FileSystemError",
    "HashingError",
    "MakeTorrentError",
    "TorrentError",
    "ValidationError",
    # Logging
    "get_logger",
    "setup_logging",
]
