"""Verbosity management for the maketorrent CLI.

Maps the ``-v`` count (and the ``-d`` debug flag) onto logging levels.
"""

from __future__ import annotations

import logging
from enum import IntEnum


class VerbosityLevel(IntEnum):
    """Verbosity levels for CLI commands."""

    QUIET = 0  # Only warnings and errors
    VERBOSE = 1  # -v: progress and per-file info
    DEBUG = 2  # -vv / -d: debug messages
    TRACE = 3  # -vvv: debug with stack traces


class VerbosityManager:
    """Manages verbosity levels and maps them to logging levels."""

    LEVEL_TO_LOGGING: dict[VerbosityLevel, int] = {
        VerbosityLevel.QUIET: logging.WARNING,
        VerbosityLevel.VERBOSE: logging.INFO,
        VerbosityLevel.DEBUG: logging.DEBUG,
        VerbosityLevel.TRACE: logging.DEBUG,
    }

    def __init__(self, verbosity_count: int = 0):
        """Initialize verbosity manager.

        Args:
            verbosity_count: Number of -v flags (clamped to 0-3)

        """
        self.verbosity_count = max(0, min(3, verbosity_count))
        self.level = VerbosityLevel(self.verbosity_count)
        self.logging_level = self.LEVEL_TO_LOGGING[self.level]

    @classmethod
    def from_flags(cls, verbose: int, debug: bool = False) -> VerbosityManager:
        """Create from the ``-v`` count; ``debug`` is equivalent to ``-vv``."""
        if debug:
            verbose = max(verbose, VerbosityLevel.DEBUG)
        return cls(verbose)

    @property
    def log_level_name(self) -> str:
        """Logging level name for ObservabilityConfig."""
        return logging.getLevelName(self.logging_level)

    def should_show_stack_trace(self) -> bool:
        """Check if stack traces should be shown."""
        return self.level == VerbosityLevel.TRACE
