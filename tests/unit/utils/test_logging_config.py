"""Tests for logging setup."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from maketorrent.models import LogLevel, ObservabilityConfig
from maketorrent.utils.exceptions import FileSystemError, MakeTorrentError
from maketorrent.utils.logging_config import (
    CorrelationFilter,
    StructuredFormatter,
    get_correlation_id,
    get_logger,
    set_correlation_id,
    setup_logging,
)
from maketorrent.utils.rich_logging import CorrelationRichHandler, strip_rich_markup

pytestmark = [pytest.mark.logging, pytest.mark.unit]


def _flush():
    for handler in logging.getLogger("maketorrent").handlers:
        handler.flush()


class TestGetLogger:
    """Test cases for get_logger."""

    def test_prefixes_namespace(self):
        """Short names are placed below the package logger."""
        assert get_logger("creator").name == "maketorrent.creator"

    def test_keeps_qualified_names(self):
        """Module names are used as they are."""
        assert get_logger("maketorrent.core.files").name == "maketorrent.core.files"
        assert get_logger("maketorrent").name == "maketorrent"


class TestSetupLogging:
    """Test cases for setup_logging."""

    def test_console_handler_level(self):
        """The package logger gets a single Rich handler at the configured level."""
        setup_logging(ObservabilityConfig(log_level=LogLevel.INFO))
        setup_logging(ObservabilityConfig(log_level=LogLevel.INFO))

        package_logger = logging.getLogger("maketorrent")
        rich_handlers = [
            h for h in package_logger.handlers if isinstance(h, CorrelationRichHandler)
        ]
        assert package_logger.level == logging.INFO
        assert package_logger.propagate is False
        assert len(rich_handlers) == 1

    def test_plain_file_output(self, tmp_path):
        """Plain log files have Rich markup stripped."""
        log_file = tmp_path / "logs" / "maketorrent.log"
        setup_logging(
            ObservabilityConfig(log_level=LogLevel.DEBUG, log_file=str(log_file))
        )

        get_logger("test").debug("[bold]hashed[/bold] %d pieces", 3)
        _flush()

        text = log_file.read_text()
        assert "hashed 3 pieces" in text
        assert "[bold]" not in text
        assert "DEBUG maketorrent.test" in text

    def test_structured_file_output(self, tmp_path):
        """Structured logging writes one JSON object per record."""
        log_file = tmp_path / "maketorrent.log"
        setup_logging(
            ObservabilityConfig(
                log_level=LogLevel.INFO,
                log_file=str(log_file),
                structured_logging=True,
            )
        )

        get_logger("test").info("Adding %s", "a.txt", extra={"length": 5})
        _flush()

        entry = json.loads(log_file.read_text().splitlines()[-1])
        assert entry["message"] == "Adding a.txt"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "maketorrent.test"
        assert entry["length"] == 5
        assert entry["correlation_id"] == get_correlation_id()

    def test_level_filters_file_output(self, tmp_path):
        """Records below the configured level are dropped."""
        log_file = tmp_path / "maketorrent.log"
        setup_logging(ObservabilityConfig(log_file=str(log_file)))

        get_logger("test").info("hidden")
        get_logger("test").warning("shown")
        _flush()

        text = log_file.read_text()
        assert "hidden" not in text
        assert "shown" in text


class TestCorrelation:
    """Test cases for correlation ids."""

    def test_set_and_get(self):
        """An explicit id is stored in the context."""
        assert set_correlation_id("abc") == "abc"
        assert get_correlation_id() == "abc"

    def test_generated_id(self):
        """Without an argument a fresh id is generated."""
        corr_id = set_correlation_id()
        assert corr_id
        assert get_correlation_id() == corr_id

    def test_filter_tags_record(self):
        """CorrelationFilter adds the id to records."""
        set_correlation_id("xyz")
        record = logging.LogRecord("n", logging.INFO, __file__, 1, "m", (), None)

        assert CorrelationFilter().filter(record) is True
        assert record.correlation_id == "xyz"

    def test_structured_formatter_exception(self):
        """Exceptions are rendered into the JSON record."""
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord(
                "n", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["message"] == "failed"
        assert "ValueError: bad" in entry["exception"]


class TestHelpers:
    """Test cases for small helpers."""

    def test_strip_rich_markup(self):
        """Markup tags are removed."""
        assert strip_rich_markup("[red]Error:[/red] boom") == "Error: boom"

    def test_error_details(self):
        """Error details are appended to the message."""
        assert str(MakeTorrentError("boom")) == "boom"
        error = FileSystemError("Cannot open", {"path": "a"})
        assert str(error) == "Cannot open (Details: {'path': 'a'})"
        assert isinstance(error, MakeTorrentError)
